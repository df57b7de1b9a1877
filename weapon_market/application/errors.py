class ValidationError(Exception):
    """A mutation was called with a missing or empty required value."""


class PersistenceError(Exception):
    """A repository or cache operation failed."""
