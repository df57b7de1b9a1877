import json

from weapon_market.config import settings
from weapon_market.domain.query.weapon_filter import Pagination, WeaponFilter


class CacheKeyEncoder:
    """Encodes a canonical query as a stable cache signature."""

    def __init__(self, prefix: str = settings.cache_key_prefix) -> None:
        self._prefix = prefix

    def encode(self, weapon_filter: WeaponFilter, pagination: Pagination) -> str:
        # Key order comes from the canonical() definitions, never from the caller
        query = json.dumps(weapon_filter.canonical(), separators=(",", ":"))
        options = json.dumps(pagination.canonical(), separators=(",", ":"))
        return f"{self._prefix}{query}-{options}"
