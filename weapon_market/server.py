"""Runs the market API under uvicorn."""
import uvicorn

from weapon_market.config import settings

APP = "weapon_market.api.main:app"


def main() -> None:
    uvicorn.run(
        APP,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
