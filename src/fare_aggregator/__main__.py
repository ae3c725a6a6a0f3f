"""Poetry script entrypoint for Fare Aggregator API."""

import uvicorn

from fare_aggregator.config import get_settings


def main() -> None:
    """Run dev server."""
    settings = get_settings()
    uvicorn.run(
        "fare_aggregator.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        factory=False,
    )


if __name__ == "__main__":
    main()
