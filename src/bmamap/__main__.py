"""Run the BMA Map server: ``python -m bmamap``."""

import argparse

import uvicorn

from bmamap.config import settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve BMA map layers and styles")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--port", type=int, default=settings.port)
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    args = parser.parse_args()

    uvicorn.run(
        "bmamap.main:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
