"""Run the catalog API under uvicorn: ``python -m catalog [--backend sql]``."""
import argparse

import uvicorn

from catalog.config import settings
from catalog.logging_config import setup_logging
from catalog.main import BACKENDS, create_app


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the service catalog API")
    parser.add_argument("--host", default=settings.HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Bind port")
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=settings.REPOSITORY_BACKEND,
        help="Repository backend",
    )
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Root log level")
    args = parser.parse_args()

    setup_logging(args.log_level)
    app = create_app(backend=args.backend)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
