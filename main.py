"""Story AI: dev launcher. Serves the API with uvicorn."""

import argparse
import logging

import uvicorn

from story_ai.config import load_settings


def main():
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Story AI server")
    parser.add_argument("--host", default=settings.host,
                        help=f"Bind address (default: {settings.host})")
    parser.add_argument("--port", type=int, default=settings.port,
                        help=f"Port (default: {settings.port})")
    parser.add_argument("--reload", action="store_true",
                        help="Restart on source changes")
    args = parser.parse_args()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print(f"Starting Story AI on http://localhost:{args.port} ...")
    uvicorn.run("story_ai.app:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
