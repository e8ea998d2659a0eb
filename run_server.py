from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from api_server import app


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the automation API.")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT") or 3004), help="Listen port")
    parser.add_argument("--log-level", default="info", help="uvicorn log level")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())
    config = uvicorn.Config(app, host=args.host, port=args.port, log_level=args.log_level)
    server = uvicorn.Server(config)
    server.run()


if __name__ == "__main__":
    main()
