"""Command line entry point serving the records API with uvicorn."""
from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from typing import Optional, Sequence

import uvicorn
from dotenv import load_dotenv

from json_records.api import app
from json_records.config import Settings, get_settings

logger = logging.getLogger("json_records")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve JSON records stored in a flat file.")
    parser.add_argument("--host", help="Interface to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--data-file", help="JSON array file backing the collection")
    parser.add_argument("--log-level", help="Logging level, e.g. INFO or DEBUG")
    return parser


def resolve_settings(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    settings = base or get_settings()
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.data_file:
        overrides["data_file"] = args.data_file
    if args.log_level:
        overrides["log_level"] = args.log_level.upper()
    return replace(settings, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    settings = resolve_settings(args)

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.settings = settings

    logger.info("Server running on port %d", settings.port)
    logger.info("Home Route localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
