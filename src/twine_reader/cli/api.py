"""CLI entrypoint for serving the twine_reader HTTP API."""

from __future__ import annotations

import argparse
import os

import uvicorn

from twine_reader.adapters.observability import configure_runtime_logging


def build_arg_parser() -> argparse.ArgumentParser:
    """Create CLI args for the local API server process."""
    parser = argparse.ArgumentParser(description="Serve a Twee story over the twine_reader API.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--reload", action="store_true")
    parser.add_argument(
        "--story",
        default="",
        help="Twee story file to serve (default: story.twee).",
    )
    parser.add_argument(
        "--db-path",
        default="",
        help="SQLite path for reader progress (default: work/local/twine_reader.db).",
    )
    parser.add_argument(
        "--choice-timeout",
        type=int,
        default=0,
        help="Seconds a session waits for a choice before withdrawing it (default: 600).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI flags and start uvicorn with the app factory path."""
    configure_runtime_logging()
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    story_path = str(parsed.story).strip()
    if story_path:
        os.environ["TWINE_READER_STORY_PATH"] = story_path
    db_path = str(parsed.db_path).strip()
    if db_path:
        os.environ["TWINE_READER_DB_PATH"] = db_path
    if int(parsed.choice_timeout) > 0:
        os.environ["TWINE_READER_CHOICE_TIMEOUT_SECONDS"] = str(int(parsed.choice_timeout))
    uvicorn.run(
        "twine_reader.api.app:create_app",
        factory=True,
        host=str(parsed.host),
        port=int(parsed.port),
        reload=bool(parsed.reload),
    )


if __name__ == "__main__":
    main()
