"""Environment-driven configuration for the reader service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_STORY_PATH = Path("story.twee")
DEFAULT_DB_PATH = Path("work/local/twine_reader.db")
DEFAULT_LOG_PATH = Path("work/logs/twine_reader.log")
DEFAULT_CHOICE_TIMEOUT_SECONDS = 600
DEFAULT_RESPONSE_WAIT_SECONDS = 30


def _int_env(name: str, default: int, *, minimum: int, maximum: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return max(minimum, min(maximum, value))


def _path_env(name: str, default: Path) -> Path:
    raw = os.environ.get(name, "").strip()
    return Path(raw) if raw else default


@dataclass(frozen=True)
class LoggingSettings:
    """Log level, destination, and rotation bounds."""

    level: str = "INFO"
    access_level: str = "WARNING"
    log_path: Path = DEFAULT_LOG_PATH
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 10

    @classmethod
    def from_env(cls) -> LoggingSettings:
        return cls(
            level=os.environ.get("TWINE_READER_LOG_LEVEL", "INFO").strip().upper() or "INFO",
            access_level=os.environ.get("TWINE_READER_ACCESS_LOG_LEVEL", "WARNING").strip().upper()
            or "WARNING",
            log_path=_path_env("TWINE_READER_LOG_PATH", DEFAULT_LOG_PATH),
            max_bytes=_int_env(
                "TWINE_READER_LOG_MAX_BYTES",
                5 * 1024 * 1024,
                minimum=64 * 1024,
                maximum=100 * 1024 * 1024,
            ),
            backup_count=_int_env("TWINE_READER_LOG_BACKUP_COUNT", 10, minimum=1, maximum=120),
        )


@dataclass(frozen=True)
class ReaderSettings:
    """Where the story and progress live, and how long sessions wait."""

    story_path: Path = DEFAULT_STORY_PATH
    db_path: Path = DEFAULT_DB_PATH
    choice_timeout_seconds: float = DEFAULT_CHOICE_TIMEOUT_SECONDS
    response_wait_seconds: float = DEFAULT_RESPONSE_WAIT_SECONDS

    @classmethod
    def from_env(cls) -> ReaderSettings:
        return cls(
            story_path=_path_env("TWINE_READER_STORY_PATH", DEFAULT_STORY_PATH),
            db_path=_path_env("TWINE_READER_DB_PATH", DEFAULT_DB_PATH),
            choice_timeout_seconds=_int_env(
                "TWINE_READER_CHOICE_TIMEOUT_SECONDS",
                DEFAULT_CHOICE_TIMEOUT_SECONDS,
                minimum=1,
                maximum=86_400,
            ),
            response_wait_seconds=_int_env(
                "TWINE_READER_RESPONSE_WAIT_SECONDS",
                DEFAULT_RESPONSE_WAIT_SECONDS,
                minimum=1,
                maximum=600,
            ),
        )
