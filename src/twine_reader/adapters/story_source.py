"""Process-wide story resource: read once, parsed once, shared read-only."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path

from twine_reader.core.errors import MalformedStoryError
from twine_reader.core.story_parser import parse_story
from twine_reader.domain.models import Story

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorySource:
    """Raw story text plus its parsed graph, immutable for the process lifetime."""

    path: Path | None
    raw_text: str
    story: Story
    source_hash: str

    @classmethod
    def from_text(cls, raw_text: str, *, path: Path | None = None) -> StorySource:
        story = parse_story(raw_text)
        source_hash = sha256(raw_text.encode("utf-8")).hexdigest()
        logger.info(
            "story.loaded path=%s passages=%s start=%s sha256=%s",
            path,
            len(story.passages),
            story.start,
            source_hash[:12],
        )
        return cls(path=path, raw_text=raw_text, story=story, source_hash=source_hash)


def load_story_source(path: Path) -> StorySource:
    """Read and strictly parse a Twee file; any problem aborts startup."""
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedStoryError(f"Cannot read story file {path}: {exc}") from exc
    return StorySource.from_text(raw_text, path=path)
