"""Strict Twee 3 parsing into an immutable passage graph."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from twine_reader.core.errors import MalformedStoryError, MissingPassageError, NoStartPassageError
from twine_reader.core.passage_renderer import LINK_ARROW, LINK_PATTERN
from twine_reader.domain.models import Passage, Story

HEADER_PREFIX = "::"
DEFAULT_START_PASSAGE = "Start"
STORY_TITLE_PASSAGE = "StoryTitle"
STORY_DATA_PASSAGE = "StoryData"
NON_PLAYABLE_TAGS = frozenset({"script", "stylesheet"})

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PassageHeader:
    """Parsed ``:: Name [tags] {metadata}`` line."""

    name: str
    tags: tuple[str, ...]
    metadata: dict[str, object] | None


@dataclass(frozen=True)
class _RawPassage:
    header: PassageHeader
    content: str
    line_index: int


def _read_name(text: str) -> tuple[str, str]:
    """Read a passage name up to an unescaped ``[`` or ``{``; return (name, rest)."""
    chars: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text):
            chars.append(text[index + 1])
            index += 2
            continue
        if char in "[{":
            break
        chars.append(char)
        index += 1
    return "".join(chars).strip(), text[index:].strip()


def parse_header(line: str, *, line_index: int, warnings: list[str]) -> PassageHeader:
    """Parse one header line, appending any structural problems to ``warnings``."""
    name, rest = _read_name(line[len(HEADER_PREFIX) :])
    if not name:
        warnings.append(f"line {line_index + 1}: passage header has no name")

    tags: tuple[str, ...] = ()
    if rest.startswith("["):
        closing = rest.find("]")
        if closing == -1:
            warnings.append(f"line {line_index + 1}: unclosed tag block in header {name!r}")
            return PassageHeader(name=name, tags=(), metadata=None)
        tags = tuple(rest[1:closing].split())
        rest = rest[closing + 1 :].strip()

    metadata: dict[str, object] | None = None
    if rest.startswith("{"):
        try:
            decoded = json.loads(rest)
        except json.JSONDecodeError:
            warnings.append(f"line {line_index + 1}: invalid metadata in header {name!r}")
        else:
            if isinstance(decoded, dict):
                metadata = decoded
            else:
                warnings.append(
                    f"line {line_index + 1}: metadata in header {name!r} is not an object"
                )
    elif rest:
        warnings.append(f"line {line_index + 1}: unexpected text after header {name!r}: {rest!r}")

    return PassageHeader(name=name, tags=tags, metadata=metadata)


def _finish_passage(header: PassageHeader, body: list[str], line_index: int) -> _RawPassage:
    return _RawPassage(header=header, content="\n".join(body).strip(), line_index=line_index)


def _split_passages(raw_text: str, warnings: list[str]) -> list[_RawPassage]:
    lines = raw_text.replace("\r\n", "\n").split("\n")
    raw_passages: list[_RawPassage] = []
    header: PassageHeader | None = None
    header_line = 0
    body: list[str] = []

    for line_index, line in enumerate(lines):
        if line.startswith(HEADER_PREFIX):
            if header is not None:
                raw_passages.append(_finish_passage(header, body, header_line))
            header = parse_header(line, line_index=line_index, warnings=warnings)
            header_line = line_index
            body = []
            continue
        if header is None:
            if line.strip():
                warnings.append(f"line {line_index + 1}: text before the first passage header")
            continue
        body.append(line)

    if header is not None:
        raw_passages.append(_finish_passage(header, body, header_line))
    return raw_passages


def link_warnings(passage_name: str, raw_content: str) -> list[str]:
    """Return link-syntax problems found in one passage body."""
    problems: list[str] = []
    for match in LINK_PATTERN.finditer(raw_content):
        contents = match.group("contents")
        if not contents.strip():
            problems.append(f"passage {passage_name!r}: empty link")
            continue
        if "[[" in contents or "]]" in contents:
            problems.append(f"passage {passage_name!r}: nested brackets in link {match.group(0)!r}")
            continue
        label, arrow, target = contents.partition(LINK_ARROW)
        if arrow and (not label.strip() or not target.strip()):
            problems.append(
                f"passage {passage_name!r}: link {match.group(0)!r} is missing a label or target"
            )
    remainder = LINK_PATTERN.sub("", raw_content)
    if "[[" in remainder:
        problems.append(f"passage {passage_name!r}: unclosed link")
    if "]]" in remainder:
        problems.append(f"passage {passage_name!r}: unmatched link close")
    return problems


def _story_data(raw: _RawPassage) -> dict[str, object]:
    try:
        decoded = json.loads(raw.content)
    except json.JSONDecodeError as exc:
        raise MalformedStoryError(f"{STORY_DATA_PASSAGE} is not valid JSON ({exc.msg})") from exc
    if not isinstance(decoded, dict):
        raise MalformedStoryError(f"{STORY_DATA_PASSAGE} must be a JSON object")
    return decoded


def parse_story(raw_text: str) -> Story:
    """Parse Twee source into a ``Story``, escalating every warning to an error."""
    warnings: list[str] = []
    raw_passages = _split_passages(raw_text, warnings)
    if not raw_passages:
        raise MalformedStoryError("Story text contains no passages", warnings=tuple(warnings))

    seen: set[str] = set()
    passages: dict[str, Passage] = {}
    title: str | None = None
    story_data: dict[str, object] = {}

    for raw in raw_passages:
        name = raw.header.name
        if name in seen:
            warnings.append(f"line {raw.line_index + 1}: duplicate passage name {name!r}")
            continue
        seen.add(name)

        if name == STORY_TITLE_PASSAGE:
            title = raw.content or None
            continue
        if name == STORY_DATA_PASSAGE:
            story_data = _story_data(raw)
            continue
        if NON_PLAYABLE_TAGS.intersection(raw.header.tags):
            continue

        warnings.extend(link_warnings(name, raw.content))
        passages[name] = Passage(name=name, raw_content=raw.content, tags=raw.header.tags)

    if warnings:
        raise MalformedStoryError("Story has unresolved warnings", warnings=tuple(warnings))

    start = _resolve_start(story_data, passages)
    logger.debug("story.parsed passages=%s start=%s", len(passages), start)
    return Story(passages=passages, start=start, title=title)


def _resolve_start(story_data: dict[str, object], passages: dict[str, Passage]) -> str:
    declared = story_data.get("start")
    if declared is not None:
        if not isinstance(declared, str) or not declared.strip():
            raise MalformedStoryError(f"{STORY_DATA_PASSAGE} start must be a passage name")
        if declared not in passages:
            raise MissingPassageError(declared)
        return declared
    if DEFAULT_START_PASSAGE in passages:
        return DEFAULT_START_PASSAGE
    raise NoStartPassageError("No start passage defined")
