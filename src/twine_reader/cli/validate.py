"""CLI for strict validation of a Twee story before it is served."""

from __future__ import annotations

import argparse
from pathlib import Path

from twine_reader.adapters.story_source import load_story_source
from twine_reader.core.errors import MissingPassageError, StoryLoadError
from twine_reader.core.story_inspection import inspect_story


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Validate a Twee story strictly.")
    parser.add_argument("--story", required=True, help="Path to the Twee story file.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Exit non-zero with the load error when the story cannot be served."""
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)
    story_path = Path(str(parsed.story))
    try:
        source = load_story_source(story_path)
    except (StoryLoadError, MissingPassageError) as exc:
        raise SystemExit(f"Invalid story {story_path}: {exc}") from exc

    reports = inspect_story(source.story)
    terminal = sum(1 for report in reports if report.terminal)
    print(f"Validated story: {story_path}")
    print(f"title: {source.story.title or '(untitled)'}")
    print(f"start: {source.story.start}")
    print(f"passages: {len(reports)} ({terminal} terminal)")
    for report in reports:
        for target in report.dead_targets:
            print(f"dead link: {report.name} -> {target}")


if __name__ == "__main__":
    main()
