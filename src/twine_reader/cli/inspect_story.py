"""CLI for dumping each passage's rendered text and links as JSON."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from twine_reader.adapters.story_source import load_story_source
from twine_reader.core.story_inspection import inspect_story, report_as_dict


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect passages of a Twee story.")
    parser.add_argument("--story", required=True, help="Path to the Twee story file.")
    parser.add_argument(
        "--output",
        default="",
        help="Optional path to write the JSON report. Defaults to stdout.",
    )
    parser.add_argument(
        "--passage",
        action="append",
        default=[],
        help="Only report the named passage (repeatable).",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse the story strictly and emit one JSON entry per passage."""
    parser = build_arg_parser()
    parsed = parser.parse_args(argv)

    source = load_story_source(Path(str(parsed.story)))
    wanted = set(parsed.passage)
    reports = [
        report_as_dict(report)
        for report in inspect_story(source.story)
        if not wanted or report.name in wanted
    ]
    payload = json.dumps(
        {"title": source.story.title, "start": source.story.start, "passages": reports},
        indent=2,
        ensure_ascii=False,
    )
    output = str(parsed.output).strip()
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote passage report: {output_path}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
