"""Offline inspection of a parsed story: names, rendered text, and links."""

from __future__ import annotations

from dataclasses import dataclass

from twine_reader.core.passage_renderer import render_passage
from twine_reader.domain.models import Link, Story


@dataclass(frozen=True)
class PassageReport:
    """What a reader would see for one passage, plus where its links lead."""

    name: str
    rendered_content: str
    links: tuple[Link, ...]
    dead_targets: tuple[str, ...]
    is_start: bool

    @property
    def terminal(self) -> bool:
        return not self.links


def inspect_story(story: Story) -> list[PassageReport]:
    """Build one report per passage in story order."""
    reports: list[PassageReport] = []
    for passage in story.passages.values():
        rendered = render_passage(passage)
        dead_targets = tuple(
            dict.fromkeys(
                link.target for link in rendered.links if story.get_passage(link.target) is None
            )
        )
        reports.append(
            PassageReport(
                name=passage.name,
                rendered_content=rendered.display_text,
                links=rendered.links,
                dead_targets=dead_targets,
                is_start=passage.name == story.start,
            )
        )
    return reports


def report_as_dict(report: PassageReport) -> dict[str, object]:
    return {
        "name": report.name,
        "rendered_content": report.rendered_content,
        "links": [{"label": link.label, "target": link.target} for link in report.links],
        "dead_targets": list(report.dead_targets),
        "is_start": report.is_start,
        "terminal": report.terminal,
    }
