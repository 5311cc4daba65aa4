from __future__ import annotations

import pytest

from twine_reader.core.errors import MalformedStoryError, MissingPassageError, NoStartPassageError
from twine_reader.core.story_parser import parse_header, parse_story

EXAMPLE_STORY = """\
:: Start
Welcome! [[Go north->Forest]] or [[Go south->Cave]]
:: Forest
A dark forest. [[Return->Start]]
:: Cave
A damp cave. The end.
"""


def test_parse_example_story_builds_passage_graph() -> None:
    story = parse_story(EXAMPLE_STORY)

    assert story.passage_names() == {"Start", "Forest", "Cave"}
    assert story.start == "Start"
    assert list(story.passages) == ["Start", "Forest", "Cave"]
    assert story.passages["Cave"].raw_content == "A damp cave. The end."
    assert story.passages["Start"].raw_content == (
        "Welcome! [[Go north->Forest]] or [[Go south->Cave]]"
    )


def test_parse_is_deterministic() -> None:
    first = parse_story(EXAMPLE_STORY)
    second = parse_story(EXAMPLE_STORY)

    assert first.passage_names() == second.passage_names()
    for name, passage in first.passages.items():
        assert second.passages[name].raw_content == passage.raw_content


def test_story_passages_are_read_only() -> None:
    story = parse_story(EXAMPLE_STORY)
    with pytest.raises(TypeError):
        story.passages["Extra"] = story.passages["Cave"]  # type: ignore[index]


def test_story_data_start_and_special_passages() -> None:
    story = parse_story(
        """\
:: StoryTitle
The Lighthouse

:: StoryData
{"ifid": "D674C58C-DEFA-4F70-B7A2-27742230C0FC", "start": "Shore"}

:: Styles [stylesheet]
body { color: red; }

:: Shore [beach cold]
Waves. [[Climb]]

:: Climb
The lamp is lit.
"""
    )

    assert story.title == "The Lighthouse"
    assert story.start == "Shore"
    assert story.passage_names() == {"Shore", "Climb"}
    assert story.passages["Shore"].tags == ("beach", "cold")


def test_dead_links_are_not_parse_errors() -> None:
    story = parse_story(":: Start\nGo [[Nowhere]]\n")
    assert story.passage_names() == {"Start"}


def test_no_passages_is_malformed() -> None:
    with pytest.raises(MalformedStoryError):
        parse_story("")


def test_text_before_first_header_is_malformed() -> None:
    with pytest.raises(MalformedStoryError) as excinfo:
        parse_story("stray prose\n:: Start\nHello\n")
    assert any("before the first passage header" in w for w in excinfo.value.warnings)


def test_duplicate_passage_names_are_malformed() -> None:
    with pytest.raises(MalformedStoryError) as excinfo:
        parse_story(":: Start\nOne\n:: Start\nTwo\n")
    assert any("duplicate passage name 'Start'" in w for w in excinfo.value.warnings)


@pytest.mark.parametrize(
    "body",
    [
        "An [[unclosed link",
        "An empty [[]] link",
        "A [[->Target]] with no label",
        "A [[Label->]] with no target",
        "Go [[north [[Forest]] or leave]] now",
        "A stray close]] after text",
    ],
)
def test_malformed_links_are_escalated(body: str) -> None:
    with pytest.raises(MalformedStoryError) as excinfo:
        parse_story(f":: Start\n{body}\n")
    assert excinfo.value.warnings


def test_nested_link_reports_both_bracket_problems() -> None:
    with pytest.raises(MalformedStoryError) as excinfo:
        parse_story(":: Start\nGo [[north [[Forest]] or leave]] now\n:: Forest\nEnd.\n")
    warnings = excinfo.value.warnings
    assert any("nested brackets" in w for w in warnings)
    assert any("unmatched link close" in w for w in warnings)


def test_all_warnings_are_reported_together() -> None:
    with pytest.raises(MalformedStoryError) as excinfo:
        parse_story(":: Start\n[[]]\n:: Start\nagain\n:: Other\n[[open\n")
    assert len(excinfo.value.warnings) == 3


def test_missing_start_passage() -> None:
    with pytest.raises(NoStartPassageError):
        parse_story(":: Beginning\nHello\n")


def test_story_data_start_must_resolve() -> None:
    with pytest.raises(MissingPassageError) as excinfo:
        parse_story(':: StoryData\n{"start": "Ghost"}\n:: Start\nHello\n')
    assert excinfo.value.passage_name == "Ghost"


def test_story_data_must_be_json_object() -> None:
    with pytest.raises(MalformedStoryError):
        parse_story(":: StoryData\n[1, 2]\n:: Start\nHello\n")


def test_parse_header_handles_escapes_tags_and_metadata() -> None:
    warnings: list[str] = []
    header = parse_header(
        r':: Room \[1\] [dark wet] {"position": "100,200"}', line_index=0, warnings=warnings
    )

    assert warnings == []
    assert header.name == "Room [1]"
    assert header.tags == ("dark", "wet")
    assert header.metadata == {"position": "100,200"}


def test_parse_header_flags_bad_metadata() -> None:
    warnings: list[str] = []
    parse_header(":: Room {not json}", line_index=4, warnings=warnings)
    assert warnings == ["line 5: invalid metadata in header 'Room'"]
