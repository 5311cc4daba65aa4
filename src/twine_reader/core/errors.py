"""Error taxonomy for story loading and reader sessions."""

from __future__ import annotations


class TwineReaderError(RuntimeError):
    """Base class for every error raised by twine_reader."""


class StoryLoadError(TwineReaderError):
    """Story text cannot be served; the process must not start reading it."""


class MalformedStoryError(StoryLoadError):
    """Story markup could not be split into a clean passage graph."""

    def __init__(self, message: str, *, warnings: tuple[str, ...] = ()) -> None:
        if warnings:
            message = f"{message}: " + "; ".join(warnings)
        super().__init__(message)
        self.warnings = warnings


class NoStartPassageError(StoryLoadError):
    """No passage is designated as the story entry point."""


class MissingPassageError(TwineReaderError):
    """A selected, resumed, or designated passage name does not resolve."""

    def __init__(self, passage_name: str) -> None:
        super().__init__(f"Passage not defined: {passage_name!r}")
        self.passage_name = passage_name


class ProgressStoreError(TwineReaderError):
    """Reading or writing reader progress failed."""


class UnexpectedInteractionError(TwineReaderError):
    """A selection event arrived that story messages never offer."""
