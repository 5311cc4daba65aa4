"""Typed contracts shared by API handlers and Python interfaces."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from twine_reader.adapters.interaction_hub import MessageRecord
from twine_reader.core.story_inspection import PassageReport

InteractionKind = Literal["button", "select", "text"]


class ContractModel(BaseModel):
    """Base model config used by all API contracts."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class VerbatimContractModel(ContractModel):
    """Contract whose strings carry choice tokens or link targets byte-for-byte."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=False)


class ChoiceResponse(VerbatimContractModel):
    """One selectable control; the label is plain text without brackets."""

    label: str
    token: str


class MessageResponse(ContractModel):
    """A presented message and the controls that are still selectable."""

    message_id: str
    reader_id: int
    text: str
    passage_name: str | None = None
    terminal: bool
    withdrawn: bool = False
    choices: list[ChoiceResponse] = Field(default_factory=list)


class InteractionRequest(VerbatimContractModel):
    """A reader's selection of one presented control."""

    token: str = Field(min_length=3, max_length=1000)
    kind: InteractionKind = "button"
    values: list[str] = Field(default_factory=list)
    text: str = ""


class ProgressResponse(ContractModel):
    """Stored progress for one reader."""

    reader_id: int
    current_passage: str


class LinkResponse(VerbatimContractModel):
    label: str
    target: str


class PassageReportResponse(ContractModel):
    """Inspection view of one passage."""

    name: str
    rendered_content: str
    links: list[LinkResponse]
    dead_targets: list[str]
    is_start: bool
    terminal: bool


class StoryInspectionResponse(ContractModel):
    """Inspection view of the whole loaded story."""

    title: str | None
    start: str | None
    source_hash: str
    passages: list[PassageReportResponse]


def message_response(record: MessageRecord) -> MessageResponse:
    message = record.message
    return MessageResponse(
        message_id=record.message_id,
        reader_id=message.reader_id,
        text=message.text,
        passage_name=message.passage_name,
        terminal=message.terminal,
        withdrawn=record.withdrawn,
        choices=[
            ChoiceResponse(label=choice.label, token=choice.token)
            for choice in message.choices
            if choice.token in record.active_choices
        ],
    )


def passage_report_response(report: PassageReport) -> PassageReportResponse:
    return PassageReportResponse(
        name=report.name,
        rendered_content=report.rendered_content,
        links=[LinkResponse(label=link.label, target=link.target) for link in report.links],
        dead_targets=list(report.dead_targets),
        is_start=report.is_start,
        terminal=report.terminal,
    )
