"""FastAPI transport for playing a story one choice at a time."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Coroutine
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from twine_reader.adapters.interaction_hub import InteractionHub, PendingInteraction
from twine_reader.adapters.settings import ReaderSettings
from twine_reader.adapters.sqlite_progress_store import SQLiteProgressStore
from twine_reader.adapters.story_source import StorySource, load_story_source
from twine_reader.api.contracts import (
    InteractionRequest,
    MessageResponse,
    ProgressResponse,
    StoryInspectionResponse,
    message_response,
    passage_report_response,
)
from twine_reader.application.session_controller import SessionController, SessionOutcome
from twine_reader.core.choice_tokens import decode_choice_token
from twine_reader.core.errors import ProgressStoreError, UnexpectedInteractionError
from twine_reader.core.story_inspection import inspect_story
from twine_reader.domain.events import ButtonPressed, ChoiceEvent, MenuSelected, TextSubmitted

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Simple health payload used by probes."""

    status: Literal["ok"] = "ok"
    service: str = "twine_reader"


class ApiRootResponse(BaseModel):
    """Describes currently available API capabilities."""

    name: str = "twine_reader"
    persistence: Literal["sqlite"] = "sqlite"
    endpoints: list[str] = Field(
        default_factory=lambda: [
            "/healthz",
            "/api/v1",
            "/api/v1/readers/{reader_id}/play",
            "/api/v1/readers/{reader_id}/progress",
            "/api/v1/interactions",
            "/api/v1/messages/{message_id}",
            "/api/v1/story/passages",
        ]
    )


def _choice_event(payload: InteractionRequest, interaction: PendingInteraction) -> ChoiceEvent:
    if payload.kind == "select":
        return MenuSelected(
            token=payload.token, values=tuple(payload.values), responder=interaction
        )
    if payload.kind == "text":
        return TextSubmitted(token=payload.token, text=payload.text, responder=interaction)
    return ButtonPressed(token=payload.token, responder=interaction)


def create_app(
    settings: ReaderSettings | None = None,
    *,
    story_source: StorySource | None = None,
    progress_store: SQLiteProgressStore | None = None,
) -> FastAPI:
    """Create the API application; story load errors abort here, before serving."""
    effective_settings = settings or ReaderSettings.from_env()
    source = story_source or load_story_source(effective_settings.story_path)
    store = progress_store or SQLiteProgressStore(db_path=effective_settings.db_path)
    hub = InteractionHub()
    controller = SessionController(
        source.story,
        store,
        hub,
        choice_timeout_seconds=effective_settings.choice_timeout_seconds,
    )
    session_tasks: set[asyncio.Task[SessionOutcome]] = set()

    def _session_finished(task: asyncio.Task[SessionOutcome]) -> None:
        session_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("session.crashed error=%s", error, exc_info=error)
            return
        logger.debug("session.finished outcome=%s", task.result())

    def spawn_session(session: Coroutine[Any, Any, SessionOutcome]) -> None:
        task = asyncio.create_task(session)
        session_tasks.add(task)
        task.add_done_callback(_session_finished)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        pending = list(session_tasks)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info("api.stop cancelled_sessions=%s", len(pending))

    app = FastAPI(
        title="twine_reader API",
        version="0.1.0",
        description="Play a branching Twee story one choice at a time, with remembered progress.",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "system", "description": "Service health and runtime metadata."},
            {"name": "api", "description": "API discovery and root-level capability listing."},
            {"name": "play", "description": "Start sessions and deliver reader choices."},
            {"name": "story", "description": "Read-only inspection of the loaded story."},
        ],
    )

    logger.info(
        "api.start story_path=%s db_path=%s choice_timeout_seconds=%s",
        source.path,
        store.db_path,
        effective_settings.choice_timeout_seconds,
    )

    async def reply_or_error(interaction: PendingInteraction) -> MessageResponse:
        reply = await interaction.wait_for_reply(effective_settings.response_wait_seconds)
        if reply is None:
            raise HTTPException(status_code=504, detail="The story did not respond in time")
        if reply.record is None:
            raise HTTPException(status_code=500, detail=reply.failure or "Session failed")
        return message_response(reply.record)

    @app.get("/healthz", response_model=HealthResponse, tags=["system"])
    def healthz() -> HealthResponse:
        return HealthResponse()

    @app.get("/api/v1", response_model=ApiRootResponse, tags=["api"])
    def api_v1_root() -> ApiRootResponse:
        return ApiRootResponse()

    @app.post("/api/v1/readers/{reader_id}/play", response_model=MessageResponse, tags=["play"])
    async def play(reader_id: int) -> MessageResponse:
        interaction = hub.open_interaction(reader_id)
        spawn_session(controller.play(reader_id, interaction))
        return await reply_or_error(interaction)

    @app.post("/api/v1/interactions", response_model=MessageResponse, tags=["play"])
    async def interact(payload: InteractionRequest) -> MessageResponse:
        if not hub.is_pending(payload.token):
            raise HTTPException(status_code=404, detail="No session is waiting for this choice")
        try:
            reader_id = decode_choice_token(payload.token).reader_id
        except UnexpectedInteractionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        interaction = hub.open_interaction(reader_id)
        if not hub.dispatch(_choice_event(payload, interaction)):
            raise HTTPException(status_code=404, detail="No session is waiting for this choice")
        return await reply_or_error(interaction)

    @app.get("/api/v1/messages/{message_id}", response_model=MessageResponse, tags=["play"])
    def get_message(message_id: str) -> MessageResponse:
        record = hub.get_message(message_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Message not found")
        return message_response(record)

    @app.get(
        "/api/v1/readers/{reader_id}/progress", response_model=ProgressResponse, tags=["play"]
    )
    def get_progress(reader_id: int) -> ProgressResponse:
        try:
            progress = store.get_progress(reader_id)
        except ProgressStoreError as exc:
            raise HTTPException(status_code=503, detail="Progress store unavailable") from exc
        if progress is None:
            raise HTTPException(status_code=404, detail="No progress stored for this reader")
        return ProgressResponse(
            reader_id=progress.reader_id, current_passage=progress.current_passage
        )

    @app.get("/api/v1/story/passages", response_model=StoryInspectionResponse, tags=["story"])
    def story_passages() -> StoryInspectionResponse:
        return StoryInspectionResponse(
            title=source.story.title,
            start=source.story.start,
            source_hash=source.source_hash,
            passages=[passage_report_response(report) for report in inspect_story(source.story)],
        )

    return app
