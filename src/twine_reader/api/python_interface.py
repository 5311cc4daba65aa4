"""Python-first client for playing a story through the HTTP API."""

from __future__ import annotations

import httpx

from twine_reader.api.contracts import (
    InteractionRequest,
    MessageResponse,
    ProgressResponse,
    StoryInspectionResponse,
)


class ReaderApiClient:
    """Tiny typed API client for Python users."""

    def __init__(self, api_base_url: str = "http://127.0.0.1:8000") -> None:
        """Initialize client with an API base URL."""
        self._api_base_url = api_base_url.rstrip("/")

    @property
    def api_base_url(self) -> str:
        """Return normalized API base URL."""
        return self._api_base_url

    def play(self, *, reader_id: int) -> MessageResponse:
        """Start or resume a reader's session and return the first message."""
        response = httpx.post(
            f"{self._api_base_url}/api/v1/readers/{reader_id}/play",
            timeout=60.0,
        )
        response.raise_for_status()
        return MessageResponse.model_validate(response.json())

    def choose(self, *, token: str) -> MessageResponse:
        """Select one presented control and return the message it leads to."""
        request = InteractionRequest(token=token)
        response = httpx.post(
            f"{self._api_base_url}/api/v1/interactions",
            json=request.model_dump(mode="json"),
            timeout=60.0,
        )
        response.raise_for_status()
        return MessageResponse.model_validate(response.json())

    def progress(self, *, reader_id: int) -> ProgressResponse | None:
        """Fetch stored progress; None for a reader who never made a choice."""
        response = httpx.get(
            f"{self._api_base_url}/api/v1/readers/{reader_id}/progress",
            timeout=30.0,
        )
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return ProgressResponse.model_validate(response.json())

    def passages(self) -> StoryInspectionResponse:
        """Fetch the inspection view of the loaded story."""
        response = httpx.get(f"{self._api_base_url}/api/v1/story/passages", timeout=30.0)
        response.raise_for_status()
        return StoryInspectionResponse.model_validate(response.json())


__all__ = ["ReaderApiClient"]
