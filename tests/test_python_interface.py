from __future__ import annotations

import httpx
import pytest

from twine_reader.api.python_interface import ReaderApiClient


def _message_payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "message_id": "m1",
        "reader_id": 4,
        "text": "Welcome! [[Go north]]",
        "passage_name": "Start",
        "terminal": False,
        "withdrawn": False,
        "choices": [{"label": "Go north", "token": "4-0|Forest"}],
    }
    payload.update(overrides)
    return payload


def test_client_normalizes_base_url() -> None:
    assert ReaderApiClient("http://127.0.0.1:8000/").api_base_url == "http://127.0.0.1:8000"


def test_play_and_choose_parse_messages(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[tuple[str, object]] = []

    def fake_post(url: str, timeout: float, json: object = None) -> httpx.Response:
        seen.append((url, json))
        request = httpx.Request("POST", url)
        if url.endswith("/play"):
            return httpx.Response(status_code=200, request=request, json=_message_payload())
        return httpx.Response(
            status_code=200,
            request=request,
            json=_message_payload(
                message_id="m2", text="A dark forest.", passage_name="Forest", choices=[]
            ),
        )

    monkeypatch.setattr("twine_reader.api.python_interface.httpx.post", fake_post)
    client = ReaderApiClient()

    first = client.play(reader_id=4)
    second = client.choose(token=first.choices[0].token)

    assert first.choices[0].label == "Go north"
    assert second.passage_name == "Forest"
    assert seen[0][0] == "http://127.0.0.1:8000/api/v1/readers/4/play"
    assert seen[1][1] == {"token": "4-0|Forest", "kind": "button", "values": [], "text": ""}


def test_progress_returns_none_for_new_reader(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_get(url: str, timeout: float) -> httpx.Response:
        request = httpx.Request("GET", url)
        if "/readers/1/" in url:
            return httpx.Response(status_code=404, request=request, json={"detail": "none"})
        return httpx.Response(
            status_code=200, request=request, json={"reader_id": 2, "current_passage": "Cave"}
        )

    monkeypatch.setattr("twine_reader.api.python_interface.httpx.get", fake_get)
    client = ReaderApiClient()

    assert client.progress(reader_id=1) is None
    progress = client.progress(reader_id=2)
    assert progress is not None
    assert progress.current_passage == "Cave"


def test_choose_raises_for_stale_token(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(url: str, timeout: float, json: object = None) -> httpx.Response:
        return httpx.Response(
            status_code=404, request=httpx.Request("POST", url), json={"detail": "gone"}
        )

    monkeypatch.setattr("twine_reader.api.python_interface.httpx.post", fake_post)
    with pytest.raises(httpx.HTTPStatusError):
        ReaderApiClient().choose(token="4-0|Forest")
