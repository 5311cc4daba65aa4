"""Public API surface for HTTP serving and Python-first interfaces."""

from twine_reader.api.app import create_app
from twine_reader.api.contracts import InteractionRequest, MessageResponse, ProgressResponse
from twine_reader.api.python_interface import ReaderApiClient

__all__ = [
    "InteractionRequest",
    "MessageResponse",
    "ProgressResponse",
    "ReaderApiClient",
    "create_app",
]
