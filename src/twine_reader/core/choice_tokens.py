"""Opaque choice tokens carried by each selectable control."""

from __future__ import annotations

from dataclasses import dataclass

from twine_reader.core.errors import UnexpectedInteractionError

TARGET_SEPARATOR = "|"
INDEX_SEPARATOR = "-"


@dataclass(frozen=True)
class ChoiceToken:
    """Decoded ``{reader_id}-{sequence_index}|{target}`` token."""

    reader_id: int
    sequence_index: int
    target: str


def encode_choice_token(reader_id: int, sequence_index: int, target: str) -> str:
    return f"{reader_id}{INDEX_SEPARATOR}{sequence_index}{TARGET_SEPARATOR}{target}"


def decode_choice_token(token: str) -> ChoiceToken:
    """Decode a token this process issued; anything else is an invariant violation."""
    prefix, separator, target = token.partition(TARGET_SEPARATOR)
    reader_part, index_separator, index_part = prefix.rpartition(INDEX_SEPARATOR)
    if not separator or not index_separator:
        raise UnexpectedInteractionError(f"Choice token has no target: {token!r}")
    try:
        return ChoiceToken(
            reader_id=int(reader_part),
            sequence_index=int(index_part),
            target=target,
        )
    except ValueError as exc:
        raise UnexpectedInteractionError(f"Choice token is not well formed: {token!r}") from exc
