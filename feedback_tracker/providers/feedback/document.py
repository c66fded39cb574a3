"""Encoding of the feedback collection as a single JSON document.

Shared by every backend that stores the collection as text, so the JSON
file and the SQLite row hold byte-compatible documents: a top-level array
of camelCase record objects, pretty-printed with two-space indentation.
"""

from __future__ import annotations

import json
from collections.abc import Sequence

import pydantic

from feedback_tracker.models.feedback import FeedbackRecord
from feedback_tracker.utils.errors import PersistenceError


def encode_collection(records: Sequence[FeedbackRecord]) -> str:
    """Serialize *records* in order to the on-disk JSON text."""
    return json.dumps(
        [record.to_document() for record in records],
        indent=2,
        ensure_ascii=False,
    )


def decode_collection(text: str, provider_name: str) -> list[FeedbackRecord]:
    """Parse stored JSON text back into records.

    Blank text is treated as an empty collection.  Anything else that is
    not an array of valid records raises :class:`PersistenceError` rather
    than silently dropping data.
    """
    if not text.strip():
        return []

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PersistenceError(
            message="Stored feedback is corrupt",
            provider_name=provider_name,
        ) from exc

    if not isinstance(payload, list):
        raise PersistenceError(
            message="Stored feedback is not a list of records",
            provider_name=provider_name,
        )

    try:
        return [FeedbackRecord.model_validate(item) for item in payload]
    except pydantic.ValidationError as exc:
        raise PersistenceError(
            message="Stored feedback contains an invalid record",
            provider_name=provider_name,
        ) from exc
