"""Decode websocket frames into replica stream messages.

A frame carries one or more JSON documents separated by newlines. Each
document is either the tagged form ``{"kind": "snapshot", "records": [...]}``
/ ``{"kind": "delta", "record": {...}}`` or the untagged form the balancer
sends today, where an array is a snapshot and an object is a delta.
"""

from __future__ import annotations

import json
from typing import Any, Iterator, List, Optional

from pydantic import ValidationError

from replica_dashboard.core.logger import get_logger
from replica_dashboard.domain.errors import MessageDecodeError
from replica_dashboard.domain.messages import (
    DeltaMessage,
    SnapshotMessage,
    StreamMessage,
    stream_message_adapter,
)
from replica_dashboard.infrastructure.metrics import STREAM_DECODE_FAILURES_TOTAL

logger = get_logger("replica_dashboard.message_parser")

_decoder = json.JSONDecoder()


def classify(data: Any) -> StreamMessage:
    """Turn one decoded JSON value into a Snapshot or Delta message."""
    try:
        if isinstance(data, list):
            return SnapshotMessage(records=data)
        if isinstance(data, dict):
            if "kind" in data:
                return stream_message_adapter.validate_python(data)
            return DeltaMessage(record=data)
    except ValidationError as e:
        raise MessageDecodeError(
            f"invalid replica message: {e.error_count()} validation error(s)"
        ) from e
    raise MessageDecodeError(f"unexpected payload type {type(data).__name__}")


def _documents(text: str) -> Iterator[tuple[Any, Optional[json.JSONDecodeError]]]:
    """Yield each JSON document in ``text``; on a syntax error skip to the next line."""
    idx, end = 0, len(text)
    while idx < end:
        while idx < end and text[idx].isspace():
            idx += 1
        if idx >= end:
            return
        try:
            data, idx = _decoder.raw_decode(text, idx)
        except json.JSONDecodeError as e:
            yield None, e
            newline = text.find("\n", idx)
            if newline == -1:
                return
            idx = newline + 1
            continue
        yield data, None


def parse_frame(text: str) -> List[StreamMessage]:
    """Decode every document in a frame, dropping (and logging) bad ones."""
    messages: List[StreamMessage] = []
    for data, error in _documents(text):
        try:
            if error is not None:
                raise MessageDecodeError(f"invalid json: {error.msg}") from error
            messages.append(classify(data))
        except MessageDecodeError as e:
            STREAM_DECODE_FAILURES_TOTAL.inc()
            logger.warning(
                "stream_message_decode_failed",
                extra={"error": str(e), "frame_size": len(text)},
            )
    return messages
