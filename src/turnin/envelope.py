from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import MalformedEnvelopeError

logger = logging.getLogger(__name__)

RAW_REQUEST_KEY = "rawRequest"
FORM_DATA_KEY = "formData"


class EnvelopeKind(str, Enum):
    RAW_REQUEST = "raw_request"
    FORM_DATA = "form_data"
    BARE = "bare"


_WRAPPERS: tuple[tuple[str, EnvelopeKind], ...] = (
    (RAW_REQUEST_KEY, EnvelopeKind.RAW_REQUEST),
    (FORM_DATA_KEY, EnvelopeKind.FORM_DATA),
)
_WRAPPER_KEYS = frozenset(key for key, _ in _WRAPPERS)


@dataclass(frozen=True)
class Submission:
    kind: EnvelopeKind
    fields: dict[str, Any]
    malformed: bool = False


def _decode_wrapped(value: Any) -> dict[str, Any] | None:
    """Return the wrapped field set, or None when it cannot be decoded."""

    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except ValueError:
            return None
        if isinstance(decoded, Mapping):
            return dict(decoded)
    return None


def unwrap(payload: Mapping[str, Any] | None, *, strict: bool = False) -> Submission:
    """Pick the field set out of a provider payload.

    Envelope shapes are tried in order: ``rawRequest`` (JSON string or
    object), ``formData`` (object or JSON string), then the payload itself.
    A wrapper that fails to decode is skipped with a warning, or raises
    :class:`MalformedEnvelopeError` when ``strict`` is set.
    """

    if not isinstance(payload, Mapping):
        if strict:
            raise MalformedEnvelopeError("Webhook payload is not an object")
        logger.warning("Webhook payload is not an object; treating it as empty")
        return Submission(kind=EnvelopeKind.BARE, fields={}, malformed=True)

    malformed = False
    for key, kind in _WRAPPERS:
        if key not in payload or payload[key] in (None, ""):
            continue
        fields = _decode_wrapped(payload[key])
        if fields is not None:
            return Submission(kind=kind, fields=fields, malformed=malformed)
        if strict:
            raise MalformedEnvelopeError(f"Could not decode '{key}' as a JSON object")
        logger.warning(
            "Could not decode %r as a JSON object; falling back",
            key,
            extra={"envelope": kind.value},
        )
        malformed = True

    fields = {k: v for k, v in payload.items() if k not in _WRAPPER_KEYS}
    return Submission(kind=EnvelopeKind.BARE, fields=fields, malformed=malformed)
