from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .fields import FIELD_TABLE, FieldKind, FieldSpec

logger = logging.getLogger(__name__)

_INDEX_PREFIX = re.compile(r"^q?(\d+)_(.+)$")

# Ordered address parts; each tuple lists the accepted keys for that part.
ADDRESS_PARTS: tuple[tuple[str, ...], ...] = (
    ("addr_line1", "line1", "street"),
    ("addr_line2", "line2"),
    ("city",),
    ("state",),
    ("postal", "zip", "postal_code"),
)
_ADDRESS_KEYS = frozenset(key for part in ADDRESS_PARTS for key in part)
_NAME_KEYS = frozenset({"first", "last"})
_IDENTITY_KEYS: tuple[str, ...] = ("value", "text", "id")

_FALSE_STRINGS = frozenset({"false", "no", "off", "0", "n", "unchecked"})


@dataclass(frozen=True)
class Scalar:
    value: Any


@dataclass(frozen=True)
class PersonName:
    first: str
    last: str

    @property
    def full(self) -> str:
        return " ".join(part for part in (self.first, self.last) if part).strip()


@dataclass(frozen=True)
class PostalAddress:
    parts: tuple[str, ...]

    @property
    def joined(self) -> str:
        return ", ".join(self.parts)


@dataclass(frozen=True)
class OpaqueObject:
    identity: str


Decoded = Scalar | PersonName | PostalAddress | OpaqueObject


@dataclass
class CanonicalRecord:
    """Normalized submission.

    ``fields`` always carries every canonical label. ``extras`` holds the raw
    passthrough copy and is only consulted when ``fields`` has no entry.
    """

    fields: dict[str, Any]
    sources: dict[str, str] = field(default_factory=dict)
    extras: dict[str, Any] = field(default_factory=dict)
    unrecognized: list[str] = field(default_factory=list)

    def __getitem__(self, key: str) -> Any:
        if key in self.fields:
            return self.fields[key]
        return self.extras[key]

    def __contains__(self, key: object) -> bool:
        return key in self.fields or key in self.extras

    def get(self, key: str, default: Any = "") -> Any:
        if key in self.fields:
            return self.fields[key]
        return self.extras.get(key, default)

    def is_resolved(self, key: str) -> bool:
        return key in self.sources

    def as_dict(self) -> dict[str, Any]:
        merged = dict(self.extras)
        merged.update(self.fields)
        return merged


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _decode_name(obj: Mapping[str, Any]) -> PersonName:
    return PersonName(first=_text(obj.get("first")), last=_text(obj.get("last")))


def _decode_address(obj: Mapping[str, Any]) -> PostalAddress:
    parts: list[str] = []
    for aliases in ADDRESS_PARTS:
        for alias in aliases:
            text = _text(obj.get(alias))
            if text:
                parts.append(text)
                break
    return PostalAddress(parts=tuple(parts))


def _decode_opaque(obj: Mapping[str, Any]) -> OpaqueObject:
    for key in _IDENTITY_KEYS:
        candidate = obj.get(key)
        if isinstance(candidate, str | int | float) and not isinstance(candidate, bool):
            return OpaqueObject(identity=_text(candidate))
    return OpaqueObject(identity="")


def decode_value(value: Any, kind: FieldKind = FieldKind.TEXT) -> Decoded:
    """Classify a raw value into one of the supported shapes."""

    if isinstance(value, Mapping):
        keys = set(value.keys())
        looks_like_name = bool(keys & _NAME_KEYS)
        looks_like_address = bool(keys & _ADDRESS_KEYS)
        if kind is FieldKind.ADDRESS and looks_like_address:
            return _decode_address(value)
        if looks_like_name:
            return _decode_name(value)
        if looks_like_address:
            return _decode_address(value)
        return _decode_opaque(value)
    if isinstance(value, list | tuple):
        items = [_text(item) for item in value if not isinstance(item, Mapping)]
        return Scalar(", ".join(item for item in items if item))
    return Scalar(value)


def _decoded_text(decoded: Decoded) -> Any:
    if isinstance(decoded, PersonName):
        return decoded.full
    if isinstance(decoded, PostalAddress):
        return decoded.joined
    if isinstance(decoded, OpaqueObject):
        return decoded.identity
    return decoded.value


def _as_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def _prefixed_index(raw: Mapping[str, Any]) -> dict[str, str]:
    """Map de-prefixed names to the raw key carrying them; lowest index wins."""

    ranked: dict[str, tuple[int, str]] = {}
    for key in raw:
        if not isinstance(key, str):
            continue
        match = _INDEX_PREFIX.match(key)
        if not match:
            continue
        index, name = int(match.group(1)), match.group(2)
        current = ranked.get(name)
        if current is None or (index, key) < current:
            ranked[name] = (index, key)
    return {name: key for name, (_, key) in ranked.items()}


def strip_index_prefix(key: str) -> str | None:
    match = _INDEX_PREFIX.match(key)
    return match.group(2) if match else None


def _resolve(
    spec: FieldSpec,
    raw: Mapping[str, Any],
    prefixed: Mapping[str, str],
    unrecognized: list[str],
) -> tuple[str, Decoded] | None:
    for candidate in spec.candidates:
        for raw_key in (candidate, prefixed.get(candidate)):
            if raw_key is None or raw_key not in raw:
                continue
            value = raw[raw_key]
            if _is_blank(value):
                continue
            decoded = decode_value(value, spec.kind)
            if isinstance(decoded, OpaqueObject) and raw_key not in unrecognized:
                logger.warning(
                    "Unrecognized object shape for %r under key %r; keys=%s",
                    spec.name,
                    raw_key,
                    sorted(str(k) for k in value),
                )
                unrecognized.append(raw_key)
            return raw_key, decoded
    return None


def normalize(raw: Mapping[str, Any] | None) -> CanonicalRecord:
    """Reconcile a raw submission into a canonical record. Never raises."""

    if not isinstance(raw, Mapping):
        if raw is not None:
            logger.warning("Submission is not a mapping (%s); using defaults", type(raw).__name__)
        raw = {}

    prefixed = _prefixed_index(raw)
    fields: dict[str, Any] = {}
    sources: dict[str, str] = {}
    unrecognized: list[str] = []

    for spec in FIELD_TABLE:
        if spec.first_name_field:
            fields[spec.first_name_field] = ""
        if spec.last_name_field:
            fields[spec.last_name_field] = ""

        resolved = _resolve(spec, raw, prefixed, unrecognized)
        if resolved is None:
            fields[spec.name] = spec.default
            continue

        raw_key, decoded = resolved
        sources[spec.name] = raw_key
        value = _decoded_text(decoded)
        if spec.kind is FieldKind.FLAG:
            fields[spec.name] = _as_flag(value)
        else:
            fields[spec.name] = value
        if isinstance(decoded, PersonName):
            if spec.first_name_field:
                fields[spec.first_name_field] = decoded.first
            if spec.last_name_field:
                fields[spec.last_name_field] = decoded.last

    extras: dict[str, Any] = {}
    for key, value in raw.items():
        extras[str(key)] = value
    for name, raw_key in prefixed.items():
        extras.setdefault(name, raw[raw_key])

    return CanonicalRecord(
        fields=fields,
        sources=sources,
        extras=extras,
        unrecognized=unrecognized,
    )
