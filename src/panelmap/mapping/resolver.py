"""Identifier extraction from tag messages using ordered mapping rules.

A tag interaction yields a list of records, each with a type string and a
payload. Rules are tried in creation order; the first rule whose record type
appears in the message decides the outcome:

* the payload parses as a JSON object holding the rule's field: that value;
* the payload parses as a JSON object without the field: no identifier;
* the payload is not a JSON object: the decoded text itself, verbatim.

Rules whose record type is absent from the message are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import logging
from typing import Callable, Iterable, Protocol, Sequence


logger = logging.getLogger(__name__)

DEFAULT_TEXT_ENCODING = "utf-8"
_TEXT_ENCODINGS = {"utf-8", "utf-16", "utf-16be", "utf-16le"}


class RecordKind(Enum):
    EMPTY = "empty"
    TEXT = "text"
    URL = "url"
    ABSOLUTE_URL = "absolute-url"
    MIME = "mime"
    SMART_POSTER = "smart-poster"
    UNKNOWN = "unknown"
    EXTERNAL = "external"

    @classmethod
    def classify(cls, record_type: str) -> "RecordKind":
        try:
            return cls(record_type)
        except ValueError:
            return cls.EXTERNAL


@dataclass(frozen=True, slots=True)
class TagRecord:
    """One payload unit from a physical tag read."""

    record_type: str
    payload: str | bytes = b""
    encoding: str = DEFAULT_TEXT_ENCODING

    @property
    def kind(self) -> RecordKind:
        return RecordKind.classify(self.record_type)


class RuleLike(Protocol):
    record_type: str
    field_path: str


def _decode_utf8(record: TagRecord) -> str:
    if isinstance(record.payload, str):
        return record.payload
    return record.payload.decode("utf-8")


def _decode_text(record: TagRecord) -> str:
    if isinstance(record.payload, str):
        return record.payload
    encoding = (record.encoding or DEFAULT_TEXT_ENCODING).lower()
    if encoding not in _TEXT_ENCODINGS:
        raise UnicodeDecodeError(encoding, record.payload, 0, len(record.payload), "unsupported text encoding")
    return record.payload.decode(encoding)


def _decode_empty(record: TagRecord) -> str:
    return ""


_DECODERS: dict[RecordKind, Callable[[TagRecord], str]] = {
    RecordKind.EMPTY: _decode_empty,
    RecordKind.TEXT: _decode_text,
    RecordKind.URL: _decode_utf8,
    RecordKind.ABSOLUTE_URL: _decode_utf8,
    RecordKind.MIME: _decode_utf8,
    RecordKind.SMART_POSTER: _decode_utf8,
    RecordKind.UNKNOWN: _decode_utf8,
    RecordKind.EXTERNAL: _decode_utf8,
}


def decode_payload(record: TagRecord) -> str:
    """Decode a record payload with the decoder registered for its kind."""

    return _DECODERS[record.kind](record)


def _lookup_field(document: dict, field_path: str) -> object | None:
    if field_path in document:
        return document[field_path]

    current: object = document
    for part in field_path.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def _as_identifier(value: object | None) -> str | None:
    if value is None or isinstance(value, (dict, list)):
        return None
    identifier = str(value).strip()
    return identifier or None


def _first_record_of_type(records: Sequence[TagRecord], record_type: str) -> TagRecord | None:
    for record in records:
        if record.record_type == record_type:
            return record
    return None


def extract_identifier(record: TagRecord, field_path: str) -> str | None:
    """Apply one rule's field path to a record whose type already matched."""

    try:
        text = decode_payload(record)
    except UnicodeDecodeError as exc:
        logger.warning("Undecodable %s record payload: %s", record.record_type, exc)
        return None

    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        document = None

    if not isinstance(document, dict):
        return text

    return _as_identifier(_lookup_field(document, field_path))


def resolve_identifier(rules: Iterable[RuleLike], records: Sequence[TagRecord]) -> str | None:
    """Resolve an identifier from a tag message; ``None`` means not resolved."""

    for rule in rules:
        record = _first_record_of_type(records, rule.record_type)
        if record is None:
            continue
        identifier = extract_identifier(record, rule.field_path)
        logger.debug(
            "Rule %s/%s matched a record, identifier=%r",
            rule.record_type,
            rule.field_path,
            identifier,
        )
        return identifier
    return None
