"""JSON representation of tag messages handed over by tag readers."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from panelmap.errors import ValidationError
from panelmap.mapping.resolver import DEFAULT_TEXT_ENCODING, TagRecord


def _record_from_dict(index: int, raw: Any) -> TagRecord:
    if not isinstance(raw, dict):
        raise ValidationError("records", "Tag record must be an object", record_index=index)

    record_type = str(raw.get("recordType") or raw.get("record_type") or "").strip()
    if not record_type:
        raise ValidationError("recordType", "Record type is required", record_index=index)

    encoding = str(raw.get("encoding") or DEFAULT_TEXT_ENCODING)

    if "dataHex" in raw:
        try:
            payload: str | bytes = bytes.fromhex(str(raw["dataHex"]))
        except ValueError as exc:
            raise ValidationError("dataHex", f"Invalid hex payload: {exc}", record_index=index) from exc
    elif "dataBase64" in raw:
        try:
            payload = base64.b64decode(str(raw["dataBase64"]), validate=True)
        except binascii.Error as exc:
            raise ValidationError("dataBase64", f"Invalid base64 payload: {exc}", record_index=index) from exc
    else:
        data = raw.get("data", "")
        payload = "" if data is None else str(data)

    return TagRecord(record_type=record_type, payload=payload, encoding=encoding)


def parse_tag_message(data: Any) -> list[TagRecord]:
    """Build tag records from ``{"records": [...]}`` or a bare record list.

    Each record carries ``recordType`` and one of ``data`` (text),
    ``dataHex`` or ``dataBase64`` (raw bytes), plus an optional ``encoding``.
    """

    if isinstance(data, dict):
        data = data.get("records")
    if not isinstance(data, list):
        raise ValidationError("records", "Tag message must contain a list of records")
    return [_record_from_dict(index, raw) for index, raw in enumerate(data)]
