"""Tag payload identifier resolution."""

from .message import parse_tag_message
from .resolver import (
    RecordKind,
    TagRecord,
    decode_payload,
    extract_identifier,
    resolve_identifier,
)

__all__ = [
    "RecordKind",
    "TagRecord",
    "decode_payload",
    "extract_identifier",
    "parse_tag_message",
    "resolve_identifier",
]
