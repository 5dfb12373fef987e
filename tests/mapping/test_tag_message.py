from __future__ import annotations

import pytest

from panelmap.errors import ValidationError
from panelmap.mapping.message import parse_tag_message
from panelmap.mapping.resolver import TagRecord


def test_parse_accepts_wrapped_and_bare_record_lists() -> None:
    wrapped = parse_tag_message({"records": [{"recordType": "text", "data": "S1"}]})
    bare = parse_tag_message([{"record_type": "url", "data": "https://example.test"}])

    assert wrapped == [TagRecord("text", "S1")]
    assert bare == [TagRecord("url", "https://example.test")]


def test_parse_decodes_binary_payload_fields() -> None:
    records = parse_tag_message(
        [
            {"recordType": "mime", "dataHex": "53312d4858"},
            {"recordType": "text", "dataBase64": "UzEtQjY0", "encoding": "utf-8"},
            {"recordType": "empty"},
        ]
    )

    assert records[0].payload == b"S1-HX"
    assert records[1].payload == b"S1-B64"
    assert records[2].payload == ""


@pytest.mark.parametrize(
    ("message", "field", "record_index"),
    [
        ({"records": "nope"}, "records", None),
        ([42], "records", 0),
        ([{"data": "S1"}], "recordType", 0),
        ([{"recordType": "text", "data": "ok"}, {"recordType": "mime", "dataHex": "zz"}], "dataHex", 1),
        ([{"recordType": "mime", "dataBase64": "***"}], "dataBase64", 0),
    ],
)
def test_parse_rejects_malformed_messages(message: object, field: str, record_index: int | None) -> None:
    with pytest.raises(ValidationError) as excinfo:
        parse_tag_message(message)

    assert excinfo.value.field == field
    assert excinfo.value.record_index == record_index
