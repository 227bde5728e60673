from __future__ import annotations

import pytest

from tickerlens.core.data import extract_json_block, parse_json_object, parse_json_payload
from tickerlens.core.exceptions import ExtractionError


def test_json_fence_is_preferred() -> None:
    text = 'Here you go:\n```text\nignored\n```\n```json\n{"price": {"current": 1}}\n```\nthanks'

    assert extract_json_block(text) == '{"price": {"current": 1}}'


def test_any_fence_is_used_when_no_json_fence() -> None:
    assert extract_json_block("```\n[1, 2]\n```") == "[1, 2]"


@pytest.mark.parametrize(
    "text",
    [
        '```{"price": {"current": 1}}```',
        'Answer: ```{"price": {"current": 1}}``` done',
        '```javascript\n{"price": {"current": 1}}\n```',
    ],
)
def test_single_line_and_tagged_fences_keep_their_content(text: str) -> None:
    assert extract_json_block(text) == '{"price": {"current": 1}}'
    assert parse_json_object(text) == {"price": {"current": 1}}


def test_unfenced_text_is_stripped() -> None:
    assert extract_json_block('  {"a": 1}\n') == '{"a": 1}'


def test_parse_json_payload_returns_any_document() -> None:
    assert parse_json_payload("```json\n[1, 2]\n```") == [1, 2]


def test_parse_json_object_requires_an_object() -> None:
    assert parse_json_object('```JSON\n{"a": 1}\n```') == {"a": 1}

    with pytest.raises(ExtractionError) as excinfo:
        parse_json_object("[1, 2]")
    assert "expected a JSON object" in excinfo.value.message


def test_invalid_json_carries_a_preview() -> None:
    with pytest.raises(ExtractionError) as excinfo:
        parse_json_payload('{"price": ')

    assert excinfo.value.preview == '{"price":'
    assert excinfo.value.error_code == "EXTRACTION_ERROR"


def test_empty_text_is_an_error() -> None:
    with pytest.raises(ExtractionError):
        parse_json_payload("   ")
