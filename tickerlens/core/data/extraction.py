"""Extract structured JSON from free-form model or scraper responses."""

from __future__ import annotations

import json
import re
from typing import Any

from tickerlens.core.exceptions import ExtractionError

_JSON_FENCE = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
_ANY_FENCE = re.compile(r"```(?:[\w+-]*\n)?([\s\S]*?)```")
_PREVIEW_LENGTH = 200


def extract_json_block(text: str) -> str:
    """Return the most likely JSON document inside ``text``.

    A ```json fenced block wins over any other fenced block; without fences
    the stripped text is returned unchanged.
    """

    fenced = _JSON_FENCE.search(text)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()
    fenced = _ANY_FENCE.search(text)
    if fenced and fenced.group(1).strip():
        return fenced.group(1).strip()
    return text.strip()


def parse_json_payload(text: str) -> Any:
    """Parse the JSON document contained in ``text``."""

    block = extract_json_block(text)
    if not block:
        raise ExtractionError("response contained no JSON content", preview="")
    try:
        return json.loads(block)
    except json.JSONDecodeError as exc:
        raise ExtractionError(
            f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}",
            preview=block[:_PREVIEW_LENGTH],
        ) from exc


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse ``text`` and require the document to be a JSON object."""

    payload = parse_json_payload(text)
    if not isinstance(payload, dict):
        raise ExtractionError(
            f"expected a JSON object, got {type(payload).__name__}",
            preview=extract_json_block(text)[:_PREVIEW_LENGTH],
        )
    return payload


__all__ = ["extract_json_block", "parse_json_object", "parse_json_payload"]
