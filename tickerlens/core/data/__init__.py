"""Helpers turning collector output into structured data."""

from tickerlens.core.data.extraction import extract_json_block, parse_json_object, parse_json_payload

__all__ = ["extract_json_block", "parse_json_object", "parse_json_payload"]
