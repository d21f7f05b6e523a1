#!/usr/bin/env python3
"""
Template Validator - Structural Analyzer

Compares the raw JSON of a template.json file with the shape the wizard
expects: unknown properties, missing required properties and values of the
wrong type are reported. Content semantics are not looked at here, see
template_content_checks.py for those.

Returns either a list of discrepancies or [ALL_GOOD].
"""

from __future__ import annotations

import json
import re
from typing import Any

from jsonschema import Draft202012Validator
from tv_validation_common import ALL_GOOD

_STRING_ARRAY: dict[str, Any] = {"type": "array", "items": {"type": "string"}}

# Expected shape of .template.config/template.json
TEMPLATE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "additionalProperties": False,
    "required": ["classifications", "tags"],
    "properties": {
        "$schema": {"type": "string"},
        "author": {"type": "string"},
        "classifications": _STRING_ARRAY,
        "name": {"type": "string"},
        "shortName": {"type": "string"},
        "groupIdentity": {"type": "string"},
        "identity": {"type": "string"},
        "description": {"type": "string"},
        "tags": {"type": "object", "additionalProperties": {"type": "string"}},
        "sourceName": {"type": "string"},
        "preferNameDirectory": {"type": "boolean"},
        "primaryOutputs": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["path"],
                "properties": {
                    "path": {"type": "string"},
                    "condition": {"type": "string"},
                },
            },
        },
        "symbols": {"type": "object", "additionalProperties": {"type": "object"}},
        "postActions": {"type": "array", "items": {"type": "object"}},
        "guids": _STRING_ARRAY,
    },
}

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")

_VALIDATOR = Draft202012Validator(TEMPLATE_SCHEMA)


class _PairsDict(dict):
    """dict that remembers keys which appeared more than once while decoding."""

    duplicates: list[str]


def _collect_pairs(pairs: list[tuple[str, Any]]) -> _PairsDict:
    obj = _PairsDict()
    obj.duplicates = []
    for key, value in pairs:
        if key in obj and key not in obj.duplicates:
            obj.duplicates.append(key)
        obj[key] = value
    return obj


def format_json_path(path: Any) -> str:
    """Render a jsonschema path deque as $.a[0]['b.c']."""
    parts = ["$"]
    for item in path:
        if isinstance(item, int):
            parts.append(f"[{item}]")
        elif _IDENTIFIER.match(item):
            parts.append(f".{item}")
        else:
            parts.append(f"[{item!r}]")
    return "".join(parts)


def _find_duplicates(node: Any, path: list[Any], found: list[str]) -> None:
    if isinstance(node, dict):
        for key in getattr(node, "duplicates", []):
            found.append(f"{format_json_path(path)}: Duplicate property '{key}'")
        for key, value in node.items():
            _find_duplicates(value, path + [key], found)
    elif isinstance(node, list):
        for i, value in enumerate(node):
            _find_duplicates(value, path + [i], found)


def analyze_json(text: str) -> list[str]:
    """Compare template.json text against TEMPLATE_SCHEMA.

    Args:
        text: Raw file contents

    Returns:
        Duplicate keys first, then schema discrepancies ordered by JSON
        path, or [ALL_GOOD] when the document
        matches the expected shape exactly
    """
    try:
        document = json.loads(text, object_pairs_hook=_collect_pairs)
    except json.JSONDecodeError as e:
        return [f"Invalid JSON: {e}"]

    messages: list[str] = []
    _find_duplicates(document, [], messages)

    errors = sorted(
        _VALIDATOR.iter_errors(document),
        key=lambda e: ([str(p) for p in e.absolute_path], e.message),
    )
    for error in errors:
        messages.append(f"{format_json_path(error.absolute_path)}: {error.message}")

    return messages or [ALL_GOOD]
