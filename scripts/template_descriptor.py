#!/usr/bin/env python3
"""
Template descriptor model.

A read-only view over a parsed template.json document holding the fields
the content checks care about. Built fresh for every validation call.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


def tag_text(value: Any) -> Any:
    """Read a JSON scalar tag value as text; null stays None, arrays and objects are left alone."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


@dataclass(frozen=True)
class TemplateDescriptor:
    """Parsed template.json contents.

    Attributes:
        identity: Template-unique name (composition templates may omit it)
        description: Free text shown in the wizard
        classifications: Declared classifications, in document order
        tags: Tag key -> tag value
        symbols: Symbol key -> symbol definition
        primary_outputs: Relative paths of the declared primary outputs
        guids: Identifiers the template content is expected to use
    """

    identity: str | None = None
    description: str | None = None
    classifications: tuple[str, ...] = ()
    tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    symbols: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    primary_outputs: tuple[str, ...] = ()
    guids: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TemplateDescriptor:
        """Build a descriptor from a decoded JSON object.

        Raises:
            TypeError: If the document is not a JSON object
        """
        if not isinstance(data, dict):
            raise TypeError(f"template.json must contain a JSON object, not {type(data).__name__}")

        outputs = data.get("primaryOutputs") or []
        tags = dict(data.get("tags") or {})
        return cls(
            identity=data.get("identity"),
            description=data.get("description"),
            classifications=tuple(data.get("classifications") or ()),
            tags=MappingProxyType({key: tag_text(value) for key, value in tags.items()}),
            symbols=MappingProxyType(dict(data.get("symbols") or {})),
            primary_outputs=tuple(o["path"] for o in outputs),
            guids=tuple(data.get("guids") or ()),
        )

    @classmethod
    def from_json(cls, text: str) -> TemplateDescriptor:
        return cls.from_dict(json.loads(text))

    def tag(self, key: str) -> str | None:
        return self.tags.get(key)
