#!/usr/bin/env python3
"""
Template Validator - Tag Rules

Every tag declared in template.json is routed by key to the rule(s)
registered for it in TAG_VALIDATORS. Keys without an entry are skipped
without a diagnostic so that templates can carry tags this validator does
not know about yet.

A rule takes (key, value, descriptor) and returns a list of diagnostics.
Rules never modify the descriptor.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Iterator

import composition_query
from template_descriptor import TemplateDescriptor
from tv_validation_common import RULES

TagRule = Callable[[str, str, TemplateDescriptor], list[str]]

VERSION_PATTERN = re.compile(r"\d{1,2}\.\d{1,2}\.\d{1,2}")

# Crude match for a markdown link: [License name](http...)
LICENSE_PATTERN = re.compile(r"\[([\w .\-]){4,}\]\(http([\w ./?=\-:]){9,}\)")

INTEGER_PATTERN = re.compile(r"^\s*[+-]?\d+\s*$")

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

VISUAL_BASIC = "VisualBasic"


def is_int32(value: str | None) -> bool:
    """Check value parses as a 32-bit signed integer (surrounding whitespace allowed)."""
    if value is None or not INTEGER_PATTERN.match(value):
        return False
    return INT32_MIN <= int(value) <= INT32_MAX


def parses_as_true(value: str | None) -> bool:
    return value is not None and value.strip().lower() == "true"


def shown(value: str | None) -> str:
    """Render a tag value for a message; a JSON null reads as empty."""
    return "" if value is None else value


# =============================================================================
# Rule factories
# =============================================================================


def one_of(value_set: str, verb: str = "Invalid") -> TagRule:
    """Rule: the whole tag value must be in RULES.allowed(value_set)."""
    allowed = RULES.allowed(value_set)

    def rule(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
        if value not in allowed:
            return [f"{verb} value '{shown(value)}' specified in the {key} tag."]
        return []

    return rule


def each_of(value_set: str) -> TagRule:
    """Rule: every '|'-separated element must be in RULES.allowed(value_set)."""
    allowed = RULES.allowed(value_set)

    def rule(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
        return [
            f"Invalid value '{element}' specified in the {key} tag."
            for element in value.split("|")
            if element not in allowed
        ]

    return rule


def integer(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    if not is_int32(value):
        return [f"The {key} tag must be an integer. Not '{shown(value)}'."]
    return []


# =============================================================================
# Tag specific rules
# =============================================================================


def verify_feature_default_instance(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    """Single-instance features must name their default instance."""
    if value != "feature":
        return []

    multiple_instance = descriptor.tag("wts.multipleInstance")
    if multiple_instance is None or parses_as_true(multiple_instance):
        return []

    default_instance = descriptor.tag("wts.defaultInstance")
    if default_instance is None or not default_instance.strip():
        return [
            "Template must define a valid value for wts.defaultInstance tag "
            f"as wts.type is '{value}' and wts.multipleInstance is 'false'."
        ]
    return []


def verify_deprecated_order(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    return [f"The {key} tag is no longer supported. Please use the wts.displayOrder or the wts.compositionOrder tag."]


def verify_version(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    if not VERSION_PATTERN.fullmatch(value):
        return [f"'{value}' specified in the {key} tag does not match the expected format of 'X.Y.Z'."]
    return []


def verify_composition_filter_syntax(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    try:
        composition_query.parse(value)
    except composition_query.InvalidCompositionQueryError as e:
        return [f"Unable to parse the {key} value of '{value}': {e}."]
    return []


def verify_composition_filter_language(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    """VisualBasic templates must only compose with VisualBasic identities."""
    # Textual check only; an identity built from parameters slips through
    if descriptor.tag("language") == VISUAL_BASIC and "identity" in value and ".VB" not in value:
        return [f"The {key} identity value does not match the language. ({value})"]
    return []


def verify_licenses(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    if not LICENSE_PATTERN.fullmatch(value):
        return [f"'{value}' specified in the {key} tag does not match the expected format."]
    return []


def verify_not_blank(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    if value is None or not value.strip():
        return [f"The tag {key} cannot be blank if specified."]
    return []


# =============================================================================
# Dispatch table
# =============================================================================

_boolean = one_of("boolean")

TAG_VALIDATORS: MappingProxyType[str, tuple[TagRule, ...]] = MappingProxyType(
    {
        "language": (one_of("language"),),
        "type": (one_of("type"),),
        "wts.type": (one_of("wts.type"), verify_feature_default_instance),
        "wts.order": (verify_deprecated_order,),
        "wts.displayOrder": (integer,),
        "wts.compositionOrder": (integer,),
        "wts.genGroup": (integer,),
        "wts.framework": (each_of("wts.framework"),),
        "wts.projecttype": (each_of("wts.projecttype"),),
        "wts.version": (verify_version,),
        "wts.rightClickEnabled": (_boolean,),
        "wts.multipleInstance": (_boolean,),
        "wts.isHidden": (_boolean,),
        "wts.compositionFilter": (verify_composition_filter_syntax, verify_composition_filter_language),
        "wts.licenses": (verify_licenses,),
        "wts.group": (one_of("wts.group"),),
        "wts.export.baseclass": (one_of("wts.export.baseclass", verb="Unexpected"),),
        "wts.export.setter": (one_of("wts.export.setter", verb="Unexpected"),),
        "wts.defaultInstance": (verify_not_blank,),
        # Checked against the template folder by the folder verifier
        "wts.dependencies": (),
    }
)


def verify_tag(key: str, value: str, descriptor: TemplateDescriptor) -> list[str]:
    """Run every rule registered for key. Unregistered keys yield nothing."""
    messages: list[str] = []
    for rule in TAG_VALIDATORS.get(key, ()):
        messages.extend(rule(key, value, descriptor))
    return messages


def iter_tag_messages(descriptor: TemplateDescriptor) -> Iterator[list[str]]:
    """Yield the diagnostics of each declared tag, in declaration order."""
    for key, value in descriptor.tags.items():
        yield verify_tag(key, value, descriptor)
