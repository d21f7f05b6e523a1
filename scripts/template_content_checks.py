#!/usr/bin/env python3
"""
Template Validator - Content Checks

Checks what the wizard does with a template.json beyond its shape:
descriptor text, identity naming, classification, tags, declared outputs,
declared GUIDs and exported symbols.

Each check returns its own list of diagnostics. perform_content_checks()
runs them in a fixed order, keeping what each one reported, and turns an
unexpected failure into one extra diagnostic, so callers always get a list
back.
"""

from __future__ import annotations

import codecs
import os
from pathlib import Path
from typing import Iterator

from template_descriptor import TemplateDescriptor
from template_tag_rules import iter_tag_messages
from tv_validation_common import RULES

DESCRIPTOR_SETTINGS = RULES.descriptor


def is_composition_template(file_path: str | Path) -> bool:
    """Composition templates live under a _composition folder."""
    return DESCRIPTOR_SETTINGS["composition_marker"] in Path(file_path).as_posix()


def is_visual_basic_template(file_path: str | Path) -> bool:
    """VisualBasic templates live under a folder whose name ends in VB."""
    return DESCRIPTOR_SETTINGS["visual_basic_marker"] in Path(file_path).as_posix()


def get_template_root(file_path: str | Path) -> Path:
    """Return the folder holding .template.config/, the base of the template content."""
    config_dir = Path(file_path).parent
    if config_dir.name == DESCRIPTOR_SETTINGS["config_dir"]:
        return config_dir.parent
    return config_dir


# =============================================================================
# Descriptor-level checks
# =============================================================================


def ensure_adequate_description(descriptor: TemplateDescriptor) -> list[str]:
    description = descriptor.description
    if description is None or not description.strip():
        return ["Description not provided."]
    if len(description.strip()) < DESCRIPTOR_SETTINGS["min_description_length"]:
        return ["Description is too short."]
    return []


def ensure_identity_matches_language(descriptor: TemplateDescriptor, file_path: str | Path) -> list[str]:
    """VisualBasic identities end in 'VB', all others must not."""
    identity = descriptor.identity
    if identity is None or not identity.strip():
        return ["The template is missing an identity."]

    suffix = DESCRIPTOR_SETTINGS["identity_vb_suffix"]
    if is_visual_basic_template(file_path):
        if not identity.endswith(suffix):
            return [f"The identity of templates for VisualBasic should end with '{suffix}'."]
    elif identity.endswith(suffix):
        return [f"Only VisualBasic templates should end with '{suffix}'."]
    return []


def ensure_classification_as_expected(descriptor: TemplateDescriptor) -> list[str]:
    expected = DESCRIPTOR_SETTINGS["classification"]
    if len(descriptor.classifications) != 1:
        return ["Only a single classification is expected."]
    if descriptor.classifications[0] != expected:
        return [f"Classification of '{expected}' is expected."]
    return []


def verify_symbols(descriptor: TemplateDescriptor) -> list[str]:
    # A new exported symbol must be added to gen_params in template_rules.yaml
    return [
        f"Invalid Symbol key '{key}' specified."
        for key in descriptor.symbols
        if key not in RULES.valid_symbol_keys
    ]


# =============================================================================
# Filesystem checks
# =============================================================================


def ensure_primary_outputs_exist(descriptor: TemplateDescriptor, template_root: Path) -> list[str]:
    return [
        f"Primary output '{output}' does not exist."
        for output in descriptor.primary_outputs
        if not (template_root / output).is_file()
    ]


def iter_content_files(template_root: Path):
    """Yield every file under template_root except template.json, in sorted order."""
    file_name = DESCRIPTOR_SETTINGS["file_name"]
    for dirpath, dirnames, filenames in os.walk(template_root):
        dirnames.sort()
        for filename in sorted(filenames):
            if filename == file_name:
                continue
            yield Path(dirpath) / filename


def read_content_text(filepath: Path) -> str:
    """Decode a content file, honouring a UTF-16 byte order mark; undecodable bytes are dropped."""
    raw = filepath.read_bytes()
    if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return raw.decode("utf-16", errors="ignore")
    return raw.decode("utf-8-sig", errors="ignore")


def ensure_guids_are_used(descriptor: TemplateDescriptor, template_root: Path) -> list[str]:
    """Every declared GUID must appear literally in at least one content file."""
    if not descriptor.guids:
        return []
    if not template_root.is_dir():
        raise NotADirectoryError(f"Template root '{template_root}' is not a directory")

    unused = list(dict.fromkeys(descriptor.guids))
    for filepath in iter_content_files(template_root):
        content = read_content_text(filepath)
        unused = [guid for guid in unused if guid not in content]
        if not unused:
            break

    return [f"Defined GUID '{guid}' is not used." for guid in descriptor.guids if guid in unused]


# =============================================================================
# Entry point
# =============================================================================


def iter_content_checks(descriptor: TemplateDescriptor, file_path: str | Path) -> Iterator[list[str]]:
    """Yield the diagnostics of each content check, in the order they run."""
    # Composition templates need neither a description nor an identity
    if not is_composition_template(file_path):
        yield ensure_adequate_description(descriptor)
        yield ensure_identity_matches_language(descriptor, file_path)

    yield ensure_classification_as_expected(descriptor)
    yield from iter_tag_messages(descriptor)

    template_root = get_template_root(file_path)
    yield ensure_primary_outputs_exist(descriptor, template_root)
    yield ensure_guids_are_used(descriptor, template_root)

    yield verify_symbols(descriptor)


def perform_content_checks(file_path: str | Path, file_contents: str) -> list[str]:
    """Parse file_contents and run the content checks.

    Args:
        file_path: Path of the template.json file as given by the caller,
            used for layout conventions
        file_contents: Raw text of the file

    Returns:
        Content diagnostics (empty when nothing is wrong). A failure while
        parsing or checking adds one "Exception during template checks"
        diagnostic after whatever the earlier checks already reported.
    """
    messages: list[str] = []
    try:
        descriptor = TemplateDescriptor.from_json(file_contents)
        for check_messages in iter_content_checks(descriptor, file_path):
            messages.extend(check_messages)
    except Exception as e:
        messages.append(f"Exception during template checks: {type(e).__name__}: {e}")
    return messages
