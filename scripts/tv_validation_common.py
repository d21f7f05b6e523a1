#!/usr/bin/env python3
"""
Template Validator - Common Module

Shared infrastructure for the template.json validators.
This module contains:
- Type definitions (ValidationResult)
- Rule tables loaded from template_rules.yaml (allowed values, symbol registry)
- Utility functions (exit codes, color formatting, result printing)

All template validators should import from this module to ensure consistency.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

# =============================================================================
# Exit Codes
# =============================================================================

EXIT_OK = 0  # Every template passed
EXIT_FAILED = 1  # At least one template reported a problem

# =============================================================================
# Messages
# =============================================================================

# The single diagnostic meaning "no problems found"
ALL_GOOD = "All good."

# Environment variable that points at an alternative rules file
RULES_ENV_VAR = "TEMPLATE_VALIDATOR_RULES"

DEFAULT_RULES_PATH = Path(__file__).resolve().parent / "template_rules.yaml"

# Keys every rules file must provide under allowed_values
REQUIRED_VALUE_SETS = (
    "language",
    "type",
    "wts.type",
    "wts.framework",
    "wts.projecttype",
    "wts.group",
    "wts.export.baseclass",
    "wts.export.setter",
    "boolean",
)

REQUIRED_DESCRIPTOR_SETTINGS = (
    "file_name",
    "config_dir",
    "composition_marker",
    "visual_basic_marker",
    "identity_vb_suffix",
    "min_description_length",
    "classification",
)


class RulesConfigError(ValueError):
    """Raised when template_rules.yaml is missing or malformed."""


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one template.json file.

    Attributes:
        success: True only when messages is exactly [ALL_GOOD]
        messages: Ordered diagnostics, one problem per message
        path: The path that was validated, if any
    """

    success: bool
    messages: tuple[str, ...]
    path: str | None = None

    @classmethod
    def from_messages(cls, messages: list[str] | tuple[str, ...], path: str | None = None) -> ValidationResult:
        """Build a result, deriving success from the message list."""
        messages = tuple(messages)
        return cls(success=messages == (ALL_GOOD,), messages=messages, path=path)

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.success else EXIT_FAILED

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"success": self.success, "messages": list(self.messages)}
        if self.path is not None:
            result["path"] = self.path
        return result

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


@dataclass(frozen=True)
class Rules:
    """Immutable rule tables shared by every validation call."""

    version: int
    descriptor: Mapping[str, Any]
    allowed_values: Mapping[str, frozenset[str]]
    valid_symbol_keys: frozenset[str]

    def allowed(self, name: str) -> frozenset[str]:
        return self.allowed_values[name]


def _string_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise RulesConfigError(f"'{where}' must be a list of strings")
    return value


def load_rules(path: Path | None = None) -> Rules:
    """Load and freeze the rule tables.

    Args:
        path: Rules file to read. Defaults to $TEMPLATE_VALIDATOR_RULES,
            then to template_rules.yaml next to this module.

    Returns:
        Frozen Rules instance

    Raises:
        RulesConfigError: If the file cannot be read or lacks a required table
    """
    if path is None:
        override = os.environ.get(RULES_ENV_VAR, "").strip()
        path = Path(override) if override else DEFAULT_RULES_PATH

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise RulesConfigError(f"Cannot read rules file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RulesConfigError(f"Invalid YAML in rules file {path}: {e}") from e

    if not isinstance(data, dict):
        raise RulesConfigError(f"Rules file {path} must contain a mapping")

    version = data.get("rules_version")
    if not isinstance(version, int):
        raise RulesConfigError("'rules_version' must be an integer")

    descriptor = data.get("descriptor")
    if not isinstance(descriptor, dict):
        raise RulesConfigError("'descriptor' must be a mapping")
    for key in REQUIRED_DESCRIPTOR_SETTINGS:
        if key not in descriptor:
            raise RulesConfigError(f"'descriptor.{key}' is missing")

    raw_values = data.get("allowed_values")
    if not isinstance(raw_values, dict):
        raise RulesConfigError("'allowed_values' must be a mapping")
    for key in REQUIRED_VALUE_SETS:
        if key not in raw_values:
            raise RulesConfigError(f"'allowed_values.{key}' is missing")

    allowed_values = {
        name: frozenset(_string_list(values, f"allowed_values.{name}")) for name, values in raw_values.items()
    }
    symbol_keys = _string_list(data.get("gen_params"), "gen_params") + _string_list(
        data.get("extra_symbol_keys", []), "extra_symbol_keys"
    )

    return Rules(
        version=version,
        descriptor=MappingProxyType(dict(descriptor)),
        allowed_values=MappingProxyType(allowed_values),
        valid_symbol_keys=frozenset(symbol_keys),
    )


# Built once at import; read-only afterwards
RULES = load_rules()

# =============================================================================
# Color Formatting (for terminal output)
# =============================================================================

# ANSI color codes
COLORS = {
    "FAILED": "\033[91m",  # Red
    "WARNING": "\033[93m",  # Yellow
    "INFO": "\033[90m",  # Gray
    "PASSED": "\033[92m",  # Green
    "RESET": "\033[0m",  # Reset
    "BOLD": "\033[1m",  # Bold
}


def colorize(text: str, level: str) -> str:
    """Apply color to text based on level."""
    color = COLORS.get(level, "")
    return f"{color}{text}{COLORS['RESET']}"


def print_result(result: ValidationResult, verbose: bool = False) -> None:
    """Print one template's diagnostics in human-readable format."""
    location = result.path or "<no path>"
    if result.success:
        if verbose:
            print(f"{colorize('[PASSED]', 'PASSED')} {location}")
        return

    print(f"{colorize('[FAILED]', 'FAILED')} {location}")
    for message in result.messages:
        print(f"  - {message}")


def print_summary(results: list[ValidationResult]) -> None:
    """Print a one-block summary after all templates were validated."""
    failed = sum(1 for r in results if not r.success)

    print(f"\n{'=' * 60}")
    print(f"{COLORS['BOLD']}Template Validation Report{COLORS['RESET']}")
    print(f"{'=' * 60}")
    print(f"Templates checked: {len(results)}")
    print(f"Rules version:     {RULES.version}")

    if failed == 0:
        print(f"\n{COLORS['PASSED']}✓ All templates passed{COLORS['RESET']}")
    else:
        print(f"\n{COLORS['FAILED']}✗ {failed} template(s) with issues{COLORS['RESET']}")
