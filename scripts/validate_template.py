#!/usr/bin/env python3
"""
Template Validator - template.json Verifier

Validates the .template.config/template.json descriptor of a template
before it is packaged. Runs the structural analyzer (shape of the JSON)
and the content checks (tags, symbols, identity, declared files and GUIDs)
and merges their diagnostics.

Usage:
    uv run python scripts/validate_template.py path/to/.template.config/template.json
    uv run python scripts/validate_template.py path/to/templates/
    uv run python scripts/validate_template.py path/to/templates/ --verbose
    uv run python scripts/validate_template.py path/to/templates/ --json

Exit codes:
    0 - All templates passed
    1 - At least one template has issues
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from template_content_checks import perform_content_checks
from template_structure import analyze_json
from tv_validation_common import (
    ALL_GOOD,
    EXIT_FAILED,
    EXIT_OK,
    RULES,
    ValidationResult,
    print_result,
    print_summary,
)

DESCRIPTOR_FILE_NAME = RULES.descriptor["file_name"]
CONFIG_DIR_NAME = RULES.descriptor["config_dir"]


def check_preconditions(config_file_path: str | Path | None) -> list[str]:
    """Check the path names an existing template.json file.

    Returns:
        One diagnostic per failed condition; empty when the file can be read
    """
    messages: list[str] = []

    if config_file_path is None:
        messages.append(f"Path to {DESCRIPTOR_FILE_NAME} file not provided.")

    if config_file_path is None or Path(config_file_path).name != DESCRIPTOR_FILE_NAME:
        messages.append(f"Path does not point to a {DESCRIPTOR_FILE_NAME} file.")

    # Relative paths resolve against the current working directory
    if config_file_path is None or not Path(config_file_path).absolute().is_file():
        messages.append(f"Path to {DESCRIPTOR_FILE_NAME} file does not exist.")

    return messages


def merge_results(structural_messages: list[str], content_messages: list[str]) -> list[str]:
    """Combine analyzer and content diagnostics.

    Content diagnostics replace a lone ALL_GOOD from the analyzer and are
    appended after any real structural discrepancy.
    """
    if not content_messages:
        return list(structural_messages)
    if structural_messages[:1] == [ALL_GOOD]:
        return list(content_messages)
    return list(structural_messages) + list(content_messages)


def verify_template_path(config_file_path: str | Path | None) -> ValidationResult:
    """Validate the template.json file at config_file_path.

    Args:
        config_file_path: Absolute or relative path to a template.json file

    Returns:
        ValidationResult; success only when the sole message is ALL_GOOD
    """
    display_path = None if config_file_path is None else str(config_file_path)

    messages = check_preconditions(config_file_path)
    if messages:
        return ValidationResult.from_messages(messages, display_path)

    file_path = Path(config_file_path)
    try:
        file_contents = file_path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        return ValidationResult.from_messages([f"Unable to read {DESCRIPTOR_FILE_NAME}: {e}"], display_path)

    structural_messages = analyze_json(file_contents)
    content_messages = perform_content_checks(file_path, file_contents)

    return ValidationResult.from_messages(merge_results(structural_messages, content_messages), display_path)


def find_template_files(root: Path) -> list[Path]:
    """Find every .template.config/template.json below root, sorted."""
    return sorted(p for p in root.rglob(DESCRIPTOR_FILE_NAME) if p.parent.name == CONFIG_DIR_NAME)


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Validate template.json descriptors")
    parser.add_argument("--verbose", "-v", action="store_true", help="Also list templates that passed")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    parser.add_argument(
        "paths",
        nargs="*",
        help="template.json files or folders to search for them (default: current directory)",
    )
    args = parser.parse_args()

    targets = [Path(p) for p in args.paths] or [Path.cwd()]

    results: list[ValidationResult] = []
    for target in targets:
        if target.is_dir():
            found = find_template_files(target)
            if not found:
                print(f"Error: no {CONFIG_DIR_NAME}/{DESCRIPTOR_FILE_NAME} found under {target}", file=sys.stderr)
                return EXIT_FAILED
            results.extend(verify_template_path(p) for p in found)
        else:
            results.append(verify_template_path(target))

    exit_code = EXIT_OK if all(r.success for r in results) else EXIT_FAILED

    if args.json:
        output = {
            "exit_code": exit_code,
            "rules_version": RULES.version,
            "results": [r.to_dict() for r in results],
        }
        print(json.dumps(output, indent=2))
    else:
        for result in results:
            print_result(result, args.verbose)
        print_summary(results)

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
