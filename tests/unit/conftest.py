"""Shared fixtures for the template validator tests."""

import copy
import json
from pathlib import Path
from typing import Any, Callable

import pytest

USED_GUID = "C9B1D5E2-4F3A-4B8E-9D41-0A7C2E6F1B35"

VALID_DOCUMENT: dict[str, Any] = {
    "author": "Contoso",
    "classifications": ["Universal"],
    "name": "Blank",
    "description": "A blank page with no controls on it.",
    "identity": "wts.Page.Blank",
    "tags": {
        "language": "CSharp",
        "type": "item",
        "wts.type": "page",
        "wts.framework": "MVVMBasic|MVVMLight",
        "wts.version": "1.0.0",
        "wts.displayOrder": "1",
        "wts.rightClickEnabled": "true",
        "wts.licenses": "[Microsoft.Toolkit](https://github.com/windows-toolkit)",
    },
    "symbols": {
        "wts.rootNamespace": {"type": "parameter", "replaces": "Param_RootNamespace"},
    },
    "primaryOutputs": [{"path": "Views/BlankPage.xaml"}],
    "guids": [USED_GUID],
}

DEFAULT_FILES = {
    "Views/BlankPage.xaml": f'<Page x:Class="Param_RootNamespace.Views.BlankPage" Tag="{USED_GUID}" />\n',
}

TemplateFactory = Callable[..., Path]


@pytest.fixture
def valid_document() -> dict[str, Any]:
    """A fresh copy of a descriptor that passes every check."""
    return copy.deepcopy(VALID_DOCUMENT)


@pytest.fixture
def make_template(tmp_path: Path) -> TemplateFactory:
    """Write a template folder and return the path of its template.json.

    Args (of the returned factory):
        document: dict dumped as JSON, or raw text written as-is
        folder: template root relative to tmp_path
        files: extra content files relative to the template root
    """

    def factory(
        document: dict[str, Any] | str,
        folder: str = "Pages/Blank",
        files: dict[str, str] | None = None,
    ) -> Path:
        root = tmp_path / folder
        config_dir = root / ".template.config"
        config_dir.mkdir(parents=True, exist_ok=True)

        for rel_path, content in (DEFAULT_FILES if files is None else files).items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

        text = document if isinstance(document, str) else json.dumps(document, indent=2)
        config_file = config_dir / "template.json"
        config_file.write_text(text, encoding="utf-8")
        return config_file

    return factory
