"""Shared pytest fixtures for the Bootstrapp test suite.

Provides reusable fixtures for:
- A Swift package specification document and its content tree
- A factory that writes template bundles to a temporary directory
- A fixed clock and an isolated ``Config``
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from bootstrapp.config import Config
from bootstrapp.models.bundle import TemplateBundle

FIXED_NOW = datetime(2024, 3, 5, 14, 7, 9, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Specification documents
# ---------------------------------------------------------------------------


@pytest.fixture
def spec_document() -> dict[str, Any]:
    """A Swift package specification exercising every document feature."""
    return {
        "specificationVersion": "1.0.0",
        "templateVersion": "2.1.0",
        "id": "Library Swift Package",
        "type": "Swift Package",
        "description": "Static library Swift package with optional tests.",
        "outputDirectoryName": "<{ LIBRARY_NAME }>",
        "substitutions": {"COPYRIGHT_HOLDER": "Example Inc."},
        "parameters": [
            {
                "name": "Library Name",
                "id": "LIBRARY_NAME",
                "type": "String",
                "validationRegex": "[A-Za-z][A-Za-z0-9_]*",
                "default": "MyLibrary",
            },
            {
                "name": "Include Tests",
                "id": "INCLUDE_TESTS",
                "type": "Bool",
                "default": True,
            },
            {
                "name": "License",
                "id": "LICENSE_TYPE",
                "type": "Option",
                "options": ["MIT", "BSD", "None"],
                "default": 0,
            },
        ],
        "parametrizableFiles": ["Package\\.swift", ".*\\.md", "LICENSE", ".*\\.swift"],
        "includeDirectories": [
            {"if": "INCLUDE_TESTS", "directories": ["Tests"]},
        ],
        "includeFiles": [
            {"if": "LICENSE_TYPE != 'None'", "files": ["LICENSE"]},
        ],
        "packages": [
            {
                "name": "swift-log",
                "url": "https://github.com/apple/swift-log",
                "version": "1.5.0",
            },
        ],
    }


@pytest.fixture
def swift_package_content() -> dict[str, Any]:
    """Content tree matching ``spec_document``."""
    return {
        "Package.swift": (
            "// swift-tools-version:5.7\n"
            "let name = \"<{ LIBRARY_NAME }>\"\n"
            "<{ for package in packages }>\n"
            ".package(url: \"<{ package.url }>\", from: \"<{ package.version }>\"),\n"
            "<{ end }>\n"
        ),
        "README.md": "# <{ LIBRARY_NAME }>\n\nVersion <{ TEMPLATE_VERSION }>\n",
        "LICENSE": "Copyright <{ CURRENT_YEAR }> <{ COPYRIGHT_HOLDER }>\n",
        "Sources/<{ LIBRARY_NAME }>/<{ LIBRARY_NAME }>.swift": "public struct <{ LIBRARY_NAME }> {}\n",
        "Tests/<{ LIBRARY_NAME }>Tests/<{ LIBRARY_NAME }>Tests.swift": (
            "import XCTest\n@testable import <{ LIBRARY_NAME }>\n"
        ),
        "Tests/.ignored-placeholder": "",
        "Resources/logo.png": b"\x89PNG\r\n\x1a\n<{ LIBRARY_NAME }>\xff",
    }


# ---------------------------------------------------------------------------
# Bundle factory
# ---------------------------------------------------------------------------


def _write_bundle(
    root: Path,
    document: dict[str, Any],
    content: dict[str, Any],
    presets: Optional[dict[str, str]] = None,
) -> Path:
    """Write a template bundle to *root* and return it.

    *content* maps relative paths to ``str`` or ``bytes`` file contents; a
    path ending in ``/`` creates an empty directory.
    """
    root.mkdir(parents=True, exist_ok=True)
    (root / "Bootstrapp.json").write_text(json.dumps(document, indent=2), encoding="utf-8")
    content_dir = root / "Content"
    content_dir.mkdir(exist_ok=True)
    for rel, data in content.items():
        target = content_dir / rel
        if rel.endswith("/"):
            target.mkdir(parents=True, exist_ok=True)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, bytes):
            target.write_bytes(data)
        else:
            target.write_text(data, encoding="utf-8")
    if presets is not None:
        presets_dir = root / "Presets"
        presets_dir.mkdir(exist_ok=True)
        for rel, text in presets.items():
            (presets_dir / rel).write_text(text, encoding="utf-8")
    return root


@pytest.fixture
def write_bundle() -> Callable[..., Path]:
    """``write_bundle(root, document, content, presets=None)`` -> bundle root."""
    return _write_bundle


@pytest.fixture
def make_bundle(tmp_path: Path) -> Callable[..., TemplateBundle]:
    """Factory fixture: ``make_bundle(document, content, name=..., presets=...)``."""

    def _make(
        document: dict[str, Any],
        content: dict[str, Any],
        name: str = "bundle",
        presets: Optional[dict[str, str]] = None,
    ) -> TemplateBundle:
        root = _write_bundle(tmp_path / "bundles" / name, document, content, presets)
        return TemplateBundle.load(root)

    return _make


@pytest.fixture
def swift_bundle(make_bundle, spec_document, swift_package_content) -> TemplateBundle:
    return make_bundle(spec_document, swift_package_content)


# ---------------------------------------------------------------------------
# Runtime
# ---------------------------------------------------------------------------


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Config whose results root lives under the test's tmp_path."""
    return Config(temp_root=tmp_path / "tmp")


@pytest.fixture
def results_dir(config: Config) -> Path:
    """Dated results directory for ``FIXED_NOW``."""
    return config.results_root(FIXED_NOW.date())
