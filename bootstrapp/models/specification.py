"""Decoded ``Bootstrapp.json`` template specifications.

Example document::

    {
        "specificationVersion": "1.0.0",
        "templateVersion": "1.0.0",
        "id": "Library Swift Package",
        "type": "Swift Package",
        "description": "Static library Swift package with a license file.",
        "outputDirectoryName": "<{ LIBRARY_NAME }>",
        "substitutions": {"DOT": "."},
        "parameters": [
            {"name": "Library Name", "id": "LIBRARY_NAME", "type": "String",
             "validationRegex": "^[A-Za-z0-9_]+$"},
            {"name": "Add Executable Target", "id": "ADD_EXECUTABLE_TARGET",
             "type": "Bool", "default": false}
        ],
        "parametrizableFiles": ["LICENSE", ".*\\\\.md", ".*\\\\.swift"],
        "includeDirectories": [
            {"if": "ADD_EXECUTABLE_TARGET", "directories": ["Sources/Tool"]}
        ],
        "includeFiles": [
            {"if": "LICENSE_TYPE == 'MIT'", "files": ["LICENSE"]}
        ]
    }
"""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any, Mapping, Optional, Pattern

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ..errors import (
    FilesystemError,
    MissingProjectConfigFile,
    SpecificationError,
    UnsupportedProjectType,
)
from ..paths import normalize
from .package import BootstrappPackage
from .parameter import BootstrappParameter
from .version import VersionNumber


# ---------------------------------------------------------------------------
# Project type
# ---------------------------------------------------------------------------

class ProjectKind(str, Enum):
    """Recognised values of the ``type`` field."""
    GENERAL = "General"
    SWIFT_PACKAGE = "Swift Package"
    XCODE_PROJECT = "Xcode Project"
    GENERAL_META_TEMPLATE = "General Meta Template"
    SWIFT_META_TEMPLATE = "Swift Meta Template"
    XCODE_META_TEMPLATE = "Xcode Meta Template"


_CATEGORIES: dict[ProjectKind, str] = {
    ProjectKind.GENERAL: "General",
    ProjectKind.SWIFT_PACKAGE: "Swift Packages",
    ProjectKind.XCODE_PROJECT: "Xcode Projects",
    ProjectKind.GENERAL_META_TEMPLATE: "Meta Templates",
    ProjectKind.SWIFT_META_TEMPLATE: "Meta Templates",
    ProjectKind.XCODE_META_TEMPLATE: "Meta Templates",
}


class ProjectType(BaseModel):
    """Project type, with the generator config filename for Xcode projects.

    ``project_specification`` is required for ``XCODE_PROJECT`` and must be
    absent for every other kind.
    """

    model_config = ConfigDict(frozen=True)

    kind: ProjectKind
    project_specification: Optional[str] = None

    @model_validator(mode="after")
    def _check_payload(self) -> "ProjectType":
        if self.kind is ProjectKind.XCODE_PROJECT and not self.project_specification:
            raise ValueError("Xcode projects require a project specification filename")
        if self.kind is not ProjectKind.XCODE_PROJECT and self.project_specification:
            raise ValueError(f"{self.kind.value!r} takes no project specification")
        return self

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "ProjectType":
        raw = doc.get("type")
        try:
            kind = ProjectKind(raw)
        except ValueError:
            raise UnsupportedProjectType(str(raw)) from None

        if kind is ProjectKind.XCODE_PROJECT:
            filename = doc.get("projectSpecification")
            if not isinstance(filename, str) or not filename:
                raise MissingProjectConfigFile()
            return cls(kind=kind, project_specification=filename)
        return cls(kind=kind)

    @property
    def is_meta_template(self) -> bool:
        return self.kind in (
            ProjectKind.GENERAL_META_TEMPLATE,
            ProjectKind.SWIFT_META_TEMPLATE,
            ProjectKind.XCODE_META_TEMPLATE,
        )

    @property
    def category(self) -> str:
        return _CATEGORIES[self.kind]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ProjectType):
            return NotImplemented
        return self.category < other.category


# ---------------------------------------------------------------------------
# Inclusion rules
# ---------------------------------------------------------------------------

def _reject_root_entries(paths: list[str]) -> list[str]:
    # "" and "." name the whole content tree, not a single entry.
    for path in paths:
        if normalize(path) == PurePosixPath("."):
            raise ValueError(f"path entry {path!r} does not name a directory or file")
    return paths


class IncludeDirectories(BaseModel):
    """Directories kept only while ``condition`` evaluates true."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    condition: str = Field(..., alias="if")
    directories: list[str]

    @field_validator("directories")
    @classmethod
    def _check_directories(cls, value: list[str]) -> list[str]:
        return _reject_root_entries(value)


class IncludeFiles(BaseModel):
    """Files kept only while ``condition`` evaluates true."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    condition: str = Field(..., alias="if")
    files: list[str]

    @field_validator("files")
    @classmethod
    def _check_files(cls, value: list[str]) -> list[str]:
        return _reject_root_entries(value)


# ---------------------------------------------------------------------------
# Specification
# ---------------------------------------------------------------------------

def _anchor(pattern: str) -> Pattern[str]:
    return re.compile(rf"^(?:{pattern})$")


def _unanchor(pattern: Pattern[str]) -> str:
    return pattern.pattern[len("^(?:"):-len(")$")]


class BootstrappSpecification(BaseModel):
    """The decoded contents of a bundle's ``Bootstrapp.json``."""

    model_config = ConfigDict(frozen=True)

    id: str
    specification_version: VersionNumber
    template_version: VersionNumber
    type: ProjectType
    description: str
    output_directory_name: str
    substitutions: dict[str, str] = Field(default_factory=dict)
    parameters: list[BootstrappParameter] = Field(default_factory=list)
    parametrizable_files: list[Pattern[str]] = Field(default_factory=list)
    include_directories: list[IncludeDirectories] = Field(default_factory=list)
    include_files: list[IncludeFiles] = Field(default_factory=list)
    packages: list[BootstrappPackage] = Field(default_factory=list)

    @field_validator("parametrizable_files", mode="before")
    @classmethod
    def _compile_patterns(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        compiled = []
        for item in value:
            if isinstance(item, str):
                try:
                    item = _anchor(item)
                except re.error as exc:
                    raise ValueError(f"invalid pattern {item!r}: {exc}") from exc
            compiled.append(item)
        return compiled

    # -- Queries -----------------------------------------------------------

    def is_parametrizable(self, filename: str) -> bool:
        """Return whether *filename* (a last path component) gets rendered."""
        return any(p.match(filename) for p in self.parametrizable_files)

    def parameter(self, parameter_id: str) -> Optional[BootstrappParameter]:
        for param in self.parameters:
            if param.id == parameter_id:
                return param
        return None

    # -- Document coding ---------------------------------------------------

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "BootstrappSpecification":
        """Decode a specification document.

        Raises:
            UnsupportedProjectType: ``type`` is not a recognised string.
            MissingProjectConfigFile: an Xcode project lacks
                ``projectSpecification``.
            SpecificationError: any other malformed or missing field.
        """
        if not isinstance(doc, Mapping):
            raise SpecificationError("Specification document must be a JSON object")

        project_type = ProjectType.from_document(doc)
        parameters = [
            BootstrappParameter.from_document(p) for p in doc.get("parameters") or []
        ]

        try:
            return cls.model_validate({
                "id": doc.get("id"),
                "specification_version": doc.get("specificationVersion"),
                "template_version": doc.get("templateVersion"),
                "type": project_type,
                "description": doc.get("description"),
                "output_directory_name": doc.get("outputDirectoryName"),
                "substitutions": doc.get("substitutions") or {},
                "parameters": parameters,
                "parametrizable_files": doc.get("parametrizableFiles") or [],
                "include_directories": doc.get("includeDirectories") or [],
                "include_files": doc.get("includeFiles") or [],
                "packages": doc.get("packages") or [],
            })
        except PydanticValidationError as exc:
            raise SpecificationError(
                f"Invalid specification {doc.get('id', '?')!r}: {exc}"
            ) from exc

    @classmethod
    def load(cls, path: str | Path) -> "BootstrappSpecification":
        """Read and decode a ``Bootstrapp.json`` file."""
        spec_path = Path(path)
        try:
            raw = spec_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise FilesystemError(f"Cannot read specification: {exc}", spec_path) from exc
        try:
            doc = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SpecificationError(f"{spec_path} is not valid JSON: {exc}") from exc
        return cls.from_document(doc)

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "id": self.id,
            "specificationVersion": self.specification_version.string,
            "templateVersion": self.template_version.string,
            "type": self.type.kind.value,
            "description": self.description,
            "outputDirectoryName": self.output_directory_name,
            "substitutions": dict(self.substitutions),
            "parameters": [p.to_document() for p in self.parameters],
            "parametrizableFiles": [_unanchor(p) for p in self.parametrizable_files],
            "includeDirectories": [
                r.model_dump(by_alias=True) for r in self.include_directories
            ],
            "includeFiles": [r.model_dump(by_alias=True) for r in self.include_files],
            "packages": [p.model_dump() for p in self.packages],
        }
        if self.type.project_specification is not None:
            doc["projectSpecification"] = self.type.project_specification
        return doc
