"""Data models for template bundles, specifications and parameters."""

from .bundle import TemplateBundle
from .package import BootstrappPackage
from .parameter import BootstrappParameter, ContextValue, ParameterType
from .specification import (
    BootstrappSpecification,
    IncludeDirectories,
    IncludeFiles,
    ProjectKind,
    ProjectType,
)
from .version import VersionNumber

__all__ = [
    "BootstrappPackage",
    "BootstrappParameter",
    "BootstrappSpecification",
    "ContextValue",
    "IncludeDirectories",
    "IncludeFiles",
    "ParameterType",
    "ProjectKind",
    "ProjectType",
    "TemplateBundle",
    "VersionNumber",
]
