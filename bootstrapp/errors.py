"""Exception hierarchy for template instantiation.

Every failure raised by the package derives from ``BootstrappError`` so that
callers (the CLI in particular) can catch one type and report it.  None of
these errors are recovered from inside the pipeline: a run either returns
its output path or aborts with one of them.
"""

from __future__ import annotations

from pathlib import Path


class BootstrappError(Exception):
    """Base class for all errors raised by the package."""


# ---------------------------------------------------------------------------
# Specification errors
# ---------------------------------------------------------------------------


class SpecificationError(BootstrappError):
    """Raised when a ``Bootstrapp.json`` document cannot be decoded."""


class UnsupportedProjectType(SpecificationError):
    """Raised when the ``type`` field names an unknown project type."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unsupported project type: {name!r}")


class MissingProjectConfigFile(SpecificationError):
    """Raised when an Xcode project template lacks ``projectSpecification``."""

    def __init__(self) -> None:
        super().__init__(
            "Project type 'Xcode Project' requires a 'projectSpecification' field"
        )


class InvalidParameterType(SpecificationError):
    """Raised when a parameter document has an unknown ``type`` tag."""

    def __init__(self, parameter_id: str, type_name: object) -> None:
        self.parameter_id = parameter_id
        self.type_name = type_name
        super().__init__(
            f"Parameter {parameter_id!r} has invalid type {type_name!r} "
            "(expected 'String', 'Bool' or 'Option')"
        )


# ---------------------------------------------------------------------------
# Caller-surfaced validation errors
# ---------------------------------------------------------------------------


class ValidationError(BootstrappError):
    """Raised when a parameter or package override is rejected."""

    def __init__(self, message: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(message)


class ConfigurationError(BootstrappError):
    """Raised when settings from the environment are invalid."""


# ---------------------------------------------------------------------------
# Rendering / evaluation errors
# ---------------------------------------------------------------------------


class RenderError(BootstrappError):
    """Raised when a template string cannot be rendered."""

    def __init__(self, message: str, template: str | None = None) -> None:
        self.template = template
        super().__init__(message)


class ConditionError(BootstrappError):
    """Raised when an inclusion condition cannot be evaluated."""

    def __init__(self, message: str, condition: str) -> None:
        self.condition = condition
        super().__init__(message)


class ConditionSyntaxError(ConditionError):
    """Raised when an inclusion condition is malformed."""


# ---------------------------------------------------------------------------
# Filesystem and generation errors
# ---------------------------------------------------------------------------


class FilesystemError(BootstrappError):
    """Raised when a filesystem operation fails."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class GenerationError(BootstrappError):
    """Raised when the external project generator fails."""

    def __init__(self, message: str, stderr: str = "") -> None:
        self.stderr = stderr
        super().__init__(message)
