"""Bootstrapp configuration.

Typed settings for instantiation runs.  All settings use Pydantic v2 models
so they are validated at construction time and can be loaded from the
environment without boiler-plate.
"""

from __future__ import annotations

import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError


class Config(BaseModel):
    """Global instantiation configuration.

    Instances are typically created once by the CLI entry point and handed
    to ``Instantiator``.
    """

    temp_root: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Root under which dated result directories are created",
    )
    results_dir_name: str = Field(default="Results")
    output_dir: Optional[Path] = Field(
        default=None,
        description="Parent directory for the output, replacing <temp_root>/Results/<date>",
    )
    xcodegen_path: str = Field(default="xcodegen", description="XcodeGen executable")
    generator_timeout: int = Field(
        default=600, ge=1, description="Project generator timeout in seconds"
    )
    verbose: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def results_root(self, day: date) -> Path:
        """Directory that receives the rendered output directory for *day*.

        The returned path is absolute so it stays valid across working
        directory changes.
        """
        if self.output_dir is not None:
            return self.output_dir.expanduser().resolve()
        return (self.temp_root / self.results_dir_name / day.isoformat()).resolve()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            BOOTSTRAPP_TEMP_ROOT, BOOTSTRAPP_OUTPUT_DIR, BOOTSTRAPP_XCODEGEN,
            BOOTSTRAPP_GENERATOR_TIMEOUT, BOOTSTRAPP_VERBOSE.

        Raises:
            ConfigurationError: a variable holds a value the field rejects.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("BOOTSTRAPP_TEMP_ROOT"):
            kwargs["temp_root"] = Path(os.environ["BOOTSTRAPP_TEMP_ROOT"])
        if os.environ.get("BOOTSTRAPP_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["BOOTSTRAPP_OUTPUT_DIR"])
        if os.environ.get("BOOTSTRAPP_XCODEGEN"):
            kwargs["xcodegen_path"] = os.environ["BOOTSTRAPP_XCODEGEN"]
        if os.environ.get("BOOTSTRAPP_GENERATOR_TIMEOUT"):
            kwargs["generator_timeout"] = os.environ["BOOTSTRAPP_GENERATOR_TIMEOUT"]
        if os.environ.get("BOOTSTRAPP_VERBOSE"):
            kwargs["verbose"] = os.environ["BOOTSTRAPP_VERBOSE"].lower() in ("1", "true", "yes")
        try:
            return cls(**kwargs)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc
