"""Package dependency references carried through to generated projects."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BootstrappPackage(BaseModel):
    """A package dependency to include in a generated project.

    Packages are opaque data: they are merged from the specification and
    caller overrides, then handed to the renderer under ``packages``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Package name, also its identifier")
    url: str = Field(..., description="Repository URL")
    version: str = Field(..., description="Minimum version, e.g. '5.6.0'")

    @property
    def id(self) -> str:
        return self.name
