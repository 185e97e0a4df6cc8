"""Dotted version numbers (``1.0``, ``2.25.0``) with numeric ordering."""

from __future__ import annotations

import re
from functools import total_ordering
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

_VERSION_RE = re.compile(r"\d+(?:\.\d+)+")


@total_ordering
class VersionNumber(BaseModel):
    """A version number of the form ``\\d+(\\.\\d+)+``.

    Ordering is component-wise numeric.  When one version is a prefix of the
    other, the shorter one sorts first, so ``1.2 < 1.2.0``.
    """

    model_config = ConfigDict(frozen=True)

    parts: tuple[int, ...]

    @model_validator(mode="before")
    @classmethod
    def _parse_string(cls, data: Any) -> Any:
        if isinstance(data, str):
            if not _VERSION_RE.fullmatch(data):
                raise ValueError(f"Invalid version number: {data!r}")
            return {"parts": tuple(int(p) for p in data.split("."))}
        return data

    @classmethod
    def parse(cls, value: str) -> "VersionNumber":
        return cls.model_validate(value)

    @property
    def string(self) -> str:
        return ".".join(str(p) for p in self.parts)

    def __str__(self) -> str:
        return self.string

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, VersionNumber):
            return NotImplemented
        return self.parts < other.parts
