"""Template bundles: directories holding a specification and content tree.

On-disk layout::

    <bundle-root>/
        Bootstrapp.json     required specification document
        Content/            required tree to instantiate
        Documentation/      optional
        Preview/            optional preview images
        Presets/            optional, consumed by the project generator
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..errors import FilesystemError, SpecificationError
from ..paths import is_readable
from .specification import BootstrappSpecification

SPECIFICATION_FILENAME = "Bootstrapp.json"
CONTENT_DIRNAME = "Content"
DOCUMENTATION_DIRNAME = "Documentation"
PREVIEW_DIRNAME = "Preview"
PRESETS_DIRNAME = "Presets"

_PREVIEW_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".tiff", ".heic", ".pdf"}


@dataclass(frozen=True, eq=False)
class TemplateBundle:
    """A loaded template bundle.

    Two bundles are equal when they live at the same root path, regardless
    of their specification contents.
    """

    id: str
    root_path: Path
    specification: BootstrappSpecification
    presets_path: Optional[Path] = None
    documentation_path: Optional[Path] = None
    preview_image_files: list[Path] = field(default_factory=list)

    @property
    def content_path(self) -> Path:
        return self.root_path / CONTENT_DIRNAME

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TemplateBundle):
            return NotImplemented
        return self.root_path == other.root_path

    def __hash__(self) -> int:
        return hash(self.root_path)

    @classmethod
    def load(cls, path: str | Path) -> "TemplateBundle":
        """Load the bundle rooted at *path*.

        Raises:
            SpecificationError: ``Bootstrapp.json`` or ``Content/`` is missing,
                or the specification cannot be decoded.
            FilesystemError: ``Content/`` exists but cannot be read.
        """
        root = Path(path).expanduser().resolve()
        spec_path = root / SPECIFICATION_FILENAME
        if not spec_path.is_file():
            raise SpecificationError(f"{SPECIFICATION_FILENAME} not found in {root}")
        if not (root / CONTENT_DIRNAME).is_dir():
            raise SpecificationError(f"{CONTENT_DIRNAME}/ directory not found in {root}")
        if not is_readable(root / CONTENT_DIRNAME):
            raise FilesystemError(f"{CONTENT_DIRNAME}/ directory is not readable", root / CONTENT_DIRNAME)

        specification = BootstrappSpecification.load(spec_path)

        presets = root / PRESETS_DIRNAME
        documentation = root / DOCUMENTATION_DIRNAME
        preview = root / PREVIEW_DIRNAME
        previews: list[Path] = []
        if preview.is_dir():
            previews = sorted(
                p for p in preview.iterdir()
                if p.is_file() and p.suffix.lower() in _PREVIEW_SUFFIXES
            )

        return cls(
            id=specification.id,
            root_path=root,
            specification=specification,
            presets_path=presets if presets.is_dir() else None,
            documentation_path=documentation if documentation.is_dir() else None,
            preview_image_files=previews,
        )
