"""IDE project generation from a rendered XcodeGen configuration.

The pipeline renders ``XcodeProject.yml`` (or whatever the specification
names) into the output directory, then hands it to a ``ProjectGenerator``.
The default implementation drives the ``xcodegen`` command line tool.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Protocol

import yaml

from .config import Config
from .errors import GenerationError
from .rendering.templates import RenderContext
from .utils import print_step, run_command


class ProjectGenerator(Protocol):
    """Produces an IDE project from a configuration document."""

    def generate(
        self, spec_path: Path, output_path: Path, context: RenderContext
    ) -> Path: ...


class XcodeGenProjectGenerator:
    """Runs ``xcodegen generate`` and post-processes the resulting project.

    XcodeGen resolves ``include:`` presets relative to the working directory,
    which the pipeline points at the bundle's ``Presets/`` folder before
    calling :meth:`generate`.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()

    def generate(
        self, spec_path: Path, output_path: Path, context: RenderContext
    ) -> Path:
        """Generate the ``.xcodeproj`` described by *spec_path*.

        Returns:
            Path to the generated ``<name>.xcodeproj`` bundle.

        Raises:
            GenerationError: the configuration is missing or unreadable,
                xcodegen is unavailable, fails or times out, or produced no
                project at the expected location.
        """
        if not spec_path.is_file():
            raise GenerationError(f"Project specification does not exist: {spec_path}")

        project_name = _read_project_name(spec_path)

        cmd = [
            self.config.xcodegen_path,
            "generate",
            "--spec", str(spec_path),
            "--project", str(output_path),
        ]
        if self.config.verbose:
            print_step(f"Running {' '.join(cmd)}")
        try:
            returncode, stdout, stderr = run_command(
                cmd, timeout=self.config.generator_timeout
            )
        except FileNotFoundError as exc:
            raise GenerationError(
                f"xcodegen executable not found: {self.config.xcodegen_path}"
            ) from exc
        if returncode != 0:
            raise GenerationError(
                f"xcodegen failed with exit code {returncode}", stderr=stderr or stdout
            )

        project_path = output_path / f"{project_name}.xcodeproj"
        if not project_path.is_dir():
            raise GenerationError(f"xcodegen did not produce {project_path}")

        try:
            write_header_template(project_path, context)
        except OSError as exc:
            raise GenerationError(f"Cannot write file header template: {exc}") from exc
        if self.config.verbose:
            print_step(f"Created project at {project_path}")
        return project_path


def _read_project_name(spec_path: Path) -> str:
    try:
        document = yaml.safe_load(spec_path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise GenerationError(f"Cannot read project specification {spec_path}: {exc}") from exc
    if not isinstance(document, dict) or not isinstance(document.get("name"), str):
        raise GenerationError(f"Project specification {spec_path} has no 'name'")
    return document["name"]


def write_header_template(project_path: Path, context: RenderContext) -> Path:
    """Write ``IDETemplateMacros.plist`` so new files get a copyright header."""
    year = context.get("CURRENT_YEAR") or "YEAR"
    holder = context.get("COPYRIGHT_HOLDER") or "COPYRIGHT_HOLDER"
    header = f"\n//  Copyright © {year} {holder}. All rights reserved.\n//"

    shared_data = project_path / "xcshareddata"
    shared_data.mkdir(parents=True, exist_ok=True)
    plist_path = shared_data / "IDETemplateMacros.plist"
    with plist_path.open("wb") as fh:
        plistlib.dump({"FILEHEADER": header}, fh)
    return plist_path
