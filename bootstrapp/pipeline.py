"""Template instantiation pipeline.

Turns a ``TemplateBundle`` plus parameter values into a project directory:

1. Build the rendering context (clock values, template version,
   substitutions, parameter values; later sources win).
2. Evaluate the ``includeDirectories`` / ``includeFiles`` conditions into
   directory and file blacklists.
3. Render the output directory name and recreate
   ``<results root>/<name>`` from scratch.
4. Create every non-excluded content directory under its rendered name.
5. Render or copy every non-excluded content file to its rendered name.
6. For Xcode project templates, run the project generator on the rendered
   configuration.

A run is single-pass: any error aborts it and leaves the partially written
output in place.  Re-running overwrites the output directory.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from pathlib import Path, PurePosixPath
from typing import Optional

from .config import Config
from .errors import RenderError
from .models.bundle import TemplateBundle
from .models.package import BootstrappPackage
from .models.parameter import BootstrappParameter, ContextValue
from .models.specification import (
    BootstrappSpecification,
    IncludeDirectories,
    IncludeFiles,
    ProjectKind,
)
from .paths import (
    copy_file,
    create_directory,
    is_within,
    normalize,
    read_bytes,
    recursive_contents,
    remove,
    working_directory,
    write_bytes,
)
from .project_generator import ProjectGenerator, XcodeGenProjectGenerator
from .rendering.conditions import ConditionEvaluator, ExpressionEvaluator
from .rendering.templates import RenderContext, Renderer, TemplateRenderer
from .utils import print_step

# Marker file that keeps otherwise empty directories in a bundle; never copied.
IGNORED_PLACEHOLDER = ".ignored-placeholder"


def _local_now() -> datetime:
    return datetime.now().astimezone()


# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


def build_context(
    specification: BootstrappSpecification,
    parameters: Iterable[BootstrappParameter],
    now: datetime,
) -> dict[str, ContextValue]:
    """Build the rendering context for one run.

    Parameters whose resolved value is ``None`` (empty strings) leave their
    key absent rather than overriding an earlier substitution.
    """
    context: dict[str, ContextValue] = {
        "CURRENT_TIME": now.strftime("%H:%M:%S"),
        "CURRENT_DATETIME": now.isoformat(timespec="seconds"),
        "CURRENT_DATE": now.date().isoformat(),
        "CURRENT_YEAR": f"{now.year:04d}",
        "TEMPLATE_VERSION": specification.template_version.string,
    }
    context.update(specification.substitutions)
    for parameter in parameters:
        value = parameter.resolved_value()
        if value is not None:
            context[parameter.id] = value
    return context


# ---------------------------------------------------------------------------
# Blacklists
# ---------------------------------------------------------------------------


def build_directory_blacklist(
    rules: Sequence[IncludeDirectories],
    evaluator: ConditionEvaluator,
    context: RenderContext,
) -> list[PurePosixPath]:
    """Collect the directories of every rule whose condition is false."""
    blacklist: list[PurePosixPath] = []
    for rule in rules:
        if evaluator.evaluate(rule.condition, context):
            continue
        blacklist.extend(normalize(d) for d in rule.directories)
    return blacklist


def build_file_blacklist(
    rules: Sequence[IncludeFiles],
    evaluator: ConditionEvaluator,
    context: RenderContext,
) -> list[PurePosixPath]:
    """Collect the files of every rule whose condition is false."""
    blacklist: list[PurePosixPath] = []
    for rule in rules:
        if evaluator.evaluate(rule.condition, context):
            continue
        blacklist.extend(normalize(f) for f in rule.files)
    return blacklist


def is_directory_excluded(
    subpath: PurePosixPath, blacklist: Iterable[PurePosixPath]
) -> bool:
    """True if *subpath* is a blacklisted directory or lies beneath one."""
    return any(is_within(subpath, entry) for entry in blacklist)


def is_file_excluded(
    subpath: PurePosixPath,
    directory_blacklist: Iterable[PurePosixPath],
    file_blacklist: Iterable[PurePosixPath],
) -> bool:
    """True if *subpath* is the placeholder, blacklisted, or in a blacklisted directory."""
    if subpath.name == IGNORED_PLACEHOLDER:
        return True
    if is_directory_excluded(subpath, directory_blacklist):
        return True
    return normalize(subpath) in file_blacklist


# ---------------------------------------------------------------------------
# Instantiator
# ---------------------------------------------------------------------------


class Instantiator:
    """Instantiates one template bundle with one set of parameter values.

    Each instance owns its context and blacklists; create a new instance per
    run.  Two runs may proceed concurrently only when their rendered output
    directories differ.

    Attributes:
        bundle: The template bundle being instantiated.
        parameters: Parameter values for this run (defaults to the
            specification's own list).
        packages: Package references exposed to templates as ``packages``.
        blacklisted_directories: Filled in by :meth:`instantiate`.
        blacklisted_files: Filled in by :meth:`instantiate`.
    """

    def __init__(
        self,
        bundle: TemplateBundle,
        parameters: Optional[Sequence[BootstrappParameter]] = None,
        packages: Optional[Sequence[BootstrappPackage]] = None,
        *,
        config: Optional[Config] = None,
        renderer: Optional[Renderer] = None,
        evaluator: Optional[ConditionEvaluator] = None,
        project_generator: Optional[ProjectGenerator] = None,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        self.bundle = bundle
        spec = bundle.specification
        self.parameters = list(spec.parameters if parameters is None else parameters)
        self.packages = list(spec.packages if packages is None else packages)
        self.config = config or Config()
        self.renderer = renderer or TemplateRenderer(self.packages, bundle.content_path)
        self.evaluator = evaluator or ExpressionEvaluator()
        self.project_generator = project_generator or XcodeGenProjectGenerator(self.config)
        self.clock = clock
        self.blacklisted_directories: list[PurePosixPath] = []
        self.blacklisted_files: list[PurePosixPath] = []

    @property
    def specification(self) -> BootstrappSpecification:
        return self.bundle.specification

    # -- Public API --------------------------------------------------------

    def instantiate(self) -> Path:
        """Run the pipeline.

        Returns:
            The output directory, or the generated project file for Xcode
            project templates.
        """
        now = self.clock()
        context = build_context(self.specification, self.parameters, now)

        # Conditions are evaluated before anything on disk is touched.
        self.blacklisted_directories = build_directory_blacklist(
            self.specification.include_directories, self.evaluator, context
        )
        self.blacklisted_files = build_file_blacklist(
            self.specification.include_files, self.evaluator, context
        )
        self._log(f"Blacklisted directories: {[str(p) for p in self.blacklisted_directories]}")
        self._log(f"Blacklisted files: {[str(p) for p in self.blacklisted_files]}")

        content_path = self.bundle.content_path
        subpaths = recursive_contents(content_path)

        output_path = self.prepare_output_directory(context, now)
        self._log(f"Output path: {output_path}")

        directories = [p for p in subpaths if (content_path / p).is_dir()]
        files = [p for p in subpaths if not (content_path / p).is_dir()]
        self._instantiate_directories(directories, output_path, context)
        self._instantiate_files(files, content_path, output_path, context)

        if self.specification.type.kind is ProjectKind.XCODE_PROJECT:
            return self._generate_project(output_path, context)
        return output_path

    # -- Output directory --------------------------------------------------

    def prepare_output_directory(self, context: RenderContext, now: datetime) -> Path:
        """Render the output name and recreate that directory empty."""
        template = self.specification.output_directory_name
        name = self.renderer.render(template, context).strip()
        if name in ("", ".", "..") or "/" in name or os.sep in name:
            raise RenderError(
                f"Output directory name {template!r} rendered to invalid name {name!r}",
                template,
            )

        output_path = self.config.results_root(now.date()) / name
        if output_path.exists() or output_path.is_symlink():
            self._log(f"Removing previous output at {output_path}")
            remove(output_path)
        return create_directory(output_path)

    # -- Directories & files -----------------------------------------------

    def _render_subpath(self, subpath: PurePosixPath, context: RenderContext) -> PurePosixPath:
        rendered = normalize(self.renderer.render(str(subpath), context))
        if rendered == PurePosixPath(".") or rendered.is_absolute() or ".." in rendered.parts:
            raise RenderError(
                f"Content path {str(subpath)!r} rendered to invalid path {str(rendered)!r}",
                str(subpath),
            )
        return rendered

    def _instantiate_directories(
        self,
        directories: Sequence[PurePosixPath],
        output_path: Path,
        context: RenderContext,
    ) -> None:
        for subpath in directories:
            if is_directory_excluded(subpath, self.blacklisted_directories):
                self._log(f"Skipping directory {subpath}")
                continue
            rendered = self._render_subpath(subpath, context)
            create_directory(output_path / rendered)
            self._log(f"Created directory {rendered}")

    def _instantiate_files(
        self,
        files: Sequence[PurePosixPath],
        content_path: Path,
        output_path: Path,
        context: RenderContext,
    ) -> None:
        for subpath in files:
            if is_file_excluded(subpath, self.blacklisted_directories, self.blacklisted_files):
                self._log(f"Skipping file {subpath}")
                continue

            rendered = self._render_subpath(subpath, context)
            source = content_path / subpath
            destination = output_path / rendered
            create_directory(destination.parent)

            if self.specification.is_parametrizable(rendered.name):
                raw = read_bytes(source)
                try:
                    text = raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise RenderError(
                        f"Parametrizable file {subpath} is not valid UTF-8 text: {exc}"
                    ) from exc
                output = self.renderer.render(text, context)
                write_bytes(destination, output.encode("utf-8"), mode_from=source)
                self._log(f"Rendered {rendered}")
            else:
                copy_file(source, destination)
                self._log(f"Copied {rendered}")

    # -- Project generation ------------------------------------------------

    def _generate_project(self, output_path: Path, context: RenderContext) -> Path:
        filename = self.specification.type.project_specification
        assert filename is not None  # guaranteed by ProjectType validation
        spec_path = output_path / filename
        self._log(f"Generating project from {spec_path}")
        with working_directory(self.bundle.presets_path):
            return self.project_generator.generate(spec_path, output_path, context)

    def _log(self, message: str) -> None:
        if self.config.verbose:
            print_step(message)


def instantiate_template(
    bundle: TemplateBundle,
    parameters: Optional[Sequence[BootstrappParameter]] = None,
    packages: Optional[Sequence[BootstrappPackage]] = None,
    config: Optional[Config] = None,
) -> Path:
    """Convenience wrapper: instantiate *bundle* with the default collaborators."""
    return Instantiator(bundle, parameters, packages, config=config).instantiate()
