"""Command-line front end: ``bootstrapp <template-path> [options]``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from .config import Config
from .errors import BootstrappError
from .models.bundle import TemplateBundle
from .overrides import (
    apply_parameter_overrides,
    merge_packages,
    parse_assignment,
    parse_package,
)
from .pipeline import Instantiator
from .utils import print_error, print_success, print_summary_table, print_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bootstrapp",
        description="Bootstrapp -- instantiate a project from a template bundle",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  bootstrapp ./Templates/SwiftPackage --param LIBRARY_NAME=Acme\n"
            "  bootstrapp ./Templates/App --param INCLUDE_TESTS=false -o ./out\n"
            "  bootstrapp ./Templates/App --package Alamofire,https://github.com/Alamofire/Alamofire,5.6.0\n"
        ),
    )
    parser.add_argument("template", help="Path to the template bundle directory")
    parser.add_argument(
        "--param", "-p",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a parameter value (repeatable)",
    )
    parser.add_argument(
        "--package",
        action="append",
        default=[],
        metavar="NAME,URL,VERSION",
        help="Add a package reference (repeatable)",
    )
    parser.add_argument(
        "--exclude-package",
        action="append",
        default=[],
        metavar="NAME",
        help="Drop a package declared by the template (repeatable)",
    )
    parser.add_argument(
        "--output-dir", "-o",
        default=None,
        help="Parent directory for the output (default: <tmp>/Results/<date>)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Print each pipeline step",
    )
    return parser


def run(args: argparse.Namespace) -> Path:
    """Load the bundle, apply overrides and instantiate it."""
    config = Config.from_env()
    if args.output_dir:
        config.output_dir = Path(args.output_dir)
    if args.verbose:
        config.verbose = True

    bundle = TemplateBundle.load(args.template)
    spec = bundle.specification

    assignments = [parse_assignment(item) for item in args.param]
    parameters = apply_parameter_overrides(spec.parameters, assignments)
    declared = {p.name for p in spec.packages}
    for name in args.exclude_package:
        if name not in declared:
            print_warning(f"Package {name!r} is not declared by the template; nothing to exclude")
    packages = merge_packages(
        spec.packages,
        [parse_package(item) for item in args.package],
        args.exclude_package,
    )

    if config.verbose:
        print_summary_table(
            {
                "Template": f"{spec.id} ({spec.template_version})",
                "Type": spec.type.kind.value,
                "Bundle": bundle.root_path,
                "Parameters": ", ".join(
                    f"{p.id}={p.resolved_value()}" for p in parameters
                ) or "-",
                "Packages": ", ".join(p.name for p in packages) or "-",
            },
            title="Bootstrapp",
        )

    return Instantiator(bundle, parameters, packages, config=config).instantiate()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """CLI entry point for ``bootstrapp`` and ``python -m bootstrapp``."""
    args = build_parser().parse_args(argv)

    try:
        output = run(args)
    except BootstrappError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)

    if args.verbose:
        print_success("Instantiation completed successfully!")
    print(output)


if __name__ == "__main__":
    main()
