"""Caller-supplied overrides for parameter values and package lists.

The CLI accepts ``--param KEY=VALUE`` and ``--package NAME,URL,VERSION``
arguments; this module turns them into updated (copied) parameters and a
merged package list.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from .errors import ValidationError
from .models.package import BootstrappPackage
from .models.parameter import BootstrappParameter, ParameterType

_INDEX = re.compile(r"[+-]?\d+")


def parse_assignment(text: str) -> tuple[str, str]:
    """Split ``KEY=VALUE`` at the first ``=``.

    Raises:
        ValidationError: there is no ``=`` or the key is empty.
    """
    key, sep, value = text.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValidationError(f"Expected KEY=VALUE, got {text!r}")
    return key, value


def apply_parameter_overrides(
    parameters: Sequence[BootstrappParameter],
    assignments: Iterable[tuple[str, str]],
) -> list[BootstrappParameter]:
    """Return a copy of *parameters* with *assignments* applied in order.

    String values must satisfy the parameter's ``validationRegex``.  Bool
    values are true only for ``"true"`` (any case).  Option values may be an
    option name or an index into ``options``.
    """
    updated = list(parameters)
    positions = {param.id: i for i, param in enumerate(updated)}

    for key, value in assignments:
        if key not in positions:
            available = ", ".join(sorted(positions)) or "none"
            raise ValidationError(
                f"Unknown parameter {key!r} (available: {available})", key=key
            )
        index = positions[key]
        updated[index] = _override(updated[index], value)
    return updated


def _override(parameter: BootstrappParameter, value: str) -> BootstrappParameter:
    if parameter.type is ParameterType.STRING:
        parameter.validate_string(value)
        return parameter.with_string_value(value)

    if parameter.type is ParameterType.BOOL:
        return parameter.with_bool_value(value.lower() == "true")

    # An integer is always an index, even when it also spells an option name.
    if not _INDEX.fullmatch(value):
        if value in parameter.options:
            return parameter.with_option_index(parameter.options.index(value))
        raise ValidationError(
            f"Invalid option {value!r} for parameter {parameter.id!r} "
            f"(choose from {parameter.options})",
            key=parameter.id,
        )
    index = int(value)
    if not 0 <= index < len(parameter.options):
        raise ValidationError(
            f"Option index {index} out of range for parameter {parameter.id!r} "
            f"({len(parameter.options)} options)",
            key=parameter.id,
        )
    return parameter.with_option_index(index)


def parse_package(text: str) -> BootstrappPackage:
    """Parse ``NAME,URL,VERSION`` into a package reference."""
    parts = [part.strip() for part in text.split(",")]
    if len(parts) != 3 or not all(parts):
        raise ValidationError(f"Expected NAME,URL,VERSION, got {text!r}")
    name, url, version = parts
    return BootstrappPackage(name=name, url=url, version=version)


def merge_packages(
    spec_packages: Sequence[BootstrappPackage],
    extra: Iterable[BootstrappPackage] = (),
    exclude: Iterable[str] = (),
) -> list[BootstrappPackage]:
    """Drop excluded specification packages by name, then append *extra*."""
    excluded = set(exclude)
    merged = [pkg for pkg in spec_packages if pkg.name not in excluded]
    merged.extend(extra)
    return merged
