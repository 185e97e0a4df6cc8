"""Typed template parameters.

A parameter carries one meaningful value slot per type (string, bool or
option index).  Instances are frozen: every ``with_*`` update returns a new
parameter so the specification's original parameter list stays replayable.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import InvalidParameterType, SpecificationError, ValidationError

ContextValue = Union[str, bool, None]


class ParameterType(str, Enum):
    """Value type of a template parameter."""
    STRING = "String"
    BOOL = "Bool"
    OPTION = "Option"


class BootstrappParameter(BaseModel):
    """A single user-facing template parameter."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Human-readable label")
    id: str = Field(..., description="Key under which the value enters the context")
    type: ParameterType
    validation_regex: Optional[str] = Field(
        default=None, description="Pattern a string value must fully match"
    )
    options: list[str] = Field(default_factory=list)

    default_string_value: str = ""
    string_value: str = ""
    default_bool_value: bool = False
    bool_value: bool = False
    default_option_value: int = 0
    option_value: int = 0

    depends_on: Optional[str] = Field(
        default=None, description="Id of a parameter that must be truthy for this one to apply"
    )

    # -- Identity ----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BootstrappParameter):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    # -- Value updates -----------------------------------------------------

    def with_string_value(self, value: str) -> "BootstrappParameter":
        return self.model_copy(update={"string_value": value})

    def with_bool_value(self, value: bool) -> "BootstrappParameter":
        return self.model_copy(update={"bool_value": value})

    def with_option_index(self, index: int) -> "BootstrappParameter":
        return self.model_copy(update={"option_value": index})

    # -- Value resolution --------------------------------------------------

    def resolved_value(self) -> ContextValue:
        """Return the value injected into the rendering context.

        Strings resolve to ``None`` when empty, booleans to themselves and
        options to the selected option name.
        """
        if self.type is ParameterType.STRING:
            return self.string_value or None
        if self.type is ParameterType.BOOL:
            return self.bool_value
        if not 0 <= self.option_value < len(self.options):
            raise ValidationError(
                f"Option index {self.option_value} out of range for parameter "
                f"{self.id!r} ({len(self.options)} options)",
                key=self.id,
            )
        return self.options[self.option_value]

    def is_active(self, context: Mapping[str, ContextValue]) -> bool:
        """Return whether the parameter this one depends on is truthy."""
        if self.depends_on is None:
            return True
        return bool(context.get(self.depends_on))

    def validate_string(self, value: str) -> None:
        """Raise ``ValidationError`` if *value* fails ``validation_regex``."""
        if self.validation_regex is None:
            return
        if re.fullmatch(self.validation_regex, value) is None:
            raise ValidationError(
                f"Value {value!r} for parameter {self.id!r} does not match "
                f"pattern {self.validation_regex!r}",
                key=self.id,
            )

    # -- Document coding ---------------------------------------------------

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "BootstrappParameter":
        """Decode a parameter entry from ``Bootstrapp.json``.

        ``value`` falls back to ``default``, which falls back to the zero
        value of the parameter type.
        """
        raw_type = doc.get("type")
        try:
            param_type = ParameterType(raw_type)
        except ValueError:
            raise InvalidParameterType(str(doc.get("id", "?")), raw_type) from None

        fields: dict[str, Any] = {
            "name": doc.get("name"),
            "id": doc.get("id"),
            "type": param_type,
            "validation_regex": doc.get("validationRegex"),
            "options": doc.get("options") or [],
            "depends_on": doc.get("dependsOn"),
        }

        if param_type is ParameterType.STRING:
            default = doc.get("default", "")
            fields["default_string_value"] = default
            fields["string_value"] = doc.get("value", default)
        elif param_type is ParameterType.BOOL:
            default = doc.get("default", False)
            fields["default_bool_value"] = default
            fields["bool_value"] = doc.get("value", default)
        else:
            default = doc.get("default", 0)
            fields["default_option_value"] = default
            fields["option_value"] = doc.get("value", default)

        try:
            parameter = cls.model_validate(fields)
        except PydanticValidationError as exc:
            raise SpecificationError(
                f"Invalid parameter {doc.get('id', '?')!r}: {exc}"
            ) from exc

        if parameter.validation_regex is not None:
            try:
                re.compile(parameter.validation_regex)
            except re.error as exc:
                raise SpecificationError(
                    f"Invalid validationRegex for parameter {parameter.id!r}: {exc}"
                ) from exc
        return parameter

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {
            "name": self.name,
            "id": self.id,
            "type": self.type.value,
        }
        if self.validation_regex is not None:
            doc["validationRegex"] = self.validation_regex
        if self.options:
            doc["options"] = list(self.options)

        if self.type is ParameterType.STRING:
            doc["default"] = self.default_string_value
            doc["value"] = self.string_value
        elif self.type is ParameterType.BOOL:
            doc["default"] = self.default_bool_value
            doc["value"] = self.bool_value
        else:
            doc["default"] = self.default_option_value
            doc["value"] = self.option_value

        if self.depends_on is not None:
            doc["dependsOn"] = self.depends_on
        return doc
