"""Shape checks for loosely-typed parameter mappings.

Callers describe the fields they expect with :class:`ParamSpec` entries and
hand the raw mapping to :func:`validate_params`. Validation stops at the first
violated constraint so the resulting message points at a single field.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

_UINT_PATTERN = re.compile(r"^(?:[1-9]\d*|0)$")
_NUMBER_PATTERN = re.compile(r"^-?\d+(?:\.\d+)?$")


class ValidationError(ValueError):
    """Raised when a parameter is missing, mis-typed, or empty."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


@dataclass(frozen=True)
class ParamSpec:
    """Expected shape of a single named parameter."""

    name: str
    type: str
    required: bool = False
    allow_empty: bool = False


def _is_uint(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value >= 0
    if isinstance(value, str):
        return bool(_UINT_PATTERN.match(value))
    return False


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if isinstance(value, str):
        return bool(_NUMBER_PATTERN.match(value))
    return False


_TYPE_CHECKS = {
    "string": lambda value: isinstance(value, str),
    "uint": _is_uint,
    "number": _is_number,
    "array": lambda value: isinstance(value, (list, tuple)),
    "object": lambda value: isinstance(value, Mapping),
    "boolean": lambda value: isinstance(value, bool),
}


def validate_params(values: Any, schema: Sequence[ParamSpec]) -> None:
    """Check *values* against *schema*, raising :class:`ValidationError`."""

    if not isinstance(values, Mapping):
        raise ValidationError("Parameters must be an object.")

    for param in schema:
        value = values.get(param.name)
        if value is None:
            if param.required:
                raise ValidationError(f'Parameter "{param.name}" is missing.', param.name)
            continue

        check = _TYPE_CHECKS.get(param.type)
        if check is None:  # pragma: no cover - schema authoring error
            raise ValueError(f"Unknown parameter type: {param.type}")
        if not check(value):
            raise ValidationError(
                f'Parameter "{param.name}" has invalid type. "{param.type}" expected.',
                param.name,
            )

        if param.type == "array" and not value and not param.allow_empty:
            raise ValidationError(f'Parameter "{param.name}" is empty.', param.name)
