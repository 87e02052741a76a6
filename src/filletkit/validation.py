from __future__ import annotations

import math
import numbers
import warnings
from typing import Any, MutableMapping

DIAGNOSTICS_KEY = "diagnostics"


class ValidationError(ValueError):
    """Raised when validation constraints are violated."""


class InvalidParameterError(ValidationError):
    """Raised when a builder receives a parameter it cannot work with."""

    def __init__(self, parameter: str, value: Any, message: str) -> None:
        super().__init__(f"{parameter}: {message} (got {value!r})")
        self.parameter = parameter
        self.value = value


class InvalidGeometryWarning(RuntimeWarning):
    """Geometry was produced but may self-intersect or leave seams."""


def require_finite(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidParameterError(name, value, "must be a number") from exc
    if not math.isfinite(number):
        raise InvalidParameterError(name, value, "must be finite")
    return number


def require_positive(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number <= 0:
        raise InvalidParameterError(name, value, "must be > 0")
    return number


def require_non_negative(name: str, value: float) -> float:
    number = require_finite(name, value)
    if number < 0:
        raise InvalidParameterError(name, value, "must be >= 0")
    return number


def require_count(name: str, value: int, minimum: int = 1) -> int:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidParameterError(name, value, "must be an integer")
    count = int(value)
    if count < minimum:
        raise InvalidParameterError(name, value, f"must be >= {minimum}")
    return count


def emit_diagnostic(metadata: MutableMapping[str, object] | None, message: str) -> None:
    """Warn about questionable geometry and remember the message on the result.

    Diagnostics never abort the build; the caller still gets best-effort geometry.
    """

    warnings.warn(message, InvalidGeometryWarning, stacklevel=3)
    if metadata is not None:
        notes = metadata.setdefault(DIAGNOSTICS_KEY, [])
        notes.append(message)  # type: ignore[union-attr]


def diagnostics_of(item: object) -> list[str]:
    metadata = getattr(item, "metadata", None) or {}
    return list(metadata.get(DIAGNOSTICS_KEY, []))
