"""filletkit: rounded profiles, fillets and the solids swept from them."""

from __future__ import annotations

from .validation import InvalidGeometryWarning, InvalidParameterError, ValidationError

__all__ = ["__version__", "InvalidGeometryWarning", "InvalidParameterError", "ValidationError"]

__version__ = "0.1.0"
