# stiffkit/kernel/validate.py
"""
VALIDATION: ONE PLACE FOR GUARD CLAUSES
=======================================

Constructors, factories and builders all check their inputs through the
helpers below, so that every precondition class maps onto exactly one error
type from stiffkit.errors:

    require_not_none      -> ModelDefinitionError
    require               -> ModelDefinitionError (or the class passed in)
    require_model_type    -> ModelTypeError
    require_positive      -> InvalidPropertyError
    require_non_negative  -> InvalidPropertyError
    require_finite_vector -> GeometryError
"""

from typing import Any, Type

import numpy as np

from ..errors import (
    GeometryError,
    InvalidPropertyError,
    ModelDefinitionError,
    ModelTypeError,
    StiffkitError,
)


def require(condition: bool, message: str, error: Type[StiffkitError] = ModelDefinitionError) -> None:
    """Raise ``error(message)`` unless ``condition`` holds."""
    if not condition:
        raise error(message)


def require_not_none(value: Any, name: str) -> None:
    if value is None:
        raise ModelDefinitionError(f"{name} must not be None.")


def require_model_type(supported: bool, what: str, model_type) -> None:
    """Invalid-state guard for variants, nodes and forces not legal in a model type."""
    if not supported:
        raise ModelTypeError(f"{what} are not available in a model of type {model_type.name}.")


def require_positive(value: float, name: str) -> float:
    """Return ``value`` as float, or raise InvalidPropertyError if it is not > 0."""
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidPropertyError(f"{name} must be a number, got {value!r}.") from None
    if not np.isfinite(value) or value <= 0.0:
        raise InvalidPropertyError(f"{name} must be positive, got {value}.")
    return value


def require_non_negative(value: float, name: str) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise InvalidPropertyError(f"{name} must be a number, got {value!r}.") from None
    if not np.isfinite(value) or value < 0.0:
        raise InvalidPropertyError(f"{name} must not be negative, got {value}.")
    return value


def require_finite_vector(vector: np.ndarray, name: str) -> np.ndarray:
    vector = np.asarray(vector, dtype=float)
    if vector.shape != (3,) or not np.all(np.isfinite(vector)):
        raise GeometryError(f"{name} must be a finite 3-vector, got {vector!r}.")
    return vector
