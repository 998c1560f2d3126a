# stiffkit/errors.py
"""
Error taxonomy for model definition, geometry and solvability failures.

Every failure raised by stiffkit derives from StiffkitError. The concrete
classes also derive from the builtin that best describes the failure, so
callers that only know about ValueError / KeyError / RuntimeError still catch
them.
"""

from typing import Iterable, Tuple


class StiffkitError(Exception):
    """Base class for all stiffkit failures."""
    pass


class ModelDefinitionError(StiffkitError, ValueError):
    """Raised when a node, element, force or constraint is defined incorrectly."""
    pass


class ModelTypeError(ModelDefinitionError):
    """Raised when an element, node or force is not legal for the model type."""
    pass


class InvalidPropertyError(ModelDefinitionError):
    """Raised for non-positive material, section or spring properties."""
    pass


class GeometryError(StiffkitError, ValueError):
    """Raised when element geometry is degenerate (zero length, parallel axes)."""
    pass


class SolverInputError(StiffkitError, ValueError):
    """Raised when the arrays handed to the solver do not line up."""
    pass


class MechanismError(StiffkitError, RuntimeError):
    """
    Raised when the structure is unstable or ill-conditioned.

    ``dofs`` holds the nodal degrees of freedom implicated in the failure
    (free DOFs without stiffness, or the DOFs taking part in a rigid-body
    mode). It is empty when the backend gives no localisation.
    """

    def __init__(self, message: str, dofs: Iterable = ()):
        self.dofs: Tuple = tuple(dofs)
        if self.dofs:
            listed = ", ".join(str(d) for d in self.dofs[:12])
            if len(self.dofs) > 12:
                listed += f", ... ({len(self.dofs)} in total)"
            message = f"{message} Implicated DOFs: {listed}"
        super().__init__(message)


class UnknownNodeError(StiffkitError, KeyError):
    """Raised when results are requested for a node that is not in the model."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""


class UnsupportedDegreeOfFreedomError(StiffkitError, KeyError):
    """Raised when a DOF that no element supports is looked up."""

    def __str__(self):
        return str(self.args[0]) if self.args else ""
