# stiffkit/kernel - DOF indexing, assembly and solve
"""
KERNEL: THE ELEMENT-AGNOSTIC FOUNDATION
=======================================

This package contains the pieces of the direct stiffness method that work
for ANY element mix: springs, trusses, 1D beams, 3D beams.

Assembly and solving don't care about element types. They just need:
- A way to map (node, dof) → global row/column          (dof.py)
- Element stiffness matrices in global coordinates       (assemble.py)
- Constrained DOFs, prescribed values and load vectors   (solve.py)

Element-specific code (local frames, stiffness formulas) lives outside the
kernel, in stiffkit.elements and stiffkit.stiffness.
"""

from .dof import DegreeOfFreedom, DOFIndex, ModelType, NodalDegreeOfFreedom
from .solve import solve_linear, MechanismError

__all__ = [
    'DegreeOfFreedom',
    'DOFIndex',
    'ModelType',
    'NodalDegreeOfFreedom',
    'solve_linear',
    'MechanismError',
]
