# stiffkit - Linear Static Finite Element Analysis
"""
STIFFKIT: Direct Stiffness Analysis of Springs, Trusses and Beams
=================================================================

This package provides:
- Model building (nodes, elements, constraints, forces) per model type
- Element local frames and stiffness matrices rotated to global
- Keyed global assembly (dense numpy or scipy.sparse)
- Linear solve with reactions and mechanism detection

ARCHITECTURE:
-------------
    kernel/         Element-agnostic core (DOF keys, scatter-add, solve)
    geometry.py     Points, axes, keyed vectors and matrices
    errors.py       Error taxonomy
    catalog.py      Materials and cross-sections
    elements.py     Element variants and their local frames
    stiffness.py    Local stiffness builders, rotation to global
    model.py        Model aggregate, repositories and factories
    assembly.py     Model-level keyed assembly
    solve.py        LinearSolver (model → results)
    results.py      Per-node displacements and reactions
    config.py       Solver settings and logging setup
"""

import logging

from .catalog import GenericCrossSection, GenericElasticMaterial, SolidRectangle
from .config import CONFIG, SolverConfig, configure_logging
from .elements import Linear1DBeam, Linear3DBeam, LinearConstantSpring, LinearTruss
from .errors import (
    GeometryError,
    InvalidPropertyError,
    MechanismError,
    ModelDefinitionError,
    ModelTypeError,
    SolverInputError,
    StiffkitError,
    UnknownNodeError,
    UnsupportedDegreeOfFreedomError,
)
from .kernel import DegreeOfFreedom, ModelType, NodalDegreeOfFreedom, solve_linear
from .model import FiniteElementModel, ForceVector, Node
from .results import AnalysisResults
from .solve import LinearSolver, analyse

# Library logging: silent unless the application configures handlers
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
