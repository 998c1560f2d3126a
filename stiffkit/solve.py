# stiffkit/solve.py
"""
LINEAR SOLVER: Model → Displacements and Reactions
==================================================

The analysis pipeline for one model, run synchronously on a snapshot:

    UNCONSTRAINED   global K and F assembled over all analysed nodal DOFs
         ↓
    PARTITIONED     keys split into free / constrained blocks
         ↓
    SOLVED          U_f = K_ff⁻¹ (F_f − K_fc U_c),  R_c = K_cf U_f + K_cc U_c − F_c

Any failure raises (MechanismError, SolverInputError, ...) and no results
object is produced.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from .assembly import assemble_force_vector, assemble_global_stiffness
from .config import CONFIG, SolverConfig
from .errors import MechanismError
from .geometry import KeyedVector
from .kernel.dof import DOFIndex, NodalDegreeOfFreedom
from .kernel.solve import partition, reactions, solve_linear, solve_partitioned
from .model import FiniteElementModel
from .results import AnalysisResults

logger = logging.getLogger(__name__)

__all__ = ["LinearSolver", "SolverState", "analyse", "solve_linear"]


class SolverState(Enum):
    UNCONSTRAINED = "unconstrained"
    PARTITIONED = "partitioned"
    SOLVED = "solved"


class LinearSolver:
    """
    Solves a FiniteElementModel by the direct stiffness method.

    The solver owns no model data. ``state`` records how far the most recent
    ``solve()`` call got (None before the first call).

    Example:
    --------
    >>> results = LinearSolver(model).solve()
    >>> results.reaction(node1).z
    10.0
    """

    def __init__(self, model: FiniteElementModel, config: Optional[SolverConfig] = None):
        self.model = model
        self.config = config or CONFIG
        self.state: Optional[SolverState] = None

    def _transition(self, state: SolverState) -> None:
        logger.debug("Solver state: %s -> %s",
                     self.state.name if self.state else "START", state.name)
        self.state = state

    def solve(self) -> AnalysisResults:
        self.state = None
        snapshot = self.model.snapshot()

        K = assemble_global_stiffness(
            snapshot.nodes, snapshot.elements, snapshot.model_type, sparse=self.config.sparse
        )
        index = DOFIndex(K.row_keys)
        F = assemble_force_vector(index, snapshot.forces)
        self._transition(SolverState.UNCONSTRAINED)

        prescribed: Dict[int, float] = {}
        ignored: List[NodalDegreeOfFreedom] = []
        for key, value in snapshot.constraints.items():
            if key in index:
                prescribed[index.idx(key)] = value
            else:
                ignored.append(key)
        if ignored:
            logger.warning(
                "Ignoring constraints on degrees of freedom no element supports: %s",
                ", ".join(str(k) for k in sorted(ignored)),
            )

        system = partition(K, F.array, list(prescribed), prescribed)
        self._transition(SolverState.PARTITIONED)

        try:
            U_f = solve_partitioned(
                system,
                cond_limit=self.config.cond_limit,
                zero_tolerance=self.config.zero_tolerance,
                labels=index.keys,
            )
        except np.linalg.LinAlgError as exc:
            raise MechanismError(f"Linear algebra backend failed: {exc}") from exc
        R_c = reactions(system, U_f)

        d = np.zeros(index.ndof, dtype=float)
        d[system.free] = U_f
        d[system.fixed] = system.U_c
        R = np.zeros(index.ndof, dtype=float)
        R[system.fixed] = R_c
        self._transition(SolverState.SOLVED)

        logger.info(
            "Solved %s model: %d nodes, %d elements, %d DOFs (%d free, %d constrained)",
            snapshot.model_type.name, len(snapshot.nodes), len(snapshot.elements),
            index.ndof, system.free.size, system.fixed.size,
        )

        return AnalysisResults(
            model_type=snapshot.model_type,
            nodes=snapshot.nodes,
            displacements=KeyedVector(index.keys, d),
            reactions=KeyedVector(index.keys, R),
            constrained=tuple(index.keys[i] for i in system.fixed),
        )


def analyse(model: FiniteElementModel, config: Optional[SolverConfig] = None) -> AnalysisResults:
    """Shorthand for ``LinearSolver(model, config).solve()``."""
    return LinearSolver(model, config).solve()
