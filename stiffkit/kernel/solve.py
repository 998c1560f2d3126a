# stiffkit/kernel/solve.py
"""Linear system solver: partitioning by boundary conditions, mechanism detection, reactions."""

import logging
import warnings
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

import numpy as np
import scipy.linalg
from scipy import sparse
from scipy.sparse.linalg import MatrixRankWarning, spsolve

from ..errors import MechanismError, SolverInputError
from ..geometry import KeyedMatrix

logger = logging.getLogger(__name__)

# Above this size the dense eigen-decomposition used to localise a mechanism
# is skipped for sparse systems.
MAX_LOCALISATION_DOFS = 2000


@dataclass
class PartitionedSystem:
    """
    K and F split into free (f) and constrained (c) blocks.

        [ K_ff  K_fc ] [ U_f ]   [ F_f ]
        [ K_cf  K_cc ] [ U_c ] = [ F_c + R_c ]
    """
    free: np.ndarray
    fixed: np.ndarray
    K_ff: object
    K_fc: object
    K_cf: object
    K_cc: object
    F_f: np.ndarray
    F_c: np.ndarray
    U_c: np.ndarray

    @property
    def is_sparse(self) -> bool:
        return sparse.issparse(self.K_ff)


def _label(labels: Optional[Sequence], indices) -> list:
    if labels is None:
        return [int(i) for i in indices]
    return [labels[int(i)] for i in indices]


def partition(
    K,
    F: np.ndarray,
    fixed_dofs: Sequence[int],
    prescribed: Optional[Mapping[int, float]] = None,
) -> PartitionedSystem:
    """
    Split K and F by the constrained DOF indices.

    Args:
        K: Global stiffness matrix (ndof x ndof): a KeyedMatrix with the same
            row and column keys, or a bare dense or scipy.sparse array
        F: Global load vector (ndof,)
        fixed_dofs: Constrained DOF indices
        prescribed: Optional {dof index: imposed displacement}; missing
            constrained DOFs are held at zero

    Raises:
        SolverInputError: If K is not square, F does not match it, or a
            constrained/prescribed index is out of range
    """
    F = np.asarray(F, dtype=float)
    ndof = K.shape[0]
    if K.shape != (ndof, ndof):
        raise SolverInputError(f"Stiffness matrix must be square, got shape {K.shape}.")
    if not isinstance(K, KeyedMatrix):
        K = KeyedMatrix(range(ndof), range(ndof), K)
    elif K.row_keys != K.col_keys:
        raise SolverInputError("Stiffness matrix rows and columns must carry the same keys.")
    if F.shape != (ndof,):
        raise SolverInputError(f"Load vector has shape {F.shape}, expected ({ndof},).")

    fixed_set = set(int(i) for i in fixed_dofs)
    prescribed = dict(prescribed or {})
    out_of_range = [i for i in fixed_set | set(prescribed) if not 0 <= i < ndof]
    if out_of_range:
        raise SolverInputError(f"Constrained DOF indices out of range: {sorted(out_of_range)}.")
    fixed_set |= set(prescribed)

    fixed = np.array(sorted(fixed_set), dtype=int)
    free = np.array([i for i in range(ndof) if i not in fixed_set], dtype=int)
    U_c = np.array([float(prescribed.get(int(i), 0.0)) for i in fixed], dtype=float)

    free_keys = [K.row_keys[i] for i in free]
    fixed_keys = [K.row_keys[i] for i in fixed]
    blocks = {
        "K_ff": K.submatrix(free_keys, free_keys),
        "K_fc": K.submatrix(free_keys, fixed_keys),
        "K_cf": K.submatrix(fixed_keys, free_keys),
        "K_cc": K.submatrix(fixed_keys, fixed_keys),
    }

    return PartitionedSystem(
        free=free,
        fixed=fixed,
        F_f=F[free],
        F_c=F[fixed],
        U_c=U_c,
        **blocks,
    )


def zero_stiffness_dofs(K_ff, zero_tolerance: float = 1e-10) -> np.ndarray:
    """
    Positions (within the free set) whose stiffness row is zero.

    A free DOF nobody gives stiffness to makes K_ff singular. "Zero" is
    relative to the largest diagonal entry of the system.
    """
    if sparse.issparse(K_ff):
        row_size = np.asarray(abs(K_ff).sum(axis=1)).ravel()
        scale = abs(K_ff).max() if K_ff.nnz else 0.0
    else:
        row_size = np.abs(K_ff).sum(axis=1)
        scale = np.abs(K_ff).max() if K_ff.size else 0.0
    if scale == 0.0:
        return np.arange(K_ff.shape[0])
    return np.flatnonzero(row_size <= zero_tolerance * scale)


def rigid_body_dofs(K_ff, zero_tolerance: float = 1e-10) -> np.ndarray:
    """
    Positions (within the free set) taking part in near-zero-energy modes.

    Uses the eigenvectors of K_ff whose eigenvalues are below
    zero_tolerance × the largest eigenvalue.
    """
    if sparse.issparse(K_ff):
        if K_ff.shape[0] > MAX_LOCALISATION_DOFS:
            return np.zeros(0, dtype=int)
        K_ff = K_ff.toarray()
    if K_ff.shape[0] == 0:
        return np.zeros(0, dtype=int)
    eigvals, eigvecs = scipy.linalg.eigh(K_ff)
    limit = zero_tolerance * max(abs(eigvals).max(), 1e-300)
    modes = eigvecs[:, eigvals <= limit]
    if modes.shape[1] == 0:
        return np.zeros(0, dtype=int)
    participation = np.abs(modes).max(axis=1)
    return np.flatnonzero(participation > 1e-6)


def _mechanism(message: str, system: PartitionedSystem, positions, labels) -> MechanismError:
    return MechanismError(message, _label(labels, system.free[positions]))


def solve_partitioned(
    system: PartitionedSystem,
    cond_limit: float = 1e12,
    zero_tolerance: float = 1e-10,
    labels: Optional[Sequence] = None,
) -> np.ndarray:
    """
    Solve K_ff · U_f = F_f − K_fc · U_c.

    Args:
        system: Output of partition()
        cond_limit: Max condition number (dense only) before raising MechanismError
        zero_tolerance: Relative threshold for zero stiffness rows and modes
        labels: Optional names for the global DOF indices, used in errors

    Returns:
        U_f: Displacements at the free DOFs

    Raises:
        MechanismError: If the structure is unstable, K_ff is singular,
            ill-conditioned or not positive definite
    """
    n_free = system.free.size
    if n_free == 0:
        return np.zeros(0, dtype=float)

    rhs = system.F_f - system.K_fc @ system.U_c
    if rhs.shape != (n_free,):
        raise SolverInputError(f"Free load vector has shape {rhs.shape}, expected ({n_free},).")

    unloaded = zero_stiffness_dofs(system.K_ff, zero_tolerance)
    if unloaded.size:
        raise _mechanism(
            "Free degrees of freedom have no stiffness (no element supports them). "
            "Constrain them or connect them to the structure.",
            system, unloaded, labels,
        )

    if system.is_sparse:
        with warnings.catch_warnings():
            warnings.simplefilter("error", MatrixRankWarning)
            try:
                U_f = spsolve(system.K_ff.tocsc(), rhs)
            except MatrixRankWarning:
                U_f = None
        if U_f is None or not np.all(np.isfinite(U_f)):
            raise _mechanism(
                "Unstable system: the free stiffness matrix is singular. Check supports.",
                system, rigid_body_dofs(system.K_ff, zero_tolerance), labels,
            )
        return np.atleast_1d(np.asarray(U_f, dtype=float))

    cond = np.linalg.cond(system.K_ff)
    if not np.isfinite(cond) or cond > cond_limit:
        raise _mechanism(
            f"Unstable system (cond={cond:.2e}). Check supports. Need cond < {cond_limit:.0e}.",
            system, rigid_body_dofs(system.K_ff, zero_tolerance), labels,
        )

    try:
        factor = scipy.linalg.cho_factor(system.K_ff)
    except np.linalg.LinAlgError:
        raise _mechanism(
            "Free stiffness matrix is not positive definite.",
            system, rigid_body_dofs(system.K_ff, zero_tolerance), labels,
        ) from None
    return scipy.linalg.cho_solve(factor, rhs)


def reactions(system: PartitionedSystem, U_f: np.ndarray) -> np.ndarray:
    """R_c = K_cf · U_f + K_cc · U_c − F_c."""
    return system.K_cf @ U_f + system.K_cc @ system.U_c - system.F_c


def solve_linear(
    K,
    F: np.ndarray,
    fixed_dofs: list[int],
    cond_limit: float = 1e12,
    prescribed: Optional[Mapping[int, float]] = None,
    zero_tolerance: float = 1e-10,
    labels: Optional[Sequence] = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Solve K·d = F with boundary conditions enforced by partitioning.

    Args:
        K: Global stiffness matrix (ndof x ndof), dense or scipy.sparse
        F: Global load vector (ndof,)
        fixed_dofs: List of constrained DOF indices
        cond_limit: Max condition number before raising MechanismError
        prescribed: Optional {dof index: imposed displacement}
        zero_tolerance: Relative threshold for zero stiffness
        labels: Optional names for DOF indices, used in error messages

    Returns:
        d: Displacement vector (ndof,), prescribed values at constrained DOFs
        R: Reaction vector (ndof,), zero at free DOFs
        free: Array of free DOF indices

    Raises:
        MechanismError: If structure is unstable
        SolverInputError: If K and F do not line up
    """
    system = partition(K, F, fixed_dofs, prescribed)
    logger.debug("Partitioned %d DOFs: %d free, %d constrained",
                 K.shape[0], system.free.size, system.fixed.size)

    U_f = solve_partitioned(system, cond_limit, zero_tolerance, labels)

    ndof = K.shape[0]
    d = np.zeros(ndof, dtype=float)
    d[system.free] = U_f
    d[system.fixed] = system.U_c

    R = np.zeros(ndof, dtype=float)
    R[system.fixed] = reactions(system, U_f)

    return d, R, system.free
