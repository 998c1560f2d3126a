# stiffkit/kernel/assemble.py
"""
ASSEMBLY: Global Matrix Assembly by Scatter-Add
===============================================

PURPOSE:
--------
Scatter-add of per-element buffers into the global stiffness matrix and load
vector, keyed by integer positions from a DOFIndex.

Element types are invisible here. Each contribution is a pair
(dof_map, matrix or vector) with the matrix already rotated to global axes.

A DOF map entry of -1 means "this element DOF is not analysed" (for example
the out-of-plane DOFs of a beam in a 2D frame model); those rows and columns
are dropped.

CONCURRENCY:
------------
Each contribution is an independent (dof_map, ke) buffer, computed without
touching the global matrix. They are merged here, sequentially and in list
order, so the result is deterministic and no two writers ever share K.

USAGE:
------
    contributions = [(index.element_dof_map(keys), ke) for keys, ke in ...]
    K = assemble_global_K(index.ndof, contributions)          # dense
    K = assemble_global_K_sparse(index.ndof, contributions)   # scipy CSR
"""

import numpy as np
from scipy import sparse
from typing import List, Tuple


def _check_shape(dof_map, block, ndim: int) -> None:
    n = len(dof_map)
    expected = (n,) * ndim
    assert block.shape == expected, \
        f"Contribution of shape {block.shape} does not fit a DOF map of length {n}"


def _active(dof_map: List[int]) -> Tuple[np.ndarray, np.ndarray]:
    """Positions in the element matrix that map into the global system, and where."""
    dof_map = np.asarray(dof_map, dtype=int)
    local = np.flatnonzero(dof_map >= 0)
    return local, dof_map[local]


def assemble_global_K(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global stiffness matrix from element contributions.

    ALGORITHM:
    ----------
    K = zeros(ndof × ndof)
    for each element:
        for each (local_i, local_j) in element ke with both DOFs analysed:
            K[dof_map[local_i], dof_map[local_j]] += ke[local_i, local_j]

    Parameters:
    -----------
    ndof : int
        Total number of DOFs in the system
    contributions : List[Tuple[List[int], np.ndarray]]
        (dof_map, ke) tuples, one per element. ke must be square with side
        len(dof_map) and already in global coordinates.

    Returns:
    --------
    np.ndarray
        Global stiffness matrix K, shape (ndof, ndof). Symmetric positive
        semi-definite (becomes positive definite once supports are applied).
    """
    K = np.zeros((ndof, ndof), dtype=float)

    for dof_map, ke in contributions:
        _check_shape(dof_map, ke, 2)

        local, glob = _active(dof_map)
        # glob has no repeats within one element, so fancy-index += is safe
        K[np.ix_(glob, glob)] += ke[np.ix_(local, local)]

    return K


def assemble_global_K_sparse(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> sparse.csr_matrix:
    """
    Same as assemble_global_K, backed by a scipy.sparse CSR matrix.

    Triplets are collected per element and converted once; duplicate
    (row, col) entries from elements sharing a node are summed by the
    COO → CSR conversion, which is exactly superposition.
    """
    rows, cols, vals = [], [], []

    for dof_map, ke in contributions:
        _check_shape(dof_map, ke, 2)

        local, glob = _active(dof_map)
        block = ke[np.ix_(local, local)]
        r, c = np.meshgrid(glob, glob, indexing="ij")
        rows.append(r.ravel())
        cols.append(c.ravel())
        vals.append(block.ravel())

    if rows:
        rows = np.concatenate(rows)
        cols = np.concatenate(cols)
        vals = np.concatenate(vals)
    else:
        rows = cols = np.zeros(0, dtype=int)
        vals = np.zeros(0, dtype=float)

    return sparse.coo_matrix((vals, (rows, cols)), shape=(ndof, ndof)).tocsr()


def assemble_global_F(
    ndof: int,
    contributions: List[Tuple[List[int], np.ndarray]]
) -> np.ndarray:
    """
    Assemble the global load vector from nodal contributions.

    Same scatter-add logic as assemble_global_K, for vectors. Entries with a
    DOF map of -1 are skipped; the caller decides beforehand whether a load
    on such a DOF is an error.

    Example:
    --------
    >>> F = assemble_global_F(4, [([0, 2], np.array([1.0, -5.0]))])
    >>> F
    array([ 1.,  0., -5.,  0.])
    """
    F = np.zeros(ndof, dtype=float)

    for dof_map, fe in contributions:
        _check_shape(dof_map, fe, 1)

        local, glob = _active(dof_map)
        np.add.at(F, glob, fe[local])

    return F
