# stiffkit/stiffness.py
"""
STIFFNESS BUILDERS: Local Matrices and Rotation to Global
=========================================================

PURPOSE:
--------
One builder per ElementType produces the element stiffness matrix in the
element's LOCAL frame, sized and ordered like the element's supported local
DOFs (node-major):

    spring     k      × [ 1 -1 ]            DOFs: [x_i, x_j]
                        [-1  1 ]
    truss      EA/L   × [ 1 -1 ]            DOFs: [x_i, x_j]
                        [-1  1 ]
    1D beam    Euler-Bernoulli bending      DOFs: [y_i, zz_i, y_j, zz_j]
    3D beam    axial + torsion + bending    DOFs: [x, y, z, xx, yy, zz]_i, [...]_j
               about both local axes

ROTATION TO GLOBAL:
-------------------
The local matrix is first embedded in the element's global DOF layout
(3 translations and/or 3 rotations per node, see Element.global_dofs) with
zeros for unsupported local DOFs, then rotated:

    K_global = T^T × K_embedded × T

where T repeats the element's 3×3 rotation matrix R block-diagonally, once
per active translational/rotational triple per node. Because R is
orthonormal, K_global stays symmetric whenever K_local is.
"""

from typing import Callable, Dict, List, Tuple

import numpy as np
from scipy.linalg import block_diag

from .elements import Element, ElementType
from .errors import GeometryError
from .geometry import GEOMETRY_TOLERANCE
from .kernel.dof import NodalDegreeOfFreedom
from .kernel.validate import require_non_negative, require_positive


def element_length(element: Element, tol: float = GEOMETRY_TOLERANCE) -> float:
    """
    Distance between the two end nodes.

    Raises:
    -------
    GeometryError
        If the element has zero length (nodes at the same location).
    """
    nodes = element.nodes
    L = nodes[0].location.distance_to(nodes[-1].location)
    if L <= tol:
        raise GeometryError(
            f"{element!r} has zero length (nodes at the same location: {nodes[0].location})."
        )
    return L


def axial_local_stiffness(k: float) -> np.ndarray:
    """2×2 two-force-member stiffness for an axial stiffness ``k``."""
    return k * np.array([
        [ 1.0, -1.0],
        [-1.0,  1.0],
    ], dtype=float)


def bending_xy_local_stiffness(EI: float, L: float) -> np.ndarray:
    """
    Euler-Bernoulli bending in the local x-y plane.
    DOF order: [v_i, θz_i, v_j, θz_j]
    """
    L2 = L * L
    L3 = L2 * L
    return np.array([
        [ 12*EI/L3,   6*EI/L2, -12*EI/L3,   6*EI/L2],
        [  6*EI/L2,    4*EI/L,  -6*EI/L2,    2*EI/L],
        [-12*EI/L3,  -6*EI/L2,  12*EI/L3,  -6*EI/L2],
        [  6*EI/L2,    2*EI/L,  -6*EI/L2,    4*EI/L],
    ], dtype=float)


def bending_xz_local_stiffness(EI: float, L: float) -> np.ndarray:
    """
    Euler-Bernoulli bending in the local x-z plane.
    DOF order: [w_i, θy_i, w_j, θy_j]

    Same as the x-y case with the rotation sign flipped: a positive θy
    (right-hand rule about y) turns the x axis towards -z.
    """
    flip = np.diag([1.0, -1.0, 1.0, -1.0])
    return flip @ bending_xy_local_stiffness(EI, L) @ flip


def beam3d_local_stiffness(E: float, G: float, A: float, Iyy: float, Izz: float, J: float, L: float) -> np.ndarray:
    """
    12×12 local stiffness of a prismatic 3D Euler-Bernoulli beam.
    DOF order: [ux, uy, uz, rx, ry, rz]_i, [ux, uy, uz, rx, ry, rz]_j
    """
    k = np.zeros((12, 12), dtype=float)

    axial = [0, 6]
    k[np.ix_(axial, axial)] = axial_local_stiffness(E * A / L)

    torsion = [3, 9]
    k[np.ix_(torsion, torsion)] = axial_local_stiffness(G * J / L)

    # v and θz
    xy = [1, 5, 7, 11]
    k[np.ix_(xy, xy)] = bending_xy_local_stiffness(E * Izz, L)

    # w and θy
    xz = [2, 4, 8, 10]
    k[np.ix_(xz, xz)] = bending_xz_local_stiffness(E * Iyy, L)

    return k


def spring_stiffness(element) -> np.ndarray:
    k = require_positive(element.spring_constant, "spring_constant")
    element_length(element)
    return axial_local_stiffness(k)


def truss_stiffness(element) -> np.ndarray:
    E = require_positive(element.material.youngs_modulus, "youngs_modulus")
    A = require_positive(element.section.area, "area")
    L = element_length(element)
    return axial_local_stiffness(E * A / L)


def beam1d_stiffness(element) -> np.ndarray:
    E = require_positive(element.material.youngs_modulus, "youngs_modulus")
    Izz = require_positive(element.section.izz, "izz")
    L = element_length(element)
    return bending_xy_local_stiffness(E * Izz, L)


def beam3d_stiffness(element) -> np.ndarray:
    E = require_positive(element.material.youngs_modulus, "youngs_modulus")
    G = require_non_negative(element.material.shear_modulus, "shear_modulus")
    A = require_positive(element.section.area, "area")
    Iyy = require_positive(element.section.iyy, "iyy")
    Izz = require_positive(element.section.izz, "izz")
    J = require_non_negative(element.section.j, "j")
    L = element_length(element)
    return beam3d_local_stiffness(E, G, A, Iyy, Izz, J, L)


LOCAL_STIFFNESS_BUILDERS: Dict[ElementType, Callable[[Element], np.ndarray]] = {
    ElementType.LINEAR_CONSTANT_SPRING: spring_stiffness,
    ElementType.LINEAR_TRUSS: truss_stiffness,
    ElementType.LINEAR_1D_BEAM: beam1d_stiffness,
    ElementType.LINEAR_3D_BEAM: beam3d_stiffness,
}


def local_stiffness(element: Element) -> np.ndarray:
    """Local-frame stiffness for any element, dispatched on its ELEMENT_TYPE."""
    builder = LOCAL_STIFFNESS_BUILDERS[element.ELEMENT_TYPE]
    k = builder(element)
    n = len(element.SUPPORTED_LOCAL_DOFS) * len(element.nodes)
    assert k.shape == (n, n), f"{element.ELEMENT_TYPE} builder returned {k.shape}, expected {(n, n)}"
    return k


def embedding_matrix(element: Element) -> np.ndarray:
    """
    Selection matrix P with K_embedded = P × K_local × P^T.

    Rows follow the element's global DOF layout per node (the same labels,
    read in the local frame); columns follow its supported local DOFs.
    """
    layout = element.global_dofs()
    local = element.SUPPORTED_LOCAL_DOFS
    n_nodes = len(element.nodes)
    P = np.zeros((len(layout) * n_nodes, len(local) * n_nodes), dtype=float)
    for node in range(n_nodes):
        for col, dof in enumerate(local):
            P[node * len(layout) + layout.index(dof), node * len(local) + col] = 1.0
    return P


def transformation_matrix(element: Element) -> np.ndarray:
    """Block-diagonal T: one copy of R per translational/rotational triple per node."""
    R = element.rotation_matrix()
    n_blocks = len(element.global_dofs()) // 3 * len(element.nodes)
    return block_diag(*([R] * n_blocks))


def global_stiffness(element: Element) -> Tuple[List[NodalDegreeOfFreedom], np.ndarray]:
    """
    Element stiffness in global coordinates, with its keys.

    Returns:
    --------
    keys : List[NodalDegreeOfFreedom]
        The element's supported nodal DOFs (node-major, DOF order)
    ke : np.ndarray
        Matrix of shape (len(keys), len(keys))

    Example:
    --------
    >>> keys, ke = global_stiffness(truss)
    >>> len(keys), ke.shape
    (6, (6, 6))
    """
    k_local = local_stiffness(element)
    P = embedding_matrix(element)
    T = transformation_matrix(element)
    k_embedded = P @ k_local @ P.T
    ke = T.T @ k_embedded @ T
    return list(element.supported_nodal_dofs), ke
