# stiffkit/kernel/dof.py
"""
DOF INDEX: Degree of Freedom Labels and Global Indexing
=======================================================

PURPOSE:
--------
This module names the six degrees of freedom a node can have and handles the
mapping from (node, dof) to a row/column of the global system:

    Translations:  X, Y, Z        (displacements along the global axes)
    Rotations:     XX, YY, ZZ     (rotations about the global axes)

The enum order is significant: it is the order of rows/columns inside every
node's block of the global matrices.

Unlike a fixed ``dof_per_node`` layout, the global index here only contains
the (node, dof) pairs that some element actually supports, restricted to the
DOFs analysed by the model type. A truss node in a 3D model therefore gets
three rows, a beam node six.

USAGE:
------
    index = DOFIndex.from_keys(keys)   # keys: NodalDegreeOfFreedom pairs
    row = index.idx(NodalDegreeOfFreedom(node, DegreeOfFreedom.Z))
    rows = index.element_dof_map(element.supported_nodal_dofs)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Tuple

from ..errors import UnsupportedDegreeOfFreedomError
from ..geometry import KeyedVector


class DegreeOfFreedom(Enum):
    """The six motion components of a node, in matrix layout order."""
    X = 0
    Y = 1
    Z = 2
    XX = 3
    YY = 4
    ZZ = 5

    @property
    def is_translation(self) -> bool:
        return self.value < 3

    @property
    def is_rotation(self) -> bool:
        return self.value >= 3

    def __str__(self):
        return self.name


TRANSLATIONS: Tuple[DegreeOfFreedom, ...] = (DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z)
ROTATIONS: Tuple[DegreeOfFreedom, ...] = (DegreeOfFreedom.XX, DegreeOfFreedom.YY, DegreeOfFreedom.ZZ)
ALL_DOFS: Tuple[DegreeOfFreedom, ...] = TRANSLATIONS + ROTATIONS


@dataclass(frozen=True)
class NodalDegreeOfFreedom:
    """
    The pair (node, degree of freedom): the key of every global vector/matrix.

    Two keys are equal when they refer to the same node (by node id) and the
    same DOF. Keys sort by node id first, then by DOF order.
    """
    node: Any
    dof: DegreeOfFreedom

    def sort_key(self) -> Tuple[int, int]:
        return (self.node.id, self.dof.value)

    def __lt__(self, other: "NodalDegreeOfFreedom") -> bool:
        return self.sort_key() < other.sort_key()

    def __str__(self):
        return f"node {self.node.id} {self.dof.name}"


class ModelType(Enum):
    """
    The class of analysis a model performs.

    Each model type analyses a fixed subset of the six DOFs. 1D models lie
    along the global X axis; 2D models lie in the global XZ plane (Z up).

    | Model type | Analysed DOFs       |
    |------------|---------------------|
    | TRUSS_1D   | X                   |
    | BEAM_1D    | Z, YY               |
    | TRUSS_2D   | X, Z                |
    | FRAME_2D   | X, Z, YY            |
    | TRUSS_3D   | X, Y, Z             |
    | FULL_3D    | X, Y, Z, XX, YY, ZZ |
    """
    TRUSS_1D = "truss_1d"
    BEAM_1D = "beam_1d"
    TRUSS_2D = "truss_2d"
    FRAME_2D = "frame_2d"
    TRUSS_3D = "truss_3d"
    FULL_3D = "full_3d"

    @property
    def degrees_of_freedom(self) -> FrozenSet[DegreeOfFreedom]:
        return _MODEL_TYPE_DOFS[self]

    @property
    def dimensions(self) -> int:
        return _MODEL_TYPE_DIMENSIONS[self]

    def allows(self, dof: DegreeOfFreedom) -> bool:
        return dof in _MODEL_TYPE_DOFS[self]


D = DegreeOfFreedom
_MODEL_TYPE_DOFS: Dict[ModelType, FrozenSet[DegreeOfFreedom]] = {
    ModelType.TRUSS_1D: frozenset({D.X}),
    ModelType.BEAM_1D: frozenset({D.Z, D.YY}),
    ModelType.TRUSS_2D: frozenset({D.X, D.Z}),
    ModelType.FRAME_2D: frozenset({D.X, D.Z, D.YY}),
    ModelType.TRUSS_3D: frozenset(TRANSLATIONS),
    ModelType.FULL_3D: frozenset(ALL_DOFS),
}
_MODEL_TYPE_DIMENSIONS: Dict[ModelType, int] = {
    ModelType.TRUSS_1D: 1,
    ModelType.BEAM_1D: 1,
    ModelType.TRUSS_2D: 2,
    ModelType.FRAME_2D: 2,
    ModelType.TRUSS_3D: 3,
    ModelType.FULL_3D: 3,
}
del D


class DOFVector(KeyedVector):
    """
    A per-node vector keyed by DegreeOfFreedom.

    Components can be read by key or by lower-case attribute name:

    >>> v = DOFVector.from_mapping({DegreeOfFreedom.Z: -10.0})
    >>> v[DegreeOfFreedom.Z], v.z
    (-10.0, -10.0)
    """

    missing_key_error = UnsupportedDegreeOfFreedomError

    def __getattr__(self, name: str) -> float:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            dof = DegreeOfFreedom[name.upper()]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no attribute {name!r}") from None
        return self[dof]


@dataclass
class DOFIndex:
    """
    Maps NodalDegreeOfFreedom keys to global row/column indices.

    This is the bridge between "node 5, Z-displacement" and "global row 16".

    Attributes:
    -----------
    keys : Tuple[NodalDegreeOfFreedom, ...]
        The ordered, duplicate-free key set of the global system.

    Examples:
    ---------
    >>> index = DOFIndex.from_keys([k0, k1, k2])
    >>> index.idx(k1)
    1
    >>> index.ndof
    3
    """
    keys: Tuple[NodalDegreeOfFreedom, ...]
    _positions: Dict[NodalDegreeOfFreedom, int] = field(init=False, repr=False)

    def __post_init__(self):
        self.keys = tuple(self.keys)
        self._positions = {k: i for i, k in enumerate(self.keys)}
        if len(self._positions) != len(self.keys):
            raise ValueError("DOFIndex keys must be unique.")

    @classmethod
    def from_keys(cls, keys: Iterable[NodalDegreeOfFreedom]) -> "DOFIndex":
        """Collapse duplicates, keeping the first occurrence."""
        return cls(tuple(dict.fromkeys(keys)))

    @property
    def ndof(self) -> int:
        return len(self.keys)

    def __contains__(self, key: NodalDegreeOfFreedom) -> bool:
        return key in self._positions

    def idx(self, key: NodalDegreeOfFreedom) -> int:
        """
        Get the global row/column index of a nodal DOF.

        Raises:
        -------
        UnsupportedDegreeOfFreedomError
            If no element of the model supports this (node, dof) pair.
        """
        try:
            return self._positions[key]
        except KeyError:
            raise UnsupportedDegreeOfFreedomError(
                f"{key} is not supported by any element in the analysis."
            ) from None

    def node_dofs(self, node) -> List[NodalDegreeOfFreedom]:
        """All keys belonging to one node, in DOF order."""
        return [k for k in self.keys if k.node == node]

    def element_dof_map(self, element_keys: Iterable[NodalDegreeOfFreedom]) -> List[int]:
        """
        Global indices for an element's keys, skipping keys outside the index.

        Returns a list aligned with ``element_keys``; entries for keys the
        index does not contain are ``-1`` so the caller can drop them.
        """
        return [self._positions.get(k, -1) for k in element_keys]
