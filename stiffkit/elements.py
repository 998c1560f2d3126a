# stiffkit/elements.py
"""
ELEMENTS: Topology, Local Frames and Supported Degrees of Freedom
=================================================================

PURPOSE:
--------
An element connects nodes and defines, in its own LOCAL frame, which degrees
of freedom it has stiffness in. It does NOT compute stiffness itself; that is
the job of the per-type builders in stiffkit.stiffness, selected by the
element's ELEMENT_TYPE tag.

The shipped variants are all 2-node line elements:

    | Variant              | Local DOFs            | Carries                        |
    |----------------------|-----------------------|--------------------------------|
    | LinearConstantSpring | X                     | axial force (given k)          |
    | LinearTruss          | X                     | axial force (EA/L)             |
    | Linear1DBeam         | Y, ZZ                 | shear + in-plane bending only  |
    | Linear3DBeam         | X, Y, Z, XX, YY, ZZ   | axial, 2x shear/bending, torsion |

LOCAL FRAME:
------------
    local x   from the first node to the second node
    local y   normalize(local_x × global_Y)
              (normalize(global_X × local_x) for members parallel to global Y)
    local z   normalize(local_x × local_y), always derived, never stored

For a member along global X this gives local y = global Z and local z =
−global Y, so in-plane bending of an XZ-plane frame uses (local Y, local ZZ).

GLOBAL DOFs:
------------
Rotating a local translation mixes all three global translations (and the
same for rotations). So if an element supports ANY local translation it
exposes all three global translations at each of its nodes, and likewise for
rotations. A truss node gets (X, Y, Z); a beam node gets all six.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

import numpy as np

from .errors import GeometryError, ModelDefinitionError
from .geometry import GEOMETRY_TOLERANCE, Point, normalized_cross, unit_vector
from .kernel.dof import (
    ALL_DOFS,
    ROTATIONS,
    TRANSLATIONS,
    DegreeOfFreedom,
    ModelType,
    NodalDegreeOfFreedom,
)
from .kernel.validate import require, require_not_none

GLOBAL_X = np.array([1.0, 0.0, 0.0])
GLOBAL_Y = np.array([0.0, 1.0, 0.0])


class ElementType(Enum):
    """Explicit variant tag; stiffness builders are looked up by this tag."""
    LINEAR_CONSTANT_SPRING = "linear_constant_spring"
    LINEAR_TRUSS = "linear_truss"
    LINEAR_1D_BEAM = "linear_1d_beam"
    LINEAR_3D_BEAM = "linear_3d_beam"


class Element(ABC):
    """
    Base class for finite elements.

    Subclasses declare ELEMENT_TYPE, SUPPORTED_LOCAL_DOFS (in DOF order) and
    SUPPORTED_MODEL_TYPES, provide the local X and Y axes and the rule for
    accepting a new node.

    Equality compares the ordered node sequence. The hash combines the nodes
    and the local origin; the derived list of supported nodal DOFs is cached
    against a snapshot of that hash and rebuilt only when it changes.
    """

    ELEMENT_TYPE: ElementType
    SUPPORTED_LOCAL_DOFS: Tuple[DegreeOfFreedom, ...] = ()
    SUPPORTED_MODEL_TYPES: FrozenSet[ModelType] = frozenset()

    def __init__(self):
        self._nodes: list = []
        self._nodal_dofs: Optional[Tuple[NodalDegreeOfFreedom, ...]] = None
        self._nodal_dofs_snapshot: Optional[int] = None

    @property
    def nodes(self) -> list:
        """A shallow copy of the element's nodes, in order."""
        return list(self._nodes)

    @property
    def origin(self) -> Point:
        """The origin of the local frame: the location of the first node."""
        if not self._nodes:
            raise GeometryError(f"{type(self).__name__} has no nodes, so no local origin.")
        return self._nodes[0].location

    @property
    @abstractmethod
    def local_x_axis(self) -> np.ndarray:
        """Unit vector of the local x axis, in global coordinates."""

    @property
    @abstractmethod
    def local_y_axis(self) -> np.ndarray:
        """Unit vector of the local y axis, in global coordinates."""

    @property
    def local_z_axis(self) -> np.ndarray:
        return normalized_cross(self.local_x_axis, self.local_y_axis)

    @classmethod
    def is_supported_model_type(cls, model_type: ModelType) -> bool:
        return model_type in cls.SUPPORTED_MODEL_TYPES

    @classmethod
    def is_supported_local_dof(cls, dof: DegreeOfFreedom) -> bool:
        """Whether the element has stiffness in ``dof`` of its LOCAL frame."""
        return dof in cls.SUPPORTED_LOCAL_DOFS

    @classmethod
    def supports_translation(cls) -> bool:
        return any(d.is_translation for d in cls.SUPPORTED_LOCAL_DOFS)

    @classmethod
    def supports_rotation(cls) -> bool:
        return any(d.is_rotation for d in cls.SUPPORTED_LOCAL_DOFS)

    @classmethod
    def global_dofs(cls) -> Tuple[DegreeOfFreedom, ...]:
        """Global DOFs exposed at every node of this element type, in DOF order."""
        dofs: Tuple[DegreeOfFreedom, ...] = ()
        if cls.supports_translation():
            dofs += TRANSLATIONS
        if cls.supports_rotation():
            dofs += ROTATIONS
        return dofs

    @property
    def supported_nodal_dofs(self) -> Tuple[NodalDegreeOfFreedom, ...]:
        """
        (node, dof) keys this element contributes stiffness to, node-major.

        Memoized: rebuilt only if the element's hash differs from the one
        recorded when the tuple was last built.
        """
        if self._nodal_dofs is None or self.is_dirty(self._nodal_dofs_snapshot):
            self._nodal_dofs = self._build_supported_nodal_dofs()
            self._nodal_dofs_snapshot = hash(self)
        return self._nodal_dofs

    def _build_supported_nodal_dofs(self) -> Tuple[NodalDegreeOfFreedom, ...]:
        dofs = self.global_dofs()
        return tuple(NodalDegreeOfFreedom(node, dof) for node in self._nodes for dof in dofs)

    def is_dirty(self, previous_hash: Optional[int]) -> bool:
        return previous_hash is None or hash(self) != previous_hash

    def rotation_matrix(self, tol: float = GEOMETRY_TOLERANCE) -> np.ndarray:
        """
        3×3 rotation from global to local components: rows are the local axes.

        The local y axis is re-orthogonalised against local x (y = z × x), so
        the result is orthonormal whenever x and y are independent.

        Raises:
        -------
        GeometryError
            If an axis has near-zero magnitude or the axes are parallel.
        """
        x = unit_vector(self.local_x_axis, tol, name="local x axis")
        y = unit_vector(self.local_y_axis, tol, name="local y axis")
        z = normalized_cross(x, y, tol)
        y = np.cross(z, x)
        R = np.vstack([x, y, z])
        if abs(np.linalg.det(R) - 1.0) > 1e-8:
            raise GeometryError(f"Local axes of {self!r} do not form a right-handed orthonormal frame.")
        return R

    def global_to_local(self, point: Point) -> Point:
        R = self.rotation_matrix()
        return Point.from_array(R @ (point.as_array() - self.origin.as_array()))

    def local_to_global(self, point: Point) -> Point:
        R = self.rotation_matrix()
        return Point.from_array(R.T @ point.as_array() + self.origin.as_array())

    def add_node(self, node) -> None:
        """
        Append a node to the element.

        Raises:
        -------
        ModelDefinitionError
            If the node is None, already part of this element, or rejected by
            the variant's placement rule.
        """
        require_not_none(node, "node")
        require(node not in self._nodes, f"{node} is already part of this element.")
        self._check_node_can_be_added(node)
        self._nodes.append(node)

    @abstractmethod
    def _check_node_can_be_added(self, node) -> None:
        """Raise ModelDefinitionError if ``node`` cannot be appended."""

    def __eq__(self, other):
        if not isinstance(other, Element):
            return NotImplemented
        return self._nodes == other._nodes

    def __hash__(self):
        origin = (self.origin.x, self.origin.y, self.origin.z) if self._nodes else None
        return hash((tuple(self._nodes), origin))

    def __repr__(self):
        if not self._nodes:
            return f"{type(self).__name__}(<no nodes>)"
        return f"{type(self).__name__}({', '.join(str(n) for n in self._nodes)})"


class LinearElement(Element):
    """A straight 2-node element with the line-element local frame rule."""

    def __init__(self, start, end):
        super().__init__()
        self.add_node(start)
        self.add_node(end)

    @property
    def start(self):
        return self._nodes[0]

    @property
    def end(self):
        return self._nodes[1]

    @property
    def length(self) -> float:
        return self.start.location.distance_to(self.end.location)

    @property
    def local_x_axis(self) -> np.ndarray:
        require(len(self._nodes) == 2, f"{type(self).__name__} needs two nodes to define its axis.")
        axis = self.end.location.as_array() - self.start.location.as_array()
        return unit_vector(axis, name=f"axis of {self!r} (zero length)")

    @property
    def local_y_axis(self) -> np.ndarray:
        x = self.local_x_axis
        if np.linalg.norm(np.cross(x, GLOBAL_Y)) < GEOMETRY_TOLERANCE:
            return normalized_cross(GLOBAL_X, x)
        return normalized_cross(x, GLOBAL_Y)

    def _check_node_can_be_added(self, node) -> None:
        require(
            len(self._nodes) < 2,
            f"{type(self).__name__} connects exactly two nodes; cannot add {node}.",
        )
        for existing in self._nodes:
            require(
                not existing.is_coincident(node),
                f"{node} is at the same position as {existing}; the element would have zero length.",
            )


_AXIAL_MODEL_TYPES = frozenset({
    ModelType.TRUSS_1D,
    ModelType.TRUSS_2D,
    ModelType.FRAME_2D,
    ModelType.TRUSS_3D,
    ModelType.FULL_3D,
})


class LinearConstantSpring(LinearElement):
    """Axial spring with a constant stiffness between two nodes."""

    ELEMENT_TYPE = ElementType.LINEAR_CONSTANT_SPRING
    SUPPORTED_LOCAL_DOFS = (DegreeOfFreedom.X,)
    SUPPORTED_MODEL_TYPES = _AXIAL_MODEL_TYPES

    def __init__(self, start, end, spring_constant: float):
        super().__init__(start, end)
        self.spring_constant = spring_constant


class LinearTruss(LinearElement):
    """Pin-ended bar carrying axial force only."""

    ELEMENT_TYPE = ElementType.LINEAR_TRUSS
    SUPPORTED_LOCAL_DOFS = (DegreeOfFreedom.X,)
    SUPPORTED_MODEL_TYPES = _AXIAL_MODEL_TYPES

    def __init__(self, start, end, material, section):
        super().__init__(start, end)
        self.material = material
        self.section = section


class Linear1DBeam(LinearElement):
    """
    Beam with shear and bending in its local x-y plane only.

    No axial or torsional stiffness: it is meant for beam-line models where
    the members lie along one axis.
    """

    ELEMENT_TYPE = ElementType.LINEAR_1D_BEAM
    SUPPORTED_LOCAL_DOFS = (DegreeOfFreedom.Y, DegreeOfFreedom.ZZ)
    SUPPORTED_MODEL_TYPES = frozenset({ModelType.BEAM_1D, ModelType.FRAME_2D})

    def __init__(self, start, end, material, section):
        super().__init__(start, end)
        self.material = material
        self.section = section


class Linear3DBeam(LinearElement):
    """Beam carrying axial force, torsion, and shear/moment about both axes."""

    ELEMENT_TYPE = ElementType.LINEAR_3D_BEAM
    SUPPORTED_LOCAL_DOFS = ALL_DOFS
    SUPPORTED_MODEL_TYPES = frozenset({ModelType.BEAM_1D, ModelType.FRAME_2D, ModelType.FULL_3D})

    def __init__(self, start, end, material, section):
        super().__init__(start, end)
        self.material = material
        self.section = section


ELEMENT_CLASSES: List[type] = [LinearConstantSpring, LinearTruss, Linear1DBeam, Linear3DBeam]
