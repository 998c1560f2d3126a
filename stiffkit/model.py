# stiffkit/model.py
"""
MODEL: Nodes, Repositories, Factories, Constraints and Forces
=============================================================

PURPOSE:
--------
A FiniteElementModel owns everything an analysis needs:

    nodes          NodeRepository     (creation order = matrix order)
    elements       ElementRepository
    constraints    {(node, dof): prescribed displacement}
    forces         {node: ForceVector}

and exposes factories that validate what they build against the model's
ModelType (see stiffkit.kernel.dof.ModelType):

    model = FiniteElementModel(ModelType.BEAM_1D)
    n1 = model.node_factory.create(0.0)
    n2 = model.node_factory.create(1.0)
    model.element_factory.create_linear_3d_beam(n1, n2, material, section)
    model.constrain_node(n1, DegreeOfFreedom.Z)
    model.apply_force_to_node(model.force_factory.create_for_1d_beam(-10.0, 0.0), n2)

Nodes are identified by the id their factory assigns. Two nodes at the same
coordinates are distinct nodes; ``Node.is_coincident`` asks the geometric
question explicitly.
"""

import itertools
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .elements import (
    Element,
    Linear1DBeam,
    Linear3DBeam,
    LinearConstantSpring,
    LinearTruss,
)
from .errors import ModelDefinitionError, ModelTypeError
from .geometry import GEOMETRY_TOLERANCE, Point
from .kernel.dof import ALL_DOFS, DegreeOfFreedom, DOFVector, ModelType, NodalDegreeOfFreedom
from .kernel.validate import require, require_finite_vector, require_model_type, require_not_none

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Node:
    """
    A node (joint) in 3D space.

    Parameters:
    -----------
    id : int
        Identifier assigned by the node factory. Equality and hashing use it
        alone.
    x, y, z : float
        Location in the global frame. Never change after creation.

    Examples:
    ---------
    >>> a = Node(0, 1.0, 0.0, 0.0)
    >>> b = Node(1, 1.0, 0.0, 0.0)
    >>> a == b, a.is_coincident(b)
    (False, True)
    """
    id: int
    x: float = field(default=0.0, compare=False)
    y: float = field(default=0.0, compare=False)
    z: float = field(default=0.0, compare=False)

    @property
    def location(self) -> Point:
        return Point(self.x, self.y, self.z)

    def is_coincident(self, other: "Node", tol: float = GEOMETRY_TOLERANCE) -> bool:
        return self.location.distance_to(other.location) <= tol

    def __str__(self):
        return f"node {self.id} {self.location}"


class ForceVector(DOFVector):
    """Applied nodal force/moment, keyed by all six DOFs."""

    def __init__(self, values=None):
        super().__init__(ALL_DOFS, values)

    def __add__(self, other: "ForceVector") -> "ForceVector":
        if not isinstance(other, ForceVector):
            return NotImplemented
        return ForceVector(self.array + other.array)


class NodeRepository:
    """Ordered collection of the model's nodes."""

    def __init__(self):
        self._nodes: Dict[int, Node] = {}

    def add(self, node: Node) -> None:
        require_not_none(node, "node")
        require(node.id not in self._nodes, f"A node with id {node.id} already exists.")
        self._nodes[node.id] = node

    def get(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def __contains__(self, node) -> bool:
        return isinstance(node, Node) and self._nodes.get(node.id) is node

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


class ElementRepository:
    """Ordered collection of the model's elements."""

    def __init__(self):
        self._elements: List[Element] = []

    def add(self, element: Element) -> None:
        require_not_none(element, "element")
        require(
            not any(e is element for e in self._elements),
            f"{element!r} is already in the model.",
        )
        self._elements.append(element)

    def remove(self, element: Element) -> None:
        for i, e in enumerate(self._elements):
            if e is element:
                del self._elements[i]
                return
        raise ModelDefinitionError(f"{element!r} is not in the model.")

    def elements_connected_to(self, node: Node) -> List[Element]:
        return [e for e in self._elements if node in e.nodes]

    def __iter__(self) -> Iterator[Element]:
        return iter(list(self._elements))

    def __len__(self) -> int:
        return len(self._elements)


class NodeFactory:
    """
    Creates nodes with sequential ids and checks their placement:
    1D models lie on the global X axis, 2D models in the global XZ plane.
    """

    def __init__(self, model_type: ModelType, repository: Optional[NodeRepository] = None):
        self.model_type = model_type
        self.repository = repository
        self._ids = itertools.count()

    def create(self, x: float, y: float = 0.0, z: float = 0.0) -> Node:
        x, y, z = require_finite_vector([x, y, z], "Node coordinates")
        dims = self.model_type.dimensions
        if dims == 1 and (y != 0.0 or z != 0.0):
            raise ModelTypeError(
                f"Nodes of a {self.model_type.name} model must lie on the X axis, got ({x}, {y}, {z})."
            )
        if dims == 2 and y != 0.0:
            raise ModelTypeError(
                f"Nodes of a {self.model_type.name} model must lie in the XZ plane, got ({x}, {y}, {z})."
            )
        node = Node(next(self._ids), float(x), float(y), float(z))
        if self.repository is not None:
            self.repository.add(node)
        return node

    def create_for_truss(self, x: float, z: float) -> Node:
        """Node in the XZ plane, as used by 2D truss and frame models."""
        return self.create(x, 0.0, z)


class ElementFactory:
    """Creates elements, checking the variant is legal for the model type."""

    def __init__(
        self,
        model_type: ModelType,
        repository: Optional[ElementRepository] = None,
        nodes: Optional[NodeRepository] = None,
    ):
        self.model_type = model_type
        self.repository = repository
        self.nodes = nodes

    def _check(self, element_class, *nodes) -> None:
        require_model_type(
            element_class.is_supported_model_type(self.model_type),
            f"{element_class.__name__} elements",
            self.model_type,
        )
        if self.nodes is not None:
            for node in nodes:
                require_not_none(node, "node")
                require(node in self.nodes, f"{node} is not part of this model.")

    def _register(self, element: Element) -> Element:
        if self.repository is not None:
            self.repository.add(element)
        return element

    def create_linear_constant_spring(self, start: Node, end: Node, spring_constant: float) -> LinearConstantSpring:
        self._check(LinearConstantSpring, start, end)
        return self._register(LinearConstantSpring(start, end, spring_constant))

    def create_linear_truss(self, start: Node, end: Node, material, section) -> LinearTruss:
        self._check(LinearTruss, start, end)
        return self._register(LinearTruss(start, end, material, section))

    def create_linear_1d_beam(self, start: Node, end: Node, material, section) -> Linear1DBeam:
        self._check(Linear1DBeam, start, end)
        return self._register(Linear1DBeam(start, end, material, section))

    def create_linear_3d_beam(self, start: Node, end: Node, material, section) -> Linear3DBeam:
        self._check(Linear3DBeam, start, end)
        return self._register(Linear3DBeam(start, end, material, section))


class ForceFactory:
    """Creates force vectors, rejecting components the model type does not analyse."""

    def __init__(self, model_type: ModelType):
        self.model_type = model_type

    def create(self, x: float = 0.0, y: float = 0.0, z: float = 0.0,
               xx: float = 0.0, yy: float = 0.0, zz: float = 0.0) -> ForceVector:
        values = [x, y, z, xx, yy, zz]
        for dof, value in zip(ALL_DOFS, values):
            if value != 0.0 and not self.model_type.allows(dof):
                raise ModelTypeError(
                    f"A {self.model_type.name} model cannot carry a force component along {dof.name}."
                )
        return ForceVector(values)

    def create_for_truss(self, x: float, z: float) -> ForceVector:
        return self.create(x=x, z=z)

    def create_for_1d_beam(self, z: float, yy: float) -> ForceVector:
        """Transverse force (Z) and bending moment (about YY) for beam-line models."""
        return self.create(z=z, yy=yy)


@dataclass(frozen=True)
class ModelSnapshot:
    """An immutable copy of the model taken when an analysis starts."""
    model_type: ModelType
    nodes: Tuple[Node, ...]
    elements: Tuple[Element, ...]
    constraints: Dict[NodalDegreeOfFreedom, float]
    forces: Dict[Node, ForceVector]


class FiniteElementModel:
    """
    The aggregate a solver analyses: nodes, elements, constraints and forces.

    The model may be edited freely until an analysis starts; the solver works
    on ``snapshot()`` and never sees later edits.
    """

    def __init__(self, model_type: ModelType = ModelType.FULL_3D):
        self.model_type = model_type
        self.nodes = NodeRepository()
        self.elements = ElementRepository()
        self.node_factory = NodeFactory(model_type, self.nodes)
        self.element_factory = ElementFactory(model_type, self.elements, self.nodes)
        self.force_factory = ForceFactory(model_type)
        self._constraints: Dict[NodalDegreeOfFreedom, float] = {}
        self._forces: Dict[Node, ForceVector] = {}

    def _require_node(self, node: Node) -> None:
        require_not_none(node, "node")
        require(node in self.nodes, f"{node} is not part of this model.")

    def constrain_node(self, node: Node, dof: DegreeOfFreedom, value: float = 0.0) -> None:
        """
        Hold ``dof`` of ``node`` at ``value`` (0 for a fixed support).

        Raises:
        -------
        ModelTypeError
            If the model type does not analyse ``dof``.
        """
        self._require_node(node)
        require_model_type(self.model_type.allows(dof), f"Constraints on {dof.name}", self.model_type)
        self._constraints[NodalDegreeOfFreedom(node, dof)] = float(value)

    def unconstrain_node(self, node: Node, dof: DegreeOfFreedom) -> None:
        self._constraints.pop(NodalDegreeOfFreedom(node, dof), None)

    def is_constrained(self, node: Node, dof: DegreeOfFreedom) -> bool:
        return NodalDegreeOfFreedom(node, dof) in self._constraints

    def prescribed_displacement(self, node: Node, dof: DegreeOfFreedom) -> float:
        return self._constraints.get(NodalDegreeOfFreedom(node, dof), 0.0)

    @property
    def constrained_nodal_dofs(self) -> List[NodalDegreeOfFreedom]:
        return sorted(self._constraints)

    def apply_force_to_node(self, force: ForceVector, node: Node) -> None:
        """Add ``force`` to whatever is already applied at ``node``."""
        require_not_none(force, "force")
        self._require_node(node)
        for dof in ALL_DOFS:
            if force[dof] != 0.0 and not self.model_type.allows(dof):
                raise ModelTypeError(
                    f"A {self.model_type.name} model cannot carry a force component along {dof.name}."
                )
        existing = self._forces.get(node)
        self._forces[node] = force if existing is None else existing + force

    def force_on(self, node: Node) -> ForceVector:
        return self._forces.get(node, ForceVector())

    def remove_element(self, element: Element) -> None:
        self.elements.remove(element)

    def snapshot(self) -> ModelSnapshot:
        return ModelSnapshot(
            model_type=self.model_type,
            nodes=tuple(self.nodes),
            elements=tuple(self.elements),
            constraints=dict(self._constraints),
            forces=dict(self._forces),
        )

    def __repr__(self):
        return (f"FiniteElementModel({self.model_type.name}, {len(self.nodes)} nodes, "
                f"{len(self.elements)} elements, {len(self._constraints)} constraints)")
