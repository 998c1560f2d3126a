# stiffkit/assembly.py
"""Model-level assembly: keyed global stiffness matrix and load vector (uses kernel internally)."""

import logging
from typing import Iterable, List, Mapping, Sequence, Tuple

import numpy as np

from .elements import Element
from .errors import ModelDefinitionError
from .geometry import KeyedMatrix, KeyedVector
from .kernel.assemble import assemble_global_F, assemble_global_K, assemble_global_K_sparse
from .kernel.dof import ALL_DOFS, DOFIndex, ModelType, NodalDegreeOfFreedom
from .stiffness import global_stiffness

logger = logging.getLogger(__name__)


def build_dof_index(nodes: Sequence, elements: Iterable[Element], model_type: ModelType) -> DOFIndex:
    """
    The ordered key set of the global system.

    Keys are the union of every element's supported nodal DOFs, restricted to
    the DOFs the model type analyses; ordered by node (creation order), then
    by DOF.
    """
    supported = set()
    for element in elements:
        supported.update(element.supported_nodal_dofs)
    keys = [
        NodalDegreeOfFreedom(node, dof)
        for node in nodes
        for dof in ALL_DOFS
        if model_type.allows(dof) and NodalDegreeOfFreedom(node, dof) in supported
    ]
    return DOFIndex.from_keys(keys)


def element_contributions(elements: Iterable[Element]) -> List[Tuple[List[NodalDegreeOfFreedom], np.ndarray]]:
    """One independent (keys, ke_global) buffer per element."""
    return [global_stiffness(element) for element in elements]


def assemble_global_stiffness(
    nodes: Sequence,
    elements: Sequence[Element],
    model_type: ModelType,
    sparse: bool = False,
) -> KeyedMatrix:
    """
    Assemble every element's global stiffness into one keyed matrix.

    Parameters:
    -----------
    nodes : Sequence[Node]
        All model nodes, in creation order (fixes the row order)
    elements : Sequence[Element]
        All model elements
    model_type : ModelType
        Element rows/columns for DOFs the model type does not analyse are dropped
    sparse : bool
        Back the result with a scipy.sparse CSR matrix instead of numpy

    Returns:
    --------
    KeyedMatrix
        Square, symmetric; row and column keys are the DOF index keys
    """
    index = build_dof_index(nodes, elements, model_type)
    contributions = [
        (index.element_dof_map(keys), ke)
        for keys, ke in element_contributions(elements)
    ]
    if sparse:
        K = assemble_global_K_sparse(index.ndof, contributions)
    else:
        K = assemble_global_K(index.ndof, contributions)
    logger.debug("Assembled %d elements into a %dx%d %s stiffness matrix",
                 len(contributions), index.ndof, index.ndof, "sparse" if sparse else "dense")
    return KeyedMatrix(index.keys, index.keys, K)


def assemble_force_vector(index: DOFIndex, forces: Mapping) -> KeyedVector:
    """
    Scatter nodal ForceVectors into a vector over the DOF index keys.

    Raises:
    -------
    ModelDefinitionError
        If a non-zero component acts on a (node, dof) no element supports:
        nothing in the model could carry it.
    """
    contributions = []
    for node, force in forces.items():
        keys = [NodalDegreeOfFreedom(node, dof) for dof in ALL_DOFS]
        dof_map = index.element_dof_map(keys)
        values = force.array
        unsupported = [str(k) for k, i, v in zip(keys, dof_map, values) if i < 0 and v != 0.0]
        if unsupported:
            raise ModelDefinitionError(
                f"Forces applied to degrees of freedom no element supports: {', '.join(unsupported)}."
            )
        contributions.append((dof_map, values))
    return KeyedVector(index.keys, assemble_global_F(index.ndof, contributions))
