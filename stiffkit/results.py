# stiffkit/results.py
"""
RESULTS: Displacements and Reactions per Node
=============================================

An AnalysisResults is only ever produced by a successful solve; a failed
solve raises instead of returning partial results.

Per-node vectors contain exactly the DOFs of that node that are part of the
analysis (supported by an element AND analysed by the model type). Looking up
any other DOF raises UnsupportedDegreeOfFreedomError; looking up a node that
is not in the model raises UnknownNodeError.

    results.displacement(node2).z     # or [DegreeOfFreedom.Z]
    results.reaction(node1).yy        # 0.0 at DOFs that are not constrained
"""

from dataclasses import dataclass
from typing import Dict, List, Tuple

import pandas as pd

from .errors import UnknownNodeError
from .geometry import KeyedVector
from .kernel.dof import DOFVector, NodalDegreeOfFreedom


class DisplacementVector(DOFVector):
    """Displacements (translations and rotations) of one node."""
    pass


class ReactionVector(DOFVector):
    """Support reactions (forces and moments) at one node."""
    pass


@dataclass(frozen=True)
class AnalysisResults:
    """
    Stores the results of a linear static analysis.

    Attributes:
        model_type: ModelType of the analysed model
        nodes: Nodes of the analysed model, in creation order
        displacements: Global displacement vector keyed by NodalDegreeOfFreedom
            (prescribed values at constrained DOFs)
        reactions: Global reaction vector keyed by NodalDegreeOfFreedom
            (zero at free DOFs)
        constrained: Keys that were constrained
    """
    model_type: object
    nodes: Tuple
    displacements: KeyedVector
    reactions: KeyedVector
    constrained: Tuple[NodalDegreeOfFreedom, ...]

    def _node_keys(self, node) -> List[NodalDegreeOfFreedom]:
        if not any(n is node for n in self.nodes):
            raise UnknownNodeError(f"{node} is not part of the analysed model.")
        return [k for k in self.displacements if k.node == node]

    def displacement(self, node) -> DisplacementVector:
        keys = self._node_keys(node)
        return DisplacementVector([k.dof for k in keys], [self.displacements[k] for k in keys])

    def reaction(self, node) -> ReactionVector:
        keys = self._node_keys(node)
        return ReactionVector([k.dof for k in keys], [self.reactions[k] for k in keys])

    def is_constrained(self, node, dof) -> bool:
        return NodalDegreeOfFreedom(node, dof) in self.constrained

    def to_dataframe(self) -> pd.DataFrame:
        """
        One row per analysed nodal DOF.

        Columns: node, x, y, z, dof, constrained, displacement, reaction
        """
        constrained = set(self.constrained)
        rows: List[Dict] = []
        for key in self.displacements:
            rows.append({
                "node": key.node.id,
                "x": key.node.x,
                "y": key.node.y,
                "z": key.node.z,
                "dof": key.dof.name,
                "constrained": key in constrained,
                "displacement": self.displacements[key],
                "reaction": self.reactions[key],
            })
        columns = ["node", "x", "y", "z", "dof", "constrained", "displacement", "reaction"]
        return pd.DataFrame(rows, columns=columns)
