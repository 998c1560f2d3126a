import numpy as np
import pytest
from scipy import sparse

from stiffkit import DegreeOfFreedom, ModelDefinitionError, ModelType, Node
from stiffkit.assembly import assemble_force_vector, assemble_global_stiffness, build_dof_index
from stiffkit.catalog import STEEL, SolidRectangle
from stiffkit.elements import Linear3DBeam, LinearConstantSpring, LinearTruss
from stiffkit.kernel.assemble import assemble_global_F, assemble_global_K, assemble_global_K_sparse
from stiffkit.kernel.dof import NodalDegreeOfFreedom
from stiffkit.model import ForceVector

D = DegreeOfFreedom
SECTION = SolidRectangle(0.5, 0.1)


def spring_chain_contributions(k1=100.0, k2=300.0):
    ke1 = k1 * np.array([[1.0, -1.0], [-1.0, 1.0]])
    ke2 = k2 * np.array([[1.0, -1.0], [-1.0, 1.0]])
    return [([0, 1], ke1), ([1, 2], ke2)]


def test_assemble_springs_in_series():
    K = assemble_global_K(3, spring_chain_contributions())

    expected = np.array([
        [ 100.0, -100.0,    0.0],
        [-100.0,  400.0, -300.0],
        [   0.0, -300.0,  300.0],
    ])
    np.testing.assert_allclose(K, expected)


def test_negative_dof_map_entries_are_dropped():
    ke = np.array([[1.0, 2.0], [2.0, 5.0]])
    K = assemble_global_K(1, [([-1, 0], ke)])
    np.testing.assert_allclose(K, [[5.0]])


def test_sparse_matches_dense():
    contributions = spring_chain_contributions()
    K_dense = assemble_global_K(3, contributions)
    K_sparse = assemble_global_K_sparse(3, contributions)

    assert sparse.issparse(K_sparse)
    np.testing.assert_allclose(K_sparse.toarray(), K_dense)


def test_sparse_with_no_contributions():
    K = assemble_global_K_sparse(2, [])
    assert K.shape == (2, 2)
    assert K.nnz == 0


def test_assemble_load_vector():
    F = assemble_global_F(4, [([0, 2], np.array([1.0, -5.0])), ([2, -1], np.array([2.0, 7.0]))])
    np.testing.assert_allclose(F, [1.0, 0.0, -3.0, 0.0])


class TestModelAssembly:

    def test_dof_index_filtered_by_model_type(self):
        a, b = Node(0, 0.0, 0.0, 0.0), Node(1, 2.0, 0.0, 1.0)
        beam = Linear3DBeam(a, b, STEEL, SECTION)

        index = build_dof_index([a, b], [beam], ModelType.FRAME_2D)

        assert index.keys == (
            NodalDegreeOfFreedom(a, D.X),
            NodalDegreeOfFreedom(a, D.Z),
            NodalDegreeOfFreedom(a, D.YY),
            NodalDegreeOfFreedom(b, D.X),
            NodalDegreeOfFreedom(b, D.Z),
            NodalDegreeOfFreedom(b, D.YY),
        )

    def test_dof_index_only_has_supported_dofs(self):
        """A truss node in a FULL_3D model has no rotational rows."""
        a, b, c = Node(0, 0.0, 0.0, 0.0), Node(1, 1.0, 0.0, 0.0), Node(2, 5.0, 5.0, 5.0)
        truss = LinearTruss(a, b, STEEL, SECTION)

        index = build_dof_index([a, b, c], [truss], ModelType.FULL_3D)

        assert index.ndof == 6
        assert NodalDegreeOfFreedom(a, D.XX) not in index
        assert index.node_dofs(c) == []

    def test_global_stiffness_keys_and_values(self):
        a, b = Node(0, 0.0, 0.0, 0.0), Node(1, 1.0, 0.0, 0.0)
        spring = LinearConstantSpring(a, b, 250.0)

        K = assemble_global_stiffness([a, b], [spring], ModelType.TRUSS_1D)

        assert K.shape == (2, 2)
        assert K[NodalDegreeOfFreedom(a, D.X), NodalDegreeOfFreedom(b, D.X)] == pytest.approx(-250.0)
        assert K[NodalDegreeOfFreedom(b, D.X), NodalDegreeOfFreedom(b, D.X)] == pytest.approx(250.0)

    def test_shared_node_superposition(self):
        a, b, c = Node(0, 0.0, 0.0, 0.0), Node(1, 1.0, 0.0, 0.0), Node(2, 3.0, 0.0, 0.0)
        springs = [LinearConstantSpring(a, b, 100.0), LinearConstantSpring(b, c, 300.0)]

        dense = assemble_global_stiffness([a, b, c], springs, ModelType.TRUSS_1D)
        sparse_K = assemble_global_stiffness([a, b, c], springs, ModelType.TRUSS_1D, sparse=True)

        assert dense[NodalDegreeOfFreedom(b, D.X), NodalDegreeOfFreedom(b, D.X)] == pytest.approx(400.0)
        assert sparse_K.is_sparse
        np.testing.assert_allclose(sparse_K.to_dense(), dense.to_dense())

    def test_force_vector_scattered_by_key(self):
        a, b = Node(0, 0.0, 0.0, 0.0), Node(1, 1.0, 0.0, 0.0)
        index = build_dof_index([a, b], [LinearConstantSpring(a, b, 1.0)], ModelType.TRUSS_1D)

        F = assemble_force_vector(index, {b: ForceVector([7.0, 0, 0, 0, 0, 0])})

        assert F[NodalDegreeOfFreedom(b, D.X)] == 7.0
        assert F[NodalDegreeOfFreedom(a, D.X)] == 0.0

    def test_force_on_unsupported_dof_rejected(self):
        a, b = Node(0, 0.0, 0.0, 0.0), Node(1, 1.0, 0.0, 0.0)
        index = build_dof_index([a, b], [LinearTruss(a, b, STEEL, SECTION)], ModelType.FULL_3D)

        with pytest.raises(ModelDefinitionError, match="node 1 XX"):
            assemble_force_vector(index, {b: ForceVector([0, 0, 0, 5.0, 0, 0])})
