import numpy as np
import pytest
from scipy import sparse

from stiffkit import MechanismError, SolverInputError
from stiffkit.geometry import KeyedMatrix
from stiffkit.kernel.solve import partition, rigid_body_dofs, solve_linear, zero_stiffness_dofs


def chain_K(k1=100.0, k2=100.0):
    return np.array([
        [ k1,     -k1,    0.0],
        [-k1, k1 + k2,    -k2],
        [0.0,     -k2,     k2],
    ])


def test_springs_in_series():
    K = chain_K()
    F = np.array([0.0, 0.0, 10.0])

    d, R, free = solve_linear(K, F, [0])

    np.testing.assert_allclose(d, [0.0, 0.1, 0.2])
    np.testing.assert_allclose(R, [-10.0, 0.0, 0.0], atol=1e-10)
    np.testing.assert_array_equal(free, [1, 2])


def test_prescribed_displacement():
    K = chain_K(k1=100.0, k2=0.0)[:2, :2]

    d, R, _ = solve_linear(K, np.zeros(2), [0], prescribed={1: 0.1})

    np.testing.assert_allclose(d, [0.0, 0.1])
    np.testing.assert_allclose(R, [-10.0, 10.0])


def test_sparse_path_matches_dense():
    K = chain_K(100.0, 250.0)
    F = np.array([0.0, 3.0, -4.0])

    d_dense, R_dense, _ = solve_linear(K, F, [0])
    d_sparse, R_sparse, _ = solve_linear(sparse.csr_matrix(K), F, [0])

    np.testing.assert_allclose(d_sparse, d_dense)
    np.testing.assert_allclose(R_sparse, R_dense, atol=1e-10)


def test_partition_blocks():
    K = np.arange(16, dtype=float).reshape(4, 4)
    system = partition(K, np.array([1.0, 2.0, 3.0, 4.0]), [1, 3])

    np.testing.assert_array_equal(system.free, [0, 2])
    np.testing.assert_array_equal(system.fixed, [1, 3])
    np.testing.assert_allclose(system.K_fc, [[1.0, 3.0], [9.0, 11.0]])
    np.testing.assert_allclose(system.F_c, [2.0, 4.0])
    assert not system.is_sparse


def test_partition_keyed_matrix():
    keys = ["a", "b", "c"]
    K = KeyedMatrix(keys, keys, sparse.csr_matrix(chain_K(100.0, 250.0)))
    system = partition(K, np.array([0.0, 3.0, -4.0]), [0])

    assert system.is_sparse
    np.testing.assert_allclose(system.K_ff.toarray(), [[350.0, -250.0], [-250.0, 250.0]])
    np.testing.assert_allclose(system.K_cf.toarray(), [[-100.0, 0.0]])

    with pytest.raises(SolverInputError, match="same keys"):
        partition(KeyedMatrix(keys, ["x", "y", "z"], chain_K()), np.zeros(3), [0])


def test_unconstrained_structure_is_a_mechanism():
    K = chain_K()

    with pytest.raises(MechanismError) as excinfo:
        solve_linear(K, np.zeros(3), [], labels=["a", "b", "c"])

    assert set(excinfo.value.dofs) == {"a", "b", "c"}
    assert "Implicated DOFs" in str(excinfo.value)


def test_zero_stiffness_dof_is_named():
    K = np.diag([1.0, 0.0, 2.0])

    with pytest.raises(MechanismError, match="no stiffness") as excinfo:
        solve_linear(K, np.zeros(3), [])

    assert excinfo.value.dofs == (1,)


def test_sparse_singular_system():
    K = sparse.csr_matrix(np.array([[1.0, -1.0], [-1.0, 1.0]]))

    with pytest.raises(MechanismError):
        solve_linear(K, np.array([1.0, 0.0]), [])


def test_load_vector_length_checked():
    with pytest.raises(SolverInputError):
        solve_linear(chain_K(), np.zeros(2), [0])


def test_fixed_index_out_of_range():
    with pytest.raises(SolverInputError, match="out of range"):
        solve_linear(chain_K(), np.zeros(3), [5])


def test_fully_constrained_system():
    d, R, free = solve_linear(chain_K(), np.array([1.0, 0.0, 0.0]), [0, 1, 2])

    np.testing.assert_allclose(d, 0.0)
    np.testing.assert_allclose(R, [-1.0, 0.0, 0.0])
    assert free.size == 0


def test_mode_localisation_helpers():
    np.testing.assert_array_equal(zero_stiffness_dofs(np.diag([1.0, 0.0])), [1])

    # two disconnected springs, only the second is grounded
    K = np.array([
        [ 1.0, -1.0, 0.0],
        [-1.0,  1.0, 0.0],
        [ 0.0,  0.0, 1.0],
    ])
    np.testing.assert_array_equal(rigid_body_dofs(K), [0, 1])
