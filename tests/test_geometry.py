import numpy as np
import pytest
from scipy import sparse

from stiffkit import GeometryError
from stiffkit.geometry import KeyedMatrix, KeyedVector, Point, normalized_cross, unit_vector


def test_point_distance_and_str():
    a = Point(0.0, 0.0, 0.0)
    b = Point(3.0, 4.0, 0.0)

    assert a.distance_to(b) == pytest.approx(5.0)
    assert str(b) == "[3.0, 4.0, 0.0]"
    assert Point.from_array(b.as_array()) == b


def test_unit_vector_rejects_zero():
    np.testing.assert_allclose(unit_vector([0.0, 0.0, 2.0]), [0.0, 0.0, 1.0])
    with pytest.raises(GeometryError, match="near"):
        unit_vector([0.0, 0.0, 0.0])


def test_normalized_cross_rejects_parallel_axes():
    np.testing.assert_allclose(normalized_cross([1, 0, 0], [0, 2, 0]), [0.0, 0.0, 1.0])
    with pytest.raises(GeometryError, match="parallel"):
        normalized_cross([1.0, 0.0, 0.0], [-3.0, 0.0, 0.0])


class TestKeyedVector:

    def test_lookup_and_order(self):
        v = KeyedVector(["a", "b", "c"], [1.0, 2.0, 3.0])

        assert v["b"] == 2.0
        assert list(v) == ["a", "b", "c"]
        assert len(v) == 3
        assert "c" in v and "d" not in v
        np.testing.assert_allclose(v.subvector(["c", "a"]).array, [3.0, 1.0])

    def test_array_is_a_copy(self):
        v = KeyedVector(["a"], [1.0])
        v.array[0] = 99.0
        assert v["a"] == 1.0

    def test_missing_key(self):
        v = KeyedVector(["a"])
        assert v["a"] == 0.0
        with pytest.raises(KeyError):
            v["z"]

    def test_from_mapping_fills_zeros(self):
        v = KeyedVector.from_mapping({"b": 2.0}, keys=["a", "b"])
        np.testing.assert_allclose(v.array, [0.0, 2.0])

    def test_rejects_bad_input(self):
        with pytest.raises(ValueError):
            KeyedVector(["a", "a"])
        with pytest.raises(ValueError):
            KeyedVector(["a", "b"], [1.0])


class TestKeyedMatrix:

    def test_dense_lookup_and_submatrix(self):
        m = KeyedMatrix(["r0", "r1"], ["c0", "c1"], [[1.0, 2.0], [3.0, 4.0]])

        assert m["r1", "c0"] == 3.0
        assert not m.is_sparse
        np.testing.assert_allclose(m.submatrix(["r1"], ["c1", "c0"]), [[4.0, 3.0]])

    def test_sparse_backing(self):
        data = sparse.csr_matrix(np.array([[2.0, -1.0], [-1.0, 2.0]]))
        m = KeyedMatrix(["a", "b"], ["a", "b"], data)

        assert m.is_sparse
        assert m["a", "b"] == -1.0
        assert m.is_symmetric()
        np.testing.assert_allclose(m.to_dense(), [[2.0, -1.0], [-1.0, 2.0]])
        assert sparse.issparse(m.submatrix(["a"], ["a", "b"]))

    def test_shape_must_match_keys(self):
        with pytest.raises(ValueError):
            KeyedMatrix(["a"], ["a", "b"], np.zeros((2, 2)))
