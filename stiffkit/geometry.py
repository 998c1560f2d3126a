# stiffkit/geometry.py
"""
GEOMETRY AND KEYED CONTAINERS
=============================

PURPOSE:
--------
Leaf module with the small amount of vector geometry the elements need, and
the keyed containers every other module indexes by degree-of-freedom labels:

    Point        an immutable location (x, y, z)
    KeyedVector  a 1D numpy array whose entries are addressed by keys
    KeyedMatrix  a 2D (dense numpy or scipy.sparse) matrix addressed by
                 row keys and column keys

The solver works on plain arrays internally. Keys only appear at the
boundaries: when assembling element contributions and when handing results
back to callers.
"""

from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, Iterator, Mapping, Sequence, Tuple

import numpy as np
from scipy import sparse

from .errors import GeometryError

GEOMETRY_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Point:
    """An immutable point in the global Cartesian frame."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "Point":
        x, y, z = (float(v) for v in values)
        return cls(x, y, z)

    def distance_to(self, other: "Point") -> float:
        return float(np.linalg.norm(other.as_array() - self.as_array()))

    def __str__(self):
        return f"[{self.x}, {self.y}, {self.z}]"


def is_near_zero(vector: np.ndarray, tol: float = GEOMETRY_TOLERANCE) -> bool:
    """True if the Euclidean norm of ``vector`` is below ``tol``."""
    return float(np.linalg.norm(vector)) < tol


def unit_vector(vector: np.ndarray, tol: float = GEOMETRY_TOLERANCE, name: str = "vector") -> np.ndarray:
    """
    Normalize a vector to unit length.

    Raises:
    -------
    GeometryError
        If the vector has (near-)zero magnitude. A degenerate direction is
        never replaced by a default.
    """
    vector = np.asarray(vector, dtype=float)
    norm = float(np.linalg.norm(vector))
    if norm < tol:
        raise GeometryError(f"Cannot normalize {name}: magnitude {norm:.3e} is (near) zero.")
    return vector / norm


def normalized_cross(a: np.ndarray, b: np.ndarray, tol: float = GEOMETRY_TOLERANCE) -> np.ndarray:
    """normalize(a × b); GeometryError if a and b are parallel or either is zero."""
    c = np.cross(np.asarray(a, dtype=float), np.asarray(b, dtype=float))
    if is_near_zero(c, tol):
        raise GeometryError(
            f"Cross product of {np.asarray(a).tolist()} and {np.asarray(b).tolist()} is (near) zero: "
            "the axes are parallel or one of them is zero."
        )
    return c / np.linalg.norm(c)


class KeyedVector(Mapping):
    """
    A vector of floats addressed by hashable keys.

    Keys keep their insertion order, which is also the order of ``array``.

    Examples:
    ---------
    >>> v = KeyedVector(['a', 'b'], [1.0, 2.0])
    >>> v['b']
    2.0
    >>> v.subvector(["b"]).array
    array([2.])
    """

    missing_key_error = KeyError

    def __init__(self, keys: Iterable[Hashable], values: Iterable[float] = None):
        self._keys: Tuple[Hashable, ...] = tuple(keys)
        self._index: Dict[Hashable, int] = {k: i for i, k in enumerate(self._keys)}
        if len(self._index) != len(self._keys):
            raise ValueError("KeyedVector keys must be unique.")
        if values is None:
            self._values = np.zeros(len(self._keys), dtype=float)
        else:
            self._values = np.array(values, dtype=float).reshape(-1)
        if self._values.shape != (len(self._keys),):
            raise ValueError(
                f"KeyedVector has {len(self._keys)} keys but {self._values.shape[0]} values."
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping, keys: Iterable[Hashable] = None):
        """Build from a mapping; ``keys`` fixes the order and fills missing entries with 0."""
        if keys is None:
            keys = list(mapping.keys())
        keys = list(keys)
        return cls(keys, [float(mapping.get(k, 0.0)) for k in keys])

    @property
    def array(self) -> np.ndarray:
        return self._values.copy()

    def index_of(self, key: Hashable) -> int:
        try:
            return self._index[key]
        except KeyError:
            raise self.missing_key_error(f"{key} is not a key of this vector.") from None

    def subvector(self, keys: Iterable[Hashable]) -> "KeyedVector":
        keys = list(keys)
        return KeyedVector(keys, self._values[[self.index_of(k) for k in keys]])

    def __getitem__(self, key: Hashable) -> float:
        return float(self._values[self.index_of(key)])

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key) -> bool:
        return key in self._index

    def __repr__(self):
        items = ", ".join(f"{k}: {v:.6g}" for k, v in zip(self._keys, self._values))
        return f"{type(self).__name__}({{{items}}})"


class KeyedMatrix:
    """
    A matrix addressed by row keys and column keys.

    The backing store is either a dense ``numpy.ndarray`` or any
    ``scipy.sparse`` matrix; callers only go through keys and ``submatrix``,
    so the storage can change without changing the contract.
    """

    def __init__(self, row_keys: Iterable[Hashable], col_keys: Iterable[Hashable], data=None):
        self.row_keys: Tuple[Hashable, ...] = tuple(row_keys)
        self.col_keys: Tuple[Hashable, ...] = tuple(col_keys)
        self._row_index = {k: i for i, k in enumerate(self.row_keys)}
        self._col_index = {k: i for i, k in enumerate(self.col_keys)}
        if len(self._row_index) != len(self.row_keys) or len(self._col_index) != len(self.col_keys):
            raise ValueError("KeyedMatrix keys must be unique.")
        shape = (len(self.row_keys), len(self.col_keys))
        if data is None:
            data = np.zeros(shape, dtype=float)
        elif not sparse.issparse(data):
            data = np.asarray(data, dtype=float)
        if data.shape != shape:
            raise ValueError(f"KeyedMatrix data shape {data.shape} does not match keys {shape}.")
        self.data = data

    @property
    def shape(self) -> Tuple[int, int]:
        return self.data.shape

    @property
    def is_sparse(self) -> bool:
        return sparse.issparse(self.data)

    def row_index(self, key: Hashable) -> int:
        return self._row_index[key]

    def col_index(self, key: Hashable) -> int:
        return self._col_index[key]

    def __getitem__(self, keys: Tuple[Hashable, Hashable]) -> float:
        row, col = keys
        return float(self.data[self._row_index[row], self._col_index[col]])

    def submatrix(self, rows: Sequence[Hashable], cols: Sequence[Hashable]):
        """Block of the matrix for the given keys, in the storage type of the matrix."""
        r = np.array([self._row_index[k] for k in rows], dtype=int)
        c = np.array([self._col_index[k] for k in cols], dtype=int)
        if self.is_sparse:
            return self.data.tocsr()[r, :][:, c]
        return self.data[np.ix_(r, c)]

    def to_dense(self) -> np.ndarray:
        if self.is_sparse:
            return self.data.toarray()
        return np.array(self.data, dtype=float)

    def is_symmetric(self, rtol: float = 1e-10, atol: float = 1e-12) -> bool:
        if self.row_keys != self.col_keys:
            return False
        dense = self.to_dense()
        return bool(np.allclose(dense, dense.T, rtol=rtol, atol=atol))

    def __repr__(self):
        storage = "sparse" if self.is_sparse else "dense"
        return f"KeyedMatrix({self.shape[0]}x{self.shape[1]}, {storage})"
