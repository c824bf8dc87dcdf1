"""Symmetric matrices stored as a packed upper triangle.

Row ``i`` of the upper triangle, ``H[i, i:]``, occupies the slice
``data[offset(i):offset(i) + n - i]`` with ``offset(i) = i*n - i*(i-1)/2``.
The full matrix therefore needs ``n*(n+1)/2`` doubles instead of ``n*n``.
All symmetric index arithmetic lives in this module.
"""

from __future__ import annotations

import numpy as np


def packed_size(n: int) -> int:
    """Number of stored entries for an ``n x n`` symmetric matrix."""
    return n * (n + 1) // 2


class PackedSymmetricMatrix:
    """
    Symmetric ``n x n`` matrix backed by its row-major packed upper triangle.

    Parameters
    ----------
    n:
        Matrix dimension.
    data:
        Optional packed entries of length ``n*(n+1)/2``. Copied.

    Example
    -------
    >>> h = PackedSymmetricMatrix.identity(3)
    >>> h.set(0, 2, 0.5)
    >>> h.get(2, 0)
    0.5
    """

    def __init__(self, n: int, data: np.ndarray | None = None):
        if n < 0:
            raise ValueError(f"n must be non-negative, got {n}")
        self.n = int(n)
        size = packed_size(self.n)
        if data is None:
            self.data = np.zeros(size, dtype=float)
        else:
            data = np.asarray(data, dtype=float).reshape(-1)
            if data.size != size:
                raise ValueError(f"Packed data for n={n} needs {size} entries, got {data.size}")
            self.data = data.copy()

    @classmethod
    def identity(cls, n: int) -> "PackedSymmetricMatrix":
        mat = cls(n)
        mat.set_identity()
        return mat

    @classmethod
    def from_dense(cls, dense: np.ndarray) -> "PackedSymmetricMatrix":
        """Pack the upper triangle of a square matrix (the lower one is ignored)."""
        dense = np.asarray(dense, dtype=float)
        if dense.ndim != 2 or dense.shape[0] != dense.shape[1]:
            raise ValueError(f"Expected a square matrix, got shape {dense.shape}")
        n = dense.shape[0]
        return cls(n, dense[np.triu_indices(n)])

    def offset(self, i: int) -> int:
        """Packed index of the diagonal entry ``(i, i)``."""
        return i * self.n - i * (i - 1) // 2

    def index(self, i: int, j: int) -> int:
        """Packed index of entry ``(i, j)``; ``(j, i)`` maps to the same slot."""
        if not (0 <= i < self.n and 0 <= j < self.n):
            raise IndexError(f"Index ({i}, {j}) out of range for n={self.n}")
        if j < i:
            i, j = j, i
        return self.offset(i) + (j - i)

    def get(self, i: int, j: int) -> float:
        return float(self.data[self.index(i, j)])

    def set(self, i: int, j: int, value: float) -> None:
        self.data[self.index(i, j)] = value

    def row(self, i: int) -> np.ndarray:
        """View of the stored part of row ``i``, i.e. ``H[i, i:]``."""
        start = self.offset(i)
        return self.data[start:start + self.n - i]

    def set_identity(self) -> None:
        self.data[:] = 0.0
        for i in range(self.n):
            self.data[self.offset(i)] = 1.0

    def matvec(self, vec: np.ndarray) -> np.ndarray:
        """
        Return ``H @ vec`` without unpacking.

        Each stored row segment ``H[i, i:]`` contributes to ``out[i]`` as a
        row and to ``out[i+1:]`` as the matching column below the diagonal.
        """
        vec = np.asarray(vec, dtype=float).reshape(-1)
        if vec.size != self.n:
            raise ValueError(f"Expected a vector of length {self.n}, got {vec.size}")
        out = np.zeros(self.n, dtype=float)
        for i in range(self.n):
            seg = self.row(i)
            out[i] += float(np.dot(seg, vec[i:]))
            out[i + 1:] += seg[1:] * vec[i]
        return out

    def rank_two_update(self, s: np.ndarray, a: np.ndarray, coef: float) -> float:
        """
        Apply ``H += s a^T + a s^T + coef * s s^T`` in place.

        Returns the largest squared entry of the updated matrix.
        """
        s = np.asarray(s, dtype=float).reshape(-1)
        a = np.asarray(a, dtype=float).reshape(-1)
        if s.size != self.n or a.size != self.n:
            raise ValueError(f"Update vectors must have length {self.n}")
        max_sq = 0.0
        for i in range(self.n):
            seg = self.row(i)
            seg += a[i:] * s[i] + a[i] * s[i:] + coef * s[i] * s[i:]
            if seg.size:
                max_sq = max(max_sq, float(np.max(seg * seg)))
        return max_sq

    def to_dense(self) -> np.ndarray:
        dense = np.zeros((self.n, self.n), dtype=float)
        rows, cols = np.triu_indices(self.n)
        dense[rows, cols] = self.data
        dense[cols, rows] = self.data
        return dense

    def __len__(self) -> int:
        return self.data.size

    def __repr__(self) -> str:
        return f"PackedSymmetricMatrix(n={self.n})"


__all__ = ["PackedSymmetricMatrix", "packed_size"]
