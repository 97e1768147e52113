"""Assembly of the reduced weighted-Laplacian system over free points.

For N free points and m value components the system is ``A x = b`` with
A (N×N, symmetric) and b (N×m). Edges between two free points contribute
``-w`` off the diagonal; edges between a free and a fixed point move the
known value into b; every edge adds ``w`` to the diagonal of each free
endpoint. Edges between two fixed points are skipped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Tuple
from numpy.typing import NDArray

import numpy as np
import scipy.sparse as sp

from .partition import PointPartition

_LOGGER = logging.getLogger(__name__)


@dataclass
class LinearSystem:
    """Assembled stiffness matrix and right-hand side.

    Attributes:
        matrix: Sparse (N, N) CSR matrix.
        rhs: Dense (N, m) array.
    """

    matrix: sp.csr_matrix
    rhs: NDArray[Any]

    @property
    def nonzeros(self) -> int:
        return int(self.matrix.nnz)


def assemble_symmetric_system(
    edges: Iterable[Tuple[int, int]],
    partition: PointPartition,
    values: NDArray[Any],
    weight: Callable[[int, int], float],
) -> LinearSystem:
    """Build the symmetric system for the free points of `partition`.

    Args:
        edges: Unique undirected edges (i, j), each visited once.
        partition: Fixed/free classification of the mesh points.
        values: (n_points, m) current values; rows of fixed points are the
            boundary conditions.
        weight: Symmetric edge weight ``weight(i, j)``.

    Returns:
        LinearSystem: CSR matrix (N, N) and rhs (N, m).
    """
    vals = np.asarray(values, dtype=float)
    if vals.ndim == 1:
        vals = vals[:, None]
    n = partition.number_of_free_points
    m = int(vals.shape[1])

    b = np.zeros((n, m), dtype=float)
    w_ii = np.zeros(n, dtype=float)

    # COO builder lists; duplicates are summed on conversion
    rows: list[int] = []
    cols: list[int] = []
    data: list[float] = []

    n_edges = 0
    for i, j in edges:
        n_edges += 1
        r = partition.free_index(i)
        c = partition.free_index(j)
        if r < 0 and c < 0:
            continue
        w_ij = float(weight(i, j))
        if r >= 0 and c >= 0:
            rows.extend((r, c))
            cols.extend((c, r))
            data.extend((-w_ij, -w_ij))
        elif r >= 0:
            b[r, :] += w_ij * vals[j, :]
        else:
            b[c, :] += w_ij * vals[i, :]
        if r >= 0:
            w_ii[r] += w_ij
        if c >= 0:
            w_ii[c] += w_ij

    diag = np.arange(n, dtype=np.int64)
    A = sp.coo_matrix(
        (
            np.concatenate([np.asarray(data, dtype=float), w_ii]),
            (
                np.concatenate([np.asarray(rows, dtype=np.int64), diag]),
                np.concatenate([np.asarray(cols, dtype=np.int64), diag]),
            ),
        ),
        shape=(n, n),
        dtype=float,
    ).tocsr()

    _LOGGER.debug(
        "assemble_symmetric_system: edges=%d free=%d components=%d nnz=%d",
        n_edges,
        n,
        m,
        A.nnz,
    )
    return LinearSystem(matrix=A, rhs=b)
