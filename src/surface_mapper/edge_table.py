"""Module defining the EdgeTable of unique undirected mesh edges.

The table is built once from the polygons of a `Mesh` and provides:
  - iteration over each undirected edge exactly once, as (i, j) with i < j,
  - the number of polygons using each edge (1 = boundary, >2 = non-manifold),
  - edge lookup by endpoint pair and point adjacency.
"""
from __future__ import annotations

import logging
from typing import Any, Iterator, Tuple
from numpy.typing import NDArray

import numpy as np
import scipy.sparse as sp

from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)


class EdgeTable:
    """Unique undirected edges of a polygonal mesh.

    Args:
        mesh (Mesh): Surface whose polygons define the edges.

    Attributes:
        edges (NDArray[Any]): Edge endpoints, shape (n_edges, 2), sorted
            lexicographically with ``edges[:, 0] < edges[:, 1]``.
        poly_count (NDArray[Any]): Number of polygons using each edge.
        number_of_points (int): Number of mesh points.
    """

    edges: NDArray[Any]
    poly_count: NDArray[Any]
    number_of_points: int

    def __init__(self, mesh: Mesh) -> None:
        self.number_of_points = mesh.number_of_points

        heads = []
        tails = []
        for poly in mesh.polys:
            heads.append(poly)
            tails.append(np.roll(poly, -1))
        if heads:
            a = np.concatenate(heads)
            b = np.concatenate(tails)
        else:
            a = np.empty(0, dtype=np.int64)
            b = np.empty(0, dtype=np.int64)

        keep = a != b
        if not keep.all():
            _LOGGER.warning(
                "EdgeTable: skipping %d degenerate polygon side(s) with repeated points.",
                int((~keep).sum()),
            )
        lo = np.minimum(a[keep], b[keep])
        hi = np.maximum(a[keep], b[keep])

        if lo.shape[0]:
            pairs = np.column_stack([lo, hi])
            self.edges, self.poly_count = np.unique(pairs, axis=0, return_counts=True)
        else:
            self.edges = np.empty((0, 2), dtype=np.int64)
            self.poly_count = np.empty(0, dtype=np.int64)
        self.edges = self.edges.astype(np.int64, copy=False)

        # Symmetric lookup of (edge id + 1); 0 means "no edge"
        n = self.number_of_points
        ids = np.arange(1, self.number_of_edges + 1, dtype=np.int64)
        self._lookup = sp.csr_matrix(
            (
                np.concatenate([ids, ids]),
                (
                    np.concatenate([self.edges[:, 0], self.edges[:, 1]]),
                    np.concatenate([self.edges[:, 1], self.edges[:, 0]]),
                ),
            ),
            shape=(n, n),
            dtype=np.int64,
        )

        _LOGGER.debug(
            "EdgeTable: polys=%d -> edges=%d (boundary=%d, non-manifold=%d)",
            mesh.number_of_polys,
            self.number_of_edges,
            int((self.poly_count == 1).sum()),
            int((self.poly_count > 2).sum()),
        )

    @property
    def number_of_edges(self) -> int:
        return int(self.edges.shape[0])

    def __len__(self) -> int:
        return self.number_of_edges

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        """Yield every undirected edge once as a pair of point ids."""
        for i, j in self.edges:
            yield int(i), int(j)

    def edge_id(self, i: int, j: int) -> int:
        """Return the index of edge (i, j) in `edges`, or -1 if there is none."""
        return int(self._lookup[i, j]) - 1

    def edge_ids(self, i: Any, j: Any) -> NDArray[Any]:
        """Vectorized `edge_id` for arrays of endpoints."""
        i_arr = np.asarray(i, dtype=np.int64)
        j_arr = np.asarray(j, dtype=np.int64)
        return np.asarray(self._lookup[i_arr, j_arr]).reshape(i_arr.shape) - 1

    def is_edge(self, i: int, j: int) -> bool:
        return self.edge_id(i, j) >= 0

    def neighbors(self, i: int) -> NDArray[Any]:
        """Return the sorted ids of points sharing an edge with point `i`."""
        lookup = self._lookup
        row = lookup.indices[lookup.indptr[i] : lookup.indptr[i + 1]]
        return np.sort(row).astype(np.int64)

    def boundary_edges(self) -> NDArray[Any]:
        """Edges used by exactly one polygon, shape (k, 2)."""
        return self.edges[self.poly_count == 1]

    def nonmanifold_edges(self) -> NDArray[Any]:
        """Edges used by more than two polygons, shape (k, 2)."""
        return self.edges[self.poly_count > 2]
