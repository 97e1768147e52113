"""Edge weight policies for symmetric linear surface maps.

A policy returns a symmetric, typically non-negative, scalar ``w_ij`` for
every mesh edge (i, j). `prepare` is called once per solve with the working
surface and its edge table so policies can precompute per-edge data.

Policies:
  - UniformWeights: graph Laplacian (Tutte embedding).
  - InverseDistanceWeights: 1 / edge length.
  - CotangentWeights: discrete harmonic map weights on triangle meshes.
  - CallableWeights: wraps a user supplied function.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional
from numpy.typing import NDArray

import numpy as np

from .edge_table import EdgeTable
from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)


class WeightPolicy:
    """Base class of edge weight policies."""

    def prepare(self, mesh: Mesh, edges: EdgeTable) -> None:
        """Precompute per-edge data for `mesh`. Default: nothing to do."""

    def __call__(self, i: int, j: int) -> float:
        raise NotImplementedError


class UniformWeights(WeightPolicy):
    """Same weight for every edge."""

    def __init__(self, value: float = 1.0) -> None:
        if not np.isfinite(value):
            raise ValueError(f"UniformWeights: value must be finite; got {value}")
        self.value = float(value)

    def __call__(self, i: int, j: int) -> float:
        return self.value

    def __repr__(self) -> str:
        return f"UniformWeights(value={self.value})"


class InverseDistanceWeights(WeightPolicy):
    """Weight 1 / |p_i - p_j|, with the length floored at `eps`."""

    def __init__(self, eps: float = 1e-12) -> None:
        self.eps = float(eps)
        self._points: Optional[NDArray[Any]] = None

    def prepare(self, mesh: Mesh, edges: EdgeTable) -> None:
        self._points = mesh.points

    def __call__(self, i: int, j: int) -> float:
        if self._points is None:
            raise RuntimeError("InverseDistanceWeights used before prepare()")
        d = float(np.linalg.norm(self._points[i] - self._points[j]))
        return 1.0 / max(d, self.eps)


class CotangentWeights(WeightPolicy):
    """Cotangent weights ``(cot(alpha) + cot(beta)) / 2``.

    alpha and beta are the angles opposite edge (i, j) in its incident
    triangles; boundary edges have a single term. Obtuse triangles produce
    negative cotangents; pass `clamp` to floor the final edge weights.

    Args:
        clamp (Optional[float]): Lower bound applied to each edge weight.
    """

    def __init__(self, clamp: Optional[float] = None) -> None:
        self.clamp = clamp
        self._weights: Optional[NDArray[Any]] = None
        self._edges: Optional[EdgeTable] = None

    def prepare(self, mesh: Mesh, edges: EdgeTable) -> None:
        """Accumulate the per-triangle cotangents onto the edge table.

        Raises:
            ValueError: If the mesh has non-triangular polygons.
        """
        if not mesh.is_triangle_mesh:
            _LOGGER.error("CotangentWeights: mesh has non-triangular polygons.")
            raise ValueError("CotangentWeights requires a triangle mesh")

        tris = mesh.triangles()
        pts = mesh.points
        w = np.zeros(edges.number_of_edges, dtype=float)
        n_degenerate = 0

        # corner k is opposite the edge (k+1, k+2)
        for k in range(3):
            c = tris[:, k]
            a = tris[:, (k + 1) % 3]
            b = tris[:, (k + 2) % 3]
            e1 = pts[a] - pts[c]
            e2 = pts[b] - pts[c]
            dot = np.einsum("ij,ij->i", e1, e2)
            cross = np.linalg.norm(np.cross(e1, e2), axis=1)
            ok = cross > 1e-15
            n_degenerate += int((~ok).sum())
            cot = np.zeros_like(dot)
            cot[ok] = dot[ok] / cross[ok]
            np.add.at(w, edges.edge_ids(a, b), 0.5 * cot)

        if n_degenerate:
            _LOGGER.warning(
                "CotangentWeights: %d degenerate corner(s) contribute zero weight.",
                n_degenerate,
            )
        if self.clamp is not None:
            w = np.maximum(w, float(self.clamp))
        if (w < 0.0).any():
            _LOGGER.debug(
                "CotangentWeights: %d negative edge weight(s) (obtuse triangles).",
                int((w < 0.0).sum()),
            )

        self._weights = w
        self._edges = edges

    def __call__(self, i: int, j: int) -> float:
        if self._weights is None or self._edges is None:
            raise RuntimeError("CotangentWeights used before prepare()")
        eid = self._edges.edge_id(i, j)
        if eid < 0:
            raise KeyError(f"({i}, {j}) is not an edge of the prepared mesh")
        return float(self._weights[eid])


class CallableWeights(WeightPolicy):
    """Adapter for a plain function ``func(i, j) -> float``."""

    def __init__(self, func: Callable[[int, int], float]) -> None:
        self.func = func

    def __call__(self, i: int, j: int) -> float:
        return float(self.func(i, j))
