"""Boundary detection on polygonal surfaces.

A boundary edge is an edge used by exactly one polygon; a boundary point is
any point incident to a boundary edge. Besides masks and point sets, this
module orders boundary points into closed loops and derives the classic disk
boundary condition (longest loop mapped onto a circle by arc length).
"""
from __future__ import annotations

import collections
import logging
from typing import Any, DefaultDict, List, Tuple, Union
from numpy.typing import NDArray

import numpy as np

from .edge_table import EdgeTable
from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)


def _edge_table(surface: Union[Mesh, EdgeTable]) -> EdgeTable:
    return surface if isinstance(surface, EdgeTable) else EdgeTable(surface)


def boundary_edges(surface: Union[Mesh, EdgeTable]) -> NDArray[Any]:
    """Return boundary edges as an (k, 2) array of point ids."""
    table = _edge_table(surface)
    edges = table.boundary_edges()
    nonmanifold = table.nonmanifold_edges()
    if nonmanifold.shape[0]:
        _LOGGER.warning(
            "boundary_edges: %d non-manifold edge(s) detected (used by >2 polygons).",
            nonmanifold.shape[0],
        )
    return edges


def boundary_points(surface: Union[Mesh, EdgeTable]) -> NDArray[Any]:
    """Return the sorted unique ids of points incident to a boundary edge."""
    return np.unique(boundary_edges(surface).reshape(-1)).astype(np.int64)


def boundary_mask(surface: Union[Mesh, EdgeTable]) -> NDArray[Any]:
    """Return a uint8 array with 1 on boundary points and 0 elsewhere."""
    table = _edge_table(surface)
    mask = np.zeros(table.number_of_points, dtype=np.uint8)
    mask[boundary_points(table)] = 1
    return mask


def boundary_loops(mesh: Mesh) -> List[NDArray[Any]]:
    """Order the boundary points into closed loops.

    Each loop lists its point ids once, in walking order (the closing edge
    from the last point back to the first is implied).

    Args:
        mesh (Mesh): Surface with a manifold boundary.

    Returns:
        List[NDArray[Any]]: Loops, longest (by arc length) first. Empty for
        closed surfaces.

    Raises:
        ValueError: If a boundary point does not have exactly two boundary
            neighbours, i.e. the boundary is not a set of simple loops.
    """
    edges = boundary_edges(mesh)

    adj: DefaultDict[int, List[int]] = collections.defaultdict(list)
    for u, v in edges:
        adj[int(u)].append(int(v))
        adj[int(v)].append(int(u))

    bad = sorted(n for n, nbrs in adj.items() if len(nbrs) != 2)
    if bad:
        _LOGGER.error(
            "boundary_loops: %d boundary point(s) with degree != 2 (first: %d).",
            len(bad),
            bad[0],
        )
        raise ValueError(
            "Boundary is not a union of simple loops; check for non-manifold points."
        )

    visited: set[int] = set()
    loops: List[NDArray[Any]] = []
    for start in sorted(adj):
        if start in visited:
            continue
        loop = [start]
        visited.add(start)
        prev, cur = start, adj[start][0]
        while cur != start:
            loop.append(cur)
            visited.add(cur)
            a, b = adj[cur]
            prev, cur = cur, (b if a == prev else a)
        loops.append(np.asarray(loop, dtype=np.int64))

    def _length(loop: NDArray[Any]) -> float:
        seg = mesh.points[np.roll(loop, -1)] - mesh.points[loop]
        return float(np.linalg.norm(seg, axis=1).sum())

    loops.sort(key=_length, reverse=True)
    _LOGGER.debug(
        "boundary_loops: %d loop(s) with sizes %s",
        len(loops),
        [int(lp.shape[0]) for lp in loops],
    )
    return loops


def disk_boundary_values(
    mesh: Mesh, radius: float = 1.0
) -> Tuple[NDArray[Any], NDArray[Any]]:
    """Map the longest boundary loop onto a circle by normalized arc length.

    Args:
        mesh (Mesh): Disk-like surface.
        radius (float): Circle radius.

    Returns:
        Tuple[NDArray[Any], NDArray[Any]]:
            - values: (n_points, 2) with circle coordinates on the loop and 0
              elsewhere.
            - mask: (n_points,) uint8, 1 on the loop points.

    Raises:
        ValueError: If the mesh has no boundary or a degenerate one.
    """
    if not (radius > 0.0 and np.isfinite(radius)):
        raise ValueError(f"disk_boundary_values: radius must be positive; got {radius}")

    loops = boundary_loops(mesh)
    if not loops:
        _LOGGER.error("disk_boundary_values: closed surface has no boundary loop.")
        raise ValueError("Surface has no boundary; cannot map onto a disk.")
    loop = loops[0]
    if loop.shape[0] < 3:
        raise ValueError("Degenerate boundary: need at least 3 unique points.")

    pts = mesh.points
    seg_lengths = np.linalg.norm(pts[np.roll(loop, -1)] - pts[loop], axis=1)
    total_length = float(seg_lengths.sum())
    if total_length <= 0.0 or not np.isfinite(total_length):
        _LOGGER.error("disk_boundary_values: zero or non-finite boundary length.")
        raise ValueError("Degenerate boundary length.")

    # arc length at each loop point, starting at 0
    s = np.concatenate([[0.0], np.cumsum(seg_lengths)[:-1]])
    theta = 2.0 * np.pi * (s / total_length)

    values = np.zeros((mesh.number_of_points, 2), dtype=float)
    values[loop, 0] = radius * np.cos(theta)
    values[loop, 1] = radius * np.sin(theta)
    mask = np.zeros(mesh.number_of_points, dtype=np.uint8)
    mask[loop] = 1

    _LOGGER.debug(
        "disk_boundary_values: loop of %d points, length=%.6g, radius=%.6g",
        loop.shape[0],
        total_length,
        radius,
    )
    return values, mask
