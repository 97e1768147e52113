from __future__ import annotations
import pytest

import numpy as np
from surface_mapper.mesh import Mesh


def polar_disk(n_rings: int = 2, n_sectors: int = 8) -> Mesh:
    """Flat disk: one center point plus `n_rings` rings of `n_sectors` points.

    Point 0 is the center; ring k (1-based, radius k) holds ids
    1 + (k-1)*n_sectors ... k*n_sectors. The last ring is the boundary.
    """
    pts = [[0.0, 0.0, 0.0]]
    angles = 2.0 * np.pi * np.arange(n_sectors) / n_sectors
    for k in range(1, n_rings + 1):
        for a in angles:
            pts.append([k * np.cos(a), k * np.sin(a), 0.0])

    def ring(k: int, s: int) -> int:
        return 1 + (k - 1) * n_sectors + (s % n_sectors)

    tris = []
    for s in range(n_sectors):
        tris.append([0, ring(1, s), ring(1, s + 1)])
    for k in range(1, n_rings):
        for s in range(n_sectors):
            a0, a1 = ring(k, s), ring(k, s + 1)
            b0, b1 = ring(k + 1, s), ring(k + 1, s + 1)
            tris.append([a0, b0, b1])
            tris.append([a0, b1, a1])
    return Mesh(np.array(pts), polys=np.array(tris))


@pytest.fixture
def simple_triangle_mesh():
    """
    Provides a Mesh instance with a single triangle:
        v0 = [0, 0, 0]
        v1 = [1, 0, 0]
        v2 = [0, 1, 0]
    """
    verts = np.array(
        [
            [0.0, 0.0, 0.0],  # v0
            [1.0, 0.0, 0.0],  # v1
            [0.0, 1.0, 0.0],  # v2
        ]
    )
    connectivity = np.array([[0, 1, 2]])  # One triangle
    return Mesh(verts, polys=connectivity)


@pytest.fixture
def two_triangle_square():
    """
    Unit square split into two triangles along the diagonal (0-2):
      v3 (0,1) ---- v2 (1,1)
        |  \\          |
        |    \\        |
        |      \\      |
      v0 (0,0) ---- v1 (1,0)
    Triangles: [0,1,2] and [0,2,3]
    Boundary edges (undirected): (0,1),(1,2),(2,3),(0,3)
    Interior edge: (0,2)
    """
    verts = np.array(
        [
            [0.0, 0.0, 0.0],  # v0
            [1.0, 0.0, 0.0],  # v1
            [1.0, 1.0, 0.0],  # v2
            [0.0, 1.0, 0.0],  # v3
        ],
        dtype=float,
    )
    conn = np.array([[0, 1, 2], [0, 2, 3]], dtype=int)
    return Mesh(verts, polys=conn)


@pytest.fixture
def grid_3x3():
    """
    3x3 grid on [0,2]^2, 8 triangles, all diagonals through the center:

      6 --- 7 --- 8
      | \\   |   / |
      |   \\ | /   |
      3 --- 4 --- 5
      |   / | \\   |
      | /   |   \\ |
      0 --- 1 --- 2

    Point id = 3*row + col at (col, row). Point 4 is the only interior
    point and is adjacent to all 8 boundary points.
    """
    pts = np.array([[c, r, 0.0] for r in range(3) for c in range(3)], dtype=float)
    tris = np.array(
        [
            [0, 1, 4],
            [0, 4, 3],
            [1, 2, 4],
            [2, 5, 4],
            [3, 4, 6],
            [4, 7, 6],
            [4, 5, 8],
            [4, 8, 7],
        ],
        dtype=int,
    )
    return Mesh(pts, polys=tris)


@pytest.fixture
def tetra_surface():
    """
    Closed tetrahedron surface (no boundary).
    Vertices: (0,0,0),(1,0,0),(0,1,0),(0,0,1)
    Faces: (0,1,2),(0,1,3),(1,2,3),(0,2,3)
    """
    verts = np.array(
        [
            [0.0, 0.0, 0.0],  # 0
            [1.0, 0.0, 0.0],  # 1
            [0.0, 1.0, 0.0],  # 2
            [0.0, 0.0, 1.0],  # 3
        ],
        dtype=float,
    )
    conn = np.array([[0, 1, 2], [0, 1, 3], [1, 2, 3], [0, 2, 3]], dtype=int)
    return Mesh(verts, polys=conn)


@pytest.fixture
def quad_strip():
    """
    Two unit quads side by side:

      3 --- 4 --- 5
      |     |     |
      0 --- 1 --- 2
    """
    pts = np.array(
        [[0, 0, 0], [1, 0, 0], [2, 0, 0], [0, 1, 0], [1, 1, 0], [2, 1, 0]],
        dtype=float,
    )
    quads = np.array([[0, 1, 4, 3], [1, 2, 5, 4]], dtype=int)
    return Mesh(pts, polys=quads)


@pytest.fixture
def disk_mesh():
    """Flat disk with a center point, 2 rings of 8 points; ring 2 is the boundary."""
    return polar_disk(2, 8)


@pytest.fixture
def fine_disk_mesh():
    """Flat disk of radius 4: center point plus 4 rings of 16 points."""
    return polar_disk(4, 16)
