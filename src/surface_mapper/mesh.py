"""Module defining the Mesh class for polygonal surface meshes.

This module provides:
  - Construction from arrays, meshio meshes, files, or pyvista PolyData.
  - Polygon, line and vertex cell storage with per-point attribute arrays.
  - Shallow and deep copies for safe in-place modification.
  - Point-to-polygon links.
  - VTU / any meshio-supported export.

It is the surface container consumed by the mappers in this package.
"""
from __future__ import annotations

import collections
import logging
from typing import Any, Dict, DefaultDict, List, Optional, Sequence, Tuple
from numpy.typing import NDArray

import numpy as np
import meshio

_LOGGER = logging.getLogger(__name__)

# meshio cell block types that hold polygonal faces
_POLY_TYPES = ("triangle", "quad", "polygon")
_LINE_TYPES = ("line",)
_VERTEX_TYPES = ("vertex",)


def _as_cell_list(
    cells: Any, min_size: int, kind: str, n_points: int
) -> List[NDArray[Any]]:
    """Normalize cells given as an (n, k) array or a ragged sequence.

    Args:
        cells: Cell connectivity. May be None.
        min_size: Minimum number of points per cell.
        kind: Cell kind used in error messages.
        n_points: Number of mesh points, for index validation.

    Returns:
        List of 1-D integer arrays, one per cell.

    Raises:
        ValueError: If a cell is too small or references a missing point.
    """
    if cells is None:
        return []
    if isinstance(cells, np.ndarray) and cells.ndim == 2:
        out = [np.array(c, dtype=np.int64) for c in cells]
    else:
        out = [np.array(c, dtype=np.int64).reshape(-1) for c in cells]
    for idx, c in enumerate(out):
        if c.shape[0] < min_size:
            msg = f"{kind} {idx} has {c.shape[0]} point(s); need at least {min_size}"
            _LOGGER.error("Mesh: %s", msg)
            raise ValueError(msg)
        if (c < 0).any() or (c >= n_points).any():
            msg = f"{kind} {idx} references point ids outside [0, {n_points})"
            _LOGGER.error("Mesh: %s", msg)
            raise ValueError(msg)
    return out


def _pack_cells(cells: Sequence[NDArray[Any]]) -> NDArray[Any]:
    """Pack cells into the VTK legacy layout [n0, i..., n1, j..., ...]."""
    if not cells:
        return np.empty(0, dtype=np.int64)
    return np.concatenate(
        [np.concatenate([[c.shape[0]], c]) for c in cells]
    ).astype(np.int64)


def _unpack_cells(packed: Any) -> List[NDArray[Any]]:
    """Inverse of `_pack_cells`."""
    arr = np.asarray(packed, dtype=np.int64).reshape(-1)
    out: List[NDArray[Any]] = []
    pos = 0
    while pos < arr.shape[0]:
        n = int(arr[pos])
        out.append(arr[pos + 1 : pos + 1 + n].copy())
        pos += n + 1
    return out


class Mesh:
    """Handle polygonal surface meshes in 3D.

    Stores points, polygonal faces, and the non-polygonal cells (lines and
    vertices) some file formats carry alongside them, plus named per-point
    attribute arrays.

    Args:
        points (NDArray[Any]): Point coordinates (n_points×3). 2-D points are
            padded with z=0.
        polys (Optional[Any]): Polygonal faces, as an (n_polys×k) array or a
            sequence of point-id sequences of any length >= 3.
        lines (Optional[Any]): Line cells (polylines of >= 2 points).
        vertices (Optional[Any]): Point ids of vertex cells.
        point_data (Optional[Dict[str, NDArray[Any]]]): Per-point arrays.

    Attributes:
        points (NDArray[Any]): Point array, shape (n_points, 3).
        polys (List[NDArray[Any]]): Polygon point ids.
        lines (List[NDArray[Any]]): Line point ids.
        vertices (NDArray[Any]): Vertex cell point ids.
        point_data (Dict[str, NDArray[Any]]): Per-point attribute arrays.
        point_to_polys (Optional[DefaultDict[int, List[int]]]): Point→[polygon
            indices], available after `build_links`.
    """

    points: NDArray[Any]
    polys: List[NDArray[Any]]
    lines: List[NDArray[Any]]
    vertices: NDArray[Any]
    point_data: Dict[str, NDArray[Any]]
    point_to_polys: Optional[DefaultDict[int, List[int]]]

    def __init__(
        self,
        points: Any,
        polys: Optional[Any] = None,
        lines: Optional[Any] = None,
        vertices: Optional[Any] = None,
        point_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        pts = np.asarray(points, dtype=float)
        if pts.ndim != 2 or pts.shape[1] not in (2, 3):
            raise ValueError(f"points must be (n, 2) or (n, 3); got {pts.shape}")
        if pts.shape[1] == 2:
            pts = np.hstack([pts, np.zeros((pts.shape[0], 1))])
        self.points = pts

        n = pts.shape[0]
        self.polys = _as_cell_list(polys, 3, "polygon", n)
        self.lines = _as_cell_list(lines, 2, "line", n)
        verts = (
            np.empty(0, dtype=np.int64)
            if vertices is None
            else np.asarray(vertices, dtype=np.int64).reshape(-1)
        )
        if (verts < 0).any() or (verts >= n).any():
            _LOGGER.error("Mesh: vertex cells reference missing points.")
            raise ValueError("vertex cells reference point ids out of range")
        self.vertices = verts

        self.point_data = {}
        for name, arr in (point_data or {}).items():
            self.set_point_array(name, arr)

        self.point_to_polys = None

        _LOGGER.info(
            "Mesh initialized with %d points, %d polygons, %d lines, %d vertices",
            self.number_of_points,
            self.number_of_polys,
            self.number_of_lines,
            self.number_of_vertices,
        )

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_meshio(cls, m: meshio.Mesh) -> Mesh:
        """Build a Mesh from a `meshio.Mesh`.

        Triangle, quad and polygon blocks become polygons; line and vertex
        blocks are kept as such; volumetric blocks are dropped with a warning.
        """
        polys: List[NDArray[Any]] = []
        lines: List[NDArray[Any]] = []
        verts: List[int] = []
        for block in m.cells:
            data = np.asarray(block.data, dtype=np.int64)
            if block.type in _POLY_TYPES:
                polys.extend(list(data))
            elif block.type in _LINE_TYPES:
                lines.extend(list(data))
            elif block.type in _VERTEX_TYPES:
                verts.extend(int(v) for v in data.reshape(-1))
            else:
                _LOGGER.warning(
                    "from_meshio: ignoring %d cell(s) of unsupported type '%s'.",
                    len(data),
                    block.type,
                )
        return cls(
            m.points,
            polys=polys,
            lines=lines,
            vertices=verts,
            point_data=dict(m.point_data),
        )

    @classmethod
    def read(cls, filename: str) -> Mesh:
        """Read any meshio-supported surface file (OBJ, VTK, VTU, PLY, STL, ...)."""
        try:
            m = meshio.read(filename)
        except Exception:
            _LOGGER.exception("Mesh.read failed for '%s'.", filename)
            raise
        _LOGGER.info("Loaded mesh from %s", filename)
        return cls.from_meshio(m)

    @classmethod
    def from_polydata(cls, pd: Any) -> Mesh:
        """Build a Mesh from a `pyvista.PolyData`."""
        point_data = {name: np.asarray(pd.point_data[name]) for name in pd.point_data.keys()}
        verts = _unpack_cells(pd.verts)
        return cls(
            np.asarray(pd.points),
            polys=_unpack_cells(pd.faces),
            lines=_unpack_cells(pd.lines),
            vertices=np.concatenate(verts) if verts else None,
            point_data=point_data,
        )

    def to_polydata(self) -> Any:
        """Export this mesh as a `pyvista.PolyData` (requires pyvista)."""
        import pyvista as pv

        kwargs: Dict[str, Any] = {}
        if self.polys:
            kwargs["faces"] = _pack_cells(self.polys)
        if self.lines:
            kwargs["lines"] = _pack_cells(self.lines)
        pd = pv.PolyData(self.points.copy(), **kwargs)
        if self.number_of_vertices:
            pd.verts = _pack_cells([np.array([v]) for v in self.vertices])
        for name, arr in self.point_data.items():
            pd.point_data[name] = np.asarray(arr)
        return pd

    def to_meshio(
        self, point_data: Optional[Dict[str, Any]] = None
    ) -> meshio.Mesh:
        """Convert to a `meshio.Mesh`, grouping polygons by size.

        Args:
            point_data: Extra per-point arrays, merged over `self.point_data`.

        Raises:
            ValueError: If an array's length differs from the point count.
        """
        groups: Dict[int, List[NDArray[Any]]] = collections.defaultdict(list)
        for p in self.polys:
            groups[p.shape[0]].append(p)
        cells: List[Tuple[str, NDArray[Any]]] = []
        for size in sorted(groups):
            ctype = {3: "triangle", 4: "quad"}.get(size, "polygon")
            cells.append((ctype, np.vstack(groups[size])))
        for ln in self.lines:
            if ln.shape[0] == 2:
                cells.append(("line", ln.reshape(1, 2)))
            else:
                cells.append(("line", np.column_stack([ln[:-1], ln[1:]])))
        if self.number_of_vertices:
            cells.append(("vertex", self.vertices.reshape(-1, 1)))

        merged: Dict[str, NDArray[Any]] = dict(self.point_data)
        for name, arr in (point_data or {}).items():
            arr_np = np.asarray(arr)
            if arr_np.shape[0] != self.number_of_points:
                msg = (
                    f"point_data['{name}'] length {arr_np.shape[0]} "
                    f"!= n_points {self.number_of_points}"
                )
                _LOGGER.error("to_meshio: %s", msg)
                raise ValueError(msg)
            merged[name] = arr_np
        return meshio.Mesh(points=self.points, cells=cells, point_data=merged)

    def write(
        self, filename: str, point_data: Optional[Dict[str, Any]] = None
    ) -> None:
        """Write this mesh (and optional point data) with meshio.

        The format follows the file extension (e.g. ``"surface.vtu"``).
        """
        try:
            self.to_meshio(point_data).write(filename)
        except Exception:
            _LOGGER.exception("Mesh.write failed for '%s'.", filename)
            raise
        _LOGGER.info(
            "Mesh written to '%s' (points=%d, polys=%d)",
            filename,
            self.number_of_points,
            self.number_of_polys,
        )

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------
    def _from_parts(
        self,
        points: NDArray[Any],
        polys: List[NDArray[Any]],
        lines: List[NDArray[Any]],
        vertices: NDArray[Any],
        point_data: Dict[str, NDArray[Any]],
    ) -> Mesh:
        other = object.__new__(type(self))
        other.points = points
        other.polys = polys
        other.lines = lines
        other.vertices = vertices
        other.point_data = point_data
        other.point_to_polys = None
        return other

    def shallow_copy(self) -> Mesh:
        """Return a copy sharing the point and cell arrays.

        Containers (cell lists, point-data dict) are new objects, so adding,
        removing or replacing cells and attributes on the copy leaves this
        mesh untouched. Writing into the shared arrays does not.
        """
        return self._from_parts(
            self.points,
            list(self.polys),
            list(self.lines),
            self.vertices,
            dict(self.point_data),
        )

    def copy(self) -> Mesh:
        """Return a deep copy."""
        return self._from_parts(
            self.points.copy(),
            [p.copy() for p in self.polys],
            [ln.copy() for ln in self.lines],
            self.vertices.copy(),
            {k: np.array(v, copy=True) for k, v in self.point_data.items()},
        )

    # ------------------------------------------------------------------
    # Sizes / attributes
    # ------------------------------------------------------------------
    @property
    def number_of_points(self) -> int:
        return int(self.points.shape[0])

    @property
    def number_of_polys(self) -> int:
        return len(self.polys)

    @property
    def number_of_lines(self) -> int:
        return len(self.lines)

    @property
    def number_of_vertices(self) -> int:
        return int(self.vertices.shape[0])

    @property
    def is_triangle_mesh(self) -> bool:
        """True if every polygon is a triangle (and there is at least one)."""
        return bool(self.polys) and all(p.shape[0] == 3 for p in self.polys)

    def triangles(self) -> NDArray[Any]:
        """Return the polygons as an (n_polys, 3) array.

        Raises:
            ValueError: If a polygon is not a triangle.
        """
        if not self.is_triangle_mesh:
            raise ValueError("triangles: mesh has non-triangular polygons")
        return np.vstack(self.polys)

    def set_point_array(self, name: str, arr: Any) -> None:
        """Attach a per-point array.

        Raises:
            ValueError: If the array length differs from the point count.
        """
        arr_np = np.asarray(arr)
        if arr_np.shape[0] != self.number_of_points:
            msg = (
                f"point_data['{name}'] length {arr_np.shape[0]} "
                f"!= n_points {self.number_of_points}"
            )
            _LOGGER.error("set_point_array: %s", msg)
            raise ValueError(msg)
        self.point_data[name] = arr_np

    def get_point_array(self, name: str) -> Optional[NDArray[Any]]:
        """Return the named per-point array, or None."""
        return self.point_data.get(name)

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------
    def build_links(self) -> None:
        """Build the point→polygon incidence map `point_to_polys`."""
        links: DefaultDict[int, List[int]] = collections.defaultdict(list)
        for poly_idx, poly in enumerate(self.polys):
            for pt in poly:
                links[int(pt)].append(poly_idx)
        self.point_to_polys = links
        _LOGGER.debug(
            "build_links: %d of %d points referenced by polygons",
            len(links),
            self.number_of_points,
        )

    def isolated_points(self) -> NDArray[Any]:
        """Return ids of points not used by any polygon (builds links if needed)."""
        if self.point_to_polys is None:
            self.build_links()
        assert self.point_to_polys is not None
        used = np.zeros(self.number_of_points, dtype=bool)
        used[list(self.point_to_polys.keys())] = True
        return np.flatnonzero(~used)

    def __repr__(self) -> str:
        return (
            f"Mesh(points={self.number_of_points}, polys={self.number_of_polys}, "
            f"lines={self.number_of_lines}, vertices={self.number_of_vertices})"
        )
