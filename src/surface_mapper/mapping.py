"""Output maps produced by surface mappers.

`PiecewiseLinearMap` stores the domain surface and one value per point; the
map is linear inside every face. Both are copied on construction and made
read-only (points, cells and point data of the domain included), so a map
stays valid when the mapper that built it is re-run or
discarded.
"""
from __future__ import annotations

import logging
import types
from typing import Any, Optional, Sequence
from numpy.typing import NDArray

import numpy as np

from .mesh import Mesh

_LOGGER = logging.getLogger(__name__)


def _frozen_copy(mesh: Mesh) -> Mesh:
    """Deep copy of `mesh` whose arrays and cell containers cannot be modified."""
    out = mesh.copy()
    arrays = [out.points, out.vertices, *out.polys, *out.lines, *out.point_data.values()]
    for arr in arrays:
        arr.flags.writeable = False
    out.polys = tuple(out.polys)
    out.lines = tuple(out.lines)
    out.point_data = types.MappingProxyType(out.point_data)
    return out


class Mapping:
    """Base class of maps from a surface to an m-dimensional codomain."""

    @property
    def number_of_components(self) -> int:
        raise NotImplementedError

    def copy(self) -> Mapping:
        raise NotImplementedError


class PiecewiseLinearMap(Mapping):
    """Map defined by its values at the points of a surface mesh.

    Args:
        domain (Mesh): Surface on which the map is defined.
        values (Any): (n_points, m) or (n_points,) per-point values.

    Attributes:
        domain (Mesh): Private copy of the domain.
        values (NDArray[Any]): Read-only (n_points, m) value array.

    Raises:
        ValueError: If the number of value rows differs from the point count.
    """

    domain: Mesh
    values: NDArray[Any]

    def __init__(self, domain: Mesh, values: Any) -> None:
        vals = np.array(values, dtype=float, copy=True)
        if vals.ndim == 1:
            vals = vals[:, None]
        if vals.ndim != 2 or vals.shape[0] != domain.number_of_points:
            msg = (
                f"values shape {vals.shape} does not match "
                f"{domain.number_of_points} domain points"
            )
            _LOGGER.error("PiecewiseLinearMap: %s", msg)
            raise ValueError(msg)

        self.domain = _frozen_copy(domain)
        vals.flags.writeable = False
        self.values = vals

        _LOGGER.debug(
            "PiecewiseLinearMap: points=%d components=%d",
            self.number_of_points,
            self.number_of_components,
        )

    @property
    def number_of_points(self) -> int:
        return int(self.values.shape[0])

    @property
    def number_of_components(self) -> int:
        return int(self.values.shape[1])

    def value(self, pt_id: int) -> NDArray[Any]:
        """Return the map value at a domain point."""
        return self.values[pt_id]

    def evaluate(self, face_id: int, weights: Sequence[float]) -> NDArray[Any]:
        """Interpolate the map inside a face.

        Args:
            face_id (int): Polygon index in the domain.
            weights (Sequence[float]): Barycentric (triangles) or generalized
                barycentric (polygons) coordinates, one per polygon corner,
                summing to 1.

        Returns:
            NDArray[Any]: Value of length m.

        Raises:
            ValueError: If `face_id` is out of range or `weights` is invalid.
        """
        msg = None
        if face_id < 0 or face_id >= self.domain.number_of_polys:
            msg = f"face {face_id} outside [0, {self.domain.number_of_polys})"
        else:
            poly = self.domain.polys[face_id]
            w = np.asarray(weights, dtype=float).reshape(-1)
            if w.shape[0] != poly.shape[0]:
                msg = (
                    f"face {face_id} has {poly.shape[0]} corners, "
                    f"got {w.shape[0]} weights"
                )
            elif abs(float(w.sum()) - 1.0) > 1e-8:
                msg = f"weights sum to {float(w.sum())}, expected 1"
        if msg is not None:
            _LOGGER.error("PiecewiseLinearMap.evaluate: %s", msg)
            raise ValueError(f"evaluate: {msg}")
        return w @ self.values[poly]

    def to_mesh(self, name: str = "map") -> Mesh:
        """Return a copy of the domain with the values attached as point data."""
        out = self.domain.copy()
        out.set_point_array(name, np.array(self.values))
        return out

    def write(self, filename: str, name: Optional[str] = "map") -> None:
        """Write the domain with the values attached as point data `name`."""
        self.domain.write(filename, point_data={name or "map": self.values})

    def copy(self) -> PiecewiseLinearMap:
        return PiecewiseLinearMap(self.domain, self.values)

    def __repr__(self) -> str:
        return (
            f"PiecewiseLinearMap(points={self.number_of_points}, "
            f"components={self.number_of_components})"
        )
