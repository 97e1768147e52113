"""Module defining SurfaceMapper, the lifecycle shared by all surface mappers.

A mapper computes values at the free points of a surface given values at its
fixed points. `run` executes three phases:

  1. `initialize`: validate inputs, build a private working copy of the
     surface, copy the input values, resolve the fixed-point mask and
     partition the points into fixed and free sets.
  2. `solve`: compute the free values (implemented by subclasses).
  3. `finalize`: wrap surface and values into a `PiecewiseLinearMap`, unless
     `solve` already produced an output map.

The caller's mesh and arrays are never modified.
"""
from __future__ import annotations

import copy as _copy
import logging
from typing import Any, NoReturn, Optional
from numpy.typing import NDArray

import numpy as np

from .boundary import boundary_mask as _boundary_mask
from .config import Settings, config
from .edge_table import EdgeTable
from .errors import ConfigurationError
from .mapping import Mapping, PiecewiseLinearMap
from .mesh import Mesh
from .partition import PointPartition

_LOGGER = logging.getLogger(__name__)

# Point data names used to carry arrays through `remesh`
VALUES_ARRAY = "tcoords"
MASK_ARRAY = "fixed"


def _matches_points(arr: Any, n_points: int) -> bool:
    """True if `arr` has at least one axis and one row per point."""
    return np.ndim(arr) > 0 and np.shape(arr)[0] == n_points


class SurfaceMapper:
    """Base class of mappers solving for free-point values on a surface.

    Args:
        mesh (Optional[Mesh]): Input surface. Must have at least one polygon.
        values (Optional[Any]): (n_points, m) or (n_points,) input values.
            Rows of fixed points are the boundary conditions; rows of free
            points are used as the initial guess.
        fixed_mask (Optional[Any]): Per-point flags, non-zero = fixed. If
            omitted, the surface boundary points are fixed.
        settings (Optional[Settings]): Solver settings. Defaults to a
            snapshot of the active package settings.

    Attributes:
        output (Optional[Mapping]): Result of the last `run`/`finalize`.
    """

    def __init__(
        self,
        mesh: Optional[Mesh] = None,
        values: Optional[Any] = None,
        fixed_mask: Optional[Any] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.mesh = mesh
        self.input_values = values
        self.fixed_mask = fixed_mask
        self.settings: Settings = settings if settings is not None else config.settings
        self.output: Optional[Mapping] = None

        self._surface: Optional[Mesh] = None
        self._values: Optional[NDArray[Any]] = None
        self._mask_input: Optional[Any] = None
        self._fixed: Optional[NDArray[Any]] = None
        self._edge_table: Optional[EdgeTable] = None
        self._partition: Optional[PointPartition] = None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------
    def run(self) -> Mapping:
        """Initialize, solve and finalize; return the output map."""
        self.initialize()
        self.solve()
        self.finalize()
        assert self.output is not None
        return self.output

    def _fail(self, method: str, msg: str) -> NoReturn:
        full = f"{type(self).__name__}.{method}: {msg}"
        _LOGGER.error(full)
        raise ConfigurationError(full)

    def initialize(self) -> None:
        """Validate inputs and build the working surface and point partition.

        Raises:
            ConfigurationError: If the mesh is missing or has no polygons,
                if the input values are missing, or if values or mask do not
                have one entry per mesh point.
        """
        # Free previous output map
        self.output = None

        mesh = self.mesh
        if mesh is None:
            self._fail("initialize", "Missing input surface mesh")
        assert mesh is not None
        if mesh.number_of_polys == 0:
            self._fail("initialize", "Input point set must be a surface mesh")
        n_points = mesh.number_of_points
        if self.input_values is not None and not _matches_points(self.input_values, n_points):
            self._fail("initialize", "Invalid input map values array")
        if self.fixed_mask is not None and not _matches_points(self.fixed_mask, n_points):
            self._fail("initialize", "Invalid input mask")

        # Working surface: polygons only, no attributes
        surface = mesh.shallow_copy()
        surface.lines = []
        surface.vertices = np.empty(0, dtype=np.int64)
        surface.point_data = {}
        self._surface = surface

        self.initialize_values()
        assert self._values is not None
        n_components = int(self._values.shape[1])

        # Carry values and mask through an optional remeshing step
        surface.point_data[VALUES_ARRAY] = self._values
        if self.fixed_mask is not None:
            surface.point_data[MASK_ARRAY] = np.asarray(self.fixed_mask)
        if self.remesh():
            _LOGGER.info(
                "%s: surface remeshed to %d points, %d polygons",
                type(self).__name__,
                self._surface.number_of_points,
                self._surface.number_of_polys,
            )
        assert self._surface is not None
        surface = self._surface

        # Take the carried arrays back; the surface keeps no reference to them
        n_points = surface.number_of_points
        carried = surface.point_data.pop(VALUES_ARRAY, None)
        mask = surface.point_data.pop(MASK_ARRAY, None)
        if carried is None or not _matches_points(carried, n_points):
            self._fail("initialize", "Invalid input map values array")
        carried = np.asarray(carried, dtype=float)
        if carried.ndim == 1:
            carried = carried[:, None]
        if carried.ndim != 2 or carried.shape[1] != n_components:
            self._fail("initialize", "Invalid input map values array")
        if mask is not None and not _matches_points(mask, n_points):
            self._fail("initialize", "Invalid input mask")
        self._values = carried
        self._mask_input = mask

        surface.build_links()
        self._edge_table = EdgeTable(surface)

        self.initialize_mask()
        assert self._fixed is not None

        self._partition = PointPartition(self._fixed)

        isolated = surface.isolated_points()
        if isolated.shape[0]:
            n_free_isolated = int(
                sum(1 for pt in isolated if self._partition.is_free(int(pt)))
            )
            if n_free_isolated:
                _LOGGER.warning(
                    "%s: %d free point(s) are not part of any polygon; "
                    "the linear system is singular for them.",
                    type(self).__name__,
                    n_free_isolated,
                )

        _LOGGER.info(
            "%s initialized: points=%d fixed=%d free=%d components=%d",
            type(self).__name__,
            self.number_of_points,
            self.number_of_fixed_points,
            self.number_of_free_points,
            self.number_of_components,
        )

    def initialize_values(self) -> None:
        """Copy the input values into the private value buffer.

        Raises:
            ConfigurationError: If no input values were given.
        """
        if self.input_values is None:
            self._fail("initialize", "Missing boundary conditions")
        vals = np.array(self.input_values, dtype=float, copy=True)
        if vals.ndim == 1:
            vals = vals[:, None]
        self._values = vals

    def initialize_mask(self) -> None:
        """Use the input mask (as carried through `remesh`), else the boundary mask."""
        mask = self._mask_input
        self._fixed = np.asarray(mask) if mask is not None else self.boundary_mask()

    def remesh(self) -> bool:
        """Hook for subclasses that need a surface meeting topological requirements.

        Implementations replace `self._surface` and must keep the point data
        arrays named `VALUES_ARRAY` (and `MASK_ARRAY`, if present) consistent
        with the new points: one row per point, same number of value
        components. Otherwise `initialize` raises `ConfigurationError`.
        Return True if the surface was replaced.
        """
        return False

    def solve(self) -> None:
        """Compute the values at the free points."""
        raise NotImplementedError(f"{type(self).__name__}.solve")

    def finalize(self) -> None:
        """Build the output map unless `solve` already set one."""
        if self.output is None:
            assert self._surface is not None and self._values is not None
            self.output = PiecewiseLinearMap(self._surface, self._values)

    def boundary_mask(self) -> NDArray[Any]:
        """Return a uint8 mask with 1 on the working surface's boundary points."""
        if self._edge_table is not None:
            return _boundary_mask(self._edge_table)
        surface = self._surface if self._surface is not None else self.mesh
        if surface is None:
            self._fail("boundary_mask", "Missing input surface mesh")
        assert surface is not None
        return _boundary_mask(surface)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def surface(self) -> Mesh:
        if self._surface is None:
            raise RuntimeError(f"{type(self).__name__} is not initialized")
        return self._surface

    @property
    def values(self) -> NDArray[Any]:
        if self._values is None:
            raise RuntimeError(f"{type(self).__name__} is not initialized")
        return self._values

    @property
    def edge_table(self) -> EdgeTable:
        if self._edge_table is None:
            raise RuntimeError(f"{type(self).__name__} is not initialized")
        return self._edge_table

    @property
    def partition(self) -> PointPartition:
        if self._partition is None:
            raise RuntimeError(f"{type(self).__name__} is not initialized")
        return self._partition

    @property
    def number_of_points(self) -> int:
        return self.surface.number_of_points

    @property
    def number_of_components(self) -> int:
        return int(self.values.shape[1])

    @property
    def number_of_free_points(self) -> int:
        return self.partition.number_of_free_points

    @property
    def number_of_fixed_points(self) -> int:
        return self.partition.number_of_fixed_points

    def is_fixed_point(self, pt_id: int) -> bool:
        return self.partition.is_fixed(pt_id)

    def free_point_index(self, pt_id: int) -> int:
        return self.partition.free_index(pt_id)

    def free_point_id(self, r: int) -> int:
        return self.partition.free_point_id(r)

    def fixed_point_id(self, k: int) -> int:
        return self.partition.fixed_point_id(k)

    def get_value(self, pt_id: int, component: int = 0) -> float:
        return float(self.values[pt_id, component])

    def set_value(self, pt_id: int, component: int, value: float) -> None:
        self.values[pt_id, component] = value

    def copy(self) -> SurfaceMapper:
        """Return a copy with its own value buffer and output map.

        The input mesh and input arrays are shared, as are the (read-only)
        working surface, edge table and partition.
        """
        other = _copy.copy(self)
        if self._values is not None:
            other._values = self._values.copy()
        if self.output is not None:
            other.output = self.output.copy()
        return other
