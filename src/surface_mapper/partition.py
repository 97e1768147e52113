"""Partition of mesh points into fixed (boundary condition) and free points.

Every point gets a compact ordinal within its class. Internally a single
signed lookup array stores both: a fixed point with ordinal ``k`` maps to
``-(k + 1)`` and a free point with ordinal ``r`` maps to ``r``. Callers that
want the class explicit use `classify`, which returns a `PointRef`.
"""
from __future__ import annotations

import logging
from typing import Any, NamedTuple
from numpy.typing import NDArray

import numpy as np

_LOGGER = logging.getLogger(__name__)


class PointRef(NamedTuple):
    """Class and compact ordinal of one mesh point."""

    fixed: bool
    index: int


class PointPartition:
    """Disjoint fixed/free point id lists with a bidirectional index.

    Args:
        fixed_mask (Any): Per-point flags; non-zero means fixed.

    Attributes:
        fixed_points (NDArray[Any]): Global ids of fixed points, ascending.
        free_points (NDArray[Any]): Global ids of free points, ascending.
        point_index (NDArray[Any]): Signed compact index per global point id.
    """

    fixed_points: NDArray[Any]
    free_points: NDArray[Any]
    point_index: NDArray[Any]

    def __init__(self, fixed_mask: Any) -> None:
        mask = np.asarray(fixed_mask)
        if mask.ndim > 1:
            # first component decides, as for multi-component scalars
            mask = mask.reshape(mask.shape[0], -1)[:, 0]
        is_fixed = mask != 0

        n = int(is_fixed.shape[0])
        fixed: list[int] = []
        free: list[int] = []
        index = np.empty(n, dtype=np.int64)
        for pt_id in range(n):
            if is_fixed[pt_id]:
                fixed.append(pt_id)
                index[pt_id] = -len(fixed)
            else:
                index[pt_id] = len(free)
                free.append(pt_id)

        self.fixed_points = np.asarray(fixed, dtype=np.int64)
        self.free_points = np.asarray(free, dtype=np.int64)
        self.point_index = index

        _LOGGER.debug(
            "PointPartition: points=%d fixed=%d free=%d",
            n,
            self.number_of_fixed_points,
            self.number_of_free_points,
        )

    @property
    def number_of_points(self) -> int:
        return int(self.point_index.shape[0])

    @property
    def number_of_fixed_points(self) -> int:
        return int(self.fixed_points.shape[0])

    @property
    def number_of_free_points(self) -> int:
        return int(self.free_points.shape[0])

    def is_fixed(self, pt_id: int) -> bool:
        return bool(self.point_index[pt_id] < 0)

    def is_free(self, pt_id: int) -> bool:
        return bool(self.point_index[pt_id] >= 0)

    def classify(self, pt_id: int) -> PointRef:
        """Return whether `pt_id` is fixed together with its ordinal in that class."""
        idx = int(self.point_index[pt_id])
        if idx < 0:
            return PointRef(True, -idx - 1)
        return PointRef(False, idx)

    def free_index(self, pt_id: int) -> int:
        """Ordinal among free points, or -1 if the point is fixed."""
        idx = int(self.point_index[pt_id])
        return idx if idx >= 0 else -1

    def fixed_index(self, pt_id: int) -> int:
        """Ordinal among fixed points, or -1 if the point is free."""
        idx = int(self.point_index[pt_id])
        return -idx - 1 if idx < 0 else -1

    def free_indices(self, pt_ids: Any) -> NDArray[Any]:
        """Vectorized `free_index`."""
        idx = self.point_index[np.asarray(pt_ids, dtype=np.int64)]
        return np.where(idx >= 0, idx, -1)

    def free_point_id(self, r: int) -> int:
        return int(self.free_points[r])

    def fixed_point_id(self, k: int) -> int:
        return int(self.fixed_points[k])
