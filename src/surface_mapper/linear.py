"""Linear surface mappers.

`LinearSurfaceMapper` adds the iterative solver settings and the edge weight
contract. `SymmetricLinearSurfaceMapper` minimizes the weighted Dirichlet
energy ``sum_ij w_ij |f_i - f_j|^2`` over the free points: it assembles the
reduced weighted graph Laplacian and solves it with conjugate gradients,
warm-started from the current free values.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from .assembly import assemble_symmetric_system
from .config import Settings
from .mesh import Mesh
from .solver import solve_symmetric
from .mapper import SurfaceMapper
from .weights import UniformWeights, WeightPolicy

_LOGGER = logging.getLogger(__name__)


@dataclass
class SolveReport:
    """Diagnostics of one linear solve."""

    number_of_points: int
    number_of_free_points: int
    nonzeros: int
    number_of_components: int
    iterations: int
    error: float
    converged: bool = True

    def format(self) -> str:
        """Return the human-readable report block."""
        return "\n".join(
            [
                f"  No. of surface points             = {self.number_of_points}",
                f"  No. of free points                = {self.number_of_free_points}",
                f"  No. of non-zero stiffness values  = {self.nonzeros}",
                f"  Dimension of surface map codomain = {self.number_of_components}",
                f"  No. of iterations                 = {self.iterations}",
                f"  Estimated error                   = {self.error:g}",
            ]
        )


class LinearSurfaceMapper(SurfaceMapper):
    """Mapper whose free values solve a linear system built from edge weights.

    Args:
        max_iterations (Optional[int]): Iteration cap; <= 0 means solver
            default. Defaults to `settings.max_iterations`.
        tolerance (Optional[float]): Relative residual tolerance; <= 0 means
            solver default. Defaults to `settings.tolerance`.

    Other arguments are those of `SurfaceMapper`.
    """

    def __init__(
        self,
        mesh: Optional[Mesh] = None,
        values: Optional[Any] = None,
        fixed_mask: Optional[Any] = None,
        settings: Optional[Settings] = None,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
    ) -> None:
        super().__init__(mesh, values, fixed_mask, settings)
        self.max_iterations = (
            self.settings.max_iterations if max_iterations is None else int(max_iterations)
        )
        self.tolerance = self.settings.tolerance if tolerance is None else float(tolerance)
        self.last_report: Optional[SolveReport] = None

    def weight(self, i: int, j: int) -> float:
        """Weight of edge (i, j)."""
        raise NotImplementedError(f"{type(self).__name__}.weight")


class SymmetricLinearSurfaceMapper(LinearSurfaceMapper):
    """Linear mapper with symmetric edge weights.

    Args:
        weights (Optional[WeightPolicy]): Edge weight strategy. Defaults to
            `UniformWeights`.

    Other arguments are those of `LinearSurfaceMapper`.
    """

    def __init__(
        self,
        mesh: Optional[Mesh] = None,
        values: Optional[Any] = None,
        fixed_mask: Optional[Any] = None,
        weights: Optional[WeightPolicy] = None,
        settings: Optional[Settings] = None,
        max_iterations: Optional[int] = None,
        tolerance: Optional[float] = None,
    ) -> None:
        super().__init__(mesh, values, fixed_mask, settings, max_iterations, tolerance)
        self.weights: WeightPolicy = weights if weights is not None else UniformWeights()

    def weight(self, i: int, j: int) -> float:
        return self.weights(i, j)

    def solve(self) -> None:
        """Assemble and solve the reduced system, then store the free values."""
        surface = self.surface
        partition = self.partition
        values = self.values

        self.weights.prepare(surface, self.edge_table)
        system = assemble_symmetric_system(self.edge_table, partition, values, self.weight)

        report = SolveReport(
            number_of_points=surface.number_of_points,
            number_of_free_points=partition.number_of_free_points,
            nonzeros=system.nonzeros,
            number_of_components=self.number_of_components,
            iterations=0,
            error=0.0,
        )

        free = partition.free_points
        result = solve_symmetric(
            system.matrix,
            system.rhs,
            values[free],
            max_iterations=self.max_iterations,
            tolerance=self.tolerance,
        )
        values[free] = result.x

        report.iterations = result.iterations
        report.error = result.error
        report.converged = result.converged
        self.last_report = report

        if self.settings.verbose:
            _LOGGER.info("%s solve report:\n%s", type(self).__name__, report.format())
        else:
            _LOGGER.debug(
                "%s: iterations=%d error=%.3e nnz=%d",
                type(self).__name__,
                result.iterations,
                result.error,
                system.nonzeros,
            )
