"""The surface_mapper package computes maps of surface meshes onto a codomain.

Given values at a set of fixed mesh points (e.g. the boundary mapped onto a
circle), a mapper solves for the values at all remaining points by
minimizing a weighted graph-Laplacian energy, yielding planar or
vector-valued parameterizations of the surface.

Submodules:
  - assembly: Reduced weighted-Laplacian system assembly.
  - boundary: Boundary edges, points, masks, loops and disk boundary values.
  - config: Solver settings and log level.
  - edge_table: Unique undirected mesh edges.
  - errors: Exception types.
  - linear: Linear and symmetric linear surface mappers.
  - mapper: SurfaceMapper lifecycle (initialize/solve/finalize).
  - mapping: PiecewiseLinearMap output.
  - mesh: Polygonal surface mesh container and I/O.
  - partition: Fixed/free point partition.
  - solver: Warm-started conjugate gradient solve.
  - weights: Edge weight policies.

Classes:
  Mesh, EdgeTable, PointPartition, SurfaceMapper, LinearSurfaceMapper,
  SymmetricLinearSurfaceMapper, PiecewiseLinearMap, UniformWeights,
  InverseDistanceWeights, CotangentWeights, CallableWeights
"""

from .config import (
    Settings,
    config,
    configure,
    use,
    settings,
    set_log_level,
)

from surface_mapper.assembly import LinearSystem, assemble_symmetric_system
from surface_mapper.boundary import (
    boundary_edges,
    boundary_loops,
    boundary_mask,
    boundary_points,
    disk_boundary_values,
)
from surface_mapper.edge_table import EdgeTable
from surface_mapper.errors import ConfigurationError, SurfaceMapperError
from surface_mapper.linear import (
    LinearSurfaceMapper,
    SolveReport,
    SymmetricLinearSurfaceMapper,
)
from surface_mapper.mapper import SurfaceMapper
from surface_mapper.mapping import Mapping, PiecewiseLinearMap
from surface_mapper.mesh import Mesh
from surface_mapper.partition import PointPartition, PointRef
from surface_mapper.solver import SolveResult, solve_symmetric
from surface_mapper.weights import (
    CallableWeights,
    CotangentWeights,
    InverseDistanceWeights,
    UniformWeights,
    WeightPolicy,
)

__all__ = [
    # Core classes
    "Mesh",
    "EdgeTable",
    "PointPartition",
    "PointRef",
    "SurfaceMapper",
    "LinearSurfaceMapper",
    "SymmetricLinearSurfaceMapper",
    "SolveReport",
    "Mapping",
    "PiecewiseLinearMap",
    # Weights
    "WeightPolicy",
    "UniformWeights",
    "InverseDistanceWeights",
    "CotangentWeights",
    "CallableWeights",
    # Algorithms
    "LinearSystem",
    "assemble_symmetric_system",
    "SolveResult",
    "solve_symmetric",
    "boundary_edges",
    "boundary_points",
    "boundary_mask",
    "boundary_loops",
    "disk_boundary_values",
    # Errors
    "SurfaceMapperError",
    "ConfigurationError",
    # Configuration
    "Settings",
    "config",
    "configure",
    "use",
    "settings",
    "set_log_level",
]
