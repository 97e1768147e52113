"""Exception types raised by surface_mapper."""

from __future__ import annotations


class SurfaceMapperError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(SurfaceMapperError, ValueError):
    """A mapper was set up with inputs that cannot define a map.

    Raised by `SurfaceMapper.initialize` before any solve is attempted, e.g.
    for a missing mesh, a mesh without polygons, or per-point arrays whose
    length differs from the number of mesh points.
    """
