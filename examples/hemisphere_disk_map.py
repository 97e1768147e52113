import pyvista as pv
import numpy as np

from surface_mapper import (
    CotangentWeights,
    Mesh,
    SymmetricLinearSurfaceMapper,
    disk_boundary_values,
    set_log_level,
)

set_log_level("INFO")

# Upper half of a sphere: one boundary loop, disk topology
sphere = pv.Sphere(radius=10.0, center=(0, 0, 0), theta_resolution=60, phi_resolution=60)
hemisphere = sphere.clip(normal="-z", origin=(0, 0, 0)).triangulate().clean()

mesh = Mesh.from_polydata(hemisphere)
values, mask = disk_boundary_values(mesh)

# Harmonic (cotangent) map onto the unit disk
mapper = SymmetricLinearSurfaceMapper(
    mesh, values, mask, weights=CotangentWeights(), tolerance=1e-10
)
uv_map = mapper.run()
print(mapper.last_report.format())

# Attach the map and show the surface colored by u
flat = uv_map.to_mesh("uv").to_polydata()
flat.point_data["u"] = np.asarray(uv_map.values[:, 0])
uv_map.write("hemisphere_uv.vtu", name="uv")

plotter = pv.Plotter(shape=(1, 2))
plotter.subplot(0, 0)
plotter.add_mesh(flat, scalars="u", show_edges=True)
plotter.subplot(0, 1)
planar = flat.copy()
planar.points = np.column_stack([uv_map.values, np.zeros(uv_map.number_of_points)])
plotter.add_mesh(planar, scalars="u", show_edges=True)
plotter.link_views()
plotter.show()
