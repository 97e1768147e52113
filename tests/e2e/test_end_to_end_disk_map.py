from surface_mapper import (
    CotangentWeights,
    Mesh,
    SymmetricLinearSurfaceMapper,
    disk_boundary_values,
)
import meshio
import numpy as np
import pytest

# Run only when explicitly asked, e.g.:
#   pytest -m "e2e"
pytestmark = [pytest.mark.e2e, pytest.mark.slow]


def _hemisphere(n_rings: int = 12, n_sectors: int = 48) -> Mesh:
    """Unit hemisphere triangulated on polar rings around the north pole."""
    pts = [[0.0, 0.0, 1.0]]
    angles = 2.0 * np.pi * np.arange(n_sectors) / n_sectors
    for k in range(1, n_rings + 1):
        theta = 0.5 * np.pi * k / n_rings
        for a in angles:
            pts.append(
                [np.sin(theta) * np.cos(a), np.sin(theta) * np.sin(a), np.cos(theta)]
            )

    def ring(k: int, s: int) -> int:
        return 1 + (k - 1) * n_sectors + (s % n_sectors)

    tris = [[0, ring(1, s), ring(1, s + 1)] for s in range(n_sectors)]
    for k in range(1, n_rings):
        for s in range(n_sectors):
            a0, a1 = ring(k, s), ring(k, s + 1)
            b0, b1 = ring(k + 1, s), ring(k + 1, s + 1)
            tris.append([a0, b0, b1])
            tris.append([a0, b1, a1])
    return Mesh(np.array(pts), polys=np.array(tris))


def _signed_areas(mesh: Mesh, uv: np.ndarray) -> np.ndarray:
    t = mesh.triangles()
    a, b, c = uv[t[:, 0]], uv[t[:, 1]], uv[t[:, 2]]
    return 0.5 * (
        (b[:, 0] - a[:, 0]) * (c[:, 1] - a[:, 1]) - (b[:, 1] - a[:, 1]) * (c[:, 0] - a[:, 0])
    )


def test_end_to_end_tutte_disk_map(tmp_path):
    """
    Map a hemisphere onto the unit disk with uniform weights and write VTU.
    A Tutte embedding with a convex boundary has no folded triangles.
    """
    mesh = _hemisphere()
    values, mask = disk_boundary_values(mesh)

    mapper = SymmetricLinearSurfaceMapper(mesh, values, mask, tolerance=1e-10)
    uv_map = mapper.run()

    report = mapper.last_report
    assert report is not None and report.converged
    assert report.number_of_free_points == 1 + 11 * 48

    uv = np.asarray(uv_map.values)
    assert uv.shape == (mesh.number_of_points, 2)
    assert (np.linalg.norm(uv, axis=1) <= 1.0 + 1e-9).all()

    areas = _signed_areas(mesh, uv)
    assert (np.abs(areas) > 0.0).all()
    assert (np.sign(areas) == np.sign(areas[0])).all()

    out = tmp_path / "hemisphere_uv.vtu"
    uv_map.write(str(out), name="uv")
    back = meshio.read(str(out))
    assert back.points.shape[0] == mesh.number_of_points
    np.testing.assert_allclose(back.point_data["uv"], uv)


def test_end_to_end_harmonic_disk_map():
    """Cotangent weights on the same surface converge and stay consistent with Tutte."""
    mesh = _hemisphere(8, 32)
    values, mask = disk_boundary_values(mesh)

    harmonic = SymmetricLinearSurfaceMapper(
        mesh, values, mask, weights=CotangentWeights(), tolerance=1e-10
    )
    uv = np.asarray(harmonic.run().values)
    assert harmonic.last_report is not None and harmonic.last_report.converged

    # rotational symmetry pins the pole to the disk center
    np.testing.assert_allclose(uv[0], [0.0, 0.0], atol=1e-8)
    # boundary stays where it was put
    np.testing.assert_allclose(uv[mask == 1], values[mask == 1])
    # rings map to concentric circles
    radii = np.linalg.norm(uv[1:], axis=1).reshape(8, 32)
    np.testing.assert_allclose(radii, radii[:, :1].repeat(32, axis=1), rtol=1e-6)
