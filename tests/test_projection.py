import numpy as np
import pyproj
import pytest

from gridsubset import (
    CoordinateAxis,
    AxisType,
    CoordinateError,
    LatLonProjection,
    LatLonRect,
    ProjProjection,
    ProjectionRect,
)
from gridsubset.coordinates import projection_for

from conftest import LCC_MAPPING


@pytest.fixture
def lcc():
    return ProjProjection.from_cf(LCC_MAPPING, xy_units="km")


class TestProjProjection:
    def test_origin(self, lcc):
        x, y = lcc.forward(35.0, -100.0)
        np.testing.assert_allclose([x, y], [0.0, 0.0], atol=1e-6)

    def test_round_trip(self, lcc):
        lats = np.array([30.0, 35.0, 40.0, 45.0])
        lons = np.array([-110.0, -100.0, -90.0, -95.0])
        x, y = lcc.forward(lats, lons)
        back_lat, back_lon = lcc.inverse(x, y)
        np.testing.assert_allclose(back_lat, lats, atol=1e-8)
        np.testing.assert_allclose(back_lon, lons, atol=1e-8)

    def test_km_scaling(self, lcc):
        meters = ProjProjection(lcc.crs, "m")
        x_km, y_km = lcc.forward(40.0, -90.0)
        x_m, y_m = meters.forward(40.0, -90.0)
        np.testing.assert_allclose([x_km * 1000.0, y_km * 1000.0], [x_m, y_m])

    def test_equality(self, lcc):
        assert lcc == ProjProjection.from_cf(LCC_MAPPING, xy_units="kilometers")
        assert lcc != ProjProjection(lcc.crs, "m")
        assert not lcc.is_lat_lon

    def test_invalid_crs(self):
        with pytest.raises(CoordinateError, match="Invalid CRS"):
            ProjProjection("definitely not a crs")

    def test_unsupported_units(self):
        with pytest.raises(CoordinateError, match="units"):
            ProjProjection("EPSG:3857", "furlong")

    def test_rect_samples_curved_edges(self, lcc):
        rect = LatLonRect.from_bounds(-110.0, 30.0, -90.0, 40.0)
        (prect,) = lcc.lat_lon_to_proj_rect(rect)
        # The northern parallel bulges above its corners in a conic projection
        _, y_corner = lcc.forward(40.0, -110.0)
        _, y_middle = lcc.forward(40.0, -100.0)
        assert y_middle > y_corner
        assert prect.y_max > float(y_corner)
        assert prect.y_max == pytest.approx(float(y_middle), abs=0.1)

    def test_rect_split_at_seam(self):
        proj = ProjProjection(pyproj.CRS.from_epsg(3857), "m")
        rect = LatLonRect.from_bounds(170.0, -10.0, -170.0, 10.0)
        prects = proj.lat_lon_to_proj_rect(rect)
        assert len(prects) == 2

    def test_lat_lon_bounding_box(self, lcc):
        bb = lcc.proj_to_lat_lon_bb(ProjectionRect(-100.0, -100.0, 100.0, 100.0))
        assert bb.contains(35.0, -100.0)
        assert bb.width < 10.0
        assert bb.height < 10.0


class TestLatLonProjection:
    def test_forward_wraps(self):
        proj = LatLonProjection(center_lon=180.0)
        x, y = proj.forward(10.0, -170.0)
        assert float(x) == 190.0
        assert float(y) == 10.0
        lat, lon = proj.inverse(190.0, 10.0)
        assert float(lon) == -170.0

    def test_split_at_own_seam(self):
        rect = LatLonRect.from_bounds(170.0, -10.0, -170.0, 10.0)
        centred = LatLonProjection(center_lon=0.0).lat_lon_to_proj_rect(rect)
        assert centred == [
            ProjectionRect(170.0, -10.0, 180.0, 10.0),
            ProjectionRect(-180.0, -10.0, -170.0, 10.0),
        ]
        pacific = LatLonProjection(center_lon=180.0).lat_lon_to_proj_rect(rect)
        assert len(pacific) == 1
        assert (pacific[0].x_min, pacific[0].x_max) == pytest.approx((170.0, 190.0))

    def test_default_map_area(self):
        x = CoordinateAxis.regular("lon", 100.0, 1.0, 5, "degrees_east", AxisType.LON)
        y = CoordinateAxis.regular("lat", 0.0, 1.0, 3, "degrees_north", AxisType.LAT)
        area = LatLonProjection().get_default_map_area(x, y)
        assert area == ProjectionRect(99.5, -0.5, 104.5, 2.5)


def test_projection_for():
    assert isinstance(projection_for(None), LatLonProjection)
    assert isinstance(projection_for("EPSG:3857"), ProjProjection)
