import numpy as np
import pytest

from gridsubset import (
    LatLonPoint,
    LatLonRect,
    ParameterError,
    ProjectionRect,
    Range,
    SubsetRequest,
)


class TestLatLonRect:
    def test_normalises_lon_min(self):
        rect = LatLonRect(0.0, 190.0, 10.0, 20.0)
        assert rect.lon_min == -170.0
        assert rect.lon_max == -150.0
        assert not rect.crosses_seam

    @pytest.mark.parametrize(
        ("lat_min", "lon_min", "lat_max", "width"),
        [
            (-91.0, 0.0, 0.0, 10.0),
            (0.0, 0.0, 91.0, 10.0),
            (10.0, 0.0, 0.0, 10.0),
            (0.0, 0.0, 10.0, 361.0),
            (0.0, 0.0, 10.0, -1.0),
        ],
    )
    def test_invalid(self, lat_min, lon_min, lat_max, width):
        with pytest.raises(ParameterError):
            LatLonRect(lat_min, lon_min, lat_max, width)

    def test_from_width(self):
        rect = LatLonRect.from_width(20.0, 120.0, 5.0, 10.0)
        assert (rect.lat_min, rect.lat_max, rect.lon_min, rect.lon_max) == (20.0, 25.0, 120.0, 130.0)
        assert rect.height == 5.0

    def test_from_corners_crossing_seam(self):
        rect = LatLonRect.from_bounds(170.0, -10.0, -170.0, 10.0)
        assert rect.lon_min == 170.0
        assert rect.width == pytest.approx(20.0)
        assert rect.crosses_seam
        assert rect.upper_right.lon == pytest.approx(-170.0)

        west, east = rect.split_at_seam()
        assert (west.lon_min, west.lon_max) == pytest.approx((170.0, 180.0))
        assert (east.lon_min, east.lon_max) == pytest.approx((-180.0, -170.0))
        assert not west.crosses_seam
        assert not east.crosses_seam

    def test_all_longitudes(self):
        rect = LatLonRect(-10.0, -180.0, 10.0, 360.0)
        assert rect.is_all_longitudes
        assert rect.contains(0.0, 123.0)

    def test_contains(self):
        rect = LatLonRect.from_bounds(170.0, -10.0, -170.0, 10.0)
        assert rect.contains(0.0, 175.0)
        assert rect.contains(0.0, -175.0)
        assert rect.contains(0.0, 185.0)
        assert not rect.contains(0.0, 0.0)
        assert not rect.contains(20.0, 175.0)

    def test_boundary_points(self):
        rect = LatLonRect.from_width(0.0, 10.0, 10.0, 20.0)
        lats, lons = rect.boundary_points(5)
        assert lats.shape == lons.shape == (20,)
        assert lats.min() == 0.0 and lats.max() == 10.0
        assert lons.min() == 10.0 and lons.max() == 30.0

    def test_point_validation(self):
        with pytest.raises(ParameterError):
            LatLonPoint(95.0, 0.0)


class TestProjectionRect:
    def test_orders_corners(self):
        rect = ProjectionRect(5.0, 6.0, 0.0, 1.0)
        assert (rect.x_min, rect.y_min, rect.x_max, rect.y_max) == (0.0, 1.0, 5.0, 6.0)
        assert rect.width == 5.0
        assert rect.height == 5.0

    def test_from_points(self):
        rect = ProjectionRect.from_points([0.0, np.nan, 4.0, np.inf], [1.0, 2.0, -3.0, 0.0])
        assert rect == ProjectionRect(0.0, -3.0, 4.0, 1.0)
        assert ProjectionRect.from_points([np.nan], [np.nan]) is None

    def test_intersects_and_union(self):
        a = ProjectionRect(0.0, 0.0, 2.0, 2.0)
        b = ProjectionRect(1.0, 1.0, 3.0, 3.0)
        c = ProjectionRect(5.0, 5.0, 6.0, 6.0)
        assert a.intersects(b)
        assert not a.intersects(c)
        assert a.union(c) == ProjectionRect(0.0, 0.0, 6.0, 6.0)

    def test_isclose(self):
        a = ProjectionRect(0.0, 0.0, 1000.0, 1000.0)
        assert a.isclose(ProjectionRect(1e-9, 0.0, 1000.0, 1000.0))
        assert not a.isclose(ProjectionRect(1.0, 0.0, 1000.0, 1000.0))


class TestSubsetRequest:
    def test_identity(self):
        assert SubsetRequest().is_identity
        assert not SubsetRequest(vertical_stride=3).is_identity
        assert not SubsetRequest(time_range=Range(0, 0)).is_identity

    @pytest.mark.parametrize("name", ["time_stride", "vertical_stride", "y_stride", "x_stride"])
    def test_bad_stride(self, name):
        with pytest.raises(ParameterError, match="stride"):
            SubsetRequest(**{name: 0})

    def test_bad_time_range(self):
        with pytest.raises(ParameterError, match="time_range"):
            SubsetRequest(time_range=("2000-01-01", "2000-01-02", "2000-01-03"))
