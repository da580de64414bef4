import numpy as np
import pytest

from gridsubset import (
    AxisType,
    CoordinateAxis,
    CoordinateError,
    GridCoordSystem,
    LatLonProjection,
    ProjectionRect,
    ProjProjection,
    Range,
)
from gridsubset.core.exceptions import IncompatibleAxisRequestError
from gridsubset.subsetting import build_coord_system, derive_axis


class _ShiftedProjection(LatLonProjection):
    def get_default_map_area(self, x_axis, y_axis):
        area = super().get_default_map_area(x_axis, y_axis)
        return ProjectionRect(area.x_min + 1.0, area.y_min, area.x_max + 1.0, area.y_max)


class TestBuildCoordSystem:
    def test_identity_shares_everything(self, temp_grid):
        parent = temp_grid.get_coordinate_system()
        derived = build_coord_system(parent)
        assert derived.time_axis is parent.time_axis
        assert derived.vertical_axis is parent.vertical_axis
        assert derived.y_axis is parent.y_axis
        assert derived.x_axis is parent.x_axis
        assert derived.vertical_transform is parent.vertical_transform
        assert derived.projection is parent.projection

    def test_full_range_is_shared(self, temp_grid):
        parent = temp_grid.get_coordinate_system()
        derived = build_coord_system(parent, t_range=Range(0, 1), y_range=Range(0, 60))
        assert derived.time_axis is parent.time_axis
        assert derived.y_axis is parent.y_axis

    def test_strided_vertical(self, temp_grid):
        parent = temp_grid.get_coordinate_system()
        derived = build_coord_system(parent, z_range=Range(0, 26, 3))
        assert derived.vertical_axis.size == 9
        np.testing.assert_array_equal(derived.vertical_axis.values, parent.vertical_axis.values[::3])
        assert derived.vertical_axis.units == parent.vertical_axis.units

        transform = derived.get_vertical_transform()
        assert transform.num_levels == 9
        assert transform.get_unit_string() == "Pa"
        assert transform.get_unit_string() == parent.vertical_transform.get_unit_string()
        np.testing.assert_array_equal(
            transform.level_terms["a"], parent.vertical_transform.level_terms["a"][::3]
        )
        assert transform.field_terms == {"ps": "ps"}
        assert derived.time_axis is parent.time_axis

    def test_bounding_box_matches_map_area(self, temp_grid, lcc_grid):
        for grid, y_range, x_range in (
            (temp_grid, Range(10, 30, 2), Range(5, 70, 5)),
            (lcc_grid, Range(3, 20), Range(0, 39, 4)),
        ):
            derived = build_coord_system(grid.get_coordinate_system(), y_range=y_range, x_range=x_range)
            area = derived.projection.get_default_map_area(derived.x_axis, derived.y_axis)
            assert area.isclose(derived.get_bounding_box())

    def test_missing_axis(self, latlon_gds):
        orog = latlon_gds.find_grid("orog").get_coordinate_system()
        with pytest.raises(IncompatibleAxisRequestError, match="vertical"):
            build_coord_system(orog, z_range=Range(0, 0))

    def test_map_area_mismatch(self):
        y = CoordinateAxis.regular("lat", 0.0, 1.0, 5, "degrees_north", AxisType.LAT)
        x = CoordinateAxis.regular("lon", 0.0, 1.0, 5, "degrees_east", AxisType.LON)
        gcs = GridCoordSystem(y_axis=y, x_axis=x, projection=_ShiftedProjection())
        with pytest.raises(CoordinateError, match="map area"):
            build_coord_system(gcs, x_range=Range(1, 3))

    def test_axis_past_projection_plane(self):
        # Mercator on a sphere covers |x| < pi * R, about 20015 km
        proj = ProjProjection("+proj=merc +lon_0=0 +R=6371229 +units=m +no_defs", xy_units="km")
        x = CoordinateAxis.regular("x", 15000.0, 1000.0, 10, "km", AxisType.GEO_X)
        y = CoordinateAxis.regular("y", -1000.0, 500.0, 5, "km", AxisType.GEO_Y)
        gcs = GridCoordSystem(y_axis=y, x_axis=x, projection=proj)
        assert build_coord_system(gcs, x_range=Range(0, 4)).x_axis.max_value == 19000.0
        with pytest.raises(CoordinateError, match="map area"):
            build_coord_system(gcs, x_range=Range(0, 8))

    def test_longitudes_outside_projection_window(self):
        y = CoordinateAxis.regular("lat", -10.0, 1.0, 21, "degrees_north", AxisType.LAT)
        x = CoordinateAxis.regular("lon", 0.0, 1.0, 360, "degrees_east", AxisType.LON)
        gcs = GridCoordSystem(y_axis=y, x_axis=x, projection=LatLonProjection(center_lon=0.0))
        build_coord_system(gcs, x_range=Range(10, 20))
        with pytest.raises(CoordinateError, match="map area"):
            build_coord_system(gcs, x_range=Range(200, 210))


class TestDeriveAxis:
    def test_absent(self):
        assert derive_axis(None, None, "time") is None
        with pytest.raises(IncompatibleAxisRequestError):
            derive_axis(None, Range(0, 0), "time")

    def test_inconsistent_size(self):
        axis = CoordinateAxis.regular("x", 0.0, 1.0, 10, "m", AxisType.GEO_X)
        with pytest.raises(IncompatibleAxisRequestError, match="size 10"):
            derive_axis(axis, Range(0, 12), "x")

    def test_section(self):
        axis = CoordinateAxis.regular("x", 0.0, 1.0, 10, "m", AxisType.GEO_X)
        assert derive_axis(axis, None, "x") is axis
        assert derive_axis(axis, Range(0, 9), "x") is axis
        np.testing.assert_array_equal(derive_axis(axis, Range(1, 9, 4), "x").values, [1.0, 5.0, 9.0])
