import logging
from pathlib import Path

import numpy as np
import pytest

import gridsubset
from gridsubset import (
    GridNotFoundError,
    LatLonRect,
    ParameterError,
    Range,
    SubsetRequest,
    read_data_slice,
    read_region,
    read_volume_data,
    set_log_level,
    setup_logging,
    subset,
)


@pytest.fixture
def latlon_file(tmp_path, latlon_ds):
    path = tmp_path / "latlon.nc"
    latlon_ds.to_netcdf(path)
    return path


class TestSubset:
    def test_lon_lat_ranges(self, temp_grid, latlon_ds):
        view = subset(temp_grid, lon_range=(120.2, 130.2), lat_range=(-10.2, 10.2))
        assert view.shape == (2, 27, 21, 11)
        np.testing.assert_array_equal(view.read_all(), latlon_ds["temp"].values[:, :, 20:41, 20:31])

    def test_lat_range_only(self, temp_grid):
        view = subset(temp_grid, lat_range=(-10.2, 10.2))
        assert view.shape == (2, 27, 21, 76)

    def test_rect(self, temp_grid):
        view = subset(temp_grid, lat_lon_rect=LatLonRect.from_bounds(120.2, -10.2, 130.2, 10.2), xy_stride=2)
        assert view.ranges["y"] == Range(20, 40, 2)
        assert view.ranges["x"] == Range(20, 30, 2)

    def test_axis_strides_override_xy_stride(self, temp_grid):
        assert subset(temp_grid, xy_stride=3, x_stride=1).shape == (2, 27, 21, 76)

    def test_request_supersedes(self, temp_grid):
        view = subset(temp_grid, xy_stride=5, request=SubsetRequest(vertical_stride=3))
        assert view.shape == (2, 9, 61, 76)

    def test_rect_and_ranges(self, temp_grid):
        with pytest.raises(ParameterError):
            subset(temp_grid, lat_lon_rect=LatLonRect.from_bounds(120.0, 0.0, 130.0, 10.0), lon_range=(120, 130))

    def test_read_helpers(self, temp_grid, latlon_ds):
        view = subset(temp_grid, vertical_range=Range(2, 20), vertical_stride=3)
        values = latlon_ds["temp"].values
        np.testing.assert_array_equal(read_volume_data(view, 1), values[1, 2:21:3])
        np.testing.assert_array_equal(read_data_slice(view, 0, 1), values[0, 5])


class TestReadRegion:
    def test_region(self, latlon_file, latlon_ds):
        data = read_region(latlon_file, "temp", lon_range=(120.2, 130.2), lat_range=(-10.2, 10.2),
                           time_range=Range(1, 1))
        np.testing.assert_array_equal(data, latlon_ds["temp"].values[1:2, :, 20:41, 20:31])

    def test_missing_grid(self, latlon_file):
        with pytest.raises(GridNotFoundError) as excinfo:
            read_region(latlon_file, "salinity")
        assert "temp" in excinfo.value.available_grids


class TestLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger("gridsubset")
        handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
        yield
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate

    def test_setup_logging(self, tmp_path, temp_grid):
        log_file = tmp_path / "logs" / "gridsubset.log"
        setup_logging(level="DEBUG", log_file=log_file)
        subset(temp_grid, vertical_stride=3)
        for handler in logging.getLogger("gridsubset").handlers:
            handler.flush()
        assert "Subsetting 'temp'" in log_file.read_text()

    def test_set_log_level(self):
        set_log_level("ERROR")
        assert logging.getLogger("gridsubset").level == logging.ERROR


def test_version():
    assert gridsubset.__version__ == "1.0.0"


def test_readme_is_package_description():
    root = Path(__file__).resolve().parents[1]
    assert 'readme = "README.md"' in (root / "pyproject.toml").read_text()
    assert (root / "README.md").read_text().startswith("# gridsubset")
