# noqa: D100
import numpy as np
import pytest
import xarray as xr

from gridsubset import GridDataset

LATLON_SHAPE = (2, 27, 61, 76)
LCC_SHAPE = (3, 30, 40)

LCC_MAPPING = {
    "grid_mapping_name": "lambert_conformal_conic",
    "standard_parallel": [25.0, 40.0],
    "longitude_of_central_meridian": -100.0,
    "latitude_of_projection_origin": 35.0,
    "earth_radius": 6371229.0,
}


def make_latlon_dataset():
    """
    4-D lat/lon dataset with a hybrid sigma-pressure vertical axis.

    ``temp`` is ``arange`` over (time, lev, lat, lon) so every element is its
    own flat index. ``ps`` is 3-D and ``orog`` 2-D.
    """
    nt, nz, ny, nx = LATLON_SHAPE
    time = xr.DataArray(
        [0.0, 6.0], dims="time",
        attrs={"units": "hours since 2000-01-01 00:00:00", "axis": "T", "standard_name": "time"},
    )
    lev = xr.DataArray(
        np.linspace(1.0, 0.1, nz), dims="lev",
        attrs={
            "units": "1",
            "axis": "Z",
            "positive": "down",
            "standard_name": "atmosphere_hybrid_sigma_pressure_coordinate",
            "formula_terms": "a: a b: b ps: ps",
        },
    )
    lat = xr.DataArray(np.linspace(-30.0, 30.0, ny), dims="lat", attrs={"units": "degrees_north"})
    lon = xr.DataArray(100.0 + np.arange(nx, dtype=float), dims="lon", attrs={"units": "degrees_east"})

    temp = np.arange(np.prod(LATLON_SHAPE), dtype=np.float32).reshape(LATLON_SHAPE)
    ds = xr.Dataset(
        {
            "temp": (("time", "lev", "lat", "lon"), temp, {"units": "K", "long_name": "temperature"}),
            "ps": (("time", "lat", "lon"), np.full((nt, ny, nx), 1.0e5), {"units": "Pa"}),
            "orog": (("lat", "lon"), np.zeros((ny, nx)), {"units": "m"}),
            "a": (("lev",), np.linspace(0.0, 5000.0, nz), {"units": "Pa"}),
            "b": (("lev",), np.linspace(1.0, 0.0, nz), {"units": "1"}),
        },
        coords={"time": time, "lev": lev, "lat": lat, "lon": lon},
    )
    return ds


def make_lcc_dataset():
    """3-D Lambert conformal dataset with x/y in km, centred on the projection origin."""
    nt, ny, nx = LCC_SHAPE
    x = xr.DataArray(
        -200.0 + 10.0 * np.arange(nx), dims="x",
        attrs={"units": "km", "standard_name": "projection_x_coordinate", "axis": "X"},
    )
    y = xr.DataArray(
        -150.0 + 10.0 * np.arange(ny), dims="y",
        attrs={"units": "km", "standard_name": "projection_y_coordinate", "axis": "Y"},
    )
    time = xr.DataArray(
        [0.0, 1.0, 2.0], dims="time",
        attrs={"units": "days since 2010-06-01", "axis": "T"},
    )
    data = np.arange(np.prod(LCC_SHAPE), dtype=np.float64).reshape(LCC_SHAPE)
    ds = xr.Dataset(
        {
            "precip": (("time", "y", "x"), data, {"units": "mm", "grid_mapping": "lcc"}),
            "lcc": ((), 0, dict(LCC_MAPPING)),
        },
        coords={"time": time, "y": y, "x": x},
    )
    return ds


def make_global_dataset():
    """2-D global grid with longitudes 0..359."""
    lat = xr.DataArray(np.arange(-89.5, 90.0, 1.0), dims="lat", attrs={"units": "degrees_north"})
    lon = xr.DataArray(np.arange(0.0, 360.0, 1.0), dims="lon", attrs={"units": "degrees_east"})
    data = np.arange(lat.size * lon.size, dtype=np.float64).reshape(lat.size, lon.size)
    return xr.Dataset(
        {"sst": (("lat", "lon"), data, {"units": "K"})},
        coords={"lat": lat, "lon": lon},
    )


@pytest.fixture
def latlon_ds():
    return make_latlon_dataset()


@pytest.fixture
def lcc_ds():
    return make_lcc_dataset()


@pytest.fixture
def latlon_gds(latlon_ds):
    gds = GridDataset.from_xarray(latlon_ds)
    yield gds
    gds.close()


@pytest.fixture
def lcc_gds(lcc_ds):
    gds = GridDataset.from_xarray(lcc_ds)
    yield gds
    gds.close()


@pytest.fixture
def global_gds():
    gds = GridDataset.from_xarray(make_global_dataset())
    yield gds
    gds.close()


@pytest.fixture
def temp_grid(latlon_gds):
    return latlon_gds.find_grid("temp")


@pytest.fixture
def lcc_grid(lcc_gds):
    return lcc_gds.find_grid("precip")
