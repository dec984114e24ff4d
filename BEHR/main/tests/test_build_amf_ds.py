"""Tests for build_amf_ds.py and the omi_amf_ak2_for_granule entry point."""

import sys

import numpy as np
import pytest
import xarray as xr

from amf_tools.behr_min_amf_val import behr_min_amf_val
from amf_tools.build_amf_ds import PIXEL_OUTPUTS, PROFILE_OUTPUTS, build_amf_ds
from amf_tools.omi_amf_ak2 import omi_amf_ak2
from omi_amf_ak2_for_granule import BEHR_PRESSURES, demo_granule_ds, main, omi_amf_ak2_for_granule

###############################################################################
# FIXTURES
###############################################################################


@pytest.fixture
def granule_ds() -> xr.Dataset:
    """Return a small synthetic granule."""
    return demo_granule_ds(n_mirror_step=2, n_xtrack=3)


###############################################################################
# TESTS
###############################################################################


def test_outputs_added(granule_ds: xr.Dataset) -> None:
    """Every output is added with units and a description."""
    amf_ds = build_amf_ds(granule_ds)

    for name, _, _ in list(PIXEL_OUTPUTS.values()) + list(PROFILE_OUTPUTS.values()):
        assert name in amf_ds
        assert "units" in amf_ds[name].attrs
        assert "description" in amf_ds[name].attrs

    assert amf_ds["amf"].dims == ("mirror_step", "xtrack")
    assert amf_ds["averaging_kernel"].dims == ("mirror_step", "xtrack", "swt_level_ext")
    assert amf_ds.sizes["swt_level_ext"] == BEHR_PRESSURES.size + 3
    assert amf_ds.attrs["min_amf_value"] == behr_min_amf_val()


def test_values_match_core(granule_ds: xr.Dataset) -> None:
    """The Dataset holds the omi_amf_ak2 results with the vertical coordinate moved last."""
    amf_ds = build_amf_ds(granule_ds)
    out = omi_amf_ak2(
        granule_ds["surface_pressure"].data,
        granule_ds["tropopause_pressure"].data,
        granule_ds["cloud_pressure"].data,
        granule_ds["cloud_fraction"].data,
        granule_ds["cloud_radiance_fraction"].data,
        granule_ds["pressure"].data,
        np.moveaxis(granule_ds["scattering_weights_clear"].data, -1, 0),
        np.moveaxis(granule_ds["scattering_weights_cloudy"].data, -1, 0),
        np.moveaxis(granule_ds["temperature_profile"].data, -1, 0),
        np.moveaxis(granule_ds["gas_profile"].data, -1, 0),
    )

    np.testing.assert_array_equal(amf_ds["amf"].data, out["amf"])
    np.testing.assert_array_equal(amf_ds["amf_visible"].data, out["amf_vis"])
    np.testing.assert_array_equal(amf_ds["averaging_kernel"].data, np.moveaxis(out["avg_kernel"], 0, -1))


def test_dimension_order_does_not_matter(granule_ds: xr.Dataset) -> None:
    """Profiles stored level-first give the same AMFs."""
    transposed = granule_ds.transpose("swt_level", "xtrack", "mirror_step")
    np.testing.assert_array_equal(build_amf_ds(transposed)["amf"].data, build_amf_ds(granule_ds)["amf"].data)


def test_demo_granule_is_physical(granule_ds: xr.Dataset) -> None:
    """The synthetic granule gives finite AMFs above the floor."""
    amf_ds = build_amf_ds(granule_ds)

    assert np.all(amf_ds["pixel_status"].data == "computed")
    assert np.all(np.isfinite(amf_ds["amf"].data))
    assert np.all(amf_ds["amf"].data >= behr_min_amf_val())
    assert np.all(amf_ds["amf_visible"].data >= behr_min_amf_val())


def test_no_kernels(granule_ds: xr.Dataset) -> None:
    """Without compute_ak no extended dimension is added."""
    amf_ds = build_amf_ds(granule_ds, compute_ak=False)
    assert "averaging_kernel" not in amf_ds
    assert "swt_level_ext" not in amf_ds.dims


def test_missing_variable(granule_ds: xr.Dataset) -> None:
    """Missing inputs are reported by name."""
    with pytest.raises(ValueError, match="cloud_pressure"):
        build_amf_ds(granule_ds.drop_vars("cloud_pressure"))


def test_serial_entry_point(granule_ds: xr.Dataset) -> None:
    """The entry point runs the serial algorithm for one worker."""
    amf_ds = omi_amf_ak2_for_granule(granule_ds, n_workers=1, verbosity=0)
    np.testing.assert_array_equal(amf_ds["amf"].data, build_amf_ds(granule_ds)["amf"].data)


def test_bad_worker_count(granule_ds: xr.Dataset) -> None:
    """Zero workers is rejected."""
    with pytest.raises(ValueError, match="n_workers"):
        omi_amf_ak2_for_granule(granule_ds, n_workers=0)


def test_main(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture) -> None:
    """The command line entry prints the AMFs of the synthetic granule."""
    monkeypatch.setattr(sys, "argv", ["omi_amf_ak2_for_granule.py", "--n_mirror_step", "2", "--n_xtrack", "2", "--verbosity", "0"])
    assert main() == 0
    assert "amf_visible" in capsys.readouterr().out
