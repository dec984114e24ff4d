"""Tests for combine_scattering_weights.py."""

import numpy as np
import pytest

from amf_tools.amf_errors import NanMaskMismatch
from amf_tools.combine_scattering_weights import SW_FLOOR_VALUE, combine_scattering_weights

###############################################################################
# FIXTURES
###############################################################################


@pytest.fixture
def one_pixel() -> dict:
    """Return extended profiles for one pixel with the surface at 900 hPa and the cloud at 600 hPa."""
    return {
        "sw_plev": np.array([[1000.0], [800.0], [500.0], [np.nan]]),
        "sw_clr": np.array([[1.0], [1.0], [1.0], [np.nan]]),
        "sw_cld": np.array([[2.0], [2.0], [2.0], [np.nan]]),
        "p_terr": np.array([900.0]),
        "p_cld": np.array([600.0]),
        "cld_rad_frac": np.array([0.5]),
        "amf": np.array([2.0]),
    }


###############################################################################
# TESTS
###############################################################################


def test_floor_below_surface_and_cloud(one_pixel: dict) -> None:
    """Clear weights below the surface and cloudy weights below the cloud top are floored."""
    _, sc_weights_clr, sc_weights_cld, _ = combine_scattering_weights(**one_pixel)

    np.testing.assert_array_equal(sc_weights_clr[:3, 0], [SW_FLOOR_VALUE, 1.0, 1.0])
    np.testing.assert_array_equal(sc_weights_cld[:3, 0], [SW_FLOOR_VALUE, SW_FLOOR_VALUE, 2.0])
    assert np.isnan(sc_weights_clr[3, 0]) and np.isnan(sc_weights_cld[3, 0])


def test_blend_and_kernel(one_pixel: dict) -> None:
    """Weights are blended by radiance cloud fraction and divided by the AMF."""
    sc_weights, _, _, avg_kernel = combine_scattering_weights(**one_pixel)

    np.testing.assert_allclose(sc_weights[:3, 0], [SW_FLOOR_VALUE, 0.5, 1.5])
    np.testing.assert_allclose(avg_kernel[:3, 0], [SW_FLOOR_VALUE / 2, 0.25, 0.75])
    assert np.isnan(sc_weights[3, 0]) and np.isnan(avg_kernel[3, 0])


def test_inputs_not_modified(one_pixel: dict) -> None:
    """The floor is applied to copies."""
    sw_clr = one_pixel["sw_clr"].copy()
    combine_scattering_weights(**one_pixel)
    np.testing.assert_array_equal(one_pixel["sw_clr"], sw_clr)


def test_custom_floor(one_pixel: dict) -> None:
    """The floor value can be overridden."""
    _, sc_weights_clr, _, _ = combine_scattering_weights(floor_value=0.0, **one_pixel)
    assert sc_weights_clr[0, 0] == 0.0


def test_nan_mask_mismatch(one_pixel: dict) -> None:
    """A NaN in only one of the clear and cloudy weights raises."""
    one_pixel["sw_clr"][1, 0] = np.nan
    with pytest.raises(NanMaskMismatch, match="pixel"):
        combine_scattering_weights(**one_pixel)


def test_inf_counts_as_missing(one_pixel: dict) -> None:
    """An infinite weight facing a finite one is a mask mismatch too."""
    one_pixel["sw_cld"][2, 0] = np.inf
    with pytest.raises(NanMaskMismatch):
        combine_scattering_weights(**one_pixel)


def test_keeps_pixel_grid_shape() -> None:
    """Outputs have the extended levels first and the pixel grid after."""
    n_ext = 6
    sw_plev = np.tile(np.array([1000.0, 500.0, 100.0, np.nan, np.nan, np.nan])[:, None, None], (1, 2, 3))
    sw = np.where(np.isnan(sw_plev), np.nan, 1.0)
    outputs = combine_scattering_weights(
        sw_plev, sw, sw, np.full((2, 3), 1000.0), np.full((2, 3), np.nan), np.zeros((2, 3)), np.ones((2, 3))
    )
    for out in outputs:
        assert out.shape == (n_ext, 2, 3)
    np.testing.assert_array_equal(outputs[3][:3, 1, 2], [1.0, 1.0, 1.0])
