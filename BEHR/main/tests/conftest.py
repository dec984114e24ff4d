"""Fixtures shared by the AMF tests."""

import numpy as np
import pytest

###############################################################################
# FIXTURES
###############################################################################


@pytest.fixture
def toy_pressure() -> np.ndarray:
    """Return a three level standard pressure grid (hPa)."""
    return np.array([1000.0, 500.0, 100.0])


@pytest.fixture
def toy_grid(toy_pressure: np.ndarray) -> dict:
    """
    Return omi_amf_ak2 inputs for a 2x2 pixel grid on the toy pressure grid.

    (0, 0) clear sky, (0, 1) fully cloudy with the cloud at 500 hPa,
    (1, 0) no temperature data, (1, 1) geometric cloud with zero radiance fraction.
    """
    n_levels = toy_pressure.size
    profile_shape = (n_levels, 2, 2)

    no2_profile = np.full(profile_shape, 1e15)
    d_amf_clr = np.ones(profile_shape)
    d_amf_cld = np.full(profile_shape, 2.0)
    temperature = np.full(profile_shape, 220.0)
    temperature[:, 1, 0] = np.nan

    return {
        "p_terr": np.full((2, 2), 1000.0),
        "p_tropo": np.full((2, 2), 100.0),
        "p_cld": np.array([[np.nan, 500.0], [np.nan, 500.0]]),
        "cld_frac": np.array([[0.0, 1.0], [0.0, 0.5]]),
        "cld_rad_frac": np.array([[0.0, 1.0], [0.0, 0.0]]),
        "pressure": toy_pressure,
        "d_amf_clr": d_amf_clr,
        "d_amf_cld": d_amf_cld,
        "temperature": temperature,
        "no2_profile": no2_profile,
    }
