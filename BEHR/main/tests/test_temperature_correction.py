"""Tests for temperature_correction.py."""

import numpy as np
import pytest

from amf_tools.temperature_correction import temperature_correction


def test_reference_temperature_gives_one() -> None:
    """At 220 K the cross section needs no correction."""
    assert temperature_correction(220.0) == pytest.approx(1.0)


def test_behr_linear_factor() -> None:
    """The BEHR factor falls by 0.003 per kelvin above 220 K."""
    alpha = temperature_correction(np.array([220.0, 320.0, 120.0]))
    np.testing.assert_allclose(alpha, [1.0, 0.7, 1.3])


@pytest.mark.parametrize(
    "temperature, expected",
    [
        (600.0, 0.1),  # 1 - 0.003 * 380 is negative
        (-3500.0, 10.0),  # 1 + 0.003 * 3720 is above the upper bound
    ],
)
def test_clamped_to_bounds(temperature: float, expected: float) -> None:
    """Factors outside [0.1, 10] are clamped."""
    assert temperature_correction(temperature) == pytest.approx(expected)


def test_unclamped_when_requested() -> None:
    """With clamp=False the raw factor is returned."""
    assert temperature_correction(600.0, clamp=False) == pytest.approx(1 - 0.003 * 380)


def test_nan_temperature_stays_nan() -> None:
    """A missing temperature gives a missing factor, not a bound."""
    alpha = temperature_correction(np.array([np.nan, 220.0, np.nan]))
    assert np.isnan(alpha[0]) and np.isnan(alpha[2])
    assert alpha[1] == pytest.approx(1.0)


def test_all_nan_temperature_profile() -> None:
    """An entirely missing temperature profile gives an entirely missing factor."""
    alpha = temperature_correction(np.full((4, 2), np.nan))
    assert np.all(np.isnan(alpha))
