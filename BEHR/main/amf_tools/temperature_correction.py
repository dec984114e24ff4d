#### temperature_correction.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

####################################

import numpy as np

ALPHA_MIN = 0.1
ALPHA_MAX = 10
T_SIGMA = 220 # K, temperature of the NO2 cross section

def temperature_correction(temperature, clamp=True):
    '''
    Temperature correction factor for the NO2 cross section, applied to scattering weights

    Uses the linear correction of Laughner et al. (2018), equation 6.

    Parameters
    ----------
    temperature : array_like
        Temperature (K), any shape
    clamp : bool (Optional)
        If True (default), limit the factor to [0.1, 10]. NaN temperatures stay NaN.

    Returns
    -------
    c : np.ndarray
        Correction factor with the shape of temperature
    '''
    temperature = np.asarray(temperature, dtype=float)

    c = 1 - 0.003 * (temperature - T_SIGMA)

    if clamp:
        # np.maximum/np.minimum return NaN if either input is NaN, so levels without
        # temperature data keep a NaN factor instead of being set to a bound
        c = np.minimum(np.maximum(c, ALPHA_MIN), ALPHA_MAX)

    return c
