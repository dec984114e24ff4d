#### check_profile_shapes.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

##################################

import numpy as np

from amf_tools.amf_errors import ShapeMismatch

def check_profile_shapes(pressure, **profiles):
    '''
    Checks that every profile has the vertical coordinate along its first axis

    Parameters
    ----------
    pressure : array_like
        1D vector of standard pressures (hPa)
    **profiles : array_like
        Profile arrays keyed by name, e.g. no2_profile=..., temperature=...

    Raises
    ------
    ShapeMismatch
        For the first profile whose leading dimension differs from len(pressure)
    '''
    n_levels = np.size(pressure)

    for name, profile in profiles.items():
        profile_shape = np.shape(profile)
        if len(profile_shape) == 0 or profile_shape[0] != n_levels:
            raise ShapeMismatch("{} must have the vertical coordinate along the first axis. Ensure {}.shape[0] == len(pressure) ({}); shape was {}".format(name, name, n_levels, profile_shape), variable=name)
