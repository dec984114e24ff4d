#### pad_extended_profile.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

##################################

# An extended profile holds the standard levels plus up to N_INSERTED_LEVELS
# breakpoints (surface, cloud, and tropopause pressure). When a breakpoint is
# already a standard pressure the integrator returns a shorter vector, so the
# valid values always come first and the tail is NaN padding.

import numpy as np

from amf_tools.amf_errors import ExtendedProfileShapeError

N_INSERTED_LEVELS = 3

def extended_size(n_levels: int):
    return n_levels + N_INSERTED_LEVELS

def pad_extended_profile(values, n_levels: int, name: str='profile'):
    '''
    Right-pads a resampled profile with NaNs to the fixed extended length

    Parameters
    ----------
    values : array_like
        Profile returned by integ_pr2 on the extended pressure grid
    n_levels : int
        Number of standard pressure levels
    name : str (Optional)
        Variable name used in the error message

    Returns
    -------
    padded : np.ndarray
        1D array of length n_levels + N_INSERTED_LEVELS
    '''
    values = np.asarray(values, dtype=float)
    n_ext = extended_size(n_levels)

    if values.ndim != 1:
        raise ExtendedProfileShapeError('{} must be a column vector, got shape {}'.format(name, values.shape), variable=name)
    if values.size > n_ext:
        raise ExtendedProfileShapeError('{} has {} values, more than the {} levels of the extended grid'.format(name, values.size, n_ext), variable=name)

    padded = np.full(n_ext, np.nan, dtype=float)
    padded[:values.size] = values
    return padded

def extended_profile_length(values):
    '''Number of values before the trailing NaN padding'''
    values = np.asarray(values, dtype=float)
    finite = np.flatnonzero(~np.isnan(values))
    if finite.size == 0:
        return 0
    return int(finite[-1]) + 1
