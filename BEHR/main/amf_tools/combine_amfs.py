#### combine_amfs.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

#########################

import numpy as np

from amf_tools.behr_min_amf_val import behr_min_amf_val

def clamp_min_amf(values, min_amf=None):
    '''
    Raises finite AMFs below min_amf up to min_amf. NaNs are left as NaN.
    '''
    if min_amf is None:
        min_amf = behr_min_amf_val()

    values = np.array(values, dtype=float)
    not_nan = ~np.isnan(values)
    values[not_nan] = np.maximum(values[not_nan], min_amf)
    return values

def combine_amfs(amf_clr, amf_cld, vcd_gnd, vcd_cld, cld_frac, cld_rad_frac, min_amf=None):
    '''
    Combines clear and cloudy AMFs into total column and visible-only AMFs

    Parameters
    ----------
    amf_clr, amf_cld : array_like
        Clear and cloudy AMFs, both relative to the to-ground VCD
    vcd_gnd : array_like
        Modeled VCD from the surface to the tropopause
    vcd_cld : array_like
        Modeled VCD from the cloud top to the tropopause (0 when the cloud is not used)
    cld_frac : array_like
        Geometric cloud fraction
    cld_rad_frac : array_like
        Cloud radiance fraction
    min_amf : float (Optional)
        Floor for the AMFs. Default is behr_min_amf_val().

    Returns
    -------
    amf : np.ndarray
        AMF that yields the total column, including the ghost column below clouds
    amf_vis : np.ndarray
        AMF that yields only the visible column
    '''
    amf_clr = np.asarray(amf_clr, dtype=float)
    amf_cld = np.asarray(amf_cld, dtype=float)
    vcd_gnd = np.asarray(vcd_gnd, dtype=float)
    vcd_cld = np.asarray(vcd_cld, dtype=float)
    cld_frac = np.asarray(cld_frac, dtype=float)
    cld_rad_frac = np.asarray(cld_rad_frac, dtype=float)

    # The total column AMF is the modeled (visible) SCD over the total VCD,
    # so the ghost column is corrected for multiplicatively
    amf = cld_rad_frac * amf_cld + (1 - cld_rad_frac) * amf_clr
    amf = clamp_min_amf(amf, min_amf)

    # Swap the total VCD in the denominator for the visible VCD. The visible VCD weights
    # the clear and cloudy columns by the geometric cloud fraction so that the brighter
    # cloudy part of the pixel is not given extra weight.
    amf_vis = amf * vcd_gnd / (vcd_cld * cld_frac + vcd_gnd * (1 - cld_frac))
    amf_vis = clamp_min_amf(amf_vis, min_amf)

    return amf, amf_vis
