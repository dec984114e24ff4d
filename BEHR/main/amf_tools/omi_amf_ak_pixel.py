#### omi_amf_ak_pixel.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

##############################

import numpy as np

from amf_tools.integ_pr2 import integ_pr2
from amf_tools.pad_extended_profile import pad_extended_profile, extended_size

PIXEL_COMPUTED = 'computed'
PIXEL_SKIPPED = 'skipped'

def skipped_pixel(n_levels: int):
    '''Result of a pixel that lacks the data to be retrieved: every output is NaN'''
    n_ext = extended_size(n_levels)
    return {
        'status': PIXEL_SKIPPED,
        'vcd_gnd': np.nan,
        'vcd_cld': np.nan,
        'amf_clr': np.nan,
        'amf_cld': np.nan,
        'sw_plev': np.full(n_ext, np.nan),
        'sw_clr': np.full(n_ext, np.nan),
        'sw_cld': np.full(n_ext, np.nan),
        'no2_profile_interp': np.full(n_ext, np.nan),
    }

def cloud_is_used(p_tropo, p_cld, cld_frac, cld_rad_frac):
    # The cloudy part only counts if the cloud has weight in both senses and sits below the tropopause
    return cld_frac != 0 and cld_rad_frac != 0 and p_cld > p_tropo

def omi_amf_ak_pixel(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, alpha, no2_profile):
    '''
    Computes the clear and cloudy AMFs and the interpolated scattering weights for one pixel

    Parameters
    ----------
    p_terr, p_tropo, p_cld : float
        Terrain, tropopause, and cloud pressure (hPa)
    cld_frac, cld_rad_frac : float
        Geometric and radiance cloud fraction
    pressure : np.ndarray
        Standard pressures (hPa), decreasing
    d_amf_clr, d_amf_cld : np.ndarray
        Clear and cloudy box AMFs on pressure
    alpha : np.ndarray
        Temperature correction factor on pressure
    no2_profile : np.ndarray
        NO2 mixing ratio profile on pressure

    Returns
    -------
    dict
        'status' plus the scalars vcd_gnd, vcd_cld, amf_clr, amf_cld and the extended vectors
        sw_plev, sw_clr, sw_cld, no2_profile_interp (length len(pressure) + 3, NaN-padded)
    '''
    n_levels = np.size(pressure)

    clear_sw = no2_profile * d_amf_clr * alpha
    cloudy_sw = no2_profile * d_amf_cld * alpha

    if np.all(np.isnan(no2_profile)) or np.all(np.isnan(clear_sw)) or np.all(np.isnan(cloudy_sw)):
        # Do not retrieve pixels missing either set of scattering weights (e.g. no surface
        # albedo for the clear sky weights), otherwise a partly cloudy pixel would get a
        # clear sky AMF of 0
        return skipped_pixel(n_levels)

    use_cloud = cloud_is_used(p_tropo, p_cld, cld_frac, cld_rad_frac)

    vcd_gnd = integ_pr2(no2_profile, pressure, p_terr, p_tropo, fatal_if_nans=True)

    if use_cloud:
        vcd_cld = integ_pr2(no2_profile, pressure, p_cld, p_tropo, fatal_if_nans=True)
    else:
        vcd_cld = 0.0

    if cld_frac == 1 and cld_rad_frac == 1:
        amf_clr = 0.0
    else:
        amf_clr = integ_pr2(clear_sw, pressure, p_terr, p_tropo, fatal_if_nans=True) / vcd_gnd

    if use_cloud:
        cld_scd = integ_pr2(cloudy_sw, pressure, p_cld, p_tropo, fatal_if_nans=True)
        amf_cld = cld_scd / vcd_gnd
    else:
        amf_cld = 0.0

    # Interpolate to the terrain, cloud, and tropopause pressures so that the published
    # scattering weights reproduce the AMF
    breakpoints = [p_terr, p_cld, p_tropo]
    _, _, no2_interp = integ_pr2(no2_profile, pressure, p_terr, p_tropo, fatal_if_nans=True, interp_pres=breakpoints)
    _, sw_plev, sw_clr = integ_pr2(d_amf_clr * alpha, pressure, p_terr, p_tropo, fatal_if_nans=True, interp_pres=breakpoints)
    _, _, sw_cld = integ_pr2(d_amf_cld * alpha, pressure, p_cld, p_tropo, fatal_if_nans=True, interp_pres=breakpoints)

    return {
        'status': PIXEL_COMPUTED,
        'vcd_gnd': vcd_gnd,
        'vcd_cld': vcd_cld,
        'amf_clr': amf_clr,
        'amf_cld': amf_cld,
        'sw_plev': pad_extended_profile(sw_plev, n_levels, 'sw_plev'),
        'sw_clr': pad_extended_profile(sw_clr, n_levels, 'sw_clr'),
        'sw_cld': pad_extended_profile(sw_cld, n_levels, 'sw_cld'),
        'no2_profile_interp': pad_extended_profile(no2_interp, n_levels, 'no2_profile_interp'),
    }
