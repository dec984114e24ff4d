#### combine_scattering_weights.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

########################################

import numpy as np

from amf_tools.amf_errors import NanMaskMismatch

# Weights below the surface or cloud top are set to this rather than 0
SW_FLOOR_VALUE = 1e-30

def combine_scattering_weights(sw_plev, sw_clr, sw_cld, p_terr, p_cld, cld_rad_frac, amf, floor_value=SW_FLOOR_VALUE):
    '''
    Combines clear and cloudy scattering weights and derives the averaging kernel for the total column AMF

    Parameters
    ----------
    sw_plev : np.ndarray
        Extended pressure levels, vertical coordinate along axis 0 and pixels along the remaining axes
    sw_clr, sw_cld : np.ndarray
        Clear and cloudy scattering weights on sw_plev
    p_terr, p_cld : np.ndarray
        Terrain and cloud pressure, one per pixel
    cld_rad_frac : np.ndarray
        Cloud radiance fraction, one per pixel
    amf : np.ndarray
        Total column AMF, one per pixel
    floor_value : float (Optional)
        Value given to weights below the terrain (clear) or cloud top (cloudy). Default is 1e-30.

    Returns
    -------
    sc_weights : np.ndarray
        Radiance cloud fraction weighted scattering weights
    sc_weights_clr, sc_weights_cld : np.ndarray
        Clear and cloudy scattering weights with the floor applied
    avg_kernel : np.ndarray
        sc_weights divided by the AMF
    '''
    sw_plev = np.asarray(sw_plev, dtype=float)
    n_ext = sw_plev.shape[0]
    pixel_shape = sw_plev.shape[1:]

    sw_plev = sw_plev.reshape((n_ext, -1))
    sc_weights_clr = np.array(sw_clr, dtype=float).reshape((n_ext, -1))
    sc_weights_cld = np.array(sw_cld, dtype=float).reshape((n_ext, -1))
    p_terr = np.asarray(p_terr, dtype=float).ravel()
    p_cld = np.asarray(p_cld, dtype=float).ravel()
    cld_rad_frac = np.asarray(cld_rad_frac, dtype=float).ravel()
    amf = np.asarray(amf, dtype=float).ravel()

    sc_weights = np.full(sw_plev.shape, np.nan)
    avg_kernel = np.full(sw_plev.shape, np.nan)

    for i in range(sw_plev.shape[1]):
        sw_plev_i = sw_plev[:, i]
        finite_clr = np.isfinite(sc_weights_clr[:, i])
        finite_cld = np.isfinite(sc_weights_cld[:, i])

        # A finite weight in one vector and a NaN or inf in the other would blend real data with missing data
        if not np.all((finite_clr & finite_cld) == (finite_clr | finite_cld)):
            raise NanMaskMismatch('NaNs are not the same in the clear and cloudy scattering weights of pixel {}'.format(np.unravel_index(i, pixel_shape) if pixel_shape else i), variable='sw_clr')

        ii = (sw_plev_i > p_terr[i]) & ~np.isnan(sw_plev_i)
        sc_weights_clr[ii, i] = floor_value

        ii = (sw_plev_i > p_cld[i]) & ~np.isnan(sw_plev_i)
        sc_weights_cld[ii, i] = floor_value

        sc_weights[:, i] = cld_rad_frac[i] * sc_weights_cld[:, i] + (1 - cld_rad_frac[i]) * sc_weights_clr[:, i]
        avg_kernel[:, i] = sc_weights[:, i] / amf[i]

    out_shape = (n_ext,) + pixel_shape
    return sc_weights.reshape(out_shape), sc_weights_clr.reshape(out_shape), sc_weights_cld.reshape(out_shape), avg_kernel.reshape(out_shape)
