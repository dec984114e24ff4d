#### omi_amf_ak2.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

########################

import warnings
import numpy as np

from amf_tools.check_profile_shapes import check_profile_shapes
from amf_tools.temperature_correction import temperature_correction
from amf_tools.omi_amf_ak_pixel import omi_amf_ak_pixel, PIXEL_SKIPPED
from amf_tools.pad_extended_profile import extended_size
from amf_tools.combine_amfs import combine_amfs
from amf_tools.combine_scattering_weights import combine_scattering_weights

PIXEL_SCALARS = ['vcd_gnd', 'vcd_cld', 'amf_clr', 'amf_cld']
PIXEL_PROFILES = ['sw_plev', 'sw_clr', 'sw_cld', 'no2_profile_interp']

def check_pixel_shapes(shapes: dict):
    # shapes maps variable name -> shape of its pixel grid
    if len(set(shapes.values())) > 1:
        raise ValueError('{} must all have the same shape. Input shapes were {}'.format(', '.join(shapes.keys()), ', '.join(str(s) for s in shapes.values())))

def prepare_pixel_inputs(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, temperature, no2_profile):
    '''
    Validates the inputs and flattens them to one column per pixel

    Returns
    -------
    pixel_inputs : dict
        Scalars as 1D arrays of length Npix, profiles as (Nlev, Npix) arrays, the temperature
        correction factor 'alpha' in place of temperature, and 'pressure'
    pixel_shape : tuple
        Shape of the pixel grid
    '''
    pressure = np.asarray(pressure, dtype=float)
    if pressure.ndim != 1:
        raise ValueError('pressure must be a 1D vector, got shape {}'.format(pressure.shape))
    if pressure.size > 1 and not np.all(np.diff(pressure) < 0):
        raise ValueError('pressure must be ordered from highest to lowest pressure')

    # Each profile is expected to be along the first dimension
    check_profile_shapes(pressure, no2_profile=no2_profile)
    check_profile_shapes(pressure, d_amf_clr=d_amf_clr, d_amf_cld=d_amf_cld)
    check_profile_shapes(pressure, temperature=temperature)

    pixel_shape = np.shape(p_terr)
    check_pixel_shapes({
                        'p_terr': pixel_shape,
                        'p_tropo': np.shape(p_tropo),
                        'p_cld': np.shape(p_cld),
                        'cld_frac': np.shape(cld_frac),
                        'cld_rad_frac': np.shape(cld_rad_frac),
                        'no2_profile[0]': np.shape(no2_profile)[1:],
                        'd_amf_clr[0]': np.shape(d_amf_clr)[1:],
                        'd_amf_cld[0]': np.shape(d_amf_cld)[1:],
                        'temperature[0]': np.shape(temperature)[1:]
    })

    n_levels = pressure.size

    # Keep NaNs in alpha so that levels without temperature data get fill value scattering weights
    alpha = temperature_correction(temperature, clamp=True)

    pixel_inputs = {
        'pressure': pressure,
        'p_terr': np.asarray(p_terr, dtype=float).ravel(),
        'p_tropo': np.asarray(p_tropo, dtype=float).ravel(),
        'p_cld': np.asarray(p_cld, dtype=float).ravel(),
        'cld_frac': np.asarray(cld_frac, dtype=float).ravel(),
        'cld_rad_frac': np.asarray(cld_rad_frac, dtype=float).ravel(),
        'd_amf_clr': np.asarray(d_amf_clr, dtype=float).reshape((n_levels, -1)),
        'd_amf_cld': np.asarray(d_amf_cld, dtype=float).reshape((n_levels, -1)),
        'alpha': alpha.reshape((n_levels, -1)),
        'no2_profile': np.asarray(no2_profile, dtype=float).reshape((n_levels, -1)),
    }

    return pixel_inputs, pixel_shape

def pixel_loop(pixel_inputs: dict, verbosity: int=0):
    '''
    Runs omi_amf_ak_pixel on every column of pixel_inputs

    Returns
    -------
    list
        One result dict per pixel, in the order of the flattened pixel grid
    '''
    pressure = pixel_inputs['pressure']
    num_pixels = pixel_inputs['p_terr'].size

    results = []
    for i in range(num_pixels):
        result = omi_amf_ak_pixel(
                                  pixel_inputs['p_terr'][i],
                                  pixel_inputs['p_tropo'][i],
                                  pixel_inputs['p_cld'][i],
                                  pixel_inputs['cld_frac'][i],
                                  pixel_inputs['cld_rad_frac'][i],
                                  pressure,
                                  pixel_inputs['d_amf_clr'][:, i],
                                  pixel_inputs['d_amf_cld'][:, i],
                                  pixel_inputs['alpha'][:, i],
                                  pixel_inputs['no2_profile'][:, i]
        )

        if verbosity > 3 and result['status'] == PIXEL_SKIPPED:
            print('Pixel {} skipped: profile or scattering weights are all NaN'.format(i))

        results.append(result)

    return results

def gather_pixel_results(results: list, pixel_shape: tuple, n_levels: int):
    '''
    Stacks per-pixel results into arrays with the shape of the pixel grid

    Each pixel's values are written to its own slot only.
    '''
    n_ext = extended_size(n_levels)
    num_pixels = int(np.prod(pixel_shape, dtype=int))

    if len(results) != num_pixels:
        raise ValueError('Expected {} pixel results, got {}'.format(num_pixels, len(results)))

    gathered = {}
    for v in PIXEL_SCALARS:
        gathered[v] = np.full(num_pixels, np.nan)
    for v in PIXEL_PROFILES:
        gathered[v] = np.full((n_ext, num_pixels), np.nan)
    pixel_status = np.full(num_pixels, '', dtype='<U8')

    for i, result in enumerate(results):
        pixel_status[i] = result['status']
        for v in PIXEL_SCALARS:
            gathered[v][i] = result[v]
        for v in PIXEL_PROFILES:
            gathered[v][:, i] = result[v]

    for v in PIXEL_SCALARS:
        gathered[v] = gathered[v].reshape(pixel_shape)
    for v in PIXEL_PROFILES:
        gathered[v] = gathered[v].reshape((n_ext,) + tuple(pixel_shape))
    gathered['pixel_status'] = pixel_status.reshape(pixel_shape)

    return gathered

def finish_amfs(gathered: dict, cld_frac, cld_rad_frac, p_terr, p_cld, compute_ak: bool=True, min_amf=None, verbosity: int=0):
    '''
    Combines the gathered clear and cloudy quantities into the output AMFs and, optionally, averaging kernels
    '''
    out = {}
    out['amf'], out['amf_vis'] = combine_amfs(
                                              gathered['amf_clr'],
                                              gathered['amf_cld'],
                                              gathered['vcd_gnd'],
                                              gathered['vcd_cld'],
                                              cld_frac,
                                              cld_rad_frac,
                                              min_amf=min_amf
    )
    for v in ['amf_cld', 'amf_clr', 'vcd_gnd', 'vcd_cld', 'pixel_status']:
        out[v] = gathered[v]

    num_skipped = int(np.sum(gathered['pixel_status'] == PIXEL_SKIPPED))
    if verbosity > 0 and num_skipped > 0:
        warnings.warn('{} of {} pixels skipped for missing profile or scattering weight data'.format(num_skipped, gathered['pixel_status'].size))

    if compute_ak:
        # Only done for the total column, on the assumption that most modelers compare
        # the total column against their modeled column
        if verbosity > 1:
            print('Computing scattering weights and averaging kernels')

        sc_weights, sc_weights_clr, sc_weights_cld, avg_kernel = combine_scattering_weights(
                                                                                            gathered['sw_plev'],
                                                                                            gathered['sw_clr'],
                                                                                            gathered['sw_cld'],
                                                                                            p_terr,
                                                                                            p_cld,
                                                                                            cld_rad_frac,
                                                                                            out['amf']
        )
        out['sc_weights'] = sc_weights
        out['sc_weights_clr'] = sc_weights_clr
        out['sc_weights_cld'] = sc_weights_cld
        out['avg_kernel'] = avg_kernel
        out['no2_profile_interp'] = gathered['no2_profile_interp']
        out['sw_plev'] = gathered['sw_plev']

    return out

def omi_amf_ak2(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, temperature, no2_profile, compute_ak: bool=True, min_amf=None, verbosity: int=0):
    '''
    Computes AMFs and averaging kernels for a grid of pixels from scattering weights and NO2 profiles

    Parameters
    ----------
    p_terr : array_like
        Surface pressure of each pixel (hPa)
    p_tropo : array_like
        Tropopause pressure of each pixel (hPa)
    p_cld : array_like
        Cloud pressure of each pixel (hPa)
    cld_frac : array_like
        Geometric cloud fraction of each pixel
    cld_rad_frac : array_like
        Cloud radiance fraction of each pixel
    pressure : array_like
        Standard pressures (hPa) of the profiles, from highest to lowest pressure
    d_amf_clr : array_like
        Clear sky scattering weights (box AMFs). The vertical coordinate must be along the first
        dimension; the other dimensions must match p_terr.
    d_amf_cld : array_like
        Cloudy scattering weights, same shape as d_amf_clr
    temperature : array_like
        Temperature profiles (K), same shape as d_amf_clr
    no2_profile : array_like
        NO2 mixing ratio profiles, same shape as d_amf_clr
    compute_ak : bool (Optional)
        Whether to compute scattering weights and averaging kernels. Default is True.
    min_amf : float (Optional)
        Minimum AMF. Default is behr_min_amf_val().
    verbosity : int (Optional)
        Controls print statements

    Returns
    -------
    dict
        'amf' (total column, includes the ghost column), 'amf_vis' (visible column only), 'amf_cld',
        'amf_clr', 'vcd_gnd', 'vcd_cld', 'pixel_status', and if compute_ak 'sc_weights',
        'sc_weights_clr', 'sc_weights_cld', 'avg_kernel', 'no2_profile_interp', 'sw_plev'.
        Extended profiles have len(pressure) + 3 levels along the first dimension.
    '''
    pixel_inputs, pixel_shape = prepare_pixel_inputs(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, temperature, no2_profile)

    if verbosity > 1:
        print('Integrating clear and cloudy columns for {} pixels'.format(pixel_inputs['p_terr'].size))

    results = pixel_loop(pixel_inputs, verbosity=verbosity)
    gathered = gather_pixel_results(results, pixel_shape, pixel_inputs['pressure'].size)

    return finish_amfs(gathered, cld_frac, cld_rad_frac, p_terr, p_cld, compute_ak=compute_ak, min_amf=min_amf, verbosity=verbosity)
