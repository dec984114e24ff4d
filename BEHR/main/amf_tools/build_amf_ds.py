#### build_amf_ds.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

#########################

import numpy as np
import xarray as xr

from amf_tools.omi_amf_ak2 import omi_amf_ak2
from amf_tools.behr_min_amf_val import behr_min_amf_val
from amf_tools.combine_scattering_weights import SW_FLOOR_VALUE

# Input variable names expected in granule_ds
INPUT_VARS = {
    'p_terr': 'surface_pressure',
    'p_tropo': 'tropopause_pressure',
    'p_cld': 'cloud_pressure',
    'cld_frac': 'cloud_fraction',
    'cld_rad_frac': 'cloud_radiance_fraction',
    'pressure': 'pressure',
    'd_amf_clr': 'scattering_weights_clear',
    'd_amf_cld': 'scattering_weights_cloudy',
    'temperature': 'temperature_profile',
    'no2_profile': 'gas_profile',
}

# Output name in omi_amf_ak2 -> (variable name, units, description)
PIXEL_OUTPUTS = {
    'amf': ('amf', '1', 'air mass factor for the total column, including the ghost column below clouds'),
    'amf_vis': ('amf_visible', '1', 'air mass factor for the visible column only, excluding the ghost column below clouds'),
    'amf_cld': ('amf_cloudy', '1', 'cloudy air mass factor relative to the to-ground modeled column'),
    'amf_clr': ('amf_clear', '1', 'clear sky air mass factor'),
    'vcd_gnd': ('vcd_ground', 'molecules/cm^2', 'modeled vertical column density from the surface to the tropopause'),
    'vcd_cld': ('vcd_cloud', 'molecules/cm^2', 'modeled vertical column density from the cloud top to the tropopause; 0 when the cloud is not used'),
    'pixel_status': ('pixel_status', '1', "'computed', or 'skipped' when the profile or scattering weights were all NaN"),
}

PROFILE_OUTPUTS = {
    'sc_weights': ('scattering_weights', '1', 'scattering weights weighted by cloud radiance fraction, on the extended pressure levels'),
    'sc_weights_clr': ('scattering_weights_clear_interp', '1', 'temperature corrected clear sky scattering weights on the extended pressure levels, floored below the surface'),
    'sc_weights_cld': ('scattering_weights_cloudy_interp', '1', 'temperature corrected cloudy scattering weights on the extended pressure levels, floored below the cloud top'),
    'avg_kernel': ('averaging_kernel', '1', 'averaging kernel for the total column AMF'),
    'no2_profile_interp': ('gas_profile_interp', '1', 'NO2 profile on the extended pressure levels'),
    'sw_plev': ('scattering_weight_pressure', 'hPa', 'standard pressures plus surface, cloud, and tropopause pressure; NaN padded at the end'),
}

def build_amf_ds(granule_ds: xr.Dataset, pixel_dims=('mirror_step', 'xtrack'), level_dim: str='swt_level', compute_ak: bool=True, min_amf=None, n_workers: int=1, verbosity: int=0):
    '''
    Adds AMFs and, optionally, averaging kernels to a granule Dataset

    Parameters
    ----------
    granule_ds : xr.Dataset
        Dataset with the variables listed in INPUT_VARS. 'pressure' is along level_dim only; the
        profiles have level_dim and pixel_dims in any order.
    pixel_dims : tuple (Optional)
        Names of the pixel dimensions. Default is ('mirror_step', 'xtrack').
    level_dim : str (Optional)
        Name of the vertical dimension. Default is 'swt_level'.
    compute_ak : bool (Optional)
        Whether to add scattering weights and averaging kernels. Default is True.
    min_amf : float (Optional)
        Minimum AMF. Default is behr_min_amf_val().
    n_workers : int (Optional)
        If greater than 1, distribute the pixels across this many ipyparallel engines. Default is 1.
    verbosity : int (Optional)
        Controls print statements

    Returns
    -------
    amf_ds : xr.Dataset
        Copy of granule_ds with the variables of PIXEL_OUTPUTS and, if compute_ak, PROFILE_OUTPUTS
        on the new dimension level_dim + '_ext'
    '''
    pixel_dims = list(pixel_dims)

    missing = [v for v in INPUT_VARS.values() if v not in granule_ds]
    if len(missing) > 0:
        raise ValueError('granule_ds is missing the variables {}'.format(missing))

    inputs = {}
    for arg, v in INPUT_VARS.items():
        if arg == 'pressure':
            inputs[arg] = granule_ds[v].data
        elif granule_ds[v].ndim == len(pixel_dims):
            inputs[arg] = granule_ds[v].transpose(*pixel_dims).data
        else:
            # Vertical coordinate first
            inputs[arg] = granule_ds[v].transpose(level_dim, *pixel_dims).data

    if min_amf is None:
        min_amf = behr_min_amf_val()

    if verbosity > 1:
        print('Computing AMFs')

    if n_workers > 1:
        from amf_tools_par.omi_amf_ak2_par import omi_amf_ak2_par
        amfs = omi_amf_ak2_par(n_workers=n_workers, compute_ak=compute_ak, min_amf=min_amf, verbosity=verbosity, **inputs)
    else:
        amfs = omi_amf_ak2(compute_ak=compute_ak, min_amf=min_amf, verbosity=verbosity, **inputs)

    amf_ds = granule_ds.copy()

    for k, (name, units, description) in PIXEL_OUTPUTS.items():
        amf_ds[name] = (pixel_dims, amfs[k], {'units': units, 'description': description})

    if compute_ak:
        ext_dim = level_dim + '_ext'
        for k, (name, units, description) in PROFILE_OUTPUTS.items():
            # Put the vertical coordinate last to match the input profiles
            data = np.moveaxis(amfs[k], 0, -1)
            amf_ds[name] = (pixel_dims + [ext_dim], data, {'units': units, 'description': description})

    amf_ds = amf_ds.assign_attrs({
                                  'min_amf_value': min_amf,
                                  'scattering_weight_floor': SW_FLOOR_VALUE
    })

    return amf_ds
