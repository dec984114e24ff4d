#### omi_amf_ak2_for_granule.py ####

# Last changed: 2026-10-19
# Location: BEHR/main

#####################################

import sys
import numpy as np
import xarray as xr

from amf_tools.build_amf_ds import build_amf_ds
from amf_tools.behr_min_amf_val import behr_min_amf_val

# Standard pressures of the BEHR scattering weight look-up table (hPa)
BEHR_PRESSURES = np.array([1020, 1015, 1010, 1005, 1000, 990, 980, 970, 960, 945, 925, 900, 875, 850, 825, 800, 770,
                           740, 700, 660, 620, 580, 540, 500, 450, 400, 350, 300, 250, 200, 150, 100, 50, 20, 5], dtype=float)

def demo_granule_ds(n_mirror_step: int=4, n_xtrack: int=6, seed: int=0):
    '''
    Builds a small synthetic granule with the variables build_amf_ds expects

    Parameters
    ----------
    n_mirror_step : int (Optional)
        Number of mirror steps (rows)
    n_xtrack : int (Optional)
        Number of across track positions (columns)
    seed : int (Optional)
        Seed for the random pixel values

    Returns
    -------
    xr.Dataset
    '''
    rng = np.random.default_rng(seed)
    shape_2d = (n_mirror_step, n_xtrack)
    p = BEHR_PRESSURES

    surface_pressure = rng.uniform(850, 1013, shape_2d)
    tropopause_pressure = rng.uniform(100, 250, shape_2d)
    cloud_fraction = rng.uniform(0, 1, shape_2d)
    # Cloudy part of a pixel is brighter, so the radiance fraction exceeds the geometric one
    cloud_radiance_fraction = np.minimum(1.5 * cloud_fraction, 1)
    cloud_pressure = rng.uniform(300, 900, shape_2d)

    # Mixing ratio falling off with a 1.5 km scale height above a free tropospheric background
    z = -7.4 * np.log(p / 1013) # km
    gas_profile = 1e-10 * (2e-1 + 5 * np.exp(-z / 1.5))
    temperature_profile = np.maximum(288 - 6.5 * z, 217)

    # Scattering weights increasing with altitude; cloudy weights enhanced above the cloud
    sw_clear = 0.6 + 0.25 * np.log(1013 / p)
    sw_cloudy = 1.2 + 0.3 * np.log(1013 / p)

    profile_shape = shape_2d + (p.size,)

    granule_ds = xr.Dataset(
        {
            'surface_pressure': (['mirror_step', 'xtrack'], surface_pressure, {'units': 'hPa'}),
            'tropopause_pressure': (['mirror_step', 'xtrack'], tropopause_pressure, {'units': 'hPa'}),
            'cloud_pressure': (['mirror_step', 'xtrack'], cloud_pressure, {'units': 'hPa'}),
            'cloud_fraction': (['mirror_step', 'xtrack'], cloud_fraction, {'units': '1'}),
            'cloud_radiance_fraction': (['mirror_step', 'xtrack'], cloud_radiance_fraction, {'units': '1'}),
            'pressure': (['swt_level'], p, {'units': 'hPa'}),
            'gas_profile': (['mirror_step', 'xtrack', 'swt_level'], np.broadcast_to(gas_profile, profile_shape).copy(), {'units': 'parts per part'}),
            'temperature_profile': (['mirror_step', 'xtrack', 'swt_level'], np.broadcast_to(temperature_profile, profile_shape).copy(), {'units': 'K'}),
            'scattering_weights_clear': (['mirror_step', 'xtrack', 'swt_level'], np.broadcast_to(sw_clear, profile_shape).copy(), {'units': '1'}),
            'scattering_weights_cloudy': (['mirror_step', 'xtrack', 'swt_level'], np.broadcast_to(sw_cloudy, profile_shape).copy(), {'units': '1'}),
        },
        coords={
            'mirror_step': np.arange(n_mirror_step),
            'xtrack': np.arange(n_xtrack),
        }
    )

    return granule_ds

def omi_amf_ak2_for_granule(granule_ds: xr.Dataset, compute_ak: bool=True, min_amf=None, n_workers: int=1, verbosity: int=2):
    '''
    Computes AMFs for a granule in serial (n_workers=1) or across ipyparallel engines
    '''
    n_workers = int(n_workers)

    if n_workers == 1:
        if verbosity > 0:
            print('Will process granule using serial algorithm')

    elif n_workers > 1:
        if verbosity > 0:
            print('Will process granule using parallel algorithm')

    else:
        raise ValueError("Value for 'n_workers' of {} is not greater than or equal to one.".format(n_workers))

    return build_amf_ds(granule_ds, compute_ak=compute_ak, min_amf=min_amf, n_workers=n_workers, verbosity=verbosity)

def main():
    import argparse

    parser = argparse.ArgumentParser(description='Compute BEHR AMFs and averaging kernels for a synthetic granule')
    parser.add_argument('--min_amf', type=float, default=behr_min_amf_val())
    parser.add_argument('--no_ak', action='store_true')
    parser.add_argument('--n_workers', type=int, default=1)
    parser.add_argument('--n_mirror_step', type=int, default=4)
    parser.add_argument('--n_xtrack', type=int, default=6)
    parser.add_argument('--verbosity', type=int, default=2)

    args = parser.parse_args()

    granule_ds = demo_granule_ds(args.n_mirror_step, args.n_xtrack)
    amf_ds = omi_amf_ak2_for_granule(granule_ds, compute_ak=not args.no_ak, min_amf=args.min_amf, n_workers=args.n_workers, verbosity=args.verbosity)

    print(amf_ds[['amf', 'amf_visible', 'amf_cloudy', 'amf_clear']])

    return 0

if __name__ == "__main__":
    sys.exit(main())
