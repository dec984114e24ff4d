#### integ_pr2.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

######################

import warnings
import numpy as np
from scipy import constants

from amf_tools.amf_errors import IntegrationNanError

M_AIR = 0.02897 # kg / mol

# molecules cm^-2 per (hPa * mixing ratio): 100 Pa/hPa * N_A / (g * M_air), then m^-2 -> cm^-2
COLUMN_CONVERSION = 100 * constants.Avogadro / (constants.g * M_AIR) / 1e4

def _interp_pressure(f, p, p_new):
    '''
    Interpolates f(p) to the scalar pressure p_new, extrapolating from the end layers when outside the grid

    Between two levels f is assumed to be a power law in pressure, i.e. linear in log-log space.
    If the bracketing values are not both positive, linear interpolation in pressure is used.
    '''
    n = p.size
    if n == 1:
        return f[0]

    on_grid = np.flatnonzero(p == p_new)
    if on_grid.size > 0:
        return f[on_grid[0]]

    # p is decreasing; find k such that p[k] >= p_new >= p[k+1]
    k = np.searchsorted(-p, -p_new, side='right') - 1
    k = min(max(k, 0), n - 2)

    p1, p2 = p[k], p[k+1]
    f1, f2 = f[k], f[k+1]

    if f1 > 0 and f2 > 0:
        b = np.log(f2 / f1) / np.log(p2 / p1)
        return f1 * (p_new / p1) ** b

    return f1 + (f2 - f1) * (p_new - p1) / (p2 - p1)

def _layer_integral(p1, p2, f1, f2):
    # Integral of f dp from p2 up to p1 (p1 > p2)
    if f1 > 0 and f2 > 0 and f1 != f2:
        b = np.log(f2 / f1) / np.log(p2 / p1)
        if np.abs(b + 1) < 1e-6:
            return f1 * p1 * np.log(p1 / p2)
        return f1 * p1 / (b + 1) * (1 - (p2 / p1) ** (b + 1))

    # Equal values or a non-positive value: the power law is either constant or undefined
    return 0.5 * (f1 + f2) * (p1 - p2)

def integ_pr2(mixing_ratio, pressure, p_surface, p_top=None, fatal_if_nans=False, interp_pres=None):
    '''
    Integrates a mixing ratio profile over pressure between a surface and top pressure

    Parameters
    ----------
    mixing_ratio : array_like
        1D profile (parts per part, or any quantity multiplied by one), one value per pressure
    pressure : array_like
        1D vector of pressures (hPa), strictly decreasing (surface first)
    p_surface : float
        Lower (higher pressure) integration bound (hPa)
    p_top : float (Optional)
        Upper (lower pressure) integration bound (hPa). Default is the last value of pressure.
    fatal_if_nans : bool (Optional)
        If True, raise IntegrationNanError when a level strictly between the bounds is NaN.
        Otherwise those levels are removed with a warning. NaN levels outside the bounds
        are never used. Default is False.
    interp_pres : array_like (Optional)
        Pressures to insert into the grid. If given, the profile interpolated onto the
        extended grid is returned along with the column. Inserted values are interpolated
        from the levels with data; NaN levels stay NaN.

    Returns
    -------
    vcd : float
        Column density (molecules/cm^2 when mixing_ratio is parts per part)
    p_out : np.ndarray
        Only if interp_pres is given. Pressure grid with the new pressures inserted, decreasing.
    f_out : np.ndarray
        Only if interp_pres is given. mixing_ratio on p_out.
    '''
    f = np.asarray(mixing_ratio, dtype=float)
    p = np.asarray(pressure, dtype=float)

    if f.ndim != 1 or p.ndim != 1:
        raise ValueError('mixing_ratio and pressure must be 1D vectors. Input shapes were {} and {}'.format(f.shape, p.shape))
    if f.size != p.size:
        raise ValueError('mixing_ratio and pressure must have the same length. Input lengths were {} and {}'.format(f.size, p.size))
    if p.size > 1 and not np.all(np.diff(p) < 0):
        raise ValueError('pressure must be strictly decreasing')

    if p_top is None:
        p_top = p[-1]

    # Interpolated values only use levels with data, so a NaN level outside the bounds
    # never reaches the column or the inserted pressures
    valid = ~np.isnan(f)
    p_valid = p[valid]
    f_valid = f[valid]

    #### Column ####
    if not (np.isfinite(p_surface) and np.isfinite(p_top)):
        vcd = np.float64(np.nan)

    elif p_surface <= p_top:
        vcd = np.float64(0.0)

    else:
        inside = (p < p_surface) & (p > p_top)

        nans = inside & ~valid
        if np.any(nans):
            if fatal_if_nans:
                raise IntegrationNanError('NaNs found between {} and {} hPa; {} of {} levels inside the bounds are NaN'.format(p_surface, p_top, nans.sum(), inside.sum()), variable='mixing_ratio')

            warnings.warn('Removing {} NaN values from the integration between {} and {} hPa'.format(nans.sum(), p_surface, p_top))

        if p_valid.size == 0:
            vcd = np.float64(np.nan)
        else:
            inside = inside & valid
            node_p = np.concatenate(([p_surface], p[inside], [p_top]))
            node_f = np.concatenate(([_interp_pressure(f_valid, p_valid, p_surface)], f[inside], [_interp_pressure(f_valid, p_valid, p_top)]))

            layers = [_layer_integral(node_p[z], node_p[z+1], node_f[z], node_f[z+1]) for z in range(node_p.size - 1)]
            vcd = np.sum(layers) * COLUMN_CONVERSION

    if interp_pres is None:
        return vcd

    #### Interpolation onto the extended grid ####
    new_pres = np.unique(np.asarray(interp_pres, dtype=float).ravel())
    new_pres = new_pres[np.isfinite(new_pres) & ~np.isin(new_pres, p)]

    if p_valid.size == 0:
        new_vals = np.full(new_pres.size, np.nan)
    else:
        new_vals = np.array([_interp_pressure(f_valid, p_valid, pn) for pn in new_pres], dtype=float)

    p_out = np.concatenate((p, new_pres))
    f_out = np.concatenate((f, new_vals))

    order = np.argsort(-p_out, kind='stable')
    return vcd, p_out[order], f_out[order]
