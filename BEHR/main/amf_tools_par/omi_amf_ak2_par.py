#### omi_amf_ak2_par.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools_par

############################

# Parallel version of omi_amf_ak2

import numpy as np

from amf_tools.omi_amf_ak2 import prepare_pixel_inputs, pixel_loop, gather_pixel_results, finish_amfs

PIXEL_SCALAR_INPUTS = ['p_terr', 'p_tropo', 'p_cld', 'cld_frac', 'cld_rad_frac']
PIXEL_PROFILE_INPUTS = ['d_amf_clr', 'd_amf_cld', 'alpha', 'no2_profile']

def split_pixel_inputs(pixel_inputs: dict, n_blocks: int):
    '''
    Splits flattened pixel inputs into contiguous, disjoint blocks of pixels

    Parameters
    ----------
    pixel_inputs : dict
        Output of prepare_pixel_inputs
    n_blocks : int
        Number of blocks; blocks differ in size by at most one pixel

    Returns
    -------
    list
        pixel_inputs dicts, one per block, in pixel order. Empty blocks are dropped.
    '''
    if n_blocks < 1:
        raise ValueError("Value for 'n_blocks' of {} is not greater than or equal to one.".format(n_blocks))

    num_pixels = pixel_inputs['p_terr'].size
    blocks = []

    for idx in np.array_split(np.arange(num_pixels), n_blocks):
        if idx.size == 0:
            continue

        block = {'pressure': pixel_inputs['pressure']}
        for v in PIXEL_SCALAR_INPUTS:
            block[v] = pixel_inputs[v][idx]
        for v in PIXEL_PROFILE_INPUTS:
            block[v] = pixel_inputs[v][:, idx]
        blocks.append(block)

    return blocks

def concatenate_block_results(block_results: list):
    '''Flattens a list of per-block result lists back into one list in pixel order'''
    results = []
    for r in block_results:
        results.extend(r)
    return results

def omi_amf_ak2_par(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, temperature, no2_profile, n_workers: int=2, compute_ak: bool=True, min_amf=None, verbosity: int=0):
    '''
    Same as omi_amf_ak2, with the per-pixel integration distributed across ipyparallel engines

    Parameters
    ----------
    See omi_amf_ak2. In addition:

    n_workers : int (Optional)
        Number of engines to start. Default is 2.

    Returns
    -------
    dict
        Same keys and values as omi_amf_ak2
    '''
    import ipyparallel as ipp

    n_workers = int(n_workers)
    if n_workers < 1:
        raise ValueError("Value for 'n_workers' of {} is not greater than or equal to one.".format(n_workers))

    pixel_inputs, pixel_shape = prepare_pixel_inputs(p_terr, p_tropo, p_cld, cld_frac, cld_rad_frac, pressure, d_amf_clr, d_amf_cld, temperature, no2_profile)
    blocks = split_pixel_inputs(pixel_inputs, n_workers)

    ############################
    #### PARALLEL EXECUTION ####
    ############################

    # Start the client and engines
    mycluster = ipp.Cluster(n = n_workers) # Cluster
    c = mycluster.start_and_connect_sync() # Client

    try:
        # Assign a DirectView of the engines to the name "dview"
        dview = c[:]
        # Block execution
        dview.block = True

        dview.execute('import numpy as np')
        dview.execute('from amf_tools.omi_amf_ak2 import pixel_loop')

        if verbosity > 1:
            print('Integrating clear and cloudy columns for {} pixels on {} engines'.format(pixel_inputs['p_terr'].size, len(c.ids)))

        # Each engine gets its own list of blocks; they never overlap, so no locking is needed
        dview.scatter('pixel_blocks', blocks)
        dview.push(dict(engine_verbosity=verbosity))

        @ipp.interactive
        def pixel_block_loop():
            block_results = []
            for block in pixel_blocks:
                block_results.extend(pixel_loop(block, verbosity=engine_verbosity))
            return block_results

        # apply_sync returns one list per engine, in engine order
        results = concatenate_block_results(dview.apply_sync(pixel_block_loop))

        dview.execute('del pixel_blocks')

    finally:
        mycluster.stop_cluster_sync()

    gathered = gather_pixel_results(results, pixel_shape, pixel_inputs['pressure'].size)

    return finish_amfs(gathered, cld_frac, cld_rad_frac, p_terr, p_cld, compute_ak=compute_ak, min_amf=min_amf, verbosity=verbosity)
