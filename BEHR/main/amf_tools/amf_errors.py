#### amf_errors.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

########################

# Failures raised by the AMF transform. Each one is fatal for the whole call;
# pixels skipped for missing data are not errors and never raise.

class AmfError(Exception):
    '''
    Base class for errors raised while computing AMFs and averaging kernels

    Parameters
    ----------
    message : str
        Description of the failure
    variable : str (Optional)
        Name of the input or intermediate variable that failed the check
    '''
    def __init__(self, message, variable=None):
        super().__init__(message)
        self.variable = variable


class ShapeMismatch(AmfError, ValueError):
    '''A profile input does not have the vertical length of the pressure grid'''


class IntegrationNanError(AmfError):
    '''NaNs were found inside the integration bounds with fatal_if_nans requested'''


class ExtendedProfileShapeError(AmfError, ValueError):
    '''A resampled profile is not a single column that fits in the extended grid'''


class NanMaskMismatch(AmfError):
    '''Clear and cloudy scattering weights have NaNs at different levels'''
