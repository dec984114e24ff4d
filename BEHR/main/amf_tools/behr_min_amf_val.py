#### behr_min_amf_val.py ####

# Last changed: 2026-10-19
# Location: BEHR/main/amf_tools

##############################

MIN_AMF_VALUE = 1e-6

def behr_min_amf_val():
    '''Smallest AMF allowed in the output; smaller values are clamped up to it'''
    return MIN_AMF_VALUE
