# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
modetab Constants - Fixed names and sizes shared by the emitter, compiler and parser.
"""

# kiss_fft_state.factors holds 2*MAXFACTORS entries
MAXFACTORS = 8

# A mode is "standard" when its sample rate is this multiple of its short MDCT size
STANDARD_RATE_RATIO = 400

# Well-known tables defined by the codec sources, referenced by standard modes
DEFAULT_BAND_EDGES = "eband5ms"
DEFAULT_ALLOCATION_VECTORS = "band_allocation"

# Output base names per numeric mode
BASENAME_FIXED = "static_modes_fixed"
BASENAME_FLOAT = "static_modes_float"

# C types of the generated tables
TYPE_INT16 = "opus_int16"
TYPE_BYTE = "unsigned char"
TYPE_WORD16 = "opus_val16"
TYPE_TWIDDLE = "kiss_twiddle_cpx"
TYPE_FFT_STATE = "kiss_fft_state"
TYPE_MODE = "CELTMode"

MODE_LIST_NAME = "static_mode_list"
MODE_COUNT_NAME = "TOTAL_MODES"

INCLUDES = ("modes.h", "rate.h")
