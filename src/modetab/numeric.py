# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Numeric Formatter - Renders scalars as C literals for one of the two numeric modes.

Fixed-point builds store every table entry as an integer, so values are written
in plain decimal. Floating-point builds store single-precision values, which are
written with at least 8 significant digits and an `f` suffix so the C compiler
parses them back to the exact float32 the descriptor holds.
"""

import sys
from abc import ABC, abstractmethod

try:
    import numpy as np
except ImportError:
    print("Error: numpy library is required. Install it with: pip install numpy")
    sys.exit(1)

from .constants import BASENAME_FIXED, BASENAME_FLOAT

# 9 significant digits always round-trip a binary32 value
_MAX_FLOAT_DIGITS = 9


def format_int(value):
    """
    Renders an integer in decimal with no decoration.

    Args:
        value: An integer (Python or numpy).

    Returns:
        The literal text.
    """
    return "%d" % int(value)


def format_float(value, digits=8):
    """
    Renders a real value as a single-precision C literal.

    The `#` (alternate) form of `g` keeps trailing zeros and the decimal point,
    matching C's `%#0.8g`. When `digits` significant digits are not enough to
    re-parse to the same float32, the value is written with 9 digits instead.

    Args:
        value: The value to render. It is rounded to float32 first.
        digits: Minimum number of significant digits.

    Returns:
        The literal text, e.g. "0.70710677f".
    """
    single = np.float32(value)
    text = format(float(single), f"#.{digits}g")
    if np.float32(text) != single and digits < _MAX_FLOAT_DIGITS:
        text = format(float(single), f"#.{_MAX_FLOAT_DIGITS}g")
    return text + "f"


def parse_literal(text):
    """
    Parses a literal produced by `format_int` or `format_float`.

    Args:
        text: The literal text.

    Returns:
        An int for integer literals, a numpy float32 for real literals.
    """
    text = text.strip()
    if text.endswith(("f", "F")):
        return np.float32(text[:-1])
    if any(c in text for c in ".eE"):
        return np.float32(text)
    return int(text)


class NumericFormat(ABC):
    """
    The numeric representation of one build (fixed-point or floating-point).
    """

    name = None
    basename = None
    dtype = None

    @abstractmethod
    def word(self, value):
        """
        Renders one table coefficient (opus_val16 / kiss_twiddle_scalar).
        """
        pass

    @abstractmethod
    def scale(self, value):
        """
        Renders the FFT scale field, or returns None when the build has no such field.
        """
        pass

    def integer(self, value):
        return format_int(value)

    @property
    def filename(self):
        return self.basename + ".h"


class FixedPointFormat(NumericFormat):
    name = "fixed"
    basename = BASENAME_FIXED
    dtype = np.int32

    def word(self, value):
        return format_int(value)

    def scale(self, value):
        # Fixed-point kiss_fft_state has no scale member
        return None


class FloatingPointFormat(NumericFormat):
    name = "float"
    basename = BASENAME_FLOAT
    dtype = np.float32

    def word(self, value):
        return format_float(value)

    def scale(self, value):
        return format_float(value)


def numeric_format(fixed_point=False):
    """
    Returns the formatter for the requested numeric mode.
    """
    if fixed_point:
        return FixedPointFormat()
    return FloatingPointFormat()
