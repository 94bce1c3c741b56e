# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Static Modes Verifier - Checks a generated header against the descriptors it came from.

This check detects:
- Tables whose parsed values differ from the descriptor (bit-exact for float builds)
- Declared lengths that differ from the derived lengths
- Mode records referencing the wrong table symbols
- A mode list whose order or size differs from the batch
- Include guards opened more than once
"""

import sys

try:
    import numpy as np
except ImportError:
    print("Error: numpy library is required. Install it with: pip install numpy")
    sys.exit(1)

from .descriptor import (
    band_edge_count,
    allocation_table_length,
    cache_index_length,
    cache_caps_length,
    fft_twiddle_length,
    mdct_twiddle_length,
    plan_count,
)
from .constants import MODE_COUNT_NAME
from .identity import ModeIdentity
from .numeric import parse_literal


class VerificationError(Exception):
    """
    Raised when a generated header does not reproduce its descriptors.
    """
    pass


def _bits(values, real):
    """
    Returns comparable arrays: raw float32 bit patterns for real tables, int64 otherwise.
    """
    if real:
        return np.asarray(values, dtype=np.float32).reshape(-1).view(np.uint32)
    return np.asarray(values, dtype=np.int64).reshape(-1)


class ModeTableVerifier:
    """
    Verifies a parsed static modes header against a batch of descriptors.
    """

    def __init__(self, parser, modes, numeric):
        """
        Initializes the verifier.

        Args:
            parser: A StaticModesParser that has already parsed the output.
            modes: The ModeDescriptors of the batch, in input order.
            numeric: The NumericFormat the header was generated with.
        """
        self.parser = parser
        self.modes = list(modes)
        self.numeric = numeric
        self.real = numeric.name == "float"
        self.errors = []

    def check(self):
        """
        Runs all checks.

        Returns:
            True if no errors were found.
        """
        self.errors = []

        for guard in self.parser.duplicate_guards():
            self.errors.append(f"Include guard {guard} is opened more than once")

        for mode in self.modes:
            self._check_mode(mode)

        self._check_mode_list()
        return not self.errors

    def raise_for_errors(self):
        if not self.check():
            raise VerificationError("Generated header does not match its modes:\n  " + "\n  ".join(self.errors))

    def _check_table(self, name, length, expected, real=False):
        table = self.parser.tables.get(name)
        if table is None:
            self.errors.append(f"Table {name} is missing")
            return
        if table.length != length:
            self.errors.append(f"Table {name} declares {table.length} entries, expected {length}")
        if not np.array_equal(_bits(table.values, real), _bits(expected, real)):
            self.errors.append(f"Table {name} values differ from the descriptor")

    def _check_field(self, record_name, fields, field, expected):
        actual = fields.get(field)
        if actual != expected:
            self.errors.append(f"{record_name}.{field} is {actual!r}, expected {expected!r}")

    def _check_mode(self, mode):
        identity = ModeIdentity.of(mode)
        symbol = identity.mode_symbol
        if symbol not in self.parser.records:
            self.errors.append(f"Mode record {symbol} is missing")
            return

        fields = self.parser.records[symbol]
        self._check_field(symbol, fields, "Fs", str(mode.sample_rate))
        self._check_field(symbol, fields, "overlap", str(mode.overlap))
        self._check_field(symbol, fields, "nbEBands", str(mode.band_count))
        self._check_field(symbol, fields, "effEBands", str(mode.effective_band_count))
        self._check_field(symbol, fields, "maxLM", str(mode.max_log_shift))
        self._check_field(symbol, fields, "nbShortMdcts", str(mode.short_transform_count))
        self._check_field(symbol, fields, "shortMdctSize", str(mode.short_transform_size))
        self._check_field(symbol, fields, "nbAllocVectors", str(mode.allocation_vector_count))
        self._check_field(symbol, fields, "eBands", identity.band_edges_symbol())
        self._check_field(symbol, fields, "allocVectors", identity.allocation_symbol())
        self._check_field(symbol, fields, "logN", identity.log_n_key().symbol)
        self._check_field(symbol, fields, "window", identity.window_key().symbol)

        preemphasis = [parse_literal(v) for v in self.parser.record_fields(symbol).get("preemph", [])]
        if not np.array_equal(_bits(preemphasis, self.real), _bits(mode.preemphasis, self.real)):
            self.errors.append(f"{symbol}.preemph differs from the descriptor")

        if not identity.uses_default_band_edges:
            self._check_table(identity.band_edges_key().symbol, band_edge_count(mode), mode.band_edges)
        if not identity.uses_default_allocation:
            self._check_table(identity.allocation_key().symbol, allocation_table_length(mode), mode.allocation_vectors)

        self._check_table(identity.window_key().symbol, mode.overlap, mode.window, self.real)
        self._check_table(identity.log_n_key().symbol, mode.band_count, mode.log_transform_sizes)

        suffix = identity.pulse_cache_key().suffix
        self._check_table(f"cache_index{suffix}", cache_index_length(mode), mode.pulse_cache.index)
        self._check_table(f"cache_bits{suffix}", mode.pulse_cache.size, mode.pulse_cache.bits)
        self._check_table(f"cache_caps{suffix}", cache_caps_length(mode), mode.pulse_cache.caps)

        self._check_transform(mode, identity)

    def _check_transform(self, mode, identity):
        transform = mode.transform
        twiddles = identity.fft_twiddles_key().symbol
        self._check_table(twiddles, fft_twiddle_length(mode), transform.twiddles, self.real)
        self._check_table(identity.mdct_twiddles_key().symbol, mdct_twiddle_length(mode), transform.trig, self.real)

        for shift in range(plan_count(mode)):
            plan = transform.plans[shift]
            bitrev = identity.fft_bitrev_key(plan.point_count).symbol
            self._check_table(bitrev, plan.point_count, plan.bitrev)

            state = identity.fft_state_key(shift).symbol
            fields = self.parser.records.get(state)
            if fields is None:
                self.errors.append(f"FFT state {state} is missing")
                continue
            self._check_field(state, fields, "nfft", str(plan.point_count))
            self._check_field(state, fields, "shift", str(plan.shift))
            self._check_field(state, fields, "bitrev", bitrev)
            self._check_field(state, fields, "twiddles", twiddles)
            self._check_field(state, fields, "scale", self.numeric.scale(plan.scale))

        mdct = self.parser.record_fields(identity.mode_symbol).get("mdct", [])
        expected = [str(transform.length), str(transform.max_shift)]
        expected += [f"&{identity.fft_state_key(k).symbol}" for k in range(plan_count(mode))]
        expected.append(identity.mdct_twiddles_key().symbol)
        if mdct != expected:
            self.errors.append(f"{identity.mode_symbol}.mdct is {mdct}, expected {expected}")

    def _check_mode_list(self):
        expected = [ModeIdentity.of(mode).mode_symbol for mode in self.modes]
        if self.parser.mode_list != expected:
            self.errors.append(f"Mode list is {self.parser.mode_list}, expected {expected}")
        count = self.parser.defines.get(MODE_COUNT_NAME)
        if count != str(len(self.modes)):
            self.errors.append(f"{MODE_COUNT_NAME} is {count}, expected {len(self.modes)}")
