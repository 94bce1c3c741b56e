# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Mode Emitter - Writes all tables of one mode, then the mode record that references them.

Shared tables go through the batch's TableRegistry: the first mode that needs a
table writes it, later modes only reference its symbol.
"""

from .constants import TYPE_INT16, TYPE_BYTE, TYPE_WORD16, TYPE_TWIDDLE, TYPE_FFT_STATE, TYPE_MODE
from .cwriter import wrap_values, inline_values, array_definition, record_definition, guarded
from .descriptor import (
    PREEMPHASIS_LENGTH,
    band_edge_count,
    allocation_table_length,
    cache_index_length,
    cache_caps_length,
    plan_count,
    fft_twiddle_length,
    mdct_twiddle_length,
    factor_count,
    expect_length,
)
from .identity import ModeIdentity

# Values per output line
WORDS_PER_LINE = 5
SHORTS_PER_LINE = 15
TWIDDLES_PER_LINE = 2


class ModeEmitter:
    """
    Emits the C definitions of one mode at a time into a text stream.
    """

    def __init__(self, out, registry, numeric):
        """
        Initializes the emitter.

        Args:
            out: Writable text stream.
            registry: The TableRegistry of the current batch.
            numeric: The NumericFormat of the build.
        """
        self.out = out
        self.registry = registry
        self.numeric = numeric

    def emit(self, mode):
        """
        Writes every table of a mode that is not yet in the registry, then its mode record.

        Args:
            mode: The ModeDescriptor.

        Returns:
            The symbol name of the mode record.
        """
        identity = ModeIdentity.of(mode)

        self._emit_band_edges(mode, identity)
        self._emit_window(mode, identity)
        self._emit_allocation_vectors(mode, identity)
        self._emit_log_n(mode, identity)
        self._emit_pulse_cache(mode, identity)
        self._emit_fft(mode, identity)
        self._emit_mdct_twiddles(mode, identity)
        self._emit_mode_record(mode, identity)

        return identity.mode_symbol

    def _needs(self, key):
        """
        Returns True if the table for `key` must be written now.
        """
        return not self.registry.ensure_emitted(key)

    def _ints(self, values):
        return [self.numeric.integer(v) for v in values]

    def _words(self, values):
        return [self.numeric.word(v) for v in values]

    def _emit_band_edges(self, mode, identity):
        if identity.uses_default_band_edges:
            return
        key = identity.band_edges_key()
        if not self._needs(key):
            return

        length = band_edge_count(mode)
        values = expect_length(mode.band_edges, length, key.symbol)
        table = array_definition(TYPE_INT16, key.symbol, length, inline_values(self._ints(values)))
        self.out.write(guarded(key.guard, table))

    def _emit_window(self, mode, identity):
        key = identity.window_key()
        if not self._needs(key):
            return

        values = expect_length(mode.window, mode.overlap, key.symbol)
        body = wrap_values(self._words(values), WORDS_PER_LINE)
        self.out.write(guarded(key.guard, array_definition(TYPE_WORD16, key.symbol, mode.overlap, body)))

    def _emit_allocation_vectors(self, mode, identity):
        if identity.uses_default_allocation:
            return
        key = identity.allocation_key()
        if not self._needs(key):
            return

        length = allocation_table_length(mode)
        values = expect_length(mode.allocation_vectors, length, key.symbol)
        rows = []
        for j in range(mode.allocation_vector_count):
            row = values[j * mode.band_count:(j + 1) * mode.band_count]
            rows.append(inline_values(self._ints(row), width=2) + "\n")
        self.out.write(guarded(key.guard, array_definition(TYPE_BYTE, key.symbol, length, "".join(rows))))

    def _emit_log_n(self, mode, identity):
        key = identity.log_n_key()
        if not self._needs(key):
            return

        values = expect_length(mode.log_transform_sizes, mode.band_count, key.symbol)
        table = array_definition(TYPE_INT16, key.symbol, mode.band_count, inline_values(self._ints(values)))
        self.out.write(guarded(key.guard, table))

    def _emit_pulse_cache(self, mode, identity):
        """
        Writes cache_index, cache_bits and cache_caps together under one guard.
        """
        key = identity.pulse_cache_key()
        if not self._needs(key):
            return

        cache = mode.pulse_cache
        suffix = key.suffix
        parts = [
            (TYPE_INT16, f"cache_index{suffix}", cache.index, cache_index_length(mode)),
            (TYPE_BYTE, f"cache_bits{suffix}", cache.bits, cache.size),
            (TYPE_BYTE, f"cache_caps{suffix}", cache.caps, cache_caps_length(mode)),
        ]
        tables = []
        for ctype, name, values, length in parts:
            expect_length(values, length, name)
            tables.append(array_definition(ctype, name, length, wrap_values(self._ints(values), SHORTS_PER_LINE)))
        self.out.write(guarded(key.guard, "".join(tables)))

    def _emit_fft(self, mode, identity):
        """
        Writes the shared FFT twiddles, one bit-reversal table per distinct
        point count and one kiss_fft_state per shift level.
        """
        transform = mode.transform
        plans = expect_length(transform.plans, plan_count(mode), f"fft plans of {identity.mode_symbol}")
        twiddles_key = identity.fft_twiddles_key()

        if self._needs(twiddles_key):
            length = fft_twiddle_length(mode)
            pairs = expect_length(transform.twiddles, length, twiddles_key.symbol)
            texts = [f"{{{self.numeric.word(re)}, {self.numeric.word(im)}}}" for re, im in pairs]
            table = array_definition(TYPE_TWIDDLE, twiddles_key.symbol, length, wrap_values(texts, TWIDDLES_PER_LINE))
            self.out.write(guarded(twiddles_key.guard, table))

        for plan in plans:
            key = identity.fft_bitrev_key(plan.point_count)
            if not self._needs(key):
                continue
            values = expect_length(plan.bitrev, plan.point_count, key.symbol)
            body = wrap_values(self._ints(values), SHORTS_PER_LINE)
            self.out.write(guarded(key.guard, array_definition(TYPE_INT16, key.symbol, plan.point_count, body)))

        for shift, plan in enumerate(plans):
            key = identity.fft_state_key(shift)
            if not self._needs(key):
                continue
            factors = expect_length(plan.factors, factor_count(), f"{key.symbol} factors")

            fields = [(self.numeric.integer(plan.point_count), "nfft")]
            scale = self.numeric.scale(plan.scale)
            if scale is not None:
                fields.append((scale, "scale"))
            fields.extend([
                (self.numeric.integer(plan.shift), "shift"),
                ("{" + inline_values(self._ints(factors)) + "}", "factors"),
                (identity.fft_bitrev_key(plan.point_count).symbol, "bitrev"),
                (twiddles_key.symbol, "twiddles"),
            ])
            self.out.write(guarded(key.guard, record_definition(TYPE_FFT_STATE, key.symbol, fields)))

    def _emit_mdct_twiddles(self, mode, identity):
        key = identity.mdct_twiddles_key()
        if not self._needs(key):
            return

        length = mdct_twiddle_length(mode)
        values = expect_length(mode.transform.trig, length, key.symbol)
        body = wrap_values(self._words(values), WORDS_PER_LINE)
        self.out.write(guarded(key.guard, array_definition(TYPE_WORD16, key.symbol, length, body)))

    def _emit_mode_record(self, mode, identity):
        """
        Writes the CELTMode record. Never deduplicated: every mode gets its own.
        """
        preemphasis = expect_length(mode.preemphasis, PREEMPHASIS_LENGTH, f"preemphasis of {identity.mode_symbol}")
        transform = mode.transform
        states = "".join(f"&{identity.fft_state_key(k).symbol}, " for k in range(plan_count(mode)))
        cache_suffix = identity.pulse_cache_key().suffix

        fields = [
            (self.numeric.integer(mode.sample_rate), "Fs"),
            (self.numeric.integer(mode.overlap), "overlap"),
            (self.numeric.integer(mode.band_count), "nbEBands"),
            (self.numeric.integer(mode.effective_band_count), "effEBands"),
            ("{" + inline_values(self._words(preemphasis)) + "}", "preemph"),
            (identity.band_edges_symbol(), "eBands"),
            (self.numeric.integer(mode.max_log_shift), "maxLM"),
            (self.numeric.integer(mode.short_transform_count), "nbShortMdcts"),
            (self.numeric.integer(mode.short_transform_size), "shortMdctSize"),
            (self.numeric.integer(mode.allocation_vector_count), "nbAllocVectors"),
            (identity.allocation_symbol(), "allocVectors"),
            (identity.log_n_key().symbol, "logN"),
            (identity.window_key().symbol, "window"),
            (f"{{{transform.length}, {transform.max_shift}, {{{states}}}, {identity.mdct_twiddles_key().symbol}}}", "mdct"),
            (f"{{{mode.pulse_cache.size}, cache_index{cache_suffix}, cache_bits{cache_suffix}, cache_caps{cache_suffix}}}", "cache"),
        ]
        self.out.write(record_definition(TYPE_MODE, identity.mode_symbol, fields) + "\n")
