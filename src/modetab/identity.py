# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Identity Deriver - Computes the keys that decide which tables modes can share.

Each key holds exactly the descriptor fields that determine a table's length and
contents, so two modes with equal keys need one emitted table between them.
"""

from dataclasses import dataclass

from .constants import STANDARD_RATE_RATIO, DEFAULT_BAND_EDGES, DEFAULT_ALLOCATION_VECTORS

# kind -> (include guard prefix, symbol prefix)
TABLE_KINDS = {
    "band_edges": ("DEF_EBANDS", "eBands"),
    "window": ("DEF_WINDOW", "window"),
    "allocation_vectors": ("DEF_ALLOC_VECTORS", "allocVectors"),
    "log_n": ("DEF_LOGN", "logN"),
    "pulse_cache": ("DEF_PULSE_CACHE", "cache_index"),
    "fft_twiddles": ("FFT_TWIDDLES", "fft_twiddles"),
    "fft_bitrev": ("FFT_BITREV", "fft_bitrev"),
    "fft_state": ("FFT_STATE", "fft_state"),
    "mdct_twiddles": ("MDCT_TWIDDLES", "mdct_twiddles"),
}


@dataclass(frozen=True)
class TableKey:
    """
    The dedup key of one generated table.
    """

    kind: str
    fields: tuple

    def __post_init__(self):
        if self.kind not in TABLE_KINDS:
            raise ValueError(f"Unknown table kind: {self.kind}")

    @property
    def suffix(self):
        return "_".join(str(field) for field in self.fields)

    @property
    def guard(self):
        return TABLE_KINDS[self.kind][0] + self.suffix

    @property
    def symbol(self):
        return TABLE_KINDS[self.kind][1] + self.suffix


@dataclass(frozen=True)
class ModeIdentity:
    """
    Keys and names derived from one mode descriptor.
    """

    sample_rate: int
    frame_size: int
    overlap: int
    short_transform_size: int

    @classmethod
    def of(cls, mode):
        return cls(
            sample_rate=mode.sample_rate,
            frame_size=mode.short_transform_count * mode.short_transform_size,
            overlap=mode.overlap,
            short_transform_size=mode.short_transform_size,
        )

    @property
    def is_standard(self):
        """
        True when the codec's built-in 5 ms band layout applies to this mode.
        """
        return self.sample_rate == STANDARD_RATE_RATIO * self.short_transform_size

    # The band-edge and allocation decisions are separate even though both
    # currently follow is_standard.
    @property
    def uses_default_band_edges(self):
        return self.is_standard

    @property
    def uses_default_allocation(self):
        return self.is_standard

    @property
    def frame_rate(self):
        return self.sample_rate // self.short_transform_size

    @property
    def cache_rate(self):
        return self.sample_rate // self.frame_size

    @property
    def mode_symbol(self):
        return f"mode{self.sample_rate}_{self.frame_size}_{self.overlap}"

    def band_edges_key(self):
        return TableKey("band_edges", (self.sample_rate, self.frame_size))

    def window_key(self):
        return TableKey("window", (self.overlap,))

    def allocation_key(self):
        return TableKey("allocation_vectors", (self.sample_rate, self.frame_size))

    def log_n_key(self):
        return TableKey("log_n", (self.frame_rate,))

    def pulse_cache_key(self):
        return TableKey("pulse_cache", (self.cache_rate,))

    def fft_twiddles_key(self):
        return TableKey("fft_twiddles", (self.sample_rate, self.frame_size))

    def fft_bitrev_key(self, point_count):
        return TableKey("fft_bitrev", (point_count,))

    def fft_state_key(self, shift):
        return TableKey("fft_state", (self.sample_rate, self.frame_size, shift))

    def mdct_twiddles_key(self):
        return TableKey("mdct_twiddles", (self.frame_size,))

    def band_edges_symbol(self):
        if self.uses_default_band_edges:
            return DEFAULT_BAND_EDGES
        return self.band_edges_key().symbol

    def allocation_symbol(self):
        if self.uses_default_allocation:
            return DEFAULT_ALLOCATION_VECTORS
        return self.allocation_key().symbol
