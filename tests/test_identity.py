from __future__ import annotations

import pytest

from modetab.identity import ModeIdentity, TableKey
from mode_fixtures import make_mode


def test_standard_mode_uses_default_tables() -> None:
    identity = ModeIdentity.of(make_mode(48000, 960))
    assert identity.short_transform_size == 120
    assert identity.is_standard
    assert identity.uses_default_band_edges
    assert identity.uses_default_allocation
    assert identity.band_edges_symbol() == "eband5ms"
    assert identity.allocation_symbol() == "band_allocation"


def test_custom_mode_gets_generated_names() -> None:
    identity = ModeIdentity.of(make_mode(8000, 120))
    assert identity.frame_size == 120
    assert not identity.is_standard
    assert identity.band_edges_symbol() == "eBands8000_120"
    assert identity.allocation_symbol() == "allocVectors8000_120"
    assert identity.mode_symbol == "mode8000_120_12"


def test_keys_follow_table_shape() -> None:
    identity = ModeIdentity.of(make_mode(48000, 960))
    assert identity.frame_rate == 400
    assert identity.cache_rate == 50
    assert identity.window_key() == TableKey("window", (120,))
    assert identity.log_n_key().symbol == "logN400"
    assert identity.pulse_cache_key().guard == "DEF_PULSE_CACHE50"
    assert identity.fft_twiddles_key().symbol == "fft_twiddles48000_960"
    assert identity.fft_bitrev_key(480).guard == "FFT_BITREV480"
    assert identity.fft_state_key(2).symbol == "fft_state48000_960_2"
    assert identity.mdct_twiddles_key().guard == "MDCT_TWIDDLES960"


def test_frame_rate_is_shared_across_rates() -> None:
    a = ModeIdentity.of(make_mode(48000, 960))
    b = ModeIdentity.of(make_mode(24000, 480))
    assert a.log_n_key() == b.log_n_key()
    assert a.pulse_cache_key() == b.pulse_cache_key()
    assert a.band_edges_key() != b.band_edges_key()


def test_unknown_table_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        TableKey("reverb", (1,))
