from __future__ import annotations

import io

import pytest

from modetab.descriptor import TableShapeError
from modetab.emitter import ModeEmitter
from modetab.identity import TableKey
from modetab.numeric import numeric_format
from modetab.parser import StaticModesParser
from modetab.registry import TableRegistry
from mode_fixtures import make_mode


def _emit(*modes, fixed_point: bool = False) -> tuple[str, TableRegistry]:
    out = io.StringIO()
    registry = TableRegistry()
    emitter = ModeEmitter(out, registry, numeric_format(fixed_point))
    for mode in modes:
        emitter.emit(mode)
    return out.getvalue(), registry


def test_custom_mode_emits_every_table() -> None:
    text, registry = _emit(make_mode(8000, 120))
    parsed = StaticModesParser(text).parse()

    assert set(parsed.tables) == {
        "eBands8000_120",
        "window12",
        "allocVectors8000_120",
        "logN533",
        "cache_index66",
        "cache_bits66",
        "cache_caps66",
        "fft_twiddles8000_120",
        "fft_bitrev60",
        "fft_bitrev30",
        "fft_bitrev15",
        "fft_bitrev7",
        "mdct_twiddles120",
    }
    assert set(parsed.records) == {
        "fft_state8000_120_0",
        "fft_state8000_120_1",
        "fft_state8000_120_2",
        "fft_state8000_120_3",
        "mode8000_120_12",
    }
    assert parsed.guards == registry.guards()


def test_standard_mode_has_no_band_or_allocation_table() -> None:
    text, registry = _emit(make_mode(48000, 960))
    parsed = StaticModesParser(text).parse()
    fields = parsed.records["mode48000_960_120"]

    assert "DEF_EBANDS48000_960" not in parsed.guards
    assert "DEF_ALLOC_VECTORS48000_960" not in parsed.guards
    assert TableKey("band_edges", (48000, 960)) not in registry
    assert fields["eBands"] == "eband5ms"
    assert fields["allocVectors"] == "band_allocation"


def test_window_is_shared_by_equal_overlap() -> None:
    text, registry = _emit(make_mode(48000, 120, overlap=120), make_mode(48000, 240, overlap=120))
    parsed = StaticModesParser(text).parse()

    assert parsed.guards.count("DEF_WINDOW120") == 1
    assert parsed.count_definitions("window120") == 1
    assert parsed.records["mode48000_120_120"]["window"] == "window120"
    assert parsed.records["mode48000_240_120"]["window"] == "window120"
    assert len(parsed.records) == 2 + 2 * 4


def test_bitrev_tables_are_shared_by_point_count() -> None:
    # 120 samples: 60, 30, 15, 7 points; 240 samples: 120, 60, 30, 15 points
    text, _ = _emit(make_mode(48000, 120), make_mode(48000, 240))
    parsed = StaticModesParser(text).parse()

    for nfft in (60, 30, 15):
        assert parsed.count_definitions(f"fft_bitrev{nfft}") == 1
    assert parsed.records["fft_state48000_240_1"]["bitrev"] == "fft_bitrev60"
    assert parsed.records["fft_state48000_120_0"]["bitrev"] == "fft_bitrev60"


def test_pulse_cache_is_emitted_as_a_group() -> None:
    # Both modes have Fs / frame_size == 50
    text, _ = _emit(make_mode(48000, 960), make_mode(24000, 480))
    parsed = StaticModesParser(text).parse()

    for name in ("cache_index50", "cache_bits50", "cache_caps50"):
        assert parsed.count_definitions(name) == 1
    assert parsed.guards.count("DEF_PULSE_CACHE50") == 1
    assert "cache_index50" in parsed.records["mode24000_480_60"]["cache"]


def test_mode_record_is_never_deduplicated() -> None:
    text, _ = _emit(make_mode(48000, 960), make_mode(24000, 480))
    parsed = StaticModesParser(text).parse()
    assert parsed.count_definitions("mode48000_960_120") == 1
    assert parsed.count_definitions("mode24000_480_60") == 1


def test_window_wraps_every_five_values() -> None:
    mode = make_mode(48000, 960)
    text, _ = _emit(mode)
    start = text.index("static const opus_val16 window120[120] = {\n")
    body = text[start:text.index("};", start)].splitlines()[1:]

    assert len(body) == 24
    assert all(line.count(",") == 5 for line in body)


def test_fixed_point_state_has_no_scale() -> None:
    text, _ = _emit(make_mode(48000, 960, fixed_point=True), fixed_point=True)
    parsed = StaticModesParser(text).parse()
    state = parsed.records["fft_state48000_960_0"]

    assert "scale" not in state
    assert state["nfft"] == "480"
    assert all(isinstance(v, int) for v in parsed.tables["window120"].values)


def test_float_state_has_scale() -> None:
    text, _ = _emit(make_mode(48000, 960))
    state = StaticModesParser(text).parse().records["fft_state48000_960_0"]
    assert state["scale"].endswith("f")


def test_short_table_is_rejected() -> None:
    mode = make_mode(8000, 120)
    mode.band_edges = mode.band_edges[:-1]

    with pytest.raises(TableShapeError, match="eBands8000_120"):
        _emit(mode)


def test_pulse_cache_length_follows_scalar_fields() -> None:
    mode = make_mode(48000, 960)
    mode.pulse_cache.caps = mode.pulse_cache.caps + [0]

    with pytest.raises(TableShapeError, match="cache_caps50"):
        _emit(mode)
