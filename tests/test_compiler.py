from __future__ import annotations

import io

import numpy as np

from modetab.compiler import ModeCompiler, compile_modes, summarize_batch
from modetab.numeric import numeric_format
from modetab.parser import StaticModesParser
from modetab.verify import ModeTableVerifier
from mode_fixtures import make_mode


def test_factory_selects_numeric_mode(tmp_path) -> None:
    float_compiler = ModeCompiler([], tmp_path)
    fixed_compiler = ModeCompiler([], tmp_path, fixed_point=True)

    assert isinstance(float_compiler, ModeCompiler)
    assert float_compiler.numeric.name == "float"
    assert fixed_compiler.numeric.name == "fixed"
    assert float_compiler.output_path == tmp_path / "static_modes_float.h"
    assert fixed_compiler.output_path == tmp_path / "static_modes_fixed.h"


def test_two_custom_modes_scenario() -> None:
    modes = [make_mode(8000, 120), make_mode(48000, 960, short_transform_count=4)]
    parsed = StaticModesParser(compile_modes(modes)).parse()

    assert "eBands8000_120" in parsed.tables
    assert "eBands48000_960" in parsed.tables
    assert parsed.records["mode8000_120_12"]["eBands"] == "eBands8000_120"
    assert parsed.records["mode48000_960_240"]["eBands"] == "eBands48000_960"
    assert parsed.mode_list == ["mode8000_120_12", "mode48000_960_240"]
    assert parsed.defines["TOTAL_MODES"] == "2"


def test_shared_overlap_scenario() -> None:
    modes = [make_mode(48000, 120, overlap=120), make_mode(48000, 240, overlap=120)]
    parsed = StaticModesParser(compile_modes(modes)).parse()

    assert [name for name in parsed.tables if name.startswith("window")] == ["window120"]
    assert parsed.records["mode48000_120_120"]["window"] == "window120"
    assert parsed.records["mode48000_240_120"]["window"] == "window120"


def test_mode_list_keeps_input_order() -> None:
    modes = [make_mode(48000, 960), make_mode(8000, 120), make_mode(24000, 480)]
    forward = StaticModesParser(compile_modes(modes)).parse()
    backward = StaticModesParser(compile_modes(modes[::-1])).parse()

    assert forward.mode_list == ["mode48000_960_120", "mode8000_120_12", "mode24000_480_60"]
    assert backward.mode_list == forward.mode_list[::-1]


def test_provenance_lists_requested_pairs() -> None:
    text = compile_modes([make_mode(48000, 960), make_mode(8000, 120)])
    assert "   with arguments: 48000 960 8000 120\n" in text
    assert '#include "modes.h"\n#include "rate.h"\n' in text


def test_guards_are_unique_and_match_registry() -> None:
    modes = [make_mode(48000, 960), make_mode(24000, 480), make_mode(48000, 120), make_mode(48000, 240)]
    compiler = ModeCompiler(modes, verbose=False)
    parsed = StaticModesParser(compiler.render()).parse()

    assert parsed.duplicate_guards() == []
    assert parsed.guards == compiler.registry.guards()


def test_each_render_uses_a_fresh_registry() -> None:
    compiler = ModeCompiler([make_mode(48000, 960)], verbose=False)
    first = compiler.render()
    second = compiler.render()

    assert first == second
    assert "window120[120]" in second


def test_window_round_trips_bit_exact() -> None:
    mode = make_mode(44100, 882, short_transform_count=2)
    parsed = StaticModesParser(compile_modes([mode])).parse()
    window = np.asarray(parsed.tables[f"window{mode.overlap}"].values, dtype=np.float32)

    assert np.array_equal(window.view(np.uint32), mode.window.view(np.uint32))


def test_fixed_point_window_round_trips() -> None:
    mode = make_mode(48000, 960, fixed_point=True)
    parsed = StaticModesParser(compile_modes([mode], fixed_point=True)).parse()
    assert parsed.tables["window120"].values == mode.window.tolist()


def test_generated_output_verifies() -> None:
    for fixed_point in (False, True):
        modes = [
            make_mode(48000, 960, fixed_point=fixed_point),
            make_mode(8000, 120, fixed_point=fixed_point),
            make_mode(24000, 480, fixed_point=fixed_point),
        ]
        parsed = StaticModesParser(compile_modes(modes, fixed_point=fixed_point)).parse()
        verifier = ModeTableVerifier(parsed, modes, numeric_format(fixed_point))
        assert verifier.check(), verifier.errors


def test_compile_writes_output_file(tmp_path, capsys) -> None:
    compiler = ModeCompiler([make_mode(48000, 960)], tmp_path / "out")
    path = compiler.compile()

    assert path == tmp_path / "out" / "static_modes_float.h"
    assert path.read_text(encoding="utf-8") == compiler.render()
    assert "Compilation complete!" in capsys.readouterr().out


def test_summary_of_uniform_batch() -> None:
    summary = summarize_batch([make_mode(48000, 960), make_mode(24000, 960, overlap=120)])
    assert summary.frame_size == 960
    assert summary.overlap == 120
    assert summary.channels == 0


def test_summary_marks_disagreement() -> None:
    summary = summarize_batch([make_mode(48000, 960), make_mode(48000, 480)])
    assert summary.frame_size == -1
    assert summary.overlap == -1


def test_header_defines_uniform_constants() -> None:
    compiler = ModeCompiler([make_mode(48000, 960), make_mode(24000, 960, overlap=120)], verbose=False)
    out = io.StringIO()
    compiler.dump_header(out)

    assert out.getvalue() == (
        "/* This header file is generated automatically*/\n"
        "#define FRAMESIZE(mode) 960\n"
        "#define OVERLAP(mode) 120\n"
    )


def test_header_omits_varying_constants(tmp_path) -> None:
    compiler = ModeCompiler([make_mode(48000, 960), make_mode(48000, 480, overlap=120)], verbose=False)
    text = compiler.write_header(tmp_path / "custom_modes.h").read_text(encoding="utf-8")

    assert "FRAMESIZE" not in text
    assert "#define OVERLAP(mode) 120\n" in text
    assert "CHANNELS" not in text
