"""sfxgen CLI + WAVE export tests."""

from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf
import structlog

from sfxgen.cli import EX_CONFIG, EX_OK, EX_USAGE, main
from sfxgen.codec import load_params, save_rfx
from sfxgen.params import SfxParams, WaveType
from sfxgen.random_source import NumpyRandomSource
from sfxgen.synth import SynthContext, generate_wave
from sfxgen.wave import save_wave


# ── Test 1: WAVE export ──────────────────────────────────


@pytest.mark.parametrize(
    ("fmt", "subtype"),
    [("u8", "PCM_U8"), ("i16", "PCM_16"), ("f32", "FLOAT")],
)
def test_save_wave_subtypes(tmp_path: Path, fmt: str, subtype: str) -> None:
    ctx = SynthContext(fmt, 44100, 1.0)
    frames = generate_wave(ctx, SfxParams(sustain_time=0.1, decay_time=0.1), NumpyRandomSource(1))
    path = save_wave(ctx, frames, tmp_path / f"tone_{fmt}.wav")

    info = sf.info(str(path))
    assert info.samplerate == 44100
    assert info.channels == 1
    assert info.frames == frames
    assert info.subtype == subtype


def test_save_wave_samples_exact(tmp_path: Path) -> None:
    """16-bit and 8-bit files hold exactly the quantized engine output."""
    params = SfxParams(wave_type=WaveType.SINE, sustain_time=0.1, decay_time=0.0)

    ctx16 = SynthContext("i16", 44100, 1.0)
    n16 = generate_wave(ctx16, params, NumpyRandomSource(2))
    data16, _ = sf.read(str(save_wave(ctx16, n16, tmp_path / "a.wav")), dtype="int16")
    assert np.array_equal(data16, ctx16.frames(n16))

    ctx8 = SynthContext("u8", 44100, 1.0)
    n8 = generate_wave(ctx8, params, NumpyRandomSource(2))
    data8, _ = sf.read(str(save_wave(ctx8, n8, tmp_path / "b.wav")), dtype="int16")
    expected = (ctx8.frames(n8).astype(np.int16) - 128) * 256
    assert np.array_equal(data8, expected)


# ── Test 2: Commands ─────────────────────────────────────


def test_gen_then_render(tmp_path: Path) -> None:
    rfx = tmp_path / "coin.rfx"
    wav = tmp_path / "coin.wav"
    assert main(["gen", "pickup_coin", "--seed", "42", "-o", str(rfx), "--wav", str(wav)]) == EX_OK

    assert load_params(rfx).params.rand_seed == 42
    first, _ = sf.read(str(wav), dtype="int16")
    assert len(first) > 0

    # Rendering the same file again reseeds from rand_seed → identical audio
    again = tmp_path / "again.wav"
    assert main(["render", str(rfx), "-o", str(again)]) == EX_OK
    second, _ = sf.read(str(again), dtype="int16")
    assert np.array_equal(first, second)


def test_render_default_output_name(tmp_path: Path) -> None:
    rfx = save_rfx(SfxParams(sustain_time=0.1, decay_time=0.1), tmp_path / "beep.rfx")
    assert main(["render", str(rfx)]) == EX_OK
    assert (tmp_path / "beep.wav").exists()


def test_render_missing_file(tmp_path: Path) -> None:
    assert main(["render", str(tmp_path / "missing.rfx")]) == EX_CONFIG


def test_render_output_per_input(tmp_path: Path) -> None:
    """Each input takes the -o that follows it; inputs without one get a .wav sibling."""
    a = save_rfx(SfxParams(sustain_time=0.1, decay_time=0.1), tmp_path / "a.rfx")
    b = save_rfx(SfxParams(sustain_time=0.1, decay_time=0.1), tmp_path / "b.rfx")
    c = save_rfx(SfxParams(sustain_time=0.1, decay_time=0.1), tmp_path / "c.rfx")
    out_a = tmp_path / "first.wav"
    out_b = tmp_path / "second.wav"

    code = main(["render", str(a), "-o", str(out_a), str(b), "-o", str(out_b), str(c)])
    assert code == EX_OK
    assert out_a.exists()
    assert out_b.exists()
    assert (tmp_path / "c.wav").exists()
    assert not (tmp_path / "a.wav").exists()


def test_render_output_filename_missing(tmp_path: Path) -> None:
    a = save_rfx(SfxParams(), tmp_path / "a.rfx")
    assert main(["render", str(a), "-o"]) == EX_USAGE


def test_render_needs_input() -> None:
    assert main(["render"]) == EX_USAGE


def test_bad_arguments() -> None:
    assert main(["gen", "banjo"]) == EX_USAGE


def test_mutate_command(tmp_path: Path) -> None:
    src = save_rfx(SfxParams(rand_seed=9), tmp_path / "src.rfx")
    out = tmp_path / "out.rfx"
    assert main(["mutate", str(src), "-o", str(out), "--seed", "3", "--range", "0.5"]) == EX_OK
    assert load_params(out).params.rand_seed == 9


def test_show_prints_json(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = save_rfx(SfxParams(wave_type=WaveType.PINK_NOISE, rand_seed=5), tmp_path / "p.rfx")
    assert main(["show", str(src)]) == EX_OK

    report = json.loads(capsys.readouterr().out)
    assert report["format"] == "rfx"
    assert report["params"]["wave_type"] == "pink_noise"
    assert report["params"]["rand_seed"] == 5


# ── Test 3: Logging state ────────────────────────────────


def test_cli_logging_is_reset_between_tests(tmp_path: Path) -> None:
    """configure_logging binds the current stderr; it must not leak into later tests."""
    assert not structlog.is_configured()
    assert main(["gen", "jump", "--seed", "1", "-o", str(tmp_path / "j.rfx")]) == EX_OK
    assert structlog.is_configured()
    # Codec logging after a CLI run in the same test still reaches a live stream
    assert load_params(tmp_path / "j.rfx").params.rand_seed == 1
