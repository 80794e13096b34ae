"""sfxgen Codec Tests — rFX round trips, legacy sfxr versions and failure modes."""

from __future__ import annotations

import struct
from pathlib import Path

import numpy as np
import pytest

from sfxgen.codec import (
    RFX_RECORD_SIZE,
    decode_params,
    encode_rfx,
    load_params,
    save_rfx,
)
from sfxgen.errors import (
    EncodeError,
    FileOpenError,
    FileReadError,
    InvalidParameterError,
    InvalidRecordLengthError,
    LoadError,
    SaveError,
    UnsupportedVersionError,
)
from sfxgen.params import FLOAT_FIELDS, SfxParams, WaveType
from sfxgen.presets import explosion
from sfxgen.random_source import NumpyRandomSource


# ── Helpers ──────────────────────────────────────────────


def _sfs_bytes(version: int, wave: int = 1, volume: float = 0.75) -> bytes:
    """Build a legacy sfxr settings file with float32-exact values."""
    def f(v: float) -> bytes:
        return struct.pack("<f", v)

    out = struct.pack("<i", version) + struct.pack("<i", wave)
    if version == 102:
        out += f(volume)
    out += f(0.5) + f(0.125) + f(-0.25)  # start, min, slide
    if version >= 101:
        out += f(0.0625)  # delta slide
    out += f(0.375) + f(-0.5)  # duty, duty sweep
    out += f(0.25) + f(0.75) + f(0.9)  # vibrato depth, speed, phase delay (ignored)
    out += f(0.125) + f(0.25) + f(0.5) + f(0.375)  # attack, sustain, decay, punch
    out += b"\x01"  # filterOn (ignored)
    out += f(0.5) + f(0.875) + f(-0.125) + f(0.0625) + f(0.25)  # lpf res/cut/sweep, hpf cut/sweep
    out += f(0.5) + f(-0.75) + f(0.25)  # phaser offset, sweep, repeat
    if version >= 101:
        out += f(0.625) + f(-0.375)  # change speed, amount
    return out


def _rfx_header(version: int = 200, length: int = 96) -> bytes:
    return b"rFX " + struct.pack("<HH", version, length)


# ── Test 1: rFX round trip ───────────────────────────────


def test_rfx_layout_size() -> None:
    data = encode_rfx(SfxParams())
    assert RFX_RECORD_SIZE == 96
    assert len(data) == 104
    assert data[:4] == b"rFX "
    assert struct.unpack_from("<HH", data, 4) == (200, 96)


def test_save_load_round_trip_is_byte_exact(tmp_path: Path) -> None:
    """Any parameter set survives save → load → save unchanged."""
    params = explosion(NumpyRandomSource(5))
    params.rand_seed = 0xDEADBEEF
    path = save_rfx(params, tmp_path / "boom.rfx")

    loaded = load_params(path)
    assert loaded.source_format == "rfx"
    assert loaded.params.rand_seed == 0xDEADBEEF
    assert loaded.params.wave_type == WaveType.NOISE
    assert encode_rfx(loaded.params) == path.read_bytes()
    for name in FLOAT_FIELDS:
        assert getattr(loaded.params, name) == float(np.float32(getattr(params, name)))


def test_scenario_seed_survives_reload(tmp_path: Path) -> None:
    params = SfxParams(
        rand_seed=12345,
        wave_type=WaveType.TRIANGLE,
        attack_time=0.1,
        slide=-0.33,
        lpf_cutoff=0.7,
        hpf_cutoff_sweep=-0.2,
    )
    save_rfx(params, tmp_path / "s.rfx")
    loaded = load_params(tmp_path / "s.rfx").params

    assert loaded.rand_seed == 12345
    assert loaded.wave_type == WaveType.TRIANGLE
    expected = np.array(params.as_floats(), dtype=np.float32)
    assert np.array_equal(np.array(loaded.as_floats(), dtype=np.float32), expected)


def test_rfx_trailing_bytes_ignored() -> None:
    data = encode_rfx(SfxParams(rand_seed=3)) + b"extra"
    assert decode_params(data).params.rand_seed == 3


# ── Test 2: rFX validation ───────────────────────────────


def test_rfx_wrong_version() -> None:
    data = _rfx_header(version=201) + bytes(96)
    with pytest.raises(UnsupportedVersionError):
        decode_params(data)


def test_rfx_wrong_length() -> None:
    data = _rfx_header(length=95) + bytes(96)
    with pytest.raises(InvalidRecordLengthError) as exc:
        decode_params(data)
    assert exc.value.message == "Invalid rFX wave parameters size"


def test_rfx_truncated_record() -> None:
    data = encode_rfx(SfxParams())[:-1]
    with pytest.raises(FileReadError):
        decode_params(data)


def test_rfx_unknown_wave_type() -> None:
    data = bytearray(encode_rfx(SfxParams()))
    struct.pack_into("<i", data, 12, 42)
    with pytest.raises(InvalidParameterError):
        decode_params(bytes(data))


# ── Test 3: Legacy sfxr files ────────────────────────────


def test_legacy_v102_reads_volume(tmp_path: Path) -> None:
    path = tmp_path / "old.sfs"
    path.write_bytes(_sfs_bytes(102, wave=3, volume=0.75))
    loaded = load_params(path)
    sp = loaded.params

    assert loaded.source_format == "sfs"
    assert loaded.version == 102
    assert loaded.volume == 0.75
    assert sp.wave_type == WaveType.NOISE
    assert sp.rand_seed == 0
    assert (sp.start_frequency, sp.min_frequency, sp.slide, sp.delta_slide) == (
        0.5,
        0.125,
        -0.25,
        0.0625,
    )
    assert (sp.square_duty, sp.duty_sweep) == (0.375, -0.5)
    assert (sp.vibrato_depth, sp.vibrato_speed) == (0.25, 0.75)
    assert (sp.attack_time, sp.sustain_time, sp.decay_time, sp.sustain_punch) == (
        0.125,
        0.25,
        0.5,
        0.375,
    )
    assert (sp.lpf_resonance, sp.lpf_cutoff, sp.lpf_cutoff_sweep) == (0.5, 0.875, -0.125)
    assert (sp.hpf_cutoff, sp.hpf_cutoff_sweep) == (0.0625, 0.25)
    assert (sp.phaser_offset, sp.phaser_sweep, sp.repeat_speed) == (0.5, -0.75, 0.25)
    assert (sp.change_speed, sp.change_amount) == (0.625, -0.375)


def test_legacy_v101_default_volume() -> None:
    loaded = decode_params(_sfs_bytes(101))
    assert loaded.volume == 0.5
    assert loaded.params.delta_slide == 0.0625
    assert loaded.params.change_amount == -0.375


def test_legacy_v100_zeroes_missing_fields() -> None:
    loaded = decode_params(_sfs_bytes(100))
    sp = loaded.params
    assert sp.delta_slide == 0.0
    assert sp.change_speed == 0.0
    assert sp.change_amount == 0.0
    # Fields after the gap still line up
    assert sp.square_duty == 0.375
    assert sp.repeat_speed == 0.25


@pytest.mark.parametrize("version", [99, 103, 200, -1])
def test_legacy_unsupported_version(version: int) -> None:
    """Anything not rFX-signed must be 100/101/102."""
    with pytest.raises(UnsupportedVersionError):
        decode_params(struct.pack("<i", version) + bytes(120))


@pytest.mark.parametrize("version", [100, 101, 102])
def test_legacy_truncated_fails_fast(version: int) -> None:
    data = _sfs_bytes(version)
    with pytest.raises(FileReadError):
        decode_params(data[:-2])


def test_short_header() -> None:
    with pytest.raises(FileReadError):
        decode_params(b"rF")


# ── Test 4: File boundary ────────────────────────────────


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileOpenError) as exc:
        load_params(tmp_path / "nope.rfx")
    assert exc.value.path == tmp_path / "nope.rfx"


def test_save_into_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(FileOpenError):
        save_rfx(SfxParams(), tmp_path / "missing" / "x.rfx")


def test_load_errors_share_base(tmp_path: Path) -> None:
    path = tmp_path / "bad.sfs"
    path.write_bytes(struct.pack("<i", 7))
    with pytest.raises(LoadError):
        load_params(path)


def test_out_of_range_value_is_a_save_error(tmp_path: Path) -> None:
    """Values beyond float32 range fail as an sfxgen error and leave no file behind."""
    params = SfxParams.from_dict({**SfxParams().to_dict(), "start_frequency": 1e300})
    with pytest.raises(EncodeError):
        encode_rfx(params)

    path = tmp_path / "huge.rfx"
    with pytest.raises(SaveError) as exc:
        save_rfx(params, path)
    assert exc.value.path == path
    assert not path.exists()
