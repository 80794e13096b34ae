"""sfxgen Parameter Codec — rFX and legacy sfxr (.sfs) parameter files.

rFX layout (little-endian, no padding):
  0-3    "rFX "
  4-5    uint16 version (200)
  6-7    uint16 record length (96)
  8-103  uint32 randSeed, int32 waveType, 22 x float32 in SfxParams order

Legacy .sfs files start with an int32 version (100, 101 or 102) and store
the fields sequentially; later versions add fields. Only rFX is written.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import structlog

from sfxgen.errors import (
    EncodeError,
    FileOpenError,
    FileReadError,
    FileWriteError,
    InvalidParameterError,
    InvalidRecordLengthError,
    UnsupportedVersionError,
)
from sfxgen.params import FLOAT_FIELDS, SfxParams, WaveType

logger = structlog.get_logger()

RFX_SIGNATURE = b"rFX "
RFX_VERSION = 200
RFX_HEADER = struct.Struct("<4sHH")
RFX_RECORD = struct.Struct(f"<Ii{len(FLOAT_FIELDS)}f")
RFX_RECORD_SIZE = RFX_RECORD.size  # 96

LEGACY_VERSIONS = (100, 101, 102)
LEGACY_DEFAULT_VOLUME = 0.5

_I32 = struct.Struct("<i")
_F32 = struct.Struct("<f")
_U8 = struct.Struct("<B")


# ── Data Types ───────────────────────────────────────────


@dataclass
class LoadResult:
    """A decoded parameter file."""

    params: SfxParams
    volume: float = LEGACY_DEFAULT_VOLUME  # Only stored by sfxr v102
    source_format: Literal["rfx", "sfs"] = "rfx"
    version: int = RFX_VERSION


class _Reader:
    """Sequential little-endian reader that fails on short input."""

    def __init__(self, data: bytes, path: str | Path | None) -> None:
        self._data = data
        self._pos = 0
        self._path = path

    def unpack(self, fmt: struct.Struct) -> tuple:
        end = self._pos + fmt.size
        if end > len(self._data):
            raise FileReadError("File read failed", self._path)
        values = fmt.unpack_from(self._data, self._pos)
        self._pos = end
        return values

    def i32(self) -> int:
        return self.unpack(_I32)[0]

    def f32(self) -> float:
        return self.unpack(_F32)[0]

    def u8(self) -> int:
        return self.unpack(_U8)[0]


def _wave_type(value: int, path: str | Path | None) -> WaveType:
    try:
        return WaveType(value)
    except ValueError as e:
        raise InvalidParameterError(f"Unknown wave type {value}", path) from e


# ── Decoding ─────────────────────────────────────────────


def _decode_rfx(reader: _Reader, path: str | Path | None) -> LoadResult:
    _, version, length = reader.unpack(RFX_HEADER)
    if version != RFX_VERSION:
        raise UnsupportedVersionError("rFX file version not supported", path)
    if length != RFX_RECORD_SIZE:
        raise InvalidRecordLengthError("Invalid rFX wave parameters size", path)

    seed, wave, *floats = reader.unpack(RFX_RECORD)
    params = SfxParams.from_floats(floats, rand_seed=seed, wave_type=_wave_type(wave, path))
    return LoadResult(params=params, source_format="rfx", version=version)


def _decode_sfs(reader: _Reader, path: str | Path | None) -> LoadResult:
    version = reader.i32()
    if version not in LEGACY_VERSIONS:
        raise UnsupportedVersionError("SFS file version not supported", path)

    f = reader.f32
    wave = reader.i32()
    volume = f() if version == 102 else LEGACY_DEFAULT_VOLUME

    v: dict[str, float] = {}
    v["start_frequency"] = f()
    v["min_frequency"] = f()
    v["slide"] = f()
    v["delta_slide"] = f() if version >= 101 else 0.0
    v["square_duty"] = f()
    v["duty_sweep"] = f()
    v["vibrato_depth"] = f()
    v["vibrato_speed"] = f()
    f()  # vibratoPhaseDelay, unused by sfxr
    v["attack_time"] = f()
    v["sustain_time"] = f()
    v["decay_time"] = f()
    v["sustain_punch"] = f()
    reader.u8()  # filterOn, unused by sfxr
    v["lpf_resonance"] = f()
    v["lpf_cutoff"] = f()
    v["lpf_cutoff_sweep"] = f()
    v["hpf_cutoff"] = f()
    v["hpf_cutoff_sweep"] = f()
    v["phaser_offset"] = f()
    v["phaser_sweep"] = f()
    v["repeat_speed"] = f()
    if version >= 101:
        v["change_speed"] = f()
        v["change_amount"] = f()
    else:
        v["change_speed"] = 0.0
        v["change_amount"] = 0.0

    params = SfxParams(wave_type=_wave_type(wave, path), **v)
    return LoadResult(params=params, volume=volume, source_format="sfs", version=version)


def decode_params(data: bytes, path: str | Path | None = None) -> LoadResult:
    """Decode an rFX or legacy sfxr parameter blob.

    Raises:
        FileReadError: The data ends before the record is complete.
        UnsupportedVersionError: Unknown rFX or sfxr version.
        InvalidRecordLengthError: rFX header length is not 96.
        InvalidParameterError: The wave type is not a known WaveType.
    """
    if len(data) < 4:
        raise FileReadError("File read failed", path)

    reader = _Reader(data, path)
    if data[:4] == RFX_SIGNATURE:
        return _decode_rfx(reader, path)
    return _decode_sfs(reader, path)


def load_params(path: str | Path) -> LoadResult:
    """Load an rFX (.rfx) or sfxr settings (.sfs) file."""
    path = Path(path)
    try:
        with path.open("rb") as fh:
            try:
                data = fh.read()
            except OSError as e:
                raise FileReadError("File read failed", path) from e
    except OSError as e:
        logger.warning("codec.load.open_failed", path=str(path), error=str(e))
        raise FileOpenError("File open failed", path) from e

    try:
        result = decode_params(data, path)
    except FileReadError:
        logger.warning("codec.load.short_read", path=str(path), size=len(data))
        raise
    logger.info(
        f"codec.load.{result.source_format}",
        path=str(path),
        version=result.version,
        wave=result.params.wave_type.name.lower(),
    )
    return result


# ── Encoding ─────────────────────────────────────────────


def encode_rfx(params: SfxParams) -> bytes:
    """Serialize ``params`` as a complete 104-byte rFX file."""
    header = RFX_HEADER.pack(RFX_SIGNATURE, RFX_VERSION, RFX_RECORD_SIZE)
    try:
        record = RFX_RECORD.pack(
            params.rand_seed & 0xFFFFFFFF,
            int(params.wave_type),
            *params.as_floats(),
        )
    except (struct.error, OverflowError) as e:
        msg = f"Invalid rFX wave parameters: {e}"
        raise EncodeError(msg) from e
    return header + record


def save_rfx(params: SfxParams, path: str | Path) -> Path:
    """Write ``params`` to an rFX file and return the path."""
    path = Path(path)
    try:
        data = encode_rfx(params)
    except EncodeError as e:
        logger.warning("codec.save.encode_failed", path=str(path), error=e.message)
        raise EncodeError(e.message, path) from e
    try:
        fh = path.open("wb")
    except OSError as e:
        logger.warning("codec.save.open_failed", path=str(path), error=str(e))
        raise FileOpenError("File open failed", path) from e

    try:
        with fh:
            written = fh.write(data)
    except OSError as e:
        logger.warning("codec.save.write_failed", path=str(path), error=str(e))
        raise FileWriteError("File write failed", path) from e
    if written != len(data):
        raise FileWriteError("File write failed", path)

    logger.info("codec.save.rfx", path=str(path), bytes=written)
    return path
