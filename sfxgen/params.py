"""sfxgen Parameter Model — the numeric description of one sound.

Field order matters: it is the rFX record layout and the bit order used by
``mutate`` (bit 0 = attack_time ... bit 21 = hpf_cutoff_sweep).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class WaveType(IntEnum):
    """Base oscillator shape."""

    SQUARE = 0
    SAWTOOTH = 1
    SINE = 2
    NOISE = 3
    TRIANGLE = 4
    PINK_NOISE = 5


# ── Field Tables ─────────────────────────────────────────

FLOAT_FIELDS: tuple[str, ...] = (
    # Envelope
    "attack_time",
    "sustain_time",
    "sustain_punch",
    "decay_time",
    # Frequency
    "start_frequency",
    "min_frequency",
    "slide",
    "delta_slide",
    "vibrato_depth",
    "vibrato_speed",
    # Tone change (arpeggio)
    "change_amount",
    "change_speed",
    # Square duty
    "square_duty",
    "duty_sweep",
    # Repeat
    "repeat_speed",
    # Phaser
    "phaser_offset",
    "phaser_sweep",
    # Filters
    "lpf_cutoff",
    "lpf_cutoff_sweep",
    "lpf_resonance",
    "hpf_cutoff",
    "hpf_cutoff_sweep",
)

# slide, delta_slide, change_amount, duty_sweep, phaser_offset,
# phaser_sweep, lpf_cutoff_sweep, hpf_cutoff_sweep
SIGNED_FIELD_MASK = 0x0025A4C0

# Every field except min_frequency
DEFAULT_MUTATE_MASK = 0xFFFFDF


def is_signed(index: int) -> bool:
    """True when the float field at ``index`` ranges over [-1, 1]."""
    return bool(SIGNED_FIELD_MASK & (1 << index))


def field_bit(name: str) -> int:
    """Mutate mask bit selecting a single float field."""
    return 1 << FLOAT_FIELDS.index(name)


# ── Parameter Set ────────────────────────────────────────


@dataclass
class SfxParams:
    """Complete sound description.

    Defaults are the sfxr baseline: a plain square wave with
    0.3 sustain, 0.4 decay and the low-pass filter disabled.
    """

    rand_seed: int = 0  # 0 = unseeded
    wave_type: WaveType = WaveType.SQUARE

    # Envelope
    attack_time: float = 0.0
    sustain_time: float = 0.3
    sustain_punch: float = 0.0
    decay_time: float = 0.4

    # Frequency
    start_frequency: float = 0.3
    min_frequency: float = 0.0
    slide: float = 0.0
    delta_slide: float = 0.0
    vibrato_depth: float = 0.0
    vibrato_speed: float = 0.0

    # Tone change
    change_amount: float = 0.0
    change_speed: float = 0.0

    # Square duty
    square_duty: float = 0.0
    duty_sweep: float = 0.0

    # Repeat
    repeat_speed: float = 0.0

    # Phaser
    phaser_offset: float = 0.0
    phaser_sweep: float = 0.0

    # Filters
    lpf_cutoff: float = 1.0  # 1 = disabled
    lpf_cutoff_sweep: float = 0.0
    lpf_resonance: float = 0.0
    hpf_cutoff: float = 0.0  # 0 = disabled
    hpf_cutoff_sweep: float = 0.0

    def copy(self) -> SfxParams:
        return dataclasses.replace(self)

    def as_floats(self) -> list[float]:
        """The 22 float fields in record order."""
        return [getattr(self, name) for name in FLOAT_FIELDS]

    @classmethod
    def from_floats(
        cls,
        values: list[float] | tuple[float, ...],
        rand_seed: int = 0,
        wave_type: WaveType | int = WaveType.SQUARE,
    ) -> SfxParams:
        if len(values) != len(FLOAT_FIELDS):
            msg = f"Expected {len(FLOAT_FIELDS)} float fields, got {len(values)}"
            raise ValueError(msg)
        kwargs = {name: float(v) for name, v in zip(FLOAT_FIELDS, values)}
        return cls(rand_seed=rand_seed, wave_type=WaveType(wave_type), **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to JSON-compatible dict."""
        d = dataclasses.asdict(self)
        d["wave_type"] = self.wave_type.name.lower()
        return d

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> SfxParams:
        wave = d.get("wave_type", WaveType.SQUARE)
        if isinstance(wave, str):
            wave = WaveType[wave.upper()]
        base = cls()
        return cls(
            rand_seed=int(d.get("rand_seed", 0)),
            wave_type=WaveType(wave),
            **{name: float(d.get(name, getattr(base, name))) for name in FLOAT_FIELDS},
        )


def reset_params() -> SfxParams:
    """Canonical baseline every generator starts from."""
    return SfxParams()
