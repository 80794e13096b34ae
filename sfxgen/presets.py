"""sfxgen Presets — sfxr parameter generators.

Every archetype starts from the baseline square wave and applies its own
sequence of randomly weighted tweaks. The draw order is part of the
behaviour: the same seeded RandomSource always yields the same sound.

Usage:
    rng = NumpyRandomSource()
    params = generate_preset("laser_shoot", rng)   # params.rand_seed is set
    params = mutate(params, rng)
"""

from __future__ import annotations

from typing import Callable

import structlog

from sfxgen.params import (
    DEFAULT_MUTATE_MASK,
    FLOAT_FIELDS,
    SfxParams,
    WaveType,
    is_signed,
    reset_params,
)
from sfxgen.random_source import RandomSource, frnd, rnd_np1

logger = structlog.get_logger()


# ── Archetypes ───────────────────────────────────────────


def pickup_coin(rng: RandomSource) -> SfxParams:
    sp = reset_params()
    sp.start_frequency = 0.4 + frnd(rng, 0.5)
    sp.attack_time = 0.0
    sp.sustain_time = frnd(rng, 0.1)
    sp.decay_time = 0.1 + frnd(rng, 0.4)
    sp.sustain_punch = 0.3 + frnd(rng, 0.3)

    if rng.next(2):
        sp.change_speed = 0.5 + frnd(rng, 0.2)
        sp.change_amount = 0.2 + frnd(rng, 0.4)
    return sp


def laser_shoot(rng: RandomSource) -> SfxParams:
    sp = reset_params()

    # Square and sawtooth twice as likely as sine
    sp.wave_type = WaveType(rng.next(3))
    if sp.wave_type == WaveType.SINE and rng.next(2):
        sp.wave_type = WaveType(rng.next(2))

    sp.start_frequency = 0.5 + frnd(rng, 0.5)
    sp.min_frequency = sp.start_frequency - 0.2 - frnd(rng, 0.6)
    if sp.min_frequency < 0.2:
        sp.min_frequency = 0.2
    sp.slide = -0.15 - frnd(rng, 0.2)

    if rng.next(3) == 0:
        sp.start_frequency = 0.3 + frnd(rng, 0.6)
        sp.min_frequency = frnd(rng, 0.1)
        sp.slide = -0.35 - frnd(rng, 0.3)

    if rng.next(2):
        sp.square_duty = frnd(rng, 0.5)
        sp.duty_sweep = frnd(rng, 0.2)
    else:
        sp.square_duty = 0.4 + frnd(rng, 0.5)
        sp.duty_sweep = -frnd(rng, 0.7)

    sp.attack_time = 0.0
    sp.sustain_time = 0.1 + frnd(rng, 0.2)
    sp.decay_time = frnd(rng, 0.4)

    if rng.next(2):
        sp.sustain_punch = frnd(rng, 0.3)

    if rng.next(3) == 0:
        sp.phaser_offset = frnd(rng, 0.2)
        sp.phaser_sweep = -frnd(rng, 0.2)

    if rng.next(2):
        sp.hpf_cutoff = frnd(rng, 0.3)
    return sp


def explosion(rng: RandomSource) -> SfxParams:
    sp = reset_params()
    sp.wave_type = WaveType.NOISE

    if rng.next(2):
        sp.start_frequency = 0.1 + frnd(rng, 0.4)
        sp.slide = -0.1 + frnd(rng, 0.4)
    else:
        sp.start_frequency = 0.2 + frnd(rng, 0.7)
        sp.slide = -0.2 - frnd(rng, 0.2)

    sp.start_frequency *= sp.start_frequency

    if rng.next(5) == 0:
        sp.slide = 0.0
    if rng.next(3) == 0:
        sp.repeat_speed = 0.3 + frnd(rng, 0.5)

    sp.attack_time = 0.0
    sp.sustain_time = 0.1 + frnd(rng, 0.3)
    sp.decay_time = frnd(rng, 0.5)

    if rng.next(2) == 0:
        sp.phaser_offset = -0.3 + frnd(rng, 0.9)
        sp.phaser_sweep = -frnd(rng, 0.3)

    sp.sustain_punch = 0.2 + frnd(rng, 0.6)

    if rng.next(2):
        sp.vibrato_depth = frnd(rng, 0.7)
        sp.vibrato_speed = frnd(rng, 0.6)

    if rng.next(3) == 0:
        sp.change_speed = 0.6 + frnd(rng, 0.3)
        sp.change_amount = 0.8 - frnd(rng, 1.6)
    return sp


def powerup(rng: RandomSource) -> SfxParams:
    sp = reset_params()

    if rng.next(2):
        sp.wave_type = WaveType.SAWTOOTH
        sp.square_duty = 1.0
    else:
        sp.square_duty = frnd(rng, 0.6)

    if rng.next(2):
        sp.start_frequency = 0.2 + frnd(rng, 0.3)
        sp.slide = 0.1 + frnd(rng, 0.4)
        sp.repeat_speed = 0.4 + frnd(rng, 0.4)
    else:
        sp.start_frequency = 0.2 + frnd(rng, 0.3)
        sp.slide = 0.05 + frnd(rng, 0.2)
        if rng.next(2):
            sp.vibrato_depth = frnd(rng, 0.7)
            sp.vibrato_speed = frnd(rng, 0.6)

    sp.attack_time = 0.0
    sp.sustain_time = frnd(rng, 0.4)
    sp.decay_time = 0.1 + frnd(rng, 0.4)
    return sp


def hit_hurt(rng: RandomSource) -> SfxParams:
    sp = reset_params()

    sp.wave_type = WaveType(rng.next(3))
    if sp.wave_type == WaveType.SINE:
        sp.wave_type = WaveType.NOISE
    elif sp.wave_type == WaveType.SQUARE:
        sp.square_duty = frnd(rng, 0.6)
    elif sp.wave_type == WaveType.SAWTOOTH:
        sp.square_duty = 1.0

    sp.start_frequency = 0.2 + frnd(rng, 0.6)
    sp.slide = -0.3 - frnd(rng, 0.4)
    sp.attack_time = 0.0
    sp.sustain_time = frnd(rng, 0.1)
    sp.decay_time = 0.1 + frnd(rng, 0.2)

    if rng.next(2):
        sp.hpf_cutoff = frnd(rng, 0.3)
    return sp


def jump(rng: RandomSource) -> SfxParams:
    sp = reset_params()
    sp.wave_type = WaveType.SQUARE
    sp.square_duty = frnd(rng, 0.6)
    sp.start_frequency = 0.3 + frnd(rng, 0.3)
    sp.slide = 0.1 + frnd(rng, 0.2)
    sp.attack_time = 0.0
    sp.sustain_time = 0.1 + frnd(rng, 0.3)
    sp.decay_time = 0.1 + frnd(rng, 0.2)

    if rng.next(2):
        sp.hpf_cutoff = frnd(rng, 0.3)
    if rng.next(2):
        sp.lpf_cutoff = 1.0 - frnd(rng, 0.6)
    return sp


def blip_select(rng: RandomSource) -> SfxParams:
    sp = reset_params()
    sp.wave_type = WaveType(rng.next(2))
    if sp.wave_type == WaveType.SQUARE:
        sp.square_duty = frnd(rng, 0.6)
    else:
        sp.square_duty = 1.0
    sp.start_frequency = 0.2 + frnd(rng, 0.4)
    sp.attack_time = 0.0
    sp.sustain_time = 0.1 + frnd(rng, 0.1)
    sp.decay_time = frnd(rng, 0.2)
    sp.hpf_cutoff = 0.1
    return sp


# Three musical start pitches and arpeggio steps (0 = none)
_SYNTH_FREQ = (0.27231713609, 0.19255692561, 0.13615778746)
_SYNTH_ARPEGGIO = (0.0, 0.0, 0.0, 0.0, -0.3162, 0.7454, 0.7454)


def synth(rng: RandomSource) -> SfxParams:
    """Tonal instrument-like note with optional arpeggio and filter sweep."""
    sp = reset_params()
    sp.wave_type = WaveType(rng.next(2))
    sp.start_frequency = _SYNTH_FREQ[rng.next(3)]
    sp.attack_time = frnd(rng, 0.5) if rng.next(5) > 3 else 0.0
    sp.sustain_time = frnd(rng, 1.0)
    sp.sustain_punch = frnd(rng, 1.0)
    sp.decay_time = frnd(rng, 0.9) + 0.1
    sp.change_amount = _SYNTH_ARPEGGIO[rng.next(7)]
    sp.change_speed = frnd(rng, 0.5) + 0.4
    sp.square_duty = frnd(rng, 1.0)
    sp.duty_sweep = frnd(rng, 1.0) if rng.next(3) == 2 else 0.0
    if rng.next(2) == 1:
        sp.lpf_cutoff = 1.0
    else:
        sp.lpf_cutoff = 0.9 * frnd(rng, 1.0) * frnd(rng, 1.0) + 0.1
    sp.lpf_cutoff_sweep = rnd_np1(rng)
    sp.lpf_resonance = frnd(rng, 1.0)
    sp.hpf_cutoff = frnd(rng, 1.0) if rng.next(4) == 3 else 0.0
    sp.hpf_cutoff_sweep = frnd(rng, 1.0) if rng.next(4) == 3 else 0.0
    return sp


# ── Randomize / Mutate ───────────────────────────────────


def randomize(rng: RandomSource, wave_type: WaveType | int = WaveType.SQUARE) -> SfxParams:
    """Fully random sound with a few sanity correlations between fields."""
    sp = reset_params()
    sp.wave_type = WaveType(wave_type)

    sp.start_frequency = rnd_np1(rng) ** 2
    if rng.next(2):
        sp.start_frequency = rnd_np1(rng) ** 3 + 0.5
    sp.min_frequency = 0.0
    sp.slide = rnd_np1(rng) ** 5

    # High notes slide down, low notes slide up
    if sp.start_frequency > 0.7 and sp.slide > 0.2:
        sp.slide = -sp.slide
    if sp.start_frequency < 0.2 and sp.slide < -0.05:
        sp.slide = -sp.slide

    sp.delta_slide = rnd_np1(rng) ** 3
    sp.square_duty = rnd_np1(rng)
    sp.duty_sweep = rnd_np1(rng) ** 3
    sp.vibrato_depth = rnd_np1(rng) ** 3
    sp.vibrato_speed = rnd_np1(rng)
    sp.attack_time = rnd_np1(rng) ** 3
    sp.sustain_time = rnd_np1(rng) ** 2
    sp.decay_time = rnd_np1(rng)
    sp.sustain_punch = frnd(rng, 0.8) ** 2

    if sp.attack_time + sp.sustain_time + sp.decay_time < 0.2:
        sp.sustain_time += 0.2 + frnd(rng, 0.3)
        sp.decay_time += 0.2 + frnd(rng, 0.3)

    sp.lpf_resonance = rnd_np1(rng)
    sp.lpf_cutoff = 1.0 - frnd(rng, 1.0) ** 3
    sp.lpf_cutoff_sweep = rnd_np1(rng) ** 3
    if sp.lpf_cutoff < 0.1 and sp.lpf_cutoff_sweep < -0.05:
        sp.lpf_cutoff_sweep = -sp.lpf_cutoff_sweep

    sp.hpf_cutoff = frnd(rng, 1.0) ** 5
    sp.hpf_cutoff_sweep = rnd_np1(rng) ** 5
    sp.phaser_offset = rnd_np1(rng) ** 3
    sp.phaser_sweep = rnd_np1(rng) ** 3
    sp.repeat_speed = rnd_np1(rng)
    sp.change_speed = rnd_np1(rng)
    sp.change_amount = rnd_np1(rng)
    return sp


def mutate(
    params: SfxParams,
    rng: RandomSource,
    range_: float = 0.1,
    mask: int = DEFAULT_MUTATE_MASK,
) -> SfxParams:
    """Nudge a random subset of the masked float fields.

    One 24-bit word picks which of the masked fields move; each moved field
    shifts by up to ±range_/2 and is clamped to [0, 1] (or [-1, 1] for the
    signed fields).
    """
    sp = params.copy()
    half = range_ * 0.5
    rmod = 1 + rng.next(0xFFFFFF)

    for i, name in enumerate(FLOAT_FIELDS):
        bit = 1 << i
        if rmod & bit & mask:
            low = -1.0 if is_signed(i) else 0.0
            val = getattr(sp, name) + frnd(rng, range_) - half
            if val > 1.0:
                val = 1.0
            elif val < low:
                val = low
            setattr(sp, name, val)
    return sp


# ── Registry ─────────────────────────────────────────────


def _random_wave(rng: RandomSource) -> SfxParams:
    return randomize(rng, rng.next(4))


PRESETS: dict[str, Callable[[RandomSource], SfxParams]] = {
    "pickup_coin": pickup_coin,
    "laser_shoot": laser_shoot,
    "explosion": explosion,
    "powerup": powerup,
    "hit_hurt": hit_hurt,
    "jump": jump,
    "blip_select": blip_select,
    "synth": synth,
    "random": _random_wave,
}


def generate_preset(name: str, rng: RandomSource, seed: int | None = None) -> SfxParams:
    """Build a named preset from a recorded seed.

    When ``seed`` is None a fresh non-zero seed is drawn from ``rng``. The
    source is reseeded with it before building, and the seed is stored in
    ``rand_seed`` so the same sound can be rebuilt later.
    """
    try:
        builder = PRESETS[name]
    except KeyError:
        msg = f"Unknown preset: {name}. Valid: {list(PRESETS.keys())}"
        raise ValueError(msg) from None

    if seed is None:
        seed = 1 + rng.next(0xFFFFFFFE)
    rng.seed(seed)
    sp = builder(rng)
    sp.rand_seed = seed & 0xFFFFFFFF
    logger.debug("presets.generated", preset=name, seed=sp.rand_seed)
    return sp
