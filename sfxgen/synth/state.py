"""sfxgen Synth State — running values derived from an SfxParams.

``OscillatorState.derive`` is used both at the start of a generation and
every time the repeat counter retriggers the sound, so the two always agree.
"""

from __future__ import annotations

from dataclasses import dataclass

from sfxgen.params import SfxParams


@dataclass
class OscillatorState:
    """Pitch, slide, duty and arpeggio state (everything a repeat resets)."""

    period_f: float
    max_period: float
    slide: float
    delta_slide: float
    square_duty: float
    duty_slide: float
    arpeggio_mod: float
    arpeggio_time: int
    arpeggio_limit: int

    @classmethod
    def derive(cls, sp: SfxParams, min_freq: float, sslide: float) -> OscillatorState:
        if sp.change_amount >= 0.0:
            arpeggio_mod = 1.0 - sp.change_amount**2 * 0.9
        else:
            arpeggio_mod = 1.0 + sp.change_amount**2 * 10.0

        if sp.change_speed == 1.0:
            arpeggio_limit = 0
        else:
            arpeggio_limit = int((1.0 - sp.change_speed) ** 2 * 20000 + 32)

        return cls(
            period_f=100.0 / (sp.start_frequency**2 + 0.001),
            max_period=100.0 / (min_freq**2 + 0.001),
            slide=1.0 - sslide**3 * 0.01,
            delta_slide=-(sp.delta_slide**3) * 0.000001,
            square_duty=0.5 - sp.square_duty * 0.5,
            duty_slide=-sp.duty_sweep * 0.00005,
            arpeggio_mod=arpeggio_mod,
            arpeggio_time=0,
            arpeggio_limit=arpeggio_limit,
        )


@dataclass
class FilterState:
    """Low-pass / high-pass filter coefficients and memory."""

    lp_pos: float
    lp_vel: float
    lp_w: float
    lp_w_delta: float
    lp_damp: float
    hp_pos: float
    hp: float
    hp_delta: float

    @classmethod
    def derive(cls, sp: SfxParams) -> FilterState:
        lp_w = sp.lpf_cutoff**3 * 0.1
        lp_damp = 5.0 / (1.0 + sp.lpf_resonance**2 * 20.0) * (0.01 + lp_w)
        return cls(
            lp_pos=0.0,
            lp_vel=0.0,
            lp_w=lp_w,
            lp_w_delta=1.0 + sp.lpf_cutoff_sweep * 0.0001,
            lp_damp=min(lp_damp, 0.8),
            hp_pos=0.0,
            hp=sp.hpf_cutoff**2 * 0.1,
            hp_delta=1.0 + sp.hpf_cutoff_sweep * 0.0003,
        )


def envelope_lengths(sp: SfxParams) -> tuple[int, int, int]:
    """Attack, sustain and decay lengths in samples."""
    return (
        int(sp.attack_time * sp.attack_time * 100000.0),
        int(sp.sustain_time * sp.sustain_time * 100000.0),
        int(sp.decay_time * sp.decay_time * 100000.0),
    )


def repeat_limit(sp: SfxParams) -> int:
    """Samples between retriggers, 0 when repeat is off."""
    if sp.repeat_speed == 0.0:
        return 0
    return int((1.0 - sp.repeat_speed) ** 2 * 20000 + 32)


def phaser_start(sp: SfxParams) -> tuple[float, float]:
    """Initial phaser offset and per-sample sweep, signed like the params."""
    offset = sp.phaser_offset**2 * 1020.0
    if sp.phaser_offset < 0.0:
        offset = -offset
    sweep = sp.phaser_sweep**2
    if sp.phaser_sweep < 0.0:
        sweep = -sweep
    return offset, sweep
