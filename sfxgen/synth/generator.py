"""sfxgen Waveform Generator — the sfxr synthesis loop.

One output sample is the average of 8 supersampled sub-samples. Per output
sample the loop runs: repeat → arpeggio → slide → vibrato → duty drift →
envelope → phaser/high-pass sweeps, then per sub-sample: oscillator →
low-pass → high-pass → phaser. Nothing is rejected; out-of-range values are
clamped so every parameter set produces a bounded buffer.

Generation stops at whichever comes first:
  - the context capacity (sample_rate * max_duration_s),
  - the slide pushing the pitch below min_frequency (when it is > 0),
  - the envelope running past its decay stage.
"""

from __future__ import annotations

import math

import structlog

from sfxgen.params import SfxParams, WaveType
from sfxgen.random_source import RandomSource, frnd, rnd_np1
from sfxgen.synth.context import NOISE_SIZE, PHASER_SIZE, PINK_SIZE, SampleFormat, SynthContext
from sfxgen.synth.state import (
    FilterState,
    OscillatorState,
    envelope_lengths,
    phaser_start,
    repeat_limit,
)

logger = structlog.get_logger()

SUPERSAMPLE = 8
SAMPLE_COEFFICIENT = 0.2  # Scales the mixed sample into [-1, 1]
MIN_PERIOD = 8
_PHASER_MASK = PHASER_SIZE - 1


# ── Noise Tables ─────────────────────────────────────────


def _pink_value(ctx: SynthContext, rng: RandomSource) -> float:
    """Voss-style pink noise: redraw the registers whose counter bit flipped."""
    last = ctx.pink_index
    i = last + 1
    if i > 0x1F:  # 5 set bits, one per register
        i = 0
    changed = last ^ i
    ctx.pink_index = i

    white = ctx.pink_white
    total = 0.0
    for k in range(PINK_SIZE):
        if changed & (1 << k):
            white[k] = frnd(rng, 1.0)
        total += white[k]
    return (total / PINK_SIZE) * 2.0 - 1.0


def _refill_noise(ctx: SynthContext, wave: WaveType, rng: RandomSource) -> None:
    noise = ctx.noise_buffer
    if wave == WaveType.NOISE:
        for i in range(NOISE_SIZE):
            noise[i] = rnd_np1(rng)
    elif wave == WaveType.PINK_NOISE:
        for i in range(NOISE_SIZE):
            noise[i] = _pink_value(ctx, rng)


# ── Generator ────────────────────────────────────────────


def generate_wave(ctx: SynthContext, sp: SfxParams, rng: RandomSource) -> int:
    """Synthesize ``sp`` into ``ctx.samples``.

    Args:
        ctx: Preallocated context; its scratch tables are reset here.
        sp: Sound parameters (read only).
        rng: Source for the noise tables. Its exact draw sequence, together
            with ``sp``, fully determines the output.

    Returns:
        Number of samples written, never more than ``ctx.capacity``.
    """
    # Keep related parameters consistent
    min_freq = min(sp.min_frequency, sp.start_frequency)
    sslide = sp.slide if sp.slide >= sp.delta_slide else sp.delta_slide

    osc = OscillatorState.derive(sp, min_freq, sslide)
    flt = FilterState.derive(sp)

    vib_phase = 0.0
    vib_speed = sp.vibrato_speed**2 * 0.01
    vib_amp = sp.vibrato_depth * 0.5

    env_length = envelope_lengths(sp)
    env_stage = 0
    env_time = 0
    env_volume = 0.0

    ph_offset, ph_sweep = phaser_start(sp)
    ph_delay = abs(int(ph_offset))
    ph_pos = 0

    wave = WaveType(sp.wave_type)
    ctx.reset_scratch()
    if wave == WaveType.PINK_NOISE:
        for k in range(PINK_SIZE):
            ctx.pink_white[k] = frnd(rng, 1.0)
    _refill_noise(ctx, wave, rng)
    noisy = wave in (WaveType.NOISE, WaveType.PINK_NOISE)

    rep_time = 0
    rep_limit = repeat_limit(sp)

    # Filter state lives in locals inside the loop
    lp_pos, lp_vel = flt.lp_pos, flt.lp_vel
    lp_w, lp_w_delta, lp_damp = flt.lp_w, flt.lp_w_delta, flt.lp_damp
    hp_pos, hp, hp_delta = flt.hp_pos, flt.hp, flt.hp_delta
    lpf_on = sp.lpf_cutoff != 1.0
    punch = sp.sustain_punch

    noise = ctx.noise_buffer
    phaser = ctx.phaser_buffer
    samples = ctx.samples
    fmt = ctx.sample_format
    end = ctx.capacity

    phase = 0
    count = 0
    reason = "capacity"

    while count < end:
        rep_time += 1
        if rep_limit != 0 and rep_time >= rep_limit:
            rep_time = 0
            osc = OscillatorState.derive(sp, min_freq, sslide)

        # Frequency envelopes / arpeggios
        osc.arpeggio_time += 1
        if osc.arpeggio_limit != 0 and osc.arpeggio_time >= osc.arpeggio_limit:
            osc.arpeggio_limit = 0
            osc.period_f *= osc.arpeggio_mod

        osc.slide += osc.delta_slide
        osc.period_f *= osc.slide

        last_sample = False
        if osc.period_f > osc.max_period:
            osc.period_f = osc.max_period
            if min_freq > 0.0:
                last_sample = True

        rperiod = osc.period_f
        if vib_amp > 0.0:
            vib_phase += vib_speed
            rperiod = osc.period_f * (1.0 + math.sin(vib_phase) * vib_amp)

        period = int(rperiod)
        if period < MIN_PERIOD:
            period = MIN_PERIOD

        osc.square_duty += osc.duty_slide
        if osc.square_duty < 0.0:
            osc.square_duty = 0.0
        elif osc.square_duty > 0.5:
            osc.square_duty = 0.5
        duty = osc.square_duty

        # Volume envelope
        env_time += 1
        if env_time > env_length[env_stage]:
            env_time = 0
            env_stage += 1
            while env_stage < 3 and env_length[env_stage] == 0:
                env_stage += 1
            if env_stage == 3:
                reason = "envelope"
                break

        if env_stage == 0:
            env_volume = env_time / env_length[0]
        elif env_stage == 1:
            env_volume = 1.0 + (1.0 - env_time / env_length[1]) * 2.0 * punch
        else:
            env_volume = 1.0 - env_time / env_length[2]

        # Phaser step
        ph_offset += ph_sweep
        ph_delay = abs(int(ph_offset))
        if ph_delay > _PHASER_MASK:
            ph_delay = _PHASER_MASK

        if hp_delta != 0.0:
            hp *= hp_delta
            if hp < 0.00001:
                hp = 0.00001
            elif hp > 0.1:
                hp = 0.1

        # 8x supersampling
        ssample = 0.0
        for _ in range(SUPERSAMPLE):
            phase += 1
            if phase >= period:
                phase %= period
                if noisy:
                    _refill_noise(ctx, wave, rng)

            fp = phase / period
            if wave == WaveType.SQUARE:
                sample = 0.5 if fp < duty else -0.5
            elif wave == WaveType.SAWTOOTH:
                if fp < duty:
                    sample = -1.0 + 2.0 * fp / duty
                else:
                    sample = 1.0 - 2.0 * (fp - duty) / (1.0 - duty)
            elif wave == WaveType.SINE:
                sample = math.sin(fp * 2.0 * math.pi)
            elif noisy:
                sample = float(noise[phase * NOISE_SIZE // period])
            else:  # triangle
                sample = -1.0 + 4.0 * fp if fp < 0.5 else 3.0 - 4.0 * fp

            # Low-pass filter
            prev = lp_pos
            lp_w *= lp_w_delta
            if lp_w < 0.0:
                lp_w = 0.0
            elif lp_w > 0.1:
                lp_w = 0.1

            if lpf_on:
                lp_vel += (sample - lp_pos) * lp_w
                lp_vel -= lp_vel * lp_damp
            else:
                lp_pos = sample
                lp_vel = 0.0
            lp_pos += lp_vel

            # High-pass filter
            hp_pos += lp_pos - prev
            hp_pos -= hp_pos * hp
            sample = hp_pos

            # Phaser
            phaser[ph_pos & _PHASER_MASK] = sample
            sample += float(phaser[(ph_pos - ph_delay + PHASER_SIZE) & _PHASER_MASK])
            ph_pos = (ph_pos + 1) & _PHASER_MASK

            ssample += sample * env_volume

        ssample = ssample / SUPERSAMPLE * SAMPLE_COEFFICIENT
        if ssample > 1.0:
            ssample = 1.0
        elif ssample < -1.0:
            ssample = -1.0

        if fmt is SampleFormat.U8:
            samples[count] = int(ssample * 127.0 + 128.0)
        elif fmt is SampleFormat.I16:
            samples[count] = int(ssample * 32767.0)
        else:
            samples[count] = ssample
        count += 1

        if last_sample:
            reason = "min_frequency"
            break

    logger.debug(
        "synth.generate.done",
        frames=count,
        reason=reason,
        wave=wave.name.lower(),
        capacity=end,
    )
    return count
