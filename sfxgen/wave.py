"""sfxgen WAVE export — write a generated buffer as a RIFF/WAVE file.

The context's sample format picks the WAVE subtype:
  u8  → 8-bit unsigned PCM
  i16 → 16-bit PCM
  f32 → 32-bit float
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import soundfile as sf
import structlog

from sfxgen.synth.context import SampleFormat, SynthContext

logger = structlog.get_logger()

_SUBTYPES = {
    SampleFormat.U8: "PCM_U8",
    SampleFormat.I16: "PCM_16",
    SampleFormat.F32: "FLOAT",
}


def save_wave(ctx: SynthContext, frame_count: int, path: str | Path) -> Path:
    """Write the first ``frame_count`` samples of ``ctx`` as a mono WAV file."""
    path = Path(path)
    data = ctx.frames(frame_count)

    if ctx.sample_format is SampleFormat.U8:
        # soundfile has no uint8 input; shift to int16 so PCM_U8 maps back exactly
        data = (data.astype(np.int16) - 128) * 256

    sf.write(
        str(path),
        data,
        ctx.sample_rate,
        subtype=_SUBTYPES[ctx.sample_format],
        format="WAV",
    )
    logger.info(
        "wave.saved",
        path=str(path),
        frames=len(data),
        sample_rate=ctx.sample_rate,
        bits=ctx.sample_format.bits,
    )
    return path
