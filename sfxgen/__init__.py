"""sfxgen — procedural sfxr-style sound effects.

- Params: the 22-float SfxParams sound description
- Synth: supersampled oscillator / envelope / filter / phaser engine
- Codec: rFX and legacy sfxr (.sfs) parameter files
- Presets: coin, laser, explosion, ... generators plus randomize / mutate
"""

from sfxgen.codec import LoadResult, decode_params, encode_rfx, load_params, save_rfx
from sfxgen.params import SfxParams, WaveType, reset_params
from sfxgen.presets import PRESETS, generate_preset, mutate, randomize
from sfxgen.random_source import NumpyRandomSource, RandomSource, default_random_source
from sfxgen.synth import SampleFormat, SynthContext, generate_wave

__version__ = "0.5.0"

__all__ = [
    "LoadResult",
    "decode_params",
    "encode_rfx",
    "load_params",
    "save_rfx",
    "SfxParams",
    "WaveType",
    "reset_params",
    "PRESETS",
    "generate_preset",
    "mutate",
    "randomize",
    "NumpyRandomSource",
    "RandomSource",
    "default_random_source",
    "SampleFormat",
    "SynthContext",
    "generate_wave",
]
