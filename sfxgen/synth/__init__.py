"""SYNTH — sfxr waveform generation.

- Context: preallocated output buffer + scratch tables
- State: oscillator/filter values derived from SfxParams
- Generator: the supersampled per-sample synthesis loop
"""

from sfxgen.synth.context import SampleFormat, SynthContext
from sfxgen.synth.generator import generate_wave
from sfxgen.synth.state import FilterState, OscillatorState

__all__ = [
    "SampleFormat",
    "SynthContext",
    "generate_wave",
    "FilterState",
    "OscillatorState",
]
