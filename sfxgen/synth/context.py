"""sfxgen Synth Context — preallocated output buffer and scratch state.

A context is created once per (format, rate, duration) and reused for many
generations. Generation never grows the buffer; when a longer sound is
wanted the caller asks for a ``resized`` context first.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
import structlog
from numpy.typing import NDArray

from sfxgen.config import settings
from sfxgen.errors import AllocationError

logger = structlog.get_logger()

NOISE_SIZE = 32
PINK_SIZE = 5
PHASER_SIZE = 1024


class SampleFormat(Enum):
    """Output sample representation."""

    U8 = "u8"
    I16 = "i16"
    F32 = "f32"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(_DTYPES[self])

    @property
    def bits(self) -> int:
        return self.dtype.itemsize * 8


_DTYPES = {
    SampleFormat.U8: np.uint8,
    SampleFormat.I16: np.int16,
    SampleFormat.F32: np.float32,
}


class SynthContext:
    """Sample buffer plus the scratch tables one generation needs."""

    def __init__(
        self,
        sample_format: SampleFormat | str = SampleFormat.I16,
        sample_rate: int = 44100,
        max_duration_s: float = 10.0,
    ) -> None:
        if sample_rate <= 0:
            msg = f"Sample rate must be positive, got {sample_rate}"
            raise ValueError(msg)
        if max_duration_s <= 0:
            msg = f"Max duration must be positive, got {max_duration_s}"
            raise ValueError(msg)

        self.sample_format = SampleFormat(sample_format)
        self.sample_rate = int(sample_rate)
        self.max_duration_s = float(max_duration_s)
        self.capacity = int(self.sample_rate * self.max_duration_s)

        try:
            self.samples: NDArray = np.zeros(self.capacity, dtype=self.sample_format.dtype)
        except MemoryError as e:
            logger.error(
                "synth.context.alloc_failed",
                capacity=self.capacity,
                format=self.sample_format.value,
            )
            msg = f"Cannot allocate {self.capacity} {self.sample_format.value} samples"
            raise AllocationError(msg) from e

        # Scratch, reset by every generate call
        self.noise_buffer = np.zeros(NOISE_SIZE, dtype=np.float64)
        self.pink_white = np.zeros(PINK_SIZE, dtype=np.float64)
        self.pink_index = 0
        self.phaser_buffer = np.zeros(PHASER_SIZE, dtype=np.float64)

        logger.debug(
            "synth.context.allocated",
            format=self.sample_format.value,
            sample_rate=self.sample_rate,
            capacity=self.capacity,
        )

    @classmethod
    def from_settings(cls) -> SynthContext:
        return cls(settings.sample_format, settings.sample_rate, settings.max_duration_s)

    def resized(self, max_duration_s: float) -> SynthContext:
        """New context with the same format and rate but a different capacity."""
        return SynthContext(self.sample_format, self.sample_rate, max_duration_s)

    def reset_scratch(self) -> None:
        self.noise_buffer.fill(0.0)
        self.pink_white.fill(0.0)
        self.pink_index = 0
        self.phaser_buffer.fill(0.0)

    def frames(self, count: int) -> NDArray:
        """View of the first ``count`` generated samples."""
        return self.samples[: max(0, min(count, self.capacity))]

    def pcm_bytes(self, count: int) -> bytes:
        """Little-endian raw PCM of the first ``count`` samples."""
        return self.frames(count).astype(self.sample_format.dtype.newbyteorder("<")).tobytes()

    def __repr__(self) -> str:
        return (
            f"SynthContext(format={self.sample_format.value}, "
            f"rate={self.sample_rate}, capacity={self.capacity})"
        )
