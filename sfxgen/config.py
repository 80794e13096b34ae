"""sfxgen global configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Synthesis
    sample_rate: int = 44100
    max_duration_s: float = 10.0
    sample_format: str = "i16"  # u8, i16 or f32

    # Mutation (sfxr defaults: every field except min_frequency)
    mutate_range: float = 0.1
    mutate_mask: int = 0xFFFFDF

    # Paths
    output_dir: Path = Path(".")

    # Logging
    log_level: str = "INFO"

    model_config = {"env_prefix": "SFXGEN_"}


settings = Settings()
