"""HarmSyn global configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    env: str = "development"

    # Text output
    min_relevant_amplitude: float = -70.0  # dB, lower values are omitted

    # WAV output
    output_subtype: str = "FLOAT"

    model_config = {"env_prefix": "HARMSYN_"}


settings = Settings()
