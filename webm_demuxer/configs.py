import logging

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    log_level: str = "INFO"  # The logging level to use.
    timestamp_scale_ns: int = Field(
        1_000_000, gt=0, description="Nanoseconds per timestamp tick when the container does not declare one."
    )
    chunk_duration_us: int = Field(
        42_000, ge=0, description="Synthetic duration assigned to every emitted chunk, in microseconds."
    )

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set up logging for applications embedding the demuxer. Defaults to settings.log_level."""
    level = (level or settings.log_level).upper()
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    logging.getLogger("webm_demuxer").setLevel(level)
