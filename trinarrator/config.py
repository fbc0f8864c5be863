"""
Central configuration for the commentary video pipeline.
Uses environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Literal, Optional
from pathlib import Path

from .models import NarratorIdentity


class Settings(BaseSettings):
    # Directories
    output_dir: Path = Field(default=Path("./output"), alias="VIDEO_OUTPUT_PATH")
    subtitle_dir: Optional[Path] = Field(default=None, alias="SUBTITLE_DIR")
    audio_overlay_path: Path = Field(
        default=Path("./assets/audio-overlay.mp3"), alias="AUDIO_OVERLAY_PATH"
    )

    # Encoder
    ffmpeg_binary: str = Field(default="ffmpeg", alias="FFMPEG_BINARY")
    ffprobe_binary: str = Field(default="ffprobe", alias="FFPROBE_BINARY")
    default_quality_factor: int = Field(default=18, ge=0, le=51, alias="DEFAULT_QUALITY_FACTOR")
    software_preset: str = Field(default="fast", alias="SOFTWARE_PRESET")
    overlay_order: list[NarratorIdentity] = Field(
        default=[
            NarratorIdentity.MARIO_GALLO_BESTINO,
            NarratorIdentity.NOEL,
            NarratorIdentity.NEKO_ARC,
        ],
        alias="OVERLAY_ORDER",
    )
    encode_timeout_seconds: Optional[float] = Field(default=None, alias="ENCODE_TIMEOUT_SECONDS")
    max_concurrent_encodes: int = Field(default=2, ge=1, alias="MAX_CONCURRENT_ENCODES")

    # Stores
    secondary_failure_policy: Literal["keep_completed", "mark_failed"] = Field(
        default="keep_completed", alias="SECONDARY_FAILURE_POLICY"
    )
    store_backend: Literal["json", "firestore"] = Field(default="json", alias="STORE_BACKEND")
    store_dir: Path = Field(default=Path("./data"), alias="STORE_DIR")
    gcp_project_id: Optional[str] = Field(default=None, alias="GCP_PROJECT_ID")
    ledger_database: str = Field(default="(default)", alias="LEDGER_DATABASE")
    theater_database: str = Field(default="(default)", alias="THEATER_DATABASE")
    archive_database: str = Field(default="(default)", alias="ARCHIVE_DATABASE")
    ledger_collection: str = Field(default="video_jobs", alias="LEDGER_COLLECTION")
    theater_collection: str = Field(default="performances", alias="THEATER_COLLECTION")
    archive_collection: str = Field(default="mission_sessions", alias="ARCHIVE_COLLECTION")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def subtitle_output_dir(self) -> Path:
        return self.subtitle_dir or self.output_dir


# Lazy-load settings to avoid errors when env vars not set
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings, initializing if needed."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
