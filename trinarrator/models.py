"""
Core data models for the commentary video pipeline.
These define the structure of requests, jobs, and the secondary records.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
from enum import Enum
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class NarratorIdentity(str, Enum):
    """The three fixed commentary personas."""
    NEKO_ARC = "neko-arc"                         # Narrator A
    MARIO_GALLO_BESTINO = "mario-gallo-bestino"   # Narrator B
    NOEL = "noel"                                 # Narrator C


class EncodingMethod(str, Enum):
    """Video encoder family."""
    CPU = "cpu"    # libx264
    GPU = "gpu"    # h264_qsv


class JobStatus(str, Enum):
    """Status of a video job in the ledger."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys, populates by field name too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CommentaryLine(CamelModel):
    """A single timed line of narrator dialogue."""
    narrator: NarratorIdentity
    text: str
    start_time: float = Field(ge=0, allow_inf_nan=False)  # seconds
    end_time: float = Field(ge=0, allow_inf_nan=False)  # seconds, not checked against start_time


class CreateVideoRequest(CamelModel):
    """
    Inbound request for one video job.

    The triple-participation rule is checked by the pipeline, not here,
    so the error surfaces as a MissingNarratorError naming the gaps.
    """
    input_video_path: str
    output_file_name: str
    commentaries: list[CommentaryLine] = Field(min_length=3)
    encoding_method: EncodingMethod = EncodingMethod.CPU
    include_audio_overlay: bool = True
    quality_factor: Optional[int] = Field(default=None, ge=0, le=51)


class VideoJob(BaseModel):
    """
    The canonical lifecycle record of one pipeline run.
    Stored in the ledger store, mutated only by the run that owns it.
    """
    job_id: str
    input_video_path: str
    output_file_name: str
    status: JobStatus = JobStatus.PENDING
    output_path: Optional[str] = None
    file_size: Optional[int] = None
    duration_seconds: Optional[float] = None
    narrators: list[NarratorIdentity] = []
    encoding_method: EncodingMethod = EncodingMethod.CPU
    include_audio_overlay: bool = True
    quality_factor: int = 18
    subtitle_paths: dict[NarratorIdentity, str] = {}
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None


class VideoJobResult(CamelModel):
    """Outbound view of a job, returned by create and status queries."""
    job_id: str
    status: JobStatus
    output_path: Optional[str] = None
    file_size: Optional[int] = None
    duration_seconds: Optional[float] = None
    narrators: list[NarratorIdentity]
    created_at: datetime
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    @classmethod
    def from_job(cls, job: VideoJob) -> "VideoJobResult":
        return cls(
            job_id=job.job_id,
            status=job.status,
            output_path=job.output_path,
            file_size=job.file_size,
            duration_seconds=job.duration_seconds,
            narrators=job.narrators,
            created_at=job.created_at,
            completed_at=job.completed_at,
            error=job.error,
        )


class PerformanceRecord(BaseModel):
    """
    Theater store summary of a successful run.
    Mario directs, the run's phases are told as acts.
    """
    performance_id: str
    job_id: str
    title: str
    director: NarratorIdentity = NarratorIdentity.MARIO_GALLO_BESTINO
    assistant_director: NarratorIdentity = NarratorIdentity.NEKO_ARC
    tactical_advisor: NarratorIdentity = NarratorIdentity.NOEL
    act_structure: dict[str, str]
    duration_ms: float
    video_created: bool = True
    reviews: dict[NarratorIdentity, str]
    status: str = "STANDING_OVATION"
    metadata: dict[str, str] = {}
    created_at: datetime = Field(default_factory=utcnow)


class PerformanceMetrics(BaseModel):
    encoding_duration_ms: float
    video_output_size_mb: float
    encoding_speed: str
    subtitle_layers: int
    narrator_interactions: int


class MissionRecord(BaseModel):
    """
    Archive store summary of a successful run.
    Noel commands, the run's phases are told as mission phases.
    """
    mission_id: str
    job_id: str
    title: str
    commander: NarratorIdentity = NarratorIdentity.NOEL
    support_units: list[NarratorIdentity] = [
        NarratorIdentity.NEKO_ARC,
        NarratorIdentity.MARIO_GALLO_BESTINO,
    ]
    mission_structure: dict[str, str]
    environment: dict[str, str]
    performance_metrics: PerformanceMetrics
    assessments: dict[NarratorIdentity, str]
    status: str = "MISSION_COMPLETE"
    metadata: dict[str, str] = {}
    created_at: datetime = Field(default_factory=utcnow)
