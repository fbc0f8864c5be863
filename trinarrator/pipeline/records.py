"""
Multi-Store Recorder

After a successful encode, each narrator-run store gets its own summary
of the job: Mario's theater store a PerformanceRecord, Noel's archive
store a MissionRecord. The ledger itself is the third store.

The two writes are sequential and not transactional. If one fails the
ledger already says COMPLETED; SecondaryWriteError tells the caller
exactly which store is behind.
"""

from loguru import logger

from ..models import (
    MissionRecord,
    NarratorIdentity,
    PerformanceMetrics,
    PerformanceRecord,
    VideoJob,
)
from .storage import DocumentStore


class SecondaryWriteError(Exception):
    """
    A secondary record could not be written after the video was produced.

    The output file exists and the ledger entry was COMPLETED when this
    was raised; `ledger_status` says what it is now.
    """

    def __init__(self, job_id: str, store: str, cause: Exception, ledger_status: str = "completed"):
        self.job_id = job_id
        self.store = store
        self.cause = cause
        self.ledger_status = ledger_status
        super().__init__(
            f"Job {job_id}: video produced but {store} record was not written: {cause}"
        )


def performance_id_for(job_id: str) -> str:
    return f"video-creation-{job_id}"


def mission_id_for(job_id: str) -> str:
    return f"video-encoding-{job_id}"


def build_performance_record(job: VideoJob) -> PerformanceRecord:
    return PerformanceRecord(
        performance_id=performance_id_for(job.job_id),
        job_id=job.job_id,
        title=f"The Grand {job.output_file_name} Creation Ballet",
        act_structure={
            "act1": "Subtitle File Generation",
            "act2": "Triple-Layer Filter Construction",
            "act3": "FFmpeg Encoding Performance",
            "finale": "Video Triumphantly Created!",
        },
        duration_ms=(job.duration_seconds or 0) * 1000,
        reviews={
            NarratorIdentity.MARIO_GALLO_BESTINO:
                "A MAGNIFICENT performance! THREE voices in perfect harmony! BRAVISSIMO!",
            NarratorIdentity.NEKO_ARC: "Super fun collaboration, nyaa~! Great teamwork, desu~!",
            NarratorIdentity.NOEL: "Acceptable execution. Mario's theatrics were... tolerable.",
        },
        metadata={
            "output_path": job.output_path or "",
            "file_name": job.output_file_name,
        },
    )


def build_mission_record(
    job: VideoJob,
    commentary_count: int,
    output_location: str,
) -> MissionRecord:
    duration = job.duration_seconds or 0
    return MissionRecord(
        mission_id=mission_id_for(job.job_id),
        job_id=job.job_id,
        title=f"Video Encoding Operation: {job.output_file_name}",
        mission_structure={
            "phase1": "Triple narrator validation",
            "phase2": "SRT file generation",
            "phase3": "FFmpeg execution",
            "finale": "Video output verified",
        },
        environment={
            "software": "ffmpeg with libass",
            "encoding_method": job.encoding_method.value,
            "output_location": output_location,
        },
        performance_metrics=PerformanceMetrics(
            encoding_duration_ms=duration * 1000,
            video_output_size_mb=round((job.file_size or 0) / (1024 * 1024), 3),
            encoding_speed=f"{duration:.2f}s",
            subtitle_layers=len(job.narrators),
            narrator_interactions=commentary_count,
        ),
        assessments={
            NarratorIdentity.NOEL:
                "Efficient execution. Triple-layer subtitles implemented correctly.",
            NarratorIdentity.NEKO_ARC: "Working with Mario and Noel is fun, nyaa~!",
            NarratorIdentity.MARIO_GALLO_BESTINO:
                "My narration is PERFORMANCE ART, not mere commentary!",
        },
        metadata={
            "output_path": job.output_path or "",
            "file_name": job.output_file_name,
        },
    )


class MultiStoreRecorder:
    """Writes the two secondary records for a completed job."""

    def __init__(self, theater: DocumentStore, archive: DocumentStore):
        self.theater = theater
        self.archive = archive

    def record_success(self, job: VideoJob, commentary_count: int, output_location: str) -> None:
        """
        Write the performance record, then the mission record.

        Raises:
            SecondaryWriteError: naming the store whose write failed
        """
        performance = build_performance_record(job)
        try:
            self.theater.put(performance.performance_id, performance.model_dump(mode="json"))
        except Exception as e:
            raise SecondaryWriteError(job.job_id, "theater", e) from e

        mission = build_mission_record(job, commentary_count, output_location)
        try:
            self.archive.put(mission.mission_id, mission.model_dump(mode="json"))
        except Exception as e:
            raise SecondaryWriteError(job.job_id, "archive", e) from e

        logger.info(f"Secondary records written for job {job.job_id}")

    def lookup(self, job_id: str) -> dict:
        """Both secondary records for a job, None where missing."""
        return {
            "performance": self.theater.get(performance_id_for(job_id)),
            "mission": self.archive.get(mission_id_for(job_id)),
        }
