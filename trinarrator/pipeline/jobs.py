"""
Job Ledger

Tracks the canonical VideoJob record through its lifecycle:

    PENDING -> PROCESSING -> COMPLETED
                          -> FAILED

Terminal states are final. The single exception is COMPLETED -> FAILED,
used only when secondary writes fail under the mark_failed policy.
"""

import uuid
from typing import Optional
from loguru import logger

from ..models import (
    EncodingMethod,
    JobStatus,
    NarratorIdentity,
    VideoJob,
    utcnow,
)
from ..narrators import all_narrators
from .storage import DocumentStore


class JobNotFoundError(LookupError):
    """No ledger record for the given job id."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Job {job_id} not found")


class InvalidTransitionError(RuntimeError):
    """Attempted a status change the state machine doesn't allow."""
    pass


ALLOWED_TRANSITIONS: dict[JobStatus, set[JobStatus]] = {
    JobStatus.PENDING: {JobStatus.PROCESSING, JobStatus.FAILED},
    JobStatus.PROCESSING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


class JobLedger:
    """
    Manages VideoJob records in the ledger store.

    Every mutation is written through immediately, so a status query
    always sees the latest state.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_job(
        self,
        input_video_path: str,
        output_file_name: str,
        encoding_method: EncodingMethod,
        include_audio_overlay: bool,
        quality_factor: int,
    ) -> VideoJob:
        """Create a PENDING job with a fresh id. No dedup by content."""
        job = VideoJob(
            job_id=str(uuid.uuid4()),
            input_video_path=input_video_path,
            output_file_name=output_file_name,
            status=JobStatus.PENDING,
            narrators=all_narrators(),
            encoding_method=encoding_method,
            include_audio_overlay=include_audio_overlay,
            quality_factor=quality_factor,
        )
        self._save(job)
        logger.info(f"Created job {job.job_id} for {input_video_path}")
        return job

    def get_job(self, job_id: str) -> VideoJob:
        data = self.store.get(job_id)
        if data is None:
            raise JobNotFoundError(job_id)
        return VideoJob.model_validate(data)

    def list_jobs(self, status: Optional[JobStatus] = None, limit: int = 100) -> list[VideoJob]:
        filters = {"status": status.value} if status else {}
        return [VideoJob.model_validate(d) for d in self.store.find(limit=limit, **filters)]

    def mark_processing(self, job: VideoJob) -> VideoJob:
        self._transition(job, JobStatus.PROCESSING)
        job.started_at = utcnow()
        self._save(job)
        logger.debug(f"Job {job.job_id}: processing")
        return job

    def set_subtitle_paths(self, job: VideoJob, paths: dict[NarratorIdentity, str]) -> VideoJob:
        job.subtitle_paths = dict(paths)
        self._save(job)
        return job

    def mark_completed(
        self,
        job: VideoJob,
        output_path: str,
        file_size: int,
        duration_seconds: float,
    ) -> VideoJob:
        self._transition(job, JobStatus.COMPLETED)
        job.output_path = output_path
        job.file_size = file_size
        job.duration_seconds = duration_seconds
        job.completed_at = utcnow()
        self._save(job)
        logger.info(f"Job {job.job_id} complete: {output_path}")
        return job

    def mark_failed(self, job: VideoJob, error: str, after_completion: bool = False) -> VideoJob:
        """
        Mark a job as failed.

        after_completion allows the COMPLETED -> FAILED demotion used when
        secondary records could not be written.
        """
        if not (after_completion and job.status == JobStatus.COMPLETED):
            self._transition(job, JobStatus.FAILED)
        job.status = JobStatus.FAILED
        job.error = error
        job.failed_at = utcnow()
        if job.completed_at is None:
            job.completed_at = job.failed_at
        self._save(job)
        logger.error(f"Job {job.job_id} failed: {error}")
        return job

    def _transition(self, job: VideoJob, new_status: JobStatus) -> None:
        if new_status not in ALLOWED_TRANSITIONS[job.status]:
            raise InvalidTransitionError(
                f"Job {job.job_id}: cannot go from {job.status.value} to {new_status.value}"
            )
        job.status = new_status

    def _save(self, job: VideoJob) -> None:
        job.updated_at = utcnow()
        self.store.put(job.job_id, job.model_dump(mode="json"))
