"""
Commentary Video Pipeline

Main orchestrator that coordinates all modules for one job:
1. Validate that all three narrators participate
2. Write one SRT track per narrator
3. Compose the ffmpeg invocation (overlays, audio, codec)
4. Encode
5. Record: ledger first, then the two secondary stores

Stages run strictly in order; the encode is the only wait. Any failure
after the job is accepted marks the ledger FAILED and is re-raised.
"""

import asyncio
import time
from typing import Optional
from loguru import logger

from ..config import Settings, get_settings
from ..compose import compose_encoding
from ..core import EncodingListener, FFmpegRunner
from ..models import CreateVideoRequest, JobStatus, VideoJobResult
from ..narrators import all_narrators, banter, config_for, intro_line, outro_line, validate_commentaries
from ..subtitles import build_subtitle_tracks
from .jobs import JobLedger
from .records import MultiStoreRecorder, SecondaryWriteError
from .storage import StoreSet, open_stores


class VideoPipeline:
    """
    End-to-end commentary video pipeline.

    Usage:
        pipeline = VideoPipeline()

        result = await pipeline.create_video(CreateVideoRequest(
            input_video_path="clip.mp4",
            output_file_name="clip-commented.mp4",
            commentaries=[...],
        ))
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        stores: Optional[StoreSet] = None,
        runner: Optional[FFmpegRunner] = None,
    ):
        self.settings = settings or get_settings()
        stores = stores or open_stores(self.settings)
        self.ledger = JobLedger(stores.ledger)
        self.recorder = MultiStoreRecorder(stores.theater, stores.archive)
        self.runner = runner or FFmpegRunner(
            ffmpeg_binary=self.settings.ffmpeg_binary,
            ffprobe_binary=self.settings.ffprobe_binary,
            timeout=self.settings.encode_timeout_seconds,
            max_concurrent=self.settings.max_concurrent_encodes,
        )

    async def create_video(
        self,
        request: CreateVideoRequest,
        listener: Optional[EncodingListener] = None,
    ) -> VideoJobResult:
        """
        Run the whole pipeline for one request and wait for it.

        Raises:
            MissingNarratorError: before anything is written
            OSError / EncodingError: ledger is FAILED
            SecondaryWriteError: video exists, ledger per SECONDARY_FAILURE_POLICY
        """
        started = time.monotonic()
        self._log_lines(intro_line)

        validate_commentaries(request.commentaries)

        quality_factor = (
            request.quality_factor
            if request.quality_factor is not None
            else self.settings.default_quality_factor
        )
        job = self.ledger.create_job(
            input_video_path=request.input_video_path,
            output_file_name=request.output_file_name,
            encoding_method=request.encoding_method,
            include_audio_overlay=request.include_audio_overlay,
            quality_factor=quality_factor,
        )
        self.ledger.mark_processing(job)

        try:
            tracks = build_subtitle_tracks(
                request.commentaries,
                self.settings.subtitle_output_dir,
                job.job_id,
            )
            self.ledger.set_subtitle_paths(
                job, {narrator: str(track.path) for narrator, track in tracks.items()}
            )

            self.settings.output_dir.mkdir(parents=True, exist_ok=True)
            spec = compose_encoding(
                input_path=request.input_video_path,
                output_path=self.settings.output_dir / request.output_file_name,
                tracks=tracks,
                encoding_method=request.encoding_method,
                quality_factor=quality_factor,
                include_audio_overlay=request.include_audio_overlay,
                audio_overlay_path=self.settings.audio_overlay_path,
                overlay_order=self.settings.overlay_order,
                software_preset=self.settings.software_preset,
            )

            for line in banter():
                logger.debug(line)

            artifact = await self.runner.run(spec, listener)

        except asyncio.CancelledError:
            self.ledger.mark_failed(job, "Encoding cancelled")
            raise
        except Exception as e:
            logger.exception(f"Video creation failed for job {job.job_id}")
            self.ledger.mark_failed(job, str(e))
            raise

        self.ledger.mark_completed(
            job,
            output_path=str(artifact.output_path),
            file_size=artifact.file_size,
            duration_seconds=time.monotonic() - started,
        )

        try:
            self.recorder.record_success(
                job,
                commentary_count=len(request.commentaries),
                output_location=str(self.settings.output_dir),
            )
        except SecondaryWriteError as e:
            if self.settings.secondary_failure_policy == "mark_failed":
                self.ledger.mark_failed(job, str(e), after_completion=True)
            e.ledger_status = job.status.value
            logger.error(f"{e} (ledger is {job.status.value})")
            raise

        self._log_lines(outro_line)
        return VideoJobResult.from_job(job)

    def get_job_status(self, job_id: str) -> VideoJobResult:
        """Current ledger view of a job. Raises JobNotFoundError."""
        return VideoJobResult.from_job(self.ledger.get_job(job_id))

    def inspect(self, job_id: str) -> dict:
        """
        The ledger record and both secondary records for a job.

        Useful for reconciling a COMPLETED job whose secondary writes
        failed: a missing record shows up as None.
        """
        job = self.ledger.get_job(job_id)
        records = self.recorder.lookup(job_id)
        return {
            "job": job.model_dump(mode="json"),
            "performance": records["performance"],
            "mission": records["mission"],
            "consistent": job.status != JobStatus.COMPLETED or all(records.values()),
        }

    @staticmethod
    def _log_lines(line_for) -> None:
        for narrator in all_narrators():
            logger.info(f"{config_for(narrator).name}: {line_for(narrator)}")
