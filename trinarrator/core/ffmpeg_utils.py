"""
FFmpeg runner for the encoding step.

All encoding goes through here. ffmpeg is driven as an external process;
its -progress output is parsed into lifecycle events:

    start     the command line, logged
    progress  percentage when the input duration is known, else None
    end       output file stats
    error     the encoder's own stderr, unmodified

There are no retries. A deadline and a cap on concurrent ffmpeg
processes are optional and set per runner.
"""

import asyncio
import shutil
import time
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from loguru import logger

from ..compose import EncoderInvocationSpec
from .video_info import probe_duration


STDERR_TAIL_LINES = 20


class EncodingError(Exception):
    """ffmpeg reported a failure."""
    pass


class EncoderTimeoutError(EncodingError):
    """ffmpeg did not finish before the deadline and was killed."""
    pass


@dataclass
class EncodingProgress:
    out_time: Optional[float] = None      # seconds of output written
    percent: Optional[float] = None       # None when the total is unknown
    frame: Optional[int] = None
    speed: Optional[str] = None
    finished: bool = False


@dataclass
class EncodedArtifact:
    output_path: Path
    file_size: int
    encode_seconds: float                 # wall-clock time spent in ffmpeg


class EncodingListener:
    """
    Receives encoder lifecycle events. The default just logs them;
    subclass to forward progress elsewhere.
    """

    def on_start(self, command: list[str]) -> None:
        logger.info(f"FFmpeg command: {' '.join(command)}")

    def on_progress(self, progress: EncodingProgress) -> None:
        if progress.percent is None:
            logger.debug(f"Progress: {progress.out_time or 0:.2f}s encoded")
        else:
            logger.info(f"Progress: {progress.percent:.2f}%")

    def on_end(self, artifact: EncodedArtifact) -> None:
        logger.info(
            f"FFmpeg encoding complete: {artifact.output_path} "
            f"({artifact.file_size} bytes, {artifact.encode_seconds:.2f}s)"
        )

    def on_error(self, error: EncodingError) -> None:
        logger.error(f"FFmpeg error: {error}")


def ffmpeg_available(binary: str = "ffmpeg") -> bool:
    return shutil.which(binary) is not None


def _parse_seconds(fields: dict[str, str]) -> Optional[float]:
    # out_time_ms is microseconds too, despite the name
    for key in ("out_time_us", "out_time_ms"):
        value = fields.get(key)
        if value and value != "N/A":
            try:
                return int(value) / 1_000_000
            except ValueError:
                continue
    return None


def parse_progress_block(
    fields: dict[str, str],
    total_duration: Optional[float] = None,
) -> EncodingProgress:
    """Turn one block of ffmpeg -progress key=value pairs into EncodingProgress."""
    out_time = _parse_seconds(fields)

    percent = None
    if out_time is not None and total_duration:
        percent = min(100.0, max(0.0, out_time / total_duration * 100))

    frame = fields.get("frame")
    return EncodingProgress(
        out_time=out_time,
        percent=percent,
        frame=int(frame) if frame and frame.isdigit() else None,
        speed=fields.get("speed"),
        finished=fields.get("progress") == "end",
    )


class FFmpegRunner:
    """
    Runs an EncoderInvocationSpec through ffmpeg.

    Usage:
        runner = FFmpegRunner(timeout=600, max_concurrent=2)
        artifact = await runner.run(spec)
    """

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        ffprobe_binary: str = "ffprobe",
        timeout: Optional[float] = None,
        max_concurrent: int = 2,
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary
        self.timeout = timeout
        self._slots = asyncio.Semaphore(max_concurrent)

    def build_command(self, spec: EncoderInvocationSpec) -> list[str]:
        return [
            self.ffmpeg_binary, "-y", "-hide_banner", "-nostats",
            "-progress", "pipe:1",
            *spec.to_ffmpeg_args(),
        ]

    async def run(
        self,
        spec: EncoderInvocationSpec,
        listener: Optional[EncodingListener] = None,
    ) -> EncodedArtifact:
        """
        Encode and wait for ffmpeg to exit.

        Raises:
            EncodingError: ffmpeg exited non-zero or produced no file
            EncoderTimeoutError: the deadline passed; ffmpeg was killed
        """
        listener = listener or EncodingListener()
        total_duration = await asyncio.to_thread(
            probe_duration, spec.input_path, self.ffprobe_binary
        )
        command = self.build_command(spec)

        async with self._slots:
            started = time.monotonic()
            try:
                if self.timeout is None:
                    await self._execute(command, total_duration, listener)
                else:
                    await asyncio.wait_for(
                        self._execute(command, total_duration, listener),
                        timeout=self.timeout,
                    )
            except asyncio.TimeoutError:
                error = EncoderTimeoutError(
                    f"Encoder did not finish within {self.timeout}s: {spec.output_path}"
                )
                listener.on_error(error)
                raise error from None
            except EncodingError as e:
                listener.on_error(e)
                raise
            elapsed = time.monotonic() - started

        output_path = Path(spec.output_path)
        if not output_path.exists():
            error = EncodingError(f"Encoder exited cleanly but wrote no output: {output_path}")
            listener.on_error(error)
            raise error

        artifact = EncodedArtifact(
            output_path=output_path,
            file_size=output_path.stat().st_size,
            encode_seconds=elapsed,
        )
        listener.on_end(artifact)
        return artifact

    async def _execute(
        self,
        command: list[str],
        total_duration: Optional[float],
        listener: EncodingListener,
    ) -> None:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        listener.on_start(command)
        stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)

        try:
            await asyncio.gather(
                self._read_progress(process.stdout, total_duration, listener),
                self._read_stderr(process.stderr, stderr_tail),
            )
            returncode = await process.wait()
        except asyncio.CancelledError:
            # Covers both caller cancellation and the deadline
            if process.returncode is None:
                process.kill()
                await process.wait()
            raise

        if returncode != 0:
            message = "\n".join(stderr_tail) or f"ffmpeg exited with code {returncode}"
            raise EncodingError(message)

    async def _read_progress(
        self,
        stream: asyncio.StreamReader,
        total_duration: Optional[float],
        listener: EncodingListener,
    ) -> None:
        fields: dict[str, str] = {}
        async for raw in stream:
            line = raw.decode(errors="replace").strip()
            if "=" not in line:
                continue
            key, value = line.split("=", 1)
            fields[key.strip()] = value.strip()
            if key == "progress":
                listener.on_progress(parse_progress_block(fields, total_duration))
                fields = {}

    async def _read_stderr(self, stream: asyncio.StreamReader, tail: deque) -> None:
        async for raw in stream:
            line = raw.decode(errors="replace").rstrip()
            if line:
                tail.append(line)
