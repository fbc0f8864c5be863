"""
Media probing using ffprobe.

The encoder only needs the input duration, to turn ffmpeg's out_time
into a percentage. Probing is best-effort: a file ffprobe can't read
still gets encoded, it just reports no percentage.
"""

from pathlib import Path
from typing import Optional

import ffmpeg
from loguru import logger


def probe_duration(media_path: str | Path, ffprobe_binary: str = "ffprobe") -> Optional[float]:
    """Return the container duration in seconds, or None if unknown."""
    try:
        data = ffmpeg.probe(str(media_path), cmd=ffprobe_binary)
    except ffmpeg.Error as e:
        stderr = e.stderr.decode(errors="replace") if e.stderr else ""
        logger.warning(f"ffprobe failed for {media_path}: {stderr.strip()}")
        return None
    except OSError as e:
        logger.warning(f"ffprobe unavailable ({ffprobe_binary}): {e}")
        return None

    duration = data.get("format", {}).get("duration")
    try:
        return float(duration) if duration is not None else None
    except ValueError:
        return None
