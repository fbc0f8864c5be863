"""
Subtitle Track Builder

Turns a flat commentary set into one SRT track per narrator and writes
each track to disk for the encoder's subtitles filter.

Timestamps are truncated, never rounded: 1.9999s renders as 00:00:01,999.
Existing outputs depend on that, so keep it byte-identical.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable
from loguru import logger

from ..models import CommentaryLine, NarratorIdentity
from ..narrators import force_style


@dataclass
class SubtitleCue:
    index: int          # 1-based within its track
    start_time: float
    end_time: float
    text: str


@dataclass
class SubtitleTrack:
    """All cues for one narrator, plus the style its layer is drawn with."""
    narrator: NarratorIdentity
    cues: list[SubtitleCue] = field(default_factory=list)
    style: str = ""
    path: Path | None = None

    def render(self) -> str:
        return render_cues(self.cues)


def format_srt_time(seconds: float) -> str:
    """Format seconds as HH:MM:SS,mmm using floor truncation."""
    hours = math.floor(seconds / 3600)
    minutes = math.floor((seconds % 3600) / 60)
    secs = math.floor(seconds % 60)
    millis = math.floor((seconds % 1) * 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def group_by_narrator(
    lines: Iterable[CommentaryLine],
) -> dict[NarratorIdentity, list[CommentaryLine]]:
    """Stable partition: submission order is kept inside each group."""
    groups: dict[NarratorIdentity, list[CommentaryLine]] = {}
    for line in lines:
        groups.setdefault(line.narrator, []).append(line)
    return groups


def to_cues(lines: Iterable[CommentaryLine]) -> list[SubtitleCue]:
    return [
        SubtitleCue(
            index=i + 1,
            start_time=line.start_time,
            end_time=line.end_time,
            text=line.text,
        )
        for i, line in enumerate(lines)
    ]


def render_cues(cues: Iterable[SubtitleCue]) -> str:
    return "".join(
        f"{cue.index}\n"
        f"{format_srt_time(cue.start_time)} --> {format_srt_time(cue.end_time)}\n"
        f"{cue.text}\n\n"
        for cue in cues
    )


def render_srt(lines: Iterable[CommentaryLine]) -> str:
    """Render lines as SRT, numbering cues from 1 in the given order."""
    return render_cues(to_cues(lines))


def subtitle_path_for(output_dir: Path, narrator: NarratorIdentity, job_id: str) -> Path:
    return Path(output_dir) / f"{narrator.value}-{job_id}.srt"


def build_subtitle_tracks(
    lines: Iterable[CommentaryLine],
    output_dir: Path,
    job_id: str,
) -> dict[NarratorIdentity, SubtitleTrack]:
    """
    Build and persist one SRT track per narrator present in `lines`.

    Files are named after the narrator and the job id, so concurrent jobs
    never share an artifact. They are left on disk after the run.
    I/O errors propagate unchanged.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    tracks: dict[NarratorIdentity, SubtitleTrack] = {}
    for narrator, narrator_lines in group_by_narrator(lines).items():
        track = SubtitleTrack(
            narrator=narrator,
            cues=to_cues(narrator_lines),
            style=force_style(narrator),
        )
        track.path = subtitle_path_for(output_dir, narrator, job_id)
        track.path.write_text(track.render(), encoding="utf-8")
        logger.debug(f"Wrote {len(track.cues)} cues for {narrator.value} to {track.path}")
        tracks[narrator] = track

    return tracks
