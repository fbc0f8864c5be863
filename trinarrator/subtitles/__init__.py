"""SRT subtitle generation, one track per narrator."""

from .srt import (
    SubtitleCue,
    SubtitleTrack,
    build_subtitle_tracks,
    format_srt_time,
    group_by_narrator,
    render_cues,
    render_srt,
    subtitle_path_for,
    to_cues,
)

__all__ = [
    "SubtitleCue",
    "SubtitleTrack",
    "build_subtitle_tracks",
    "format_srt_time",
    "group_by_narrator",
    "render_cues",
    "render_srt",
    "subtitle_path_for",
    "to_cues",
]
