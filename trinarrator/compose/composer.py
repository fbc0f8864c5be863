"""
Filter/Overlay Composer

Builds the encoder invocation for one job:
1. One subtitles filter per narrator track, in a fixed stacking order
2. An optional secondary audio input, with output cut to the shortest stream
3. Codec and quality options for the requested encoding method

Nothing here touches ffmpeg; the result is handed to the FFmpegRunner.
The stacking order matters visually and defaults to B, C, A
(Mario, Noel, Neko-Arc) whatever order the commentaries came in.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence
from loguru import logger

from ..models import EncodingMethod, NarratorIdentity
from ..subtitles import SubtitleTrack


DEFAULT_OVERLAY_ORDER: tuple[NarratorIdentity, ...] = (
    NarratorIdentity.MARIO_GALLO_BESTINO,
    NarratorIdentity.NOEL,
    NarratorIdentity.NEKO_ARC,
)

HARDWARE_CODEC = "h264_qsv"
SOFTWARE_CODEC = "libx264"
AUDIO_CODEC = "aac"


@dataclass
class OverlayStep:
    """One subtitle layer burned into the video."""
    narrator: NarratorIdentity
    subtitle_path: Path
    force_style: str

    def to_filter(self) -> str:
        return f"subtitles={escape_filter_path(self.subtitle_path)}:force_style='{self.force_style}'"


@dataclass
class EncoderInvocationSpec:
    """Everything the encoder needs for one job."""
    input_path: Path
    output_path: Path
    overlays: list[OverlayStep]
    encoding_method: EncodingMethod
    quality_factor: int
    video_codec: str
    codec_options: list[str]
    audio_codec: str = AUDIO_CODEC
    audio_input_path: Optional[Path] = None
    shortest: bool = False

    @property
    def overlay_order(self) -> list[NarratorIdentity]:
        return [step.narrator for step in self.overlays]

    @property
    def filter_chain(self) -> str:
        return ",".join(step.to_filter() for step in self.overlays)

    def to_ffmpeg_args(self) -> list[str]:
        """Arguments after the ffmpeg executable, ending with the output path."""
        args = ["-i", str(self.input_path)]
        if self.audio_input_path is not None:
            args += ["-i", str(self.audio_input_path)]
        if self.overlays:
            args += ["-vf", self.filter_chain]
        args += ["-c:v", self.video_codec, *self.codec_options]
        args += ["-c:a", self.audio_codec]
        if self.shortest:
            args.append("-shortest")
        args.append(str(self.output_path))
        return args


_OPTION_SPECIAL = "\\:'"
_GRAPH_SPECIAL = "\\'[],;"


def _escape(text: str, special: str) -> str:
    return "".join("\\" + c if c in special else c for c in text)


def escape_filter_path(path: Path) -> str:
    """
    Escape a file path for use inside a -vf filtergraph.

    Two levels: once for the filter's option parser, then again for the
    graph parser, which would otherwise split on , ; [ ].
    """
    return _escape(_escape(str(path), _OPTION_SPECIAL), _GRAPH_SPECIAL)


def get_codec_options(
    encoding_method: EncodingMethod,
    quality_factor: int,
    software_preset: str = "fast",
) -> tuple[str, list[str]]:
    """
    Pick the video codec and its quality options.

    GPU uses Intel Quick Sync with a single global_quality knob;
    CPU uses x264 with CRF plus a speed preset.
    """
    if encoding_method == EncodingMethod.GPU:
        return HARDWARE_CODEC, ["-global_quality", str(quality_factor)]
    return SOFTWARE_CODEC, ["-crf", str(quality_factor), "-preset", software_preset]


def compose_encoding(
    input_path: Path,
    output_path: Path,
    tracks: Mapping[NarratorIdentity, SubtitleTrack],
    encoding_method: EncodingMethod = EncodingMethod.CPU,
    quality_factor: int = 18,
    include_audio_overlay: bool = False,
    audio_overlay_path: Optional[Path] = None,
    overlay_order: Sequence[NarratorIdentity] = DEFAULT_OVERLAY_ORDER,
    software_preset: str = "fast",
) -> EncoderInvocationSpec:
    """
    Build the encoder invocation for a set of narrator tracks.

    Args:
        input_path: Source video
        output_path: Where the encoder writes the result
        tracks: Subtitle track per narrator, already on disk
        encoding_method: cpu or gpu
        quality_factor: 0-51, lower is better
        include_audio_overlay: Mix in the secondary audio if it exists
        audio_overlay_path: The secondary audio file
        overlay_order: Layer stacking order; narrators missing here are skipped

    Returns:
        EncoderInvocationSpec ready for FFmpegRunner
    """
    overlays = []
    for narrator in overlay_order:
        track = tracks.get(narrator)
        if track is None or track.path is None:
            continue
        overlays.append(OverlayStep(
            narrator=narrator,
            subtitle_path=track.path,
            force_style=track.style,
        ))

    audio_input = None
    if include_audio_overlay:
        if audio_overlay_path is not None and Path(audio_overlay_path).exists():
            logger.info(f"Adding audio overlay: {audio_overlay_path}")
            audio_input = Path(audio_overlay_path)
        else:
            logger.warning(f"Audio overlay requested but not found: {audio_overlay_path}")

    video_codec, codec_options = get_codec_options(
        encoding_method, quality_factor, software_preset
    )

    return EncoderInvocationSpec(
        input_path=Path(input_path),
        output_path=Path(output_path),
        overlays=overlays,
        encoding_method=encoding_method,
        quality_factor=quality_factor,
        video_codec=video_codec,
        codec_options=codec_options,
        audio_input_path=audio_input,
        shortest=audio_input is not None,
    )
