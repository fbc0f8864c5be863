"""Tests for the filter/overlay composer."""

from pathlib import Path

import pytest

from trinarrator.compose import DEFAULT_OVERLAY_ORDER, compose_encoding, get_codec_options
from trinarrator.compose.composer import escape_filter_path
from trinarrator.models import EncodingMethod
from trinarrator.narrators import force_style
from trinarrator.subtitles import build_subtitle_tracks

from conftest import A, B, C, make_lines


@pytest.fixture
def tracks(tmp_path):
    return build_subtitle_tracks(make_lines(order=(A, C, B)), tmp_path / "subs", "job-1")


def _compose(tmp_path, tracks, **kwargs):
    return compose_encoding(
        input_path=tmp_path / "clip.mp4",
        output_path=tmp_path / "out.mp4",
        tracks=tracks,
        **kwargs,
    )


class TestOverlayOrder:

    def test_default_order_is_mario_noel_neko(self):
        assert DEFAULT_OVERLAY_ORDER == (B, C, A)

    def test_order_ignores_submission_order(self, tmp_path, tracks):
        spec = _compose(tmp_path, tracks)
        assert spec.overlay_order == [B, C, A]

    def test_filter_chain_matches_overlay_order(self, tmp_path, tracks):
        spec = _compose(tmp_path, tracks)
        filters = spec.filter_chain.split(",subtitles=")
        assert len(filters) == 3
        assert "mario-gallo-bestino-job-1.srt" in filters[0]
        assert "noel-job-1.srt" in filters[1]
        assert "neko-arc-job-1.srt" in filters[2]

    def test_each_overlay_carries_its_style(self, tmp_path, tracks):
        spec = _compose(tmp_path, tracks)
        for step in spec.overlays:
            assert step.force_style == force_style(step.narrator)
            assert step.to_filter().endswith(f":force_style='{force_style(step.narrator)}'")

    def test_custom_order(self, tmp_path, tracks):
        spec = _compose(tmp_path, tracks, overlay_order=[A, B, C])
        assert spec.overlay_order == [A, B, C]

    def test_missing_track_is_skipped(self, tmp_path, tracks):
        del tracks[C]
        spec = _compose(tmp_path, tracks)
        assert spec.overlay_order == [B, A]


class TestCodecSelection:

    def test_cpu(self):
        assert get_codec_options(EncodingMethod.CPU, 18) == (
            "libx264", ["-crf", "18", "-preset", "fast"]
        )

    def test_gpu(self):
        assert get_codec_options(EncodingMethod.GPU, 23) == (
            "h264_qsv", ["-global_quality", "23"]
        )

    def test_preset_is_configurable(self):
        _, options = get_codec_options(EncodingMethod.CPU, 20, software_preset="slow")
        assert options == ["-crf", "20", "-preset", "slow"]

    def test_cpu_args(self, tmp_path, tracks):
        args = _compose(tmp_path, tracks, quality_factor=18).to_ffmpeg_args()
        assert args[:2] == ["-i", str(tmp_path / "clip.mp4")]
        assert args[2] == "-vf"
        assert args[4:] == [
            "-c:v", "libx264", "-crf", "18", "-preset", "fast",
            "-c:a", "aac",
            str(tmp_path / "out.mp4"),
        ]

    def test_gpu_args(self, tmp_path, tracks):
        args = _compose(
            tmp_path, tracks, encoding_method=EncodingMethod.GPU, quality_factor=25
        ).to_ffmpeg_args()
        assert args[4:] == [
            "-c:v", "h264_qsv", "-global_quality", "25",
            "-c:a", "aac",
            str(tmp_path / "out.mp4"),
        ]


class TestAudioOverlay:

    def test_added_when_present(self, tmp_path, tracks):
        audio = tmp_path / "overlay.mp3"
        audio.write_bytes(b"id3")
        spec = _compose(
            tmp_path, tracks, include_audio_overlay=True, audio_overlay_path=audio
        )
        args = spec.to_ffmpeg_args()

        assert spec.audio_input_path == audio
        assert args[:4] == ["-i", str(tmp_path / "clip.mp4"), "-i", str(audio)]
        assert "-shortest" in args
        assert args.index("-shortest") < len(args) - 1

    def test_skipped_when_file_missing(self, tmp_path, tracks):
        spec = _compose(
            tmp_path,
            tracks,
            include_audio_overlay=True,
            audio_overlay_path=tmp_path / "missing.mp3",
        )
        assert spec.audio_input_path is None
        assert "-shortest" not in spec.to_ffmpeg_args()

    def test_skipped_when_not_requested(self, tmp_path, tracks):
        audio = tmp_path / "overlay.mp3"
        audio.write_bytes(b"id3")
        spec = _compose(
            tmp_path, tracks, include_audio_overlay=False, audio_overlay_path=audio
        )
        assert spec.audio_input_path is None
        assert spec.to_ffmpeg_args().count("-i") == 1


class TestEscaping:

    def test_plain_path_unchanged(self):
        assert escape_filter_path(Path("/tmp/subs/noel-1.srt")) == "/tmp/subs/noel-1.srt"

    def test_colon_and_quote_escaped_for_both_parsers(self):
        assert escape_filter_path(Path("/tmp/a:b/it's.srt")) == r"/tmp/a\\:b/it\\\'s.srt"

    def test_graph_separators_escaped(self):
        assert escape_filter_path(Path("/tmp/a,b[1];c.srt")) == r"/tmp/a\,b\[1\]\;c.srt"

    def test_separators_in_subtitle_dir_do_not_split_the_chain(self, tmp_path):
        tracks = build_subtitle_tracks(make_lines(), tmp_path / "a,b;c", "job-1")
        spec = _compose(tmp_path, tracks)
        filters = spec.filter_chain.split(",subtitles=")
        assert len(filters) == 3
        assert all(r"a\,b\;c" in f for f in filters)
