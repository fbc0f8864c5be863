"""Tests for SRT generation."""

import pytest
from pydantic import ValidationError

from trinarrator.models import CommentaryLine
from trinarrator.narrators import force_style
from trinarrator.subtitles import (
    build_subtitle_tracks,
    format_srt_time,
    group_by_narrator,
    render_srt,
    subtitle_path_for,
)

from conftest import A, B, C, make_lines


class TestFormatSrtTime:

    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "00:00:00,000"),
            (3661.25, "01:01:01,250"),
            (1.9999, "00:00:01,999"),
            (59.5, "00:00:59,500"),
            (7322.0, "02:02:02,000"),
            (36000, "10:00:00,000"),
        ],
    )
    def test_formats(self, seconds, expected):
        assert format_srt_time(seconds) == expected

    def test_truncates_instead_of_rounding(self):
        assert format_srt_time(0.0009) == "00:00:00,000"
        assert format_srt_time(2.9996) == "00:00:02,999"


class TestCommentaryTimes:

    @pytest.mark.parametrize("value", ["inf", "-inf", "nan", float("inf")])
    def test_non_finite_times_rejected(self, value):
        with pytest.raises(ValidationError):
            CommentaryLine(narrator=A, text="x", start_time=value, end_time=1)
        with pytest.raises(ValidationError):
            CommentaryLine(narrator=A, text="x", start_time=0, end_time=value)

    def test_zero_length_and_inverted_ranges_allowed(self):
        assert CommentaryLine(narrator=A, text="x", start_time=2, end_time=2).end_time == 2
        assert CommentaryLine(narrator=A, text="x", start_time=3, end_time=1).start_time == 3


class TestGrouping:

    def test_stable_partition(self):
        lines = [
            CommentaryLine(narrator=B, text="b1", start_time=0, end_time=1),
            CommentaryLine(narrator=A, text="a1", start_time=1, end_time=2),
            CommentaryLine(narrator=B, text="b2", start_time=0.5, end_time=0.7),
            CommentaryLine(narrator=A, text="a2", start_time=3, end_time=4),
        ]
        groups = group_by_narrator(lines)
        assert [line.text for line in groups[B]] == ["b1", "b2"]
        assert [line.text for line in groups[A]] == ["a1", "a2"]
        assert C not in groups


class TestRender:

    def test_render_single_cue(self):
        line = CommentaryLine(narrator=C, text="Tch.", start_time=1.5, end_time=3)
        assert render_srt([line]) == "1\n00:00:01,500 --> 00:00:03,000\nTch.\n\n"

    def test_indices_follow_input_order_not_time(self):
        lines = [
            CommentaryLine(narrator=A, text="late", start_time=10, end_time=11),
            CommentaryLine(narrator=A, text="early", start_time=1, end_time=2),
        ]
        blocks = render_srt(lines).strip().split("\n\n")
        assert blocks[0].startswith("1\n00:00:10,000")
        assert blocks[1].startswith("2\n00:00:01,000")

    def test_empty(self):
        assert render_srt([]) == ""


class TestBuildTracks:

    def test_one_file_per_narrator(self, tmp_path):
        tracks = build_subtitle_tracks(make_lines(), tmp_path, "job-1")

        assert set(tracks) == {A, B, C}
        assert sorted(p.name for p in tmp_path.glob("*.srt")) == [
            "mario-gallo-bestino-job-1.srt",
            "neko-arc-job-1.srt",
            "noel-job-1.srt",
        ]
        for narrator, track in tracks.items():
            assert track.path == subtitle_path_for(tmp_path, narrator, "job-1")
            assert track.path.read_text(encoding="utf-8") == track.render()
            assert track.style == force_style(narrator)

    def test_cue_indices_contiguous_per_narrator(self, tmp_path):
        lines = make_lines() + make_lines(order=(B, A, B), ranges=((6, 7), (7, 8), (8, 9)))
        tracks = build_subtitle_tracks(lines, tmp_path, "job-2")

        assert [cue.index for cue in tracks[A].cues] == [1, 2]
        assert [cue.index for cue in tracks[B].cues] == [1, 2, 3]
        assert [cue.index for cue in tracks[C].cues] == [1]
        assert [cue.start_time for cue in tracks[B].cues] == [2, 6, 8]

    def test_different_jobs_never_share_files(self, tmp_path):
        first = build_subtitle_tracks(make_lines(), tmp_path, "job-a")
        second = build_subtitle_tracks(make_lines(), tmp_path, "job-b")
        assert {t.path for t in first.values()}.isdisjoint(t.path for t in second.values())

    def test_creates_output_dir(self, tmp_path):
        target = tmp_path / "nested" / "subs"
        build_subtitle_tracks(make_lines(), target, "job-3")
        assert len(list(target.glob("*.srt"))) == 3

    def test_unicode_text(self, tmp_path):
        lines = make_lines()
        lines[0] = CommentaryLine(narrator=A, text="ニャー～！", start_time=0, end_time=1)
        tracks = build_subtitle_tracks(lines, tmp_path, "job-4")
        assert "ニャー～！" in tracks[A].path.read_text(encoding="utf-8")

    def test_write_failure_propagates(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        with pytest.raises(OSError):
            build_subtitle_tracks(make_lines(), blocker, "job-5")
