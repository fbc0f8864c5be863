"""Shared test fixtures for trinarrator tests."""

import json
import stat
import sys
import textwrap
from pathlib import Path

import pytest

from trinarrator.config import Settings
from trinarrator.models import CommentaryLine, CreateVideoRequest, NarratorIdentity
from trinarrator.pipeline import JsonDocumentStore, StoreSet


A = NarratorIdentity.NEKO_ARC
B = NarratorIdentity.MARIO_GALLO_BESTINO
C = NarratorIdentity.NOEL


_FFMPEG_BEHAVIOURS = {
    # Emits two progress blocks, writes the output file, exits 0
    "ok": """
        out = Path(sys.argv[-1])
        print("frame=10\\nout_time_us=1000000\\nspeed=1.5x\\nprogress=continue", flush=True)
        print("frame=N/A\\nout_time_us=N/A\\nprogress=end", flush=True)
        out.write_bytes(b"\\x00\\x00\\x00\\x18ftypmp42fake-video")
    """,
    "fail": """
        sys.stderr.write("clip.mp4: No such file or directory\\n")
        sys.exit(1)
    """,
    "no_output": """
        print("progress=end", flush=True)
    """,
    "hang": """
        time.sleep(30)
    """,
    # Records when it ran, so tests can see whether encodes overlapped
    "slow": """
        started = time.time()
        time.sleep(0.5)
        Path(sys.argv[-1]).write_bytes(b"fake-video")
        with open(SPANS, "a") as f:
            f.write(json.dumps([started, time.time()]) + "\\n")
    """,
}


def _write_script(path: Path, body: str) -> Path:
    header = f"#!{sys.executable}\nimport json, sys, time\nfrom pathlib import Path\n"
    path.write_text(header + textwrap.dedent(body))
    path.chmod(path.stat().st_mode | stat.S_IEXEC | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def make_fake_ffmpeg(tmp_path):
    """
    Build a stand-in ffmpeg executable. Every invocation appends its argv
    to calls.jsonl next to the script so tests can check the command line.
    """
    def _make(behaviour: str = "ok") -> Path:
        calls = tmp_path / "calls.jsonl"
        record = f"""
            SPANS = {str(tmp_path / "spans.jsonl")!r}
            with open({str(calls)!r}, "a") as f:
                f.write(json.dumps(sys.argv[1:]) + "\\n")
        """
        body = textwrap.dedent(record) + textwrap.dedent(_FFMPEG_BEHAVIOURS[behaviour])
        return _write_script(tmp_path / f"fake-ffmpeg-{behaviour}", body)
    return _make


@pytest.fixture
def fake_ffprobe(tmp_path):
    """A stand-in ffprobe that reports a 4 second duration."""
    return _write_script(
        tmp_path / "fake-ffprobe",
        """
        print(json.dumps({"format": {"duration": "4.000000"}, "streams": []}))
        """,
    )


def read_calls(tmp_path: Path) -> list[list[str]]:
    calls = tmp_path / "calls.jsonl"
    if not calls.exists():
        return []
    return [json.loads(line) for line in calls.read_text().splitlines()]


def read_spans(tmp_path: Path) -> list[tuple[float, float]]:
    spans = tmp_path / "spans.jsonl"
    return sorted(tuple(json.loads(line)) for line in spans.read_text().splitlines())


@pytest.fixture
def input_video(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"not really a video")
    return path


@pytest.fixture
def settings(tmp_path, make_fake_ffmpeg):
    return Settings(
        output_dir=tmp_path / "output",
        store_dir=tmp_path / "data",
        audio_overlay_path=tmp_path / "missing-overlay.mp3",
        ffmpeg_binary=str(make_fake_ffmpeg("ok")),
        ffprobe_binary=str(tmp_path / "no-such-ffprobe"),
        store_backend="json",
    )


class SpyStore(JsonDocumentStore):
    """JsonDocumentStore that remembers every put, in order."""

    def __init__(self, name, directory):
        super().__init__(name, directory)
        self.writes: list[tuple[str, dict]] = []

    def put(self, doc_id, data):
        super().put(doc_id, data)
        self.writes.append((doc_id, data))


class FailingStore(JsonDocumentStore):
    """Every write fails."""

    def put(self, doc_id, data):
        raise OSError("store unavailable")


class DiskFullStore(JsonDocumentStore):
    """Writes reach the store but never make it to disk."""

    def _save(self, data):
        raise OSError("No space left on device")


@pytest.fixture
def stores(tmp_path):
    directory = tmp_path / "data"
    return StoreSet(
        ledger=SpyStore("video_jobs", directory),
        theater=SpyStore("performances", directory),
        archive=SpyStore("mission_sessions", directory),
    )


def make_lines(order=(A, B, C), ranges=((0, 2), (2, 4), (4, 6))) -> list[CommentaryLine]:
    texts = {
        A: "Nyaa~! Look at that jump, desu~!",
        B: "BEHOLD! A leap of operatic proportions!",
        C: "Tch. Adequate form.",
    }
    return [
        CommentaryLine(narrator=narrator, text=texts[narrator], start_time=start, end_time=end)
        for narrator, (start, end) in zip(order, ranges)
    ]


@pytest.fixture
def video_request(input_video):
    return CreateVideoRequest(
        input_video_path=str(input_video),
        output_file_name="clip-commented.mp4",
        commentaries=make_lines(),
        encoding_method="cpu",
        quality_factor=18,
        include_audio_overlay=False,
    )
