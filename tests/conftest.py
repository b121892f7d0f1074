# File: tests/conftest.py

import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from ffsegment.core.exceptions import ToolTimeoutError
from ffsegment.features.duration_probe.domain.interfaces import IDurationProber, ProbeError
from ffsegment.features.scratch_storage.data.tempdir_store import TempDirScratchStore
from ffsegment.features.scratch_storage.domain.interfaces import IScratchWorkspace
from ffsegment.features.scratch_storage.domain.models import TemporaryMediaFile
from ffsegment.features.transcoding.domain.interfaces import ITranscoder, TranscodeError
from ffsegment.features.transcoding.domain.models import TranscodeRequest

HAS_FFMPEG = shutil.which("ffmpeg") is not None and shutil.which("ffprobe") is not None


class FakeProber(IDurationProber):
    """
    Returns 'source_duration' for the first probe (the uploaded file),
    then one entry of 'segment_durations' per produced segment.
    An exception instance in either slot is raised instead of returned.
    """

    def __init__(self, source_duration, segment_durations: Sequence = ()):
        self.answers = [source_duration, *segment_durations]
        self.calls: List[TemporaryMediaFile] = []
        self.timeouts: List[Optional[float]] = []

    def probe(self, media_file: TemporaryMediaFile, timeout: Optional[float] = None) -> float:
        self.calls.append(media_file)
        self.timeouts.append(timeout)
        answer = self.answers[len(self.calls) - 1]
        if isinstance(answer, Exception):
            raise answer
        return answer


class FakeTranscoder(ITranscoder):
    """
    Writes a small marker payload per segment into the workspace.
    'fail_at' maps a segment index to the exception to raise for it.
    """

    def __init__(self, fail_at: Optional[Dict[int, Exception]] = None):
        self.fail_at = fail_at or {}
        self.requests: List[TranscodeRequest] = []
        self.outputs: List[TemporaryMediaFile] = []

    def transcode(self, request: TranscodeRequest, workspace: IScratchWorkspace) -> TemporaryMediaFile:
        self.requests.append(request)
        if request.index in self.fail_at:
            raise self.fail_at[request.index]
        output = workspace.allocate(request.target_format, prefix=request.output_prefix)
        output.path.write_bytes(f"segment-{request.index}@{request.start_offset_seconds}".encode())
        self.outputs.append(output)
        return output


@pytest.fixture
def scratch_root(tmp_path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def scratch_store(scratch_root) -> TempDirScratchStore:
    return TempDirScratchStore(parent_dir=scratch_root)


@pytest.fixture
def make_prober():
    return FakeProber


@pytest.fixture
def make_transcoder():
    return FakeTranscoder


@pytest.fixture
def probe_error():
    return ProbeError("ffprobe exited with status 1")


@pytest.fixture
def transcode_error():
    return TranscodeError("FFmpeg conversion failed: Invalid argument", returncode=1)


@pytest.fixture
def tool_timeout():
    return ToolTimeoutError(["ffmpeg", "-y"], 1.0)


@pytest.fixture(scope="session")
def sine_wav(tmp_path_factory) -> Path:
    """
    7 seconds of 8 kHz mono PCM (16000 bytes per second), generated with FFmpeg.
    Only usable when ffmpeg is installed.
    """
    if not HAS_FFMPEG:
        pytest.skip("ffmpeg/ffprobe not installed")

    path = tmp_path_factory.mktemp("media") / "sine.wav"
    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", "sine=frequency=440:sample_rate=8000:duration=7",
        "-ac", "1", "-c:a", "pcm_s16le",
        str(path)
    ]
    subprocess.run(cmd, check=True, capture_output=True)
    return path
