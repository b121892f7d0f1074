from __future__ import annotations

from typing import List

import pytest
from fastapi.testclient import TestClient

from ffsegment.core.config.settings import settings
from ffsegment.features.archive_packaging.domain.interfaces import PackError
from ffsegment.features.segmentation.domain.errors import (
    NoProgress,
    ProbeFailed,
    SegmentationTimeout,
    TranscodeFailed,
)
from ffsegment.features.segmentation.domain.models import SegmentationRequest
from ffsegment.main import create_app


class StubSegmentService:
    """Records requests and returns a canned archive (or raises)."""

    def __init__(self, result: bytes = b"archive-bytes", error: Exception | None = None):
        self.result = result
        self.error = error
        self.requests: List[SegmentationRequest] = []

    def convert(self, request: SegmentationRequest) -> bytes:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture()
def service() -> StubSegmentService:
    return StubSegmentService()


@pytest.fixture()
def client(service) -> TestClient:
    return TestClient(create_app(service=service))


def test_health_is_empty_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.content == b""


def test_post_returns_archive(client, service):
    response = client.post(
        "/ffmpeg",
        files={"file": ("holiday.MKV", b"\x1a\x45\xdf\xa3 video", "video/x-matroska")},
        data={"to": "mp4", "max_file_size": "1000000"},
    )

    assert response.status_code == 200
    assert response.content == b"archive-bytes"
    assert response.headers["content-type"] == "application/gzip"
    assert "segments.tar.gz" in response.headers["content-disposition"]

    request = service.requests[0]
    assert request.source.source_format == "mkv"
    assert request.source.data == b"\x1a\x45\xdf\xa3 video"
    assert request.target_format == "mp4"
    assert request.max_segment_bytes == 1000000


def test_post_without_size_cap(client, service):
    response = client.post("/ffmpeg", files={"file": ("a.wav", b"RIFF")}, data={"to": "mp3"})

    assert response.status_code == 200
    assert service.requests[0].max_segment_bytes is None


@pytest.mark.parametrize("files, data", [
    ({"file": ("noextension", b"data")}, {"to": "mp4"}),
    ({"file": ("movie.", b"data")}, {"to": "mp4"}),
    ({"file": ("clip.a/b", b"data")}, {"to": "mp4"}),
    ({"file": ("movie.mp4", b"data")}, {}),
    ({"file": ("movie.mp4", b"data")}, {"to": "  "}),
    ({"file": ("movie.mp4", b"data")}, {"to": "mp4\x00"}),
    ({"file": ("movie.mp4", b"data")}, {"to": "../mp4"}),
    ({"file": ("movie.mp4", b"data")}, {"to": "mp4", "max_file_size": "0"}),
    ({"file": ("movie.mp4", b"data")}, {"to": "mp4", "max_file_size": "big"}),
    ({}, {"to": "mp4", "file": "not an upload"}),
])
def test_bad_uploads_are_400(client, service, files, data):
    response = client.post("/ffmpeg", files=files or None, data=data)

    assert response.status_code == 400
    assert service.requests == []


def test_non_multipart_body_is_400(client, service):
    response = client.post("/ffmpeg", json={"to": "mp4"})

    assert response.status_code == 400
    assert service.requests == []


def test_oversized_upload_is_413(client, service, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)
    monkeypatch.setattr(settings, "UPLOAD_CHUNK_BYTES", 4)

    response = client.post("/ffmpeg", files={"file": ("a.mp4", b"0123456789")}, data={"to": "webm"})

    assert response.status_code == 413
    assert service.requests == []


@pytest.mark.parametrize("error", [
    ProbeFailed(),
    TranscodeFailed(3),
    NoProgress(1, 4.0),
    PackError("disk full"),
])
def test_pipeline_failures_are_500_without_detail(error):
    client = TestClient(create_app(service=StubSegmentService(error=error)))

    response = client.post("/ffmpeg", files={"file": ("a.mp4", b"data")}, data={"to": "webm"})

    assert response.status_code == 500
    assert "disk full" not in response.text
    assert "segment" not in response.text.lower()


def test_timeout_is_504():
    client = TestClient(create_app(service=StubSegmentService(error=SegmentationTimeout(30.0))))

    response = client.post("/ffmpeg", files={"file": ("a.mp4", b"data")}, data={"to": "webm"})

    assert response.status_code == 504
