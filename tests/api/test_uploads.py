from __future__ import annotations

import asyncio
import io

import pytest
from starlette.datastructures import UploadFile

from ffsegment.api.uploads import (
    InvalidFormFieldError,
    MissingExtensionError,
    MissingFilenameError,
    PayloadTooLargeError,
    parse_max_file_size,
    read_upload,
    source_format_from_filename,
)


@pytest.mark.parametrize("filename, expected", [
    ("movie.mp4", "mp4"),
    ("clip.final.MOV", "mov"),
    ("archive.tar.mkv", "mkv"),
])
def test_source_format_from_filename(filename, expected):
    assert source_format_from_filename(filename) == expected


@pytest.mark.parametrize("filename", [None, ""])
def test_missing_filename(filename):
    with pytest.raises(MissingFilenameError):
        source_format_from_filename(filename)


@pytest.mark.parametrize("filename", ["README", "trailing.", "spaces. ", "clip.a/b", "movie.mp4\x00"])
def test_missing_extension(filename):
    with pytest.raises(MissingExtensionError):
        source_format_from_filename(filename)


@pytest.mark.parametrize("raw, expected", [(None, None), ("", None), ("  ", None), ("1048576", 1048576), (" 42 ", 42)])
def test_parse_max_file_size(raw, expected):
    assert parse_max_file_size(raw) == expected


@pytest.mark.parametrize("raw", ["0", "-5", "ten", "1.5"])
def test_parse_max_file_size_rejects(raw):
    with pytest.raises(InvalidFormFieldError):
        parse_max_file_size(raw)


def test_read_upload_keeps_the_buffer():
    upload = UploadFile(file=io.BytesIO(b"0123456789"), filename="a.mp4")

    data = asyncio.run(read_upload(upload, max_bytes=10, chunk_size=4))

    assert isinstance(data, bytearray)
    assert data == b"0123456789"


def test_read_upload_enforces_cap():
    upload = UploadFile(file=io.BytesIO(b"0123456789"), filename="a.mp4")

    with pytest.raises(PayloadTooLargeError):
        asyncio.run(read_upload(upload, max_bytes=8, chunk_size=4))
