"""Decoding of the multipart upload into a SegmentationRequest."""

from __future__ import annotations

import logging
from typing import Optional

from starlette.datastructures import FormData, UploadFile

from ffsegment.core.shared_types import is_format_token, normalize_format
from ffsegment.features.segmentation.domain.models import MediaBlob, SegmentationRequest

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """Base class for client-side upload problems."""


class MissingFilenameError(UploadError):
    """Raised when the file part carries no filename."""


class MissingExtensionError(UploadError):
    """Raised when the filename has no extension to derive the source format from."""


class InvalidFormFieldError(UploadError):
    """Raised when a form field is missing or malformed."""


class UploadReadError(UploadError):
    """Raised when streaming the upload fails."""


class PayloadTooLargeError(UploadError):
    """Raised when the upload exceeds the configured size limit."""


def source_format_from_filename(filename: Optional[str]) -> str:
    """'clip.final.MOV' -> 'mov'."""
    if not filename:
        raise MissingFilenameError("Filename not found in the uploaded file.")
    _, dot, extension = filename.rpartition(".")
    source_format = normalize_format(extension)
    if not dot or not source_format:
        raise MissingExtensionError(f"Filename has no extension: {filename!r}")
    if not is_format_token(source_format):
        raise MissingExtensionError(f"Filename extension is not a media format: {filename!r}")
    return source_format


def parse_max_file_size(raw: object) -> Optional[int]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if not isinstance(raw, str):
        raise InvalidFormFieldError("max_file_size must be a plain form field")
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise InvalidFormFieldError(f"max_file_size is not an integer: {raw!r}") from exc
    if value <= 0:
        raise InvalidFormFieldError(f"max_file_size must be positive: {value}")
    return value


async def read_upload(upload: UploadFile, *, max_bytes: int, chunk_size: int) -> bytearray:
    """Read the upload in chunks, enforcing the size cap."""
    buffer = bytearray()
    try:
        while True:
            chunk = await upload.read(chunk_size)
            if not chunk:
                break
            buffer.extend(chunk)
            if len(buffer) > max_bytes:
                raise PayloadTooLargeError(f"Upload exceeds {max_bytes} bytes")
    except OSError as exc:
        raise UploadReadError(f"Failed to read the upload: {exc}") from exc
    return buffer


async def parse_segmentation_form(form: FormData, *, max_bytes: int, chunk_size: int) -> SegmentationRequest:
    """
    Validate the ``file``/``to``/``max_file_size`` fields and build the request.

    Raises:
        UploadError: For every client-side problem.
    """
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise InvalidFormFieldError("file is required")

    source_format = source_format_from_filename(upload.filename)

    target_format = form.get("to")
    if not isinstance(target_format, str) or not normalize_format(target_format):
        raise InvalidFormFieldError("to is required")
    if not is_format_token(normalize_format(target_format)):
        raise InvalidFormFieldError(f"to is not a media format: {target_format!r}")

    max_segment_bytes = parse_max_file_size(form.get("max_file_size"))

    data = await read_upload(upload, max_bytes=max_bytes, chunk_size=chunk_size)
    logger.debug(
        f"Received {upload.filename} ({len(data)} bytes), to={target_format!r}, max_file_size={max_segment_bytes}"
    )
    return SegmentationRequest(
        source=MediaBlob(data=data, source_format=source_format),
        target_format=target_format,
        max_segment_bytes=max_segment_bytes,
    )
