"""Conversions between uploaded files, data URLs and Gemini wire parts."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from PIL import Image, UnidentifiedImageError

from stylist.config import logger
from stylist.core.errors import DecodeError, ValidationError

DEFAULT_MIME_TYPE = "image/jpeg"
DEFAULT_ASPECT_RATIO = "1:1"

# Declaration order decides ties: the first label wins.
SUPPORTED_ASPECT_RATIOS: Dict[str, float] = {
    "1:1": 1.0,
    "3:4": 3 / 4,
    "4:3": 4 / 3,
    "9:16": 9 / 16,
    "16:9": 16 / 9,
}

_MIME_PATTERN = re.compile(r":(.*?);")

EXIF_ORIENTATION_TAG = 0x0112
# Orientations 5-8 store the image rotated by 90 degrees
ROTATED_ORIENTATIONS = {5, 6, 7, 8}


class _Upload(Protocol):
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self) -> bytes: ...


@dataclass(frozen=True, slots=True)
class ImageFile:
    """An in-memory image file with its declared MIME type."""

    filename: str
    mime_type: str
    data: bytes


@dataclass(frozen=True, slots=True)
class UploadedImage:
    """A user supplied image kept both as a file and as a preview data URL."""

    file: ImageFile
    data_url: str

    @classmethod
    def from_file(cls, file: ImageFile) -> "UploadedImage":
        return cls(file=file, data_url=file_to_data_url(file))


async def load_image_file(upload: _Upload, fallback_name: str = "image.jpg") -> ImageFile:
    """Read an uploaded file into memory. Read errors propagate to the caller."""

    data = await upload.read()
    if not data:
        raise ValidationError("Faili la picha lililopakiwa ni tupu.")

    return ImageFile(
        filename=upload.filename or fallback_name,
        mime_type=upload.content_type or DEFAULT_MIME_TYPE,
        data=data,
    )


def file_to_data_url(file: ImageFile) -> str:
    encoded = base64.b64encode(file.data).decode("utf-8")
    return f"data:{file.mime_type};base64,{encoded}"


def file_to_model_part(file: ImageFile) -> Dict[str, Any]:
    """Return the inline image part expected by the Gemini REST API."""
    return {
        "inline_data": {
            "mime_type": file.mime_type,
            "data": base64.b64encode(file.data).decode("utf-8"),
        }
    }


def data_url_to_file(data_url: str, filename: str) -> ImageFile:
    """
    Decode a ``data:<mime>;base64,<data>`` string back into an ImageFile.

    Raises:
        DecodeError: If the header carries no MIME type, the payload delimiter
            is missing, or the payload is not valid base64.
    """
    header, sep, payload = data_url.partition(",")
    mime_match = _MIME_PATTERN.search(header)
    if not sep or not mime_match:
        raise DecodeError("Invalid data URL")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload in data URL: {exc}") from exc

    return ImageFile(filename=filename, mime_type=mime_match.group(1), data=data)


def ratio_label(ratio: float) -> str:
    """Pick the supported aspect ratio label closest to ``ratio``."""
    closest = DEFAULT_ASPECT_RATIO
    min_diff = abs(ratio - SUPPORTED_ASPECT_RATIOS[DEFAULT_ASPECT_RATIO])

    for label, value in SUPPORTED_ASPECT_RATIOS.items():
        diff = abs(ratio - value)
        if diff < min_diff:
            min_diff = diff
            closest = label

    return closest


def closest_aspect_ratio(file: ImageFile) -> str:
    """
    Return the supported aspect ratio nearest to the image's displayed dimensions.

    EXIF orientation is honoured, so a portrait phone photo stored sideways
    still maps to a portrait ratio. The label only tells the model which
    framing to keep; the image itself is never cropped. Falls back to 1:1 when
    the dimensions cannot be read.
    """
    try:
        with Image.open(io.BytesIO(file.data)) as img:
            width, height = img.size
            orientation = img.getexif().get(EXIF_ORIENTATION_TAG)
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as exc:
        logger.warning(
            "Could not read image dimensions, using default aspect ratio",
            extra={"image_name": file.filename, "error": str(exc)},
        )
        return DEFAULT_ASPECT_RATIO

    if orientation in ROTATED_ORIENTATIONS:
        width, height = height, width

    if width <= 0 or height <= 0:
        return DEFAULT_ASPECT_RATIO

    return ratio_label(width / height)


__all__ = [
    "DEFAULT_ASPECT_RATIO",
    "SUPPORTED_ASPECT_RATIOS",
    "ImageFile",
    "UploadedImage",
    "load_image_file",
    "file_to_data_url",
    "file_to_model_part",
    "data_url_to_file",
    "ratio_label",
    "closest_aspect_ratio",
]
