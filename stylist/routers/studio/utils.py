"""Utility helpers for the stylist router."""

from fastapi import HTTPException, UploadFile

from stylist.config import logger
from stylist.core.codec import ImageFile, load_image_file
from stylist.core.errors import StylistError


async def read_upload(upload: UploadFile, label: str) -> ImageFile:
    """Read an uploaded image, turning failures into a 400 response."""
    if upload.content_type and not upload.content_type.startswith("image/"):
        raise HTTPException(
            status_code=400,
            detail=f"{label} must be an image, got {upload.content_type}",
        )

    try:
        image_file = await load_image_file(upload, fallback_name=f"{label}.jpg")
    except StylistError as exc:
        raise HTTPException(status_code=400, detail=exc.message)
    except OSError as exc:
        logger.error("Failed to read upload", extra={"label": label, "error": str(exc)})
        raise HTTPException(status_code=400, detail=f"Failed to read {label}: {exc}")

    logger.info(
        "Upload received",
        extra={"label": label, "size_bytes": len(image_file.data)},
    )
    return image_file
