# app/infra/vision/image_prep.py
from __future__ import annotations

import io
import os
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from app.domain.errors import InvalidImageError

log = logging.getLogger("labelscan.image")

ALLOWED_FORMATS = {"JPEG", "PNG", "WEBP"}
ALLOWED_CT = {"image/jpeg", "image/jpg", "image/png", "image/webp"}
MAX_SIDE = int(os.getenv("SCAN_MAX_IMAGE_SIDE", "1600"))
JPEG_QUALITY = int(os.getenv("SCAN_JPEG_QUALITY", "85"))


def prepare_label_image(data: bytes, content_type: Optional[str] = None, max_side: int = MAX_SIDE) -> bytes:
    """
    Validate an uploaded photo and re-encode it as JPEG for the vision model.
    - Phone cameras store rotation in EXIF → apply it before resizing
    - Longest side capped at `max_side`
    """
    if not data:
        raise InvalidImageError("Empty image upload")
    if content_type and content_type.lower() not in ALLOWED_CT:
        raise InvalidImageError(f"Unsupported content type: {content_type}")

    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InvalidImageError(f"Invalid or corrupted image: {e}") from e

    if img.format not in ALLOWED_FORMATS:
        raise InvalidImageError(f"Unsupported image format: {img.format}")

    img = ImageOps.exif_transpose(img)
    if img.mode != "RGB":
        img = img.convert("RGB")

    w, h = img.size
    if max(w, h) > max_side:
        img.thumbnail((max_side, max_side))
        log.info("downscaled label photo %sx%s -> %sx%s", w, h, *img.size)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=JPEG_QUALITY)
    return buf.getvalue()
