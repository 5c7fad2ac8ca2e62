# SPDX-License-Identifier: Apache-2.0
"""Core utilities for the FaceScan server."""

import os
import uuid
import logging
import base64
from datetime import datetime, timezone
from typing import Tuple, Optional
from PIL import Image, UnidentifiedImageError
import io

from fastapi import HTTPException

from facescan import __version__

DEFAULT_MAX_UPLOAD_MB = 6
DEFAULT_MAX_MEGAPIXELS = 40


def setup_logging():
    """Setup consistent logging configuration."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )


def get_version_info() -> str:
    """Get version information from git or environment."""
    version = os.getenv("VERSION", __version__)
    git_sha = os.getenv("GIT_SHA", "unknown")
    if git_sha != "unknown":
        return f"{version}+{git_sha[:8]}"
    return version


def generate_request_id() -> str:
    """Generate a unique request ID."""
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{timestamp}_{uuid.uuid4().hex[:8]}"


def validate_image(
    image_data: bytes,
    filename: Optional[str] = None,
    max_mb: float = DEFAULT_MAX_UPLOAD_MB,
    max_megapixels: float = DEFAULT_MAX_MEGAPIXELS
) -> Tuple[Image.Image, dict]:
    """
    Validate an uploaded photo.

    Returns:
        Tuple of (RGB PIL Image, metadata dict)

    Raises:
        HTTPException: 400 if the image is empty, too large (bytes or pixels) or undecodable
    """
    if len(image_data) == 0:
        raise HTTPException(status_code=400, detail="Empty image file")

    if len(image_data) > max_mb * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Image too large (>{max_mb:g}MB). Try a smaller photo."
        )

    try:
        image = Image.open(io.BytesIO(image_data))
        width, height = image.size
        if width * height > max_megapixels * 1_000_000:
            raise HTTPException(
                status_code=400,
                detail=f"Image too large ({width}x{height} pixels, limit {max_megapixels:g} MP)."
            )
        image.verify()

        # verify() leaves the image unusable
        image = Image.open(io.BytesIO(image_data))
        fmt = image.format
        if image.mode != 'RGB':
            image = image.convert('RGB')
    except Image.DecompressionBombError as e:
        raise HTTPException(status_code=400, detail=f"Image too large: {e}")
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid image: {e}. Supported: JPEG, PNG, WebP"
        )

    metadata = {
        "format": fmt,
        "mime_type": Image.MIME.get(fmt or "", "image/jpeg"),
        "size": image.size,
        "filename": filename
    }
    return image, metadata


def image_to_base64(image: Image.Image, format: str = "PNG") -> str:
    """Convert PIL Image to base64 string."""
    buffer = io.BytesIO()
    image.save(buffer, format=format)
    return base64.b64encode(buffer.getvalue()).decode('utf-8')
