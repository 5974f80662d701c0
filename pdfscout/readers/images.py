"""
Page image encoding with Pillow.

PyMuPDF renders pages to pixmaps; Pillow handles downscaling and
JPEG/PNG encoding so callers control size and quality.
"""

from __future__ import annotations

import base64
import io
from typing import TYPE_CHECKING

from PIL import Image

from pdfscout.config import ImageConfig

if TYPE_CHECKING:
    import pymupdf


def pixmap_to_image(pix: pymupdf.Pixmap) -> Image.Image:
    """Convert an RGB PyMuPDF pixmap to a PIL Image."""
    return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)


def fit_within(image: Image.Image, max_width: int | None, max_height: int | None) -> Image.Image:
    """Shrink proportionally so the image fits the bounds; never enlarges."""
    if max_width is None and max_height is None:
        return image
    bounds = (max_width or image.width, max_height or image.height)
    if image.width <= bounds[0] and image.height <= bounds[1]:
        return image
    resized = image.copy()
    resized.thumbnail(bounds, Image.Resampling.LANCZOS)
    return resized


def encode_pixmap(pix: pymupdf.Pixmap, config: ImageConfig) -> tuple[str, int, int]:
    """
    Encode a rendered page.

    Returns:
        (base64 data, width, height) of the encoded image
    """
    image = fit_within(pixmap_to_image(pix), config.max_width, config.max_height)

    buffer = io.BytesIO()
    if config.format == "jpeg":
        image.save(buffer, format="JPEG", quality=config.quality, optimize=True)
    else:
        image.save(buffer, format="PNG", optimize=True)

    data = base64.b64encode(buffer.getvalue()).decode("ascii")
    return data, image.width, image.height
