"""Image processing utilities using Pillow.

Provides:
- JPEG normalization of generated images
- data: URL encoding for immediate display
"""

from __future__ import annotations

import base64
import io
import logging

from PIL import Image

logger = logging.getLogger(__name__)

JPEG_QUALITY = 90
JPEG_MEDIA_TYPE = "image/jpeg"


def to_jpeg(data: bytes, quality: int = JPEG_QUALITY) -> bytes:
    """Re-encode image bytes (PNG, WebP, JPEG) as JPEG.

    Transparent areas are flattened onto a white background.

    Raises:
        ValueError: If input is not a valid image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode in ("RGBA", "LA", "P"):
                if img.mode == "P":
                    img = img.convert("RGBA")
                background = Image.new("RGB", img.size, (255, 255, 255))
                background.paste(img, mask=img.split()[-1])
                img = background
            elif img.mode != "RGB":
                img = img.convert("RGB")

            output = io.BytesIO()
            img.save(output, format="JPEG", quality=quality, optimize=True)
            logger.debug(f"Encoded {img.size[0]}x{img.size[1]} image as JPEG ({output.tell()} bytes)")
            return output.getvalue()

    except Exception as e:
        raise ValueError(f"Cannot convert image to JPEG: {e}") from e


def to_data_url(data: bytes, media_type: str = JPEG_MEDIA_TYPE) -> str:
    """Encode bytes as a `data:` URL."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"
