"""
Image Helpers
=============

Build real encoded images with Pillow for raster tests.
"""

import io
from typing import Tuple

from PIL import Image

__all__ = ["make_image", "image_size", "image_format"]


def make_image(width: int, height: int, image_format: str = "PNG", color=(30, 120, 200)) -> bytes:
    """Encode a solid-color image of the given size."""
    mode = "RGB" if image_format.upper() == "JPEG" else "RGBA"
    fill = color if mode == "RGB" else (*color, 255)
    image = Image.new(mode, (width, height), fill)
    output = io.BytesIO()
    image.save(output, format=image_format)
    return output.getvalue()


def image_size(data: bytes) -> Tuple[int, int]:
    with Image.open(io.BytesIO(data)) as image:
        return image.size


def image_format(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as image:
        return image.format
