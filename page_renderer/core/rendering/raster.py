"""
Raster Post-Processing
======================

Pillow-based processing of captured screenshots: device-scale-factor
downsampling back to logical pixel dimensions, and transcoding to formats
the engine cannot capture directly.
"""

import io
import math
from typing import Any, Dict, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from page_renderer.config.logging import get_logger

logger = get_logger(__name__)

LOSSY_FORMATS = {"JPEG", "WEBP"}

_FORMAT_NAMES = {
    "png": "PNG",
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "webp": "WEBP",
}


def logical_size(width: int, height: int, device_scale_factor: float) -> Tuple[int, int]:
    """Captured size divided by the scale factor, rounded half up."""
    return (
        max(1, int(math.floor(width / device_scale_factor + 0.5))),
        max(1, int(math.floor(height / device_scale_factor + 0.5))),
    )


class RasterPostProcessor:
    """Resamples and re-encodes captured raster images."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS):
        self.resample = resample
        self.logger: Any = logger.bind(component="raster")

    def scale_for_device(
        self, image_bytes: bytes, device_scale_factor: float, quality: Optional[int] = None
    ) -> bytes:
        """
        Downscale a capture taken at ``device_scale_factor`` to logical pixels.

        Returns the input untouched when the scale factor is 1 or less, or
        when the image dimensions cannot be read.
        """
        if device_scale_factor <= 1:
            return image_bytes

        size = self._read_size(image_bytes)
        if size is None:
            return image_bytes

        width, height = logical_size(size[0], size[1], device_scale_factor)
        return self.downscale(image_bytes, width, height, quality=quality)

    def downscale(
        self,
        image_bytes: bytes,
        target_width: int,
        target_height: int,
        quality: Optional[int] = None,
    ) -> bytes:
        """
        Resample an image to exactly ``target_width`` x ``target_height``.

        The result is encoded in the source format; ``quality`` only applies
        to lossy formats.
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            source_format = image.format or "PNG"
            resized = image.resize((target_width, target_height), self.resample)
        except (UnidentifiedImageError, OSError) as e:
            self.logger.warning("Screenshot downscale failed, using original", error=str(e))
            return image_bytes

        output = self._encode(resized, source_format, quality)

        self.logger.debug(
            "Screenshot downscaled",
            source_size=image.size,
            target_size=(target_width, target_height),
            original_bytes=len(image_bytes),
            output_bytes=len(output),
        )
        return output

    def transcode(self, image_bytes: bytes, image_type: str, quality: Optional[int] = None) -> bytes:
        """Re-encode an image as ``image_type`` (png, jpeg or webp)."""
        target_format = _FORMAT_NAMES.get(image_type.lower())
        if target_format is None:
            raise ValueError(f"Unsupported image type: {image_type}")

        image = Image.open(io.BytesIO(image_bytes))
        if image.format == target_format and quality is None:
            return image_bytes
        return self._encode(image, target_format, quality)

    def _read_size(self, image_bytes: bytes) -> Optional[Tuple[int, int]]:
        try:
            with Image.open(io.BytesIO(image_bytes)) as image:
                return image.size
        except (UnidentifiedImageError, OSError) as e:
            self.logger.warning("Unreadable screenshot metadata, skipping downscale", error=str(e))
            return None

    def _encode(self, image: Image.Image, image_format: str, quality: Optional[int]) -> bytes:
        save_kwargs: Dict[str, Any] = {"format": image_format}

        if image_format in LOSSY_FORMATS and quality is not None:
            save_kwargs["quality"] = quality
        if image_format == "JPEG" and image.mode not in ("RGB", "L"):
            image = image.convert("RGB")

        output = io.BytesIO()
        image.save(output, **save_kwargs)
        return output.getvalue()
