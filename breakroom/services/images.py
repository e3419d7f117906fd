"""
Image decoding for article thumbnails.

The feed pipeline only depends on the ImageDecoder protocol, so tests and
callers can swap in another codec.
"""

import io
from typing import Any, Protocol

from PIL import Image


class ImageDecoder(Protocol):
    """
    Protocol for image decoders.

    Implementations turn raw bytes into an image handle and raise on data
    they cannot decode.
    """

    def decode(self, data: bytes) -> Any:
        """Decodes image bytes."""


class PillowImageDecoder(ImageDecoder):
    """Decodes thumbnails with Pillow."""

    def decode(self, data: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(data))
        # Image.open is lazy; load() surfaces truncated or corrupt payloads here.
        image.load()
        return image
