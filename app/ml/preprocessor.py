"""
Image decoding and input preparation.

Handles:
- Base64 decoding and image loading
- Rejecting images that cannot be decoded, including decompression bombs
- Converting decoded images to RGB for the primary model's image processor
"""

from dataclasses import dataclass, field
import base64
import binascii
import io
import logging

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass
class PreprocessedImage:
    """RGB image ready to hand to the primary model's image processor."""
    image: Image.Image
    original_size: tuple[int, int]
    metadata: dict = field(default_factory=dict)


class ImagePreprocessor:
    """
    Decoding pipeline for wildlife photos.

    Resizing and normalization belong to the primary model's own image
    processor; this class only produces a loaded RGB image.

    Usage:
        preprocessor = ImagePreprocessor()
        image = preprocessor.decode_base64(base64_string)
        rgb = preprocessor.prepare(image).image
    """

    def decode_base64(self, base64_string: str) -> Image.Image:
        """
        Decode a base64 string (optionally a data URL) into a PIL Image.

        Raises:
            ValueError: If the data is not valid base64 or not an image
        """
        if "," in base64_string:
            base64_string = base64_string.split(",", 1)[1]

        try:
            image_bytes = base64.b64decode(base64_string)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image data: {e}")

        return self.decode_bytes(image_bytes)

    def decode_bytes(self, image_bytes: bytes) -> Image.Image:
        """
        Decode raw encoded bytes into a fully loaded PIL Image.

        Raises:
            ValueError: If the bytes are not a decodable image or exceed
                Pillow's pixel limit
        """
        try:
            image = Image.open(io.BytesIO(image_bytes))
            image.load()
        except Image.DecompressionBombError as e:
            raise ValueError(f"Could not decode image, too many pixels: {e}")
        except (UnidentifiedImageError, OSError) as e:
            raise ValueError(f"Could not decode image: {e}")
        return image

    def prepare(self, image: Image.Image) -> PreprocessedImage:
        """
        Convert a PIL Image to RGB for the primary model.

        Raises:
            ValueError: If the image has no pixels
            OSError: If the image data is truncated
        """
        original_size = image.size
        if original_size[0] == 0 or original_size[1] == 0:
            raise ValueError(f"Cannot preprocess empty image of size {original_size}")

        return PreprocessedImage(
            image=image.convert("RGB"),
            original_size=original_size,
            metadata={"original_mode": image.mode}
        )
