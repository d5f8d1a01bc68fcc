"""
Colour feature extraction.

Produces a compact colour-statistics descriptor from the centre of an
image. The descriptor feeds the heuristic species scorer, so extraction is
kept deterministic and independent of any randomness in scoring.
"""

from dataclasses import dataclass
from typing import Optional
import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorProfile:
    """Mean channel values of the sampled window, each in [0, 255]."""
    r: int
    g: int
    b: int
    average: int


NEUTRAL_PROFILE = ColorProfile(r=128, g=128, b=128, average=128)


class ColorFeatureExtractor:
    """
    Samples a centred square window and averages its RGB channels.

    The window is `sample_size` pixels per side, clamped to the image
    extent in each dimension. Images that cannot be rendered to an RGB
    pixel buffer yield NEUTRAL_PROFILE instead of an error.
    """

    def __init__(self, sample_size: int = 100):
        if sample_size <= 0:
            raise ValueError(f"sample_size must be positive, got {sample_size}")
        self.sample_size = sample_size

    def extract(self, image: Optional[Image.Image]) -> ColorProfile:
        """Compute the ColorProfile of an image."""
        pixels = self._render(image)
        if pixels is None:
            return NEUTRAL_PROFILE

        height, width = pixels.shape[:2]
        window_w = min(self.sample_size, width)
        window_h = min(self.sample_size, height)
        left = width // 2 - window_w // 2
        top = height // 2 - window_h // 2

        window = pixels[top:top + window_h, left:left + window_w]
        count = window_w * window_h
        sums = window.reshape(-1, 3).sum(axis=0, dtype=np.uint64)

        r, g, b = (int(s) // count for s in sums)
        return ColorProfile(r=r, g=g, b=b, average=(r + g + b) // 3)

    def _render(self, image: Optional[Image.Image]) -> Optional[np.ndarray]:
        """
        Render the image into an (H, W, 3) uint8 buffer.

        The RGB copy is released before returning; None means there is no
        usable drawing surface.
        """
        if image is None:
            logger.warning("No image to sample; using neutral colour profile")
            return None

        width, height = image.size
        if width == 0 or height == 0:
            logger.warning(f"Empty image {image.size}; using neutral colour profile")
            return None

        try:
            with image.convert("RGB") as rgb:
                pixels = np.array(rgb, dtype=np.uint8)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not render image pixels ({e}); using neutral colour profile")
            return None

        if pixels.ndim != 3 or pixels.shape[2] != 3 or pixels.size == 0:
            return None
        return pixels
