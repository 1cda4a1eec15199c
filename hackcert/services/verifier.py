from __future__ import annotations

import logging
from dataclasses import dataclass

from PIL import Image

from ..errors import BlankOutputDetected

logger = logging.getLogger("hackcert.render")

_WHITE_EXTREMA = ((255, 255), (255, 255), (255, 255))


@dataclass(frozen=True)
class RasterCheck:
    blank: bool
    width: int
    height: int
    content_length: int


def is_blank(image: Image.Image) -> bool:
    """True when every pixel is pure white (alpha is ignored)."""
    return image.convert("RGB").getextrema() == _WHITE_EXTREMA


def verify_raster(image: Image.Image, content_length: int) -> RasterCheck:
    """Flag an all-white capture. Advisory: the caller decides what to do."""
    check = RasterCheck(
        blank=is_blank(image),
        width=image.width,
        height=image.height,
        content_length=content_length,
    )
    if check.blank:
        logger.warning(
            "[CERT-BLANK] %s",
            BlankOutputDetected(check.width, check.height, check.content_length),
        )
    return check
