"""WebP encoding of rasterized pages."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

_LOGGER = logging.getLogger("lima_splitter.images")

THUMBNAIL_WIDTH = 310


def encode_webp(raster_path: Path, full_path: Path, thumb_path: Path, thumb_width: int = THUMBNAIL_WIDTH) -> None:
    """Encode *raster_path* as a full-size WebP and a *thumb_width* wide thumbnail.

    The thumbnail keeps the aspect ratio of the source image.
    """

    with Image.open(raster_path) as image:
        image.load()
        image.save(full_path, format="WEBP")

        height = max(1, round(image.height * thumb_width / image.width))
        thumbnail = image.resize((thumb_width, height), Image.LANCZOS)
        thumbnail.save(thumb_path, format="WEBP")

    _LOGGER.debug("Encoded %s and %s", full_path.name, thumb_path.name)
