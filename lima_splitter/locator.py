"""Output directory layout for split pages."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Union

from .types import OutputDescriptor

_LOGGER = logging.getLogger("lima_splitter.locator")

PAGES_SEGMENTS = ("lima", "pages")


def output_directory(root: Union[str, os.PathLike], descriptor: OutputDescriptor) -> Path:
    """Return ``root/YYYY/MM/DD/lima/pages`` for *descriptor*."""

    return Path(root).joinpath(descriptor.year, descriptor.month, descriptor.day, *PAGES_SEGMENTS)


def ensure_output_directory(path: Path) -> Path:
    """Create *path* and its parents; an existing directory is fine."""

    path.mkdir(parents=True, exist_ok=True)
    _LOGGER.debug("Output directory ready: %s", path)
    return path


def page_stem(ordinal: int) -> str:
    """Return the zero-padded two-digit stem used for page *ordinal*."""

    return f"{ordinal:02d}"


__all__ = ["output_directory", "ensure_output_directory", "page_stem"]
