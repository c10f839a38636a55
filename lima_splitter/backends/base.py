"""Backend protocol for compressing and rasterizing split pages."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class RenderBackend(Protocol):
    """Protocol for the external tool that post-processes split pages.

    Both operations raise :class:`~lima_splitter.exceptions.RenderBackendError`
    when the tool fails.
    """

    name: str

    def compress(self, source: Path, destination: Path) -> None:
        """Write a quality-reduced copy of *source* to *destination*."""

    def rasterize(self, source: Path, destination: Path) -> None:
        """Render the single page of *source* to a PNG at *destination*."""
