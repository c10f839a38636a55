"""Render backend abstractions for LIMA Splitter."""

from .base import RenderBackend
from .ghostscript import GhostscriptBackend, detect_render_backend, find_ghostscript

__all__ = [
    "RenderBackend",
    "GhostscriptBackend",
    "detect_render_backend",
    "find_ghostscript",
]
