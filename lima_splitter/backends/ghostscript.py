"""Ghostscript integration for page compression and rasterization."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from ..exceptions import RenderBackendError
from ..utils import run_subprocess, which

_LOGGER = logging.getLogger("lima_splitter.ghostscript")

RASTER_RESOLUTION = 100

_LOCAL_WINDOWS_BINARIES = ("gswin32c.exe", "gswin64c.exe")
_PATH_BINARIES = ("gs", "gswin64c", "gswin32c")


def _is_windows() -> bool:
    return sys.platform.startswith("win")


def find_ghostscript(directory: Optional[Path] = None) -> Optional[str]:
    """Locate a Ghostscript executable.

    A binary dropped into *directory* (the working directory by default) wins
    over one found on ``PATH``.
    """

    directory = directory or Path.cwd()
    if _is_windows():
        for name in _LOCAL_WINDOWS_BINARIES:
            if (directory / name).exists():
                return str(directory / name)
    elif (directory / "gs").exists():
        return str(directory / "gs")
    return which(_PATH_BINARIES)


def build_compress_command(executable: str, source: Path, output: Path) -> List[str]:
    return [
        executable,
        "-sDEVICE=pdfwrite",
        "-dCompatibilityLevel=1.4",
        "-dPDFSETTINGS=/ebook",
        "-dNOPAUSE",
        "-dQUIET",
        "-dBATCH",
        f"-sOutputFile={output}",
        str(source),
    ]


def build_rasterize_command(
    executable: str,
    source: Path,
    output: Path,
    resolution: int = RASTER_RESOLUTION,
) -> List[str]:
    return [
        executable,
        "-sDEVICE=png16m",
        f"-r{resolution}",
        "-dTextAlphaBits=4",
        "-dGraphicsAlphaBits=4",
        "-dNOPAUSE",
        "-dQUIET",
        "-dBATCH",
        f"-sOutputFile={output}",
        str(source),
    ]


class GhostscriptBackend:
    """Render backend that shells out to Ghostscript."""

    name = "ghostscript"

    def __init__(self, executable: Optional[str] = None, *, resolution: int = RASTER_RESOLUTION) -> None:
        self.executable = executable or find_ghostscript()
        self.resolution = resolution

    def is_available(self) -> bool:
        """Probe the executable with ``--version``."""

        if not self.executable:
            return False
        try:
            completed = run_subprocess([self.executable, "--version"])
        except (OSError, subprocess.CalledProcessError) as exc:
            _LOGGER.debug("Ghostscript version check failed: %s", exc)
            return False
        _LOGGER.debug("Ghostscript %s at %s", completed.stdout.strip(), self.executable)
        return True

    def _run(self, command: List[str], action: str) -> None:
        try:
            run_subprocess(command)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RenderBackendError(f"Ghostscript {action} failed: {exc}") from exc

    def compress(self, source: Path, destination: Path) -> None:
        if not self.executable:
            raise RenderBackendError("Ghostscript executable not found.")
        self._run(build_compress_command(self.executable, source, destination), "compression")

    def rasterize(self, source: Path, destination: Path) -> None:
        if not self.executable:
            raise RenderBackendError("Ghostscript executable not found.")
        self._run(
            build_rasterize_command(self.executable, source, destination, self.resolution),
            "rasterization",
        )


def detect_render_backend() -> Optional[GhostscriptBackend]:
    """Return a usable Ghostscript backend, or ``None`` when it is missing."""

    backend = GhostscriptBackend()
    return backend if backend.is_available() else None
