"""Small helpers shared by the CLI and the render backends."""

from __future__ import annotations

import logging
import shutil
import subprocess
from typing import Optional, Sequence

_LOGGER = logging.getLogger("lima_splitter")

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def which(executables: Sequence[str]) -> Optional[str]:
    """Resolve the first of *executables* that ``PATH`` knows about."""

    found = next(filter(None, map(shutil.which, executables)), None)
    if found:
        _LOGGER.debug("Using external tool %s", found)
    return found


def run_subprocess(command: Sequence[str], *, timeout: Optional[float] = None) -> subprocess.CompletedProcess[str]:
    """Run *command* to completion, raising on a non-zero exit status.

    Output of the tool is captured and only surfaces in debug logs.
    """

    argv = [str(part) for part in command]
    _LOGGER.debug("$ %s", " ".join(argv))
    completed = subprocess.run(argv, capture_output=True, text=True, timeout=timeout)
    if completed.stderr:
        _LOGGER.debug("%s stderr: %s", argv[0], completed.stderr.strip())
    completed.check_returncode()
    return completed


def format_file_size(size_bytes: float) -> str:
    """Render a byte count for the summary table, e.g. ``"1.5 MB"``."""

    size = float(size_bytes)
    unit = _SIZE_UNITS[0]
    for unit in _SIZE_UNITS:
        if size < 1024 or unit == _SIZE_UNITS[-1]:
            break
        size /= 1024
    return f"{size:.1f} {unit}"
