"""Date metadata recovered from input filenames."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from .types import DateParts, OutputDescriptor

FILENAME_TAG = "REPLIM"
YEAR_PIVOT = 60

_COMPACT_PATTERN = re.compile(FILENAME_TAG + r"(\d{2})(\d{2})(\d{2})")
_SLASH_PATTERN = re.compile(FILENAME_TAG + r"\s*(\d+)/(\d+)")


def extract_date_parts(filename: str, today: Optional[date] = None) -> DateParts:
    """Return the day, month and two-digit year encoded in *filename*.

    ``REPLIM150324`` gives all three fields. ``REPLIM 3/7`` gives day and month
    only, the year is taken from *today*. Anything else yields *today*, which
    defaults to the current local date.
    """

    today = today or date.today()
    day = today.strftime("%d")
    month = today.strftime("%m")
    year = today.strftime("%y")

    match = _COMPACT_PATTERN.search(filename)
    if match:
        day, month, year = match.groups()
    else:
        match = _SLASH_PATTERN.search(filename)
        if match:
            day = match.group(1).rjust(2, "0")
            month = match.group(2).rjust(2, "0")

    return DateParts(day=day, month=month, year=year)


def expand_year(year_suffix: str) -> str:
    """Expand a two-digit year: above 60 is the 1900s, otherwise the 2000s."""

    if int(year_suffix) > YEAR_PIVOT:
        return f"19{year_suffix}"
    return f"20{year_suffix}"


def describe_output(filename: str, today: Optional[date] = None) -> OutputDescriptor:
    parts = extract_date_parts(filename, today=today)
    return OutputDescriptor(
        year=expand_year(parts.year),
        month=parts.month,
        day=parts.day,
        base_name=filename,
    )


__all__ = ["FILENAME_TAG", "extract_date_parts", "expand_year", "describe_output"]
