"""
Type definitions and dataclasses for LIMA Splitter.

This module defines data structures used throughout the library.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class DateParts:
    """
    Date components recovered from a filename.

    Attributes:
        day: Two-digit day of month
        month: Two-digit month
        year: Two-digit year
    """
    day: str
    month: str
    year: str


@dataclass(frozen=True)
class OutputDescriptor:
    """
    Everything needed to place the pages of one input file.

    Attributes:
        year: Four-digit year
        month: Two-digit month
        day: Two-digit day of month
        base_name: Input filename without extension
    """
    year: str
    month: str
    day: str
    base_name: str


@dataclass
class FileResult:
    """
    Result of splitting a single PDF.

    Attributes:
        source_file: Path to the source PDF
        status: ``"success"`` or ``"failure"``
        total_pages: Page count of the source document
        files_created: Split page files written, in page order
        output_dir: Directory the pages were written to
        error: Error message if processing failed
    """
    source_file: str
    status: str
    total_pages: int = 0
    files_created: List[str] = field(default_factory=list)
    output_dir: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == "success"

    def __str__(self) -> str:
        if self.success:
            return f"FileResult(success=True, files={len(self.files_created)})"
        return f"FileResult(success=False, error='{self.error}')"


@dataclass
class BatchResult:
    """
    Result of a batch processing operation.

    Attributes:
        total: Total number of PDFs processed
        success: Number of successfully processed PDFs
        failure: Number of failed PDFs
        results: Individual results, in input order
    """
    total: int
    success: int
    failure: int
    results: List[FileResult] = field(default_factory=list)

    def __str__(self) -> str:
        return "BatchResult(total={total}, success={success}, failure={failure})".format(
            total=self.total,
            success=self.success,
            failure=self.failure,
        )
