"""
LIMA Splitter - split multi-page PDFs into single-page files.

Each input PDF is cut into one PDF per page (at most 30) and written under
``<output>/<YYYY>/<MM>/<DD>/lima/pages/``, the date being read from the
input filename. When Ghostscript is available every page is also compressed
and rendered to a WebP image with a thumbnail.

Quick Start:
    >>> from lima_splitter import BatchProcessor
    >>> processor = BatchProcessor('output')
    >>> result = processor.process_path('incoming/')

Main Classes:
    - PDFDocument: Mutable object graph of a loaded PDF
    - PageSplitter: Split a single PDF
    - BatchProcessor: Split many PDFs in parallel

For CLI usage, use the 'lima-splitter' command after installation.
"""

# Core classes
from lima_splitter.document import PDFDocument
from lima_splitter.splitter import MAX_PAGES, BatchProcessor, PageSplitter, extract_page

# Data types
from lima_splitter.types import BatchResult, DateParts, FileResult, OutputDescriptor

# Exceptions
from lima_splitter.exceptions import (
    LimaSplitterException,
    InvalidPDFError,
    PageWriteError,
    InputPathNotFoundError,
    RenderBackendError,
    PageOutOfBoundsError,
)

# Helpers
from lima_splitter.metadata import describe_output, expand_year, extract_date_parts
from lima_splitter.locator import output_directory

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Main classes
    "PDFDocument",
    "PageSplitter",
    "BatchProcessor",
    "extract_page",
    "MAX_PAGES",
    # Data types
    "BatchResult",
    "DateParts",
    "FileResult",
    "OutputDescriptor",
    # Exceptions
    "LimaSplitterException",
    "InvalidPDFError",
    "PageWriteError",
    "InputPathNotFoundError",
    "RenderBackendError",
    "PageOutOfBoundsError",
    # Helpers
    "describe_output",
    "expand_year",
    "extract_date_parts",
    "output_directory",
    # Version info
    "__version__",
]
