"""Page extraction engine and batch processing built around :class:`PDFDocument`."""

from __future__ import annotations

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .backends.base import RenderBackend
from .document import PDFDocument
from .exceptions import InputPathNotFoundError, PageOutOfBoundsError, RenderBackendError
from .images import encode_webp
from .locator import ensure_output_directory, output_directory, page_stem
from .metadata import describe_output
from .types import BatchResult, FileResult

_LOGGER = logging.getLogger("lima_splitter.splitter")

MAX_PAGES = 30
PDF_SUFFIX = ".pdf"

PageProgress = Callable[[int, int], None]
FileProgress = Callable[[str, int, int], None]


def extract_page(document: PDFDocument, target: int, total_pages: int) -> PDFDocument:
    """Reduce *document* to the single page at ordinal *target*, in place.

    *document* must be a working copy: every other page is deleted, objects
    that are no longer reachable are pruned and the survivors renumbered.
    """

    if target < 1 or target > total_pages:
        raise PageOutOfBoundsError(
            f"Page {target} is out of bounds. PDF has {total_pages} pages."
        )

    excluded = [ordinal for ordinal in range(1, total_pages + 1) if ordinal != target]
    document.delete_pages(excluded)
    document.prune_objects()
    document.renumber_objects()
    return document


class PageSplitter:
    """Split one PDF into single-page files under a date-based directory."""

    def __init__(
        self,
        output_root: Union[str, os.PathLike],
        *,
        backend: Optional[RenderBackend] = None,
        max_pages: int = MAX_PAGES,
        today: Optional[date] = None,
    ) -> None:
        self.output_root = Path(output_root)
        self.backend = backend
        self.max_pages = max_pages
        self.today = today

    def split(self, pdf_path: Union[str, os.PathLike], progress_callback: Optional[PageProgress] = None) -> FileResult:
        """Split *pdf_path*, returning the pages written.

        Only the first :attr:`max_pages` pages are processed. Load and write
        failures propagate and abandon the rest of the file.
        """

        path = Path(pdf_path)
        descriptor = describe_output(path.stem, today=self.today)
        output_dir = output_directory(self.output_root, descriptor)

        document = PDFDocument.load(path)
        total_pages = document.page_count()
        result = FileResult(
            source_file=str(path),
            status="success",
            total_pages=total_pages,
            output_dir=str(output_dir),
        )
        if total_pages == 0:
            _LOGGER.info("%s has no pages; nothing to split", path.name)
            return result

        limit = min(total_pages, self.max_pages)
        ensure_output_directory(output_dir)

        for ordinal in range(1, limit + 1):
            created = self._split_page(document, ordinal, total_pages, output_dir)
            result.files_created.append(str(created))
            if progress_callback:
                progress_callback(ordinal, limit)

        return result

    def _split_page(self, document: PDFDocument, ordinal: int, total_pages: int, output_dir: Path) -> Path:
        stem = page_stem(ordinal)
        page_path = output_dir / f"{stem}.pdf"
        compressed_path = output_dir / f"{stem}_compress.pdf"

        extract_page(document.clone(), ordinal, total_pages).save(page_path)

        if self.backend is None:
            shutil.copyfile(page_path, compressed_path)
            return page_path

        try:
            self.backend.compress(page_path, compressed_path)
        except RenderBackendError as exc:
            _LOGGER.warning(
                "%s compression failed for %s, keeping uncompressed copy: %s", self.backend.name, page_path, exc
            )
            shutil.copyfile(page_path, compressed_path)

        # rendered from the compressed file, it is smaller to read
        self._render_images(
            compressed_path,
            output_dir / f"{stem}.webp",
            output_dir / f"{stem}_thumb.webp",
        )
        return page_path

    def _render_images(self, source: Path, full_path: Path, thumb_path: Path) -> None:
        raster_path = source.with_suffix(".temp.png")
        try:
            self.backend.rasterize(source, raster_path)
            encode_webp(raster_path, full_path, thumb_path)
        except Exception as exc:
            _LOGGER.debug("Skipping images for %s: %s", source.name, exc)
            full_path.unlink(missing_ok=True)
            thumb_path.unlink(missing_ok=True)
        finally:
            raster_path.unlink(missing_ok=True)


class BatchProcessor:
    """Split many PDFs in parallel, one worker task per file."""

    def __init__(
        self,
        output_root: Union[str, os.PathLike],
        *,
        backend: Optional[RenderBackend] = None,
        max_workers: Optional[int] = None,
        max_pages: int = MAX_PAGES,
        today: Optional[date] = None,
    ) -> None:
        self.splitter = PageSplitter(output_root, backend=backend, max_pages=max_pages, today=today)
        self.max_workers = max(1, max_workers or os.cpu_count() or 1)

    @staticmethod
    def find_pdf_files(input_path: Union[str, os.PathLike]) -> List[Path]:
        """Resolve *input_path* to the PDFs to process.

        A file is returned as is. A directory yields its immediate ``.pdf``
        children, sorted; subdirectories are not searched.
        """

        path = Path(input_path)
        if not path.exists():
            raise InputPathNotFoundError(f"Input path not found: {input_path}")
        if not path.is_dir():
            return [path]
        return sorted(
            entry for entry in path.iterdir()
            if entry.is_file() and entry.suffix.lower() == PDF_SUFFIX
        )

    def process(
        self,
        pdf_files: Iterable[Union[str, os.PathLike]],
        progress_callback: Optional[FileProgress] = None,
    ) -> BatchResult:
        files = [Path(pdf_file) for pdf_file in pdf_files]
        if not files:
            return BatchResult(total=0, success=0, failure=0)

        workers = min(self.max_workers, len(files))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._process_file, pdf_file, progress_callback) for pdf_file in files]
            results = [future.result() for future in futures]

        success_count = sum(1 for result in results if result.success)
        return BatchResult(
            total=len(results),
            success=success_count,
            failure=len(results) - success_count,
            results=results,
        )

    def process_path(
        self,
        input_path: Union[str, os.PathLike],
        progress_callback: Optional[FileProgress] = None,
    ) -> BatchResult:
        return self.process(self.find_pdf_files(input_path), progress_callback=progress_callback)

    def _process_file(self, pdf_file: Path, progress_callback: Optional[FileProgress]) -> FileResult:
        page_progress: Optional[PageProgress] = None
        if progress_callback:
            def page_progress(current: int, total: int) -> None:
                progress_callback(pdf_file.name, current, total)

        try:
            result = self.splitter.split(pdf_file, progress_callback=page_progress)
        except Exception as exc:
            _LOGGER.error("Failed to process %s: %s", pdf_file, exc)
            return FileResult(source_file=str(pdf_file), status="failure", error=str(exc))

        _LOGGER.info("Processed %s: %d page(s) written", pdf_file.name, len(result.files_created))
        return result


__all__ = [
    "MAX_PAGES",
    "extract_page",
    "PageSplitter",
    "BatchProcessor",
]
