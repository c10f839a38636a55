"""In-memory PDF object graph used to cut documents into single pages.

pypdf does the parsing; the objects it returns are copied into a
:class:`PDFDocument` that owns them outright, keyed by dense object numbers.
Every :class:`~pypdf.generic.IndirectObject` inside the graph points back at
the owning document, so ``ref.get_object()`` keeps working on the copy.
"""

from __future__ import annotations

import io
import logging
from collections import deque
from pathlib import Path
from typing import BinaryIO, Callable, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from pypdf import PdfReader
from pypdf.errors import PdfReadError
from pypdf.generic import (
    ArrayObject,
    DecodedStreamObject,
    DictionaryObject,
    EncodedStreamObject,
    IndirectObject,
    NameObject,
    NullObject,
    NumberObject,
    PdfObject,
    StreamObject,
)

from .exceptions import InvalidPDFError, PageWriteError

_LOGGER = logging.getLogger("lima_splitter.document")

DEFAULT_HEADER = "%PDF-1.4"
TRAILER_KEYS = ("/Root", "/Info", "/ID")
_BINARY_MARKER = b"%\xe2\xe3\xcf\xd3\n"

Reference = Callable[[IndirectObject], PdfObject]


def _copy_value(value: PdfObject, reference: Reference) -> PdfObject:
    """Deep-copy a direct value, passing every indirect reference through *reference*."""

    if isinstance(value, IndirectObject):
        return reference(value)
    if isinstance(value, StreamObject):
        if isinstance(value, EncodedStreamObject):
            stream: StreamObject = EncodedStreamObject()
            stream._data = value._data
        else:
            stream = DecodedStreamObject()
            stream.set_data(value.get_data())
        for key, item in value.items():
            # recomputed from the data on write
            if key == "/Length":
                continue
            stream[NameObject(key)] = _copy_value(item, reference)
        return stream
    if isinstance(value, DictionaryObject):
        copied = DictionaryObject()
        for key, item in value.items():
            copied[NameObject(key)] = _copy_value(item, reference)
        return copied
    if isinstance(value, ArrayObject):
        return ArrayObject(_copy_value(item, reference) for item in value)
    return value


def _raw(dictionary: DictionaryObject, key: str) -> Optional[PdfObject]:
    """Return the unresolved value stored under *key*, or ``None``."""

    return dictionary.raw_get(key) if key in dictionary else None


def _references(value: PdfObject) -> Iterator[int]:
    """Yield the object numbers referenced directly by *value*."""

    stack = [value]
    while stack:
        current = stack.pop()
        if isinstance(current, IndirectObject):
            yield current.idnum
        elif isinstance(current, DictionaryObject):
            stack.extend(current.values())
        elif isinstance(current, ArrayObject):
            stack.extend(current)


def _strip_references(value: PdfObject, removed: Set[int]) -> None:
    """Remove every reference to an object in *removed* from *value*, in place."""

    def doomed(item: PdfObject) -> bool:
        return isinstance(item, IndirectObject) and item.idnum in removed

    if isinstance(value, DictionaryObject):
        for key, item in list(value.items()):
            if doomed(item):
                del value[key]
            else:
                _strip_references(item, removed)
    elif isinstance(value, ArrayObject):
        value[:] = [item for item in value if not doomed(item)]
        for item in value:
            _strip_references(item, removed)


class PDFDocument:
    """A PDF held as a mutable graph of numbered objects."""

    def __init__(self, header: str = DEFAULT_HEADER) -> None:
        self.header = header if header.startswith("%PDF-") else DEFAULT_HEADER
        self.objects: Dict[int, PdfObject] = {}
        self.trailer = DictionaryObject()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @classmethod
    def load(cls, pdf_path: Union[str, Path]) -> "PDFDocument":
        """Parse *pdf_path* and return its object graph, densely renumbered.

        Raises:
            InvalidPDFError: The file is missing, unreadable, malformed,
                encrypted with a non-empty password, or its page tree points
                at objects that do not exist.
        """

        path = Path(pdf_path)
        if not path.is_file():
            raise InvalidPDFError(f"PDF file not found: {pdf_path}")

        try:
            raw_bytes = path.read_bytes()
        except OSError as exc:
            raise InvalidPDFError(f"Unable to read PDF file: {pdf_path}. Error: {exc}") from exc

        try:
            reader = PdfReader(io.BytesIO(raw_bytes))
            if reader.is_encrypted and reader.decrypt("") == 0:
                raise InvalidPDFError(f"PDF is encrypted and cannot be opened: {pdf_path}")
            document = cls(reader.pdf_header)
            document._import(reader)
        except InvalidPDFError:
            raise
        except PdfReadError as exc:
            raise InvalidPDFError(f"Corrupted or invalid PDF file: {pdf_path}. Error: {exc}") from exc
        except Exception as exc:
            raise InvalidPDFError(f"Unexpected error reading PDF: {pdf_path}. Error: {exc}") from exc

        document._walk_page_tree(strict=True)
        _LOGGER.debug("Loaded %s: %d objects", path.name, len(document.objects))
        return document

    def _import(self, reader: PdfReader) -> None:
        # Objects are numbered 1..n in the order they are first reached from
        # the trailer; references to missing objects become null.
        numbers: Dict[Tuple[int, int], int] = {}
        pending: deque = deque()

        def reference(ref: IndirectObject) -> PdfObject:
            key = (ref.idnum, ref.generation)
            if key not in numbers:
                target = ref.get_object()
                if target is None or isinstance(target, NullObject):
                    return NullObject()
                numbers[key] = len(numbers) + 1
                pending.append((numbers[key], target))
            return IndirectObject(numbers[key], 0, self)

        for key in TRAILER_KEYS:
            value = _raw(reader.trailer, key)
            if value is not None:
                self.trailer[NameObject(key)] = _copy_value(value, reference)

        while pending:
            number, target = pending.popleft()
            self.objects[number] = _copy_value(target, reference)

    # ------------------------------------------------------------------
    # Object access
    # ------------------------------------------------------------------
    def get_object(self, reference: Union[int, IndirectObject]) -> Optional[PdfObject]:
        number = reference.idnum if isinstance(reference, IndirectObject) else reference
        return self.objects.get(number)

    def resolve(self, value: Optional[PdfObject]) -> Optional[PdfObject]:
        if isinstance(value, IndirectObject):
            return self.get_object(value)
        return value

    def object_ids(self) -> List[int]:
        return sorted(self.objects)

    @property
    def catalog(self) -> Optional[DictionaryObject]:
        root = self.resolve(_raw(self.trailer, "/Root"))
        return root if isinstance(root, DictionaryObject) else None

    def reachable_from(self, numbers: Iterable[int]) -> Set[int]:
        """Return the transitive closure of objects reachable from *numbers*."""

        seen: Set[int] = set()
        queue = deque(numbers)
        while queue:
            number = queue.popleft()
            if number in seen or number not in self.objects:
                continue
            seen.add(number)
            queue.extend(_references(self.objects[number]))
        return seen

    # ------------------------------------------------------------------
    # Page tree
    # ------------------------------------------------------------------
    def _walk_page_tree(self, strict: bool = False) -> Tuple[List[int], Dict[int, int]]:
        """Return page numbers in document order and a child -> parent map."""

        catalog = self.catalog
        pages: List[int] = []
        parents: Dict[int, int] = {}
        if catalog is None:
            if strict:
                raise InvalidPDFError("PDF has no document catalog.")
            return pages, parents

        seen: Set[int] = set()
        stack: List[Tuple[PdfObject, Optional[int]]] = [(_raw(catalog, "/Pages"), None)]
        while stack:
            reference, parent = stack.pop()
            node = self.resolve(reference)
            if not isinstance(reference, IndirectObject) or not isinstance(node, DictionaryObject):
                if strict and reference is not None:
                    raise InvalidPDFError("Page tree references a missing object.")
                continue
            if reference.idnum in seen:
                continue
            seen.add(reference.idnum)
            if parent is not None:
                parents[reference.idnum] = parent

            kids = self.resolve(_raw(node, "/Kids"))
            if self.resolve(_raw(node, "/Type")) == "/Pages" or kids is not None:
                if isinstance(kids, ArrayObject):
                    stack.extend((kid, reference.idnum) for kid in reversed(kids))
            else:
                pages.append(reference.idnum)
        return pages, parents

    def page_ids(self) -> List[int]:
        return self._walk_page_tree()[0]

    def page_count(self) -> int:
        return len(self.page_ids())

    def delete_pages(self, ordinals: Iterable[int]) -> List[int]:
        """Delete the pages at the given 1-based *ordinals*.

        Each page is unhooked from its parent's ``/Kids``, the ``/Count`` of
        every ancestor is decremented, and every reference to the page left
        anywhere in the graph is stripped. Returns the deleted object numbers.
        """

        pages, parents = self._walk_page_tree()
        removed = {pages[ordinal - 1] for ordinal in set(ordinals) if 1 <= ordinal <= len(pages)}

        for page_id in removed:
            parent_id = parents.get(page_id)
            parent = self.objects.get(parent_id) if parent_id is not None else None
            if isinstance(parent, DictionaryObject):
                kids = self.resolve(_raw(parent, "/Kids"))
                if isinstance(kids, ArrayObject):
                    kids[:] = [
                        kid for kid in kids
                        if not (isinstance(kid, IndirectObject) and kid.idnum == page_id)
                    ]

            node_id = parent_id
            while node_id is not None:
                node = self.objects.get(node_id)
                if not isinstance(node, DictionaryObject):
                    break
                count = self.resolve(_raw(node, "/Count"))
                if isinstance(count, int):
                    node[NameObject("/Count")] = NumberObject(max(count - 1, 0))
                node_id = parents.get(node_id)

        for page_id in removed:
            del self.objects[page_id]
        for value in self.objects.values():
            _strip_references(value, removed)
        _strip_references(self.trailer, removed)
        return sorted(removed)

    def prune_objects(self) -> List[int]:
        """Drop every object not reachable from the trailer; return their numbers."""

        reachable = self.reachable_from(_references(self.trailer))
        pruned = sorted(set(self.objects) - reachable)
        for number in pruned:
            del self.objects[number]
        return pruned

    # ------------------------------------------------------------------
    # Copying and renumbering
    # ------------------------------------------------------------------
    def clone(self) -> "PDFDocument":
        duplicate = PDFDocument(self.header)

        def reference(ref: IndirectObject) -> PdfObject:
            return IndirectObject(ref.idnum, 0, duplicate)

        duplicate.objects = {number: _copy_value(obj, reference) for number, obj in self.objects.items()}
        duplicate.trailer = _copy_value(self.trailer, reference)
        return duplicate

    def renumber_objects(self, start: int = 1) -> None:
        """Renumber objects to ``start, start + 1, ...`` keeping their order."""

        mapping = {old: new for new, old in enumerate(sorted(self.objects), start=start)}

        def reference(ref: IndirectObject) -> PdfObject:
            if ref.idnum not in mapping:
                return NullObject()
            return IndirectObject(mapping[ref.idnum], 0, self)

        self.objects = {mapping[old]: _copy_value(obj, reference) for old, obj in self.objects.items()}
        self.trailer = _copy_value(self.trailer, reference)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def write(self, stream: BinaryIO) -> None:
        """Serialize the graph with a classic cross-reference table."""

        start = stream.tell()
        stream.write(self.header.encode("latin-1") + b"\n")
        stream.write(_BINARY_MARKER)

        offsets: Dict[int, int] = {}
        for number in sorted(self.objects):
            offsets[number] = stream.tell() - start
            stream.write(b"%d 0 obj\n" % number)
            self.objects[number].write_to_stream(stream)
            stream.write(b"\nendobj\n")

        size = max(self.objects, default=0) + 1
        xref_offset = stream.tell() - start
        stream.write(b"xref\n0 %d\n" % size)
        stream.write(b"0000000000 65535 f \n")
        for number in range(1, size):
            if number in offsets:
                stream.write(b"%010d 00000 n \n" % offsets[number])
            else:
                stream.write(b"0000000000 65535 f \n")

        trailer = DictionaryObject()
        trailer[NameObject("/Size")] = NumberObject(size)
        for key, value in self.trailer.items():
            trailer[NameObject(key)] = value
        stream.write(b"trailer\n")
        trailer.write_to_stream(stream)
        stream.write(b"\nstartxref\n%d\n%%%%EOF\n" % xref_offset)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.write(buffer)
        return buffer.getvalue()

    def save(self, pdf_path: Union[str, Path]) -> Path:
        path = Path(pdf_path)
        try:
            path.write_bytes(self.to_bytes())
        except OSError as exc:
            raise PageWriteError(f"Unable to write file: {path}. Error: {exc}") from exc
        except Exception as exc:  # pragma: no cover - defensive
            raise PageWriteError(f"Unexpected error writing file: {path}. Error: {exc}") from exc
        return path


__all__ = ["PDFDocument"]
