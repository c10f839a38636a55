from __future__ import annotations

import re
import struct
from pathlib import Path
from typing import Callable, Dict, List
import sys

import pytest
from PIL import Image

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from lima_splitter.exceptions import RenderBackendError  # noqa: E402


def assemble_pdf(objects: Dict[int, bytes], root: int = 1, info: int | None = None) -> bytes:
    """Lay out numbered object bodies as a PDF with a correct xref table."""

    out = bytearray(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")
    offsets: Dict[int, int] = {}
    for number in sorted(objects):
        offsets[number] = len(out)
        out += b"%d 0 obj\n" % number + objects[number] + b"\nendobj\n"

    size = max(objects) + 1
    xref = len(out)
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for number in range(1, size):
        if number in offsets:
            out += b"%010d 00000 n \n" % offsets[number]
        else:
            out += b"0000000000 65535 f \n"

    trailer = b"/Size %d /Root %d 0 R" % (size, root)
    if info is not None:
        trailer += b" /Info %d 0 R" % info
    out += b"trailer\n<< " + trailer + b" >>\nstartxref\n%d\n%%%%EOF\n" % xref
    return bytes(out)


def sample_objects(page_count: int) -> Dict[int, bytes]:
    """Object bodies of a document whose pages share /Helvetica and each own /ExclusiveN.

    Object layout: 1 catalog, 2 page tree, 3 shared font, 4 info, then
    (page, content stream, exclusive font) per page.
    """

    objects: Dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
        4: b"<< /Title (Fixture) /Producer (lima-splitter-tests) >>",
    }
    kids: List[int] = []
    number = 5
    for index in range(1, page_count + 1):
        page_id, content_id, font_id = number, number + 1, number + 2
        number += 3
        kids.append(page_id)
        content = b"BT /F1 12 Tf 20 100 Td (Page %d) Tj /F2 10 Tf (x) Tj ET" % index
        objects[page_id] = (
            b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] "
            b"/Resources << /Font << /F1 3 0 R /F2 %d 0 R >> >> /Contents %d 0 R >>"
            % (font_id, content_id)
        )
        objects[content_id] = b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
        objects[font_id] = b"<< /Type /Font /Subtype /Type1 /BaseFont /Exclusive%d >>" % index

    objects[2] = b"<< /Type /Pages /Kids [%s] /Count %d >>" % (
        b" ".join(b"%d 0 R" % kid for kid in kids),
        page_count,
    )
    return objects


def build_pdf(page_count: int) -> bytes:
    return assemble_pdf(sample_objects(page_count), info=4)


def build_object_stream_pdf(page_count: int) -> bytes:
    """Same document as :func:`build_pdf`, written the PDF 1.5 way.

    Every non-stream object is packed into one ``/ObjStm`` and the xref table
    is replaced by an uncompressed ``/XRef`` stream.
    """

    objects = sample_objects(page_count)
    packed = [number for number in sorted(objects) if b"stream" not in objects[number]]
    objstm_id = max(objects) + 1
    xref_id = objstm_id + 1

    header = bytearray()
    body = bytearray()
    for number in packed:
        header += b"%d %d " % (number, len(body))
        body += objects[number] + b"\n"
    data = bytes(header + body)

    out = bytearray(b"%PDF-1.5\n%\xe2\xe3\xcf\xd3\n")
    offsets: Dict[int, int] = {}
    for number in sorted(set(objects) - set(packed)):
        offsets[number] = len(out)
        out += b"%d 0 obj\n" % number + objects[number] + b"\nendobj\n"
    offsets[objstm_id] = len(out)
    out += b"%d 0 obj\n<< /Type /ObjStm /N %d /First %d /Length %d >>\nstream\n" % (
        objstm_id, len(packed), len(header), len(data)
    )
    out += data + b"\nendstream\nendobj\n"
    offsets[xref_id] = len(out)

    rows = [struct.pack(">BIH", 0, 0, 65535)]
    for number in range(1, xref_id + 1):
        if number in offsets:
            rows.append(struct.pack(">BIH", 1, offsets[number], 0))
        elif number in packed:
            rows.append(struct.pack(">BIH", 2, objstm_id, packed.index(number)))
        else:
            rows.append(struct.pack(">BIH", 0, 0, 0))
    table = b"".join(rows)

    out += b"%d 0 obj\n<< /Type /XRef /Size %d /W [1 4 2] /Root 1 0 R /Info 4 0 R /Length %d >>\nstream\n" % (
        xref_id, xref_id + 1, len(table)
    )
    out += table + b"\nendstream\nendobj\n"
    out += b"startxref\n%d\n%%%%EOF\n" % offsets[xref_id]
    return bytes(out)


def build_nested_pdf() -> bytes:
    """Six pages under a two-level page tree.

    Pages 1-3 hang off node 3, pages 4-6 off node 4. The pages own no
    ``/Resources``: each inherits ``/LeftShared`` or ``/RightShared`` from its
    intermediate node, and ``/MediaBox`` from the root.
    """

    objects: Dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: b"<< /Type /Pages /Kids [3 0 R 4 0 R] /Count 6 /MediaBox [0 0 200 200] >>",
    }
    for side, node_id, font_id, ordinals in ((b"Left", 3, 20, range(1, 4)), (b"Right", 4, 21, range(4, 7))):
        kids: List[int] = []
        for ordinal in ordinals:
            page_id, content_id = 4 + ordinal, 10 + ordinal
            content = b"BT /F1 12 Tf 20 100 Td (Nested %d) Tj ET" % ordinal
            objects[page_id] = b"<< /Type /Page /Parent %d 0 R /Contents %d 0 R >>" % (node_id, content_id)
            objects[content_id] = b"<< /Length %d >>\nstream\n" % len(content) + content + b"\nendstream"
            kids.append(page_id)
        objects[node_id] = b"<< /Type /Pages /Parent 2 0 R /Kids [%s] /Count 3 /Resources << /Font << /F1 %d 0 R >> >> >>" % (
            b" ".join(b"%d 0 R" % kid for kid in kids),
            font_id,
        )
        objects[font_id] = b"<< /Type /Font /Subtype /Type1 /BaseFont /%sShared >>" % side
    return assemble_pdf(objects)


def base_fonts(data: bytes) -> List[str]:
    """Return every /BaseFont name written in *data*, in file order."""

    return [name.decode() for name in re.findall(rb"/BaseFont\s*/(\w+)", data)]


class FakeBackend:
    """Render backend double recording its calls."""

    name = "fake"

    def __init__(self, fail_compress: bool = False, fail_rasterize: bool = False) -> None:
        self.fail_compress = fail_compress
        self.fail_rasterize = fail_rasterize
        self.compressed: List[Path] = []
        self.rasterized: List[Path] = []

    def compress(self, source: Path, destination: Path) -> None:
        self.compressed.append(source)
        if self.fail_compress:
            raise RenderBackendError("compression exploded")
        destination.write_bytes(source.read_bytes() + b"%compressed\n")

    def rasterize(self, source: Path, destination: Path) -> None:
        self.rasterized.append(source)
        if self.fail_rasterize:
            raise RenderBackendError("rasterization exploded")
        Image.new("RGB", (827, 1169), "white").save(destination, format="PNG")


@pytest.fixture()
def pdf_factory(tmp_path: Path) -> Callable[[str, int], Path]:
    def _create(filename: str, page_count: int = 3) -> Path:
        path = tmp_path / filename
        path.write_bytes(build_pdf(page_count))
        return path

    return _create


@pytest.fixture()
def sample_pdf(pdf_factory: Callable[[str, int], Path]) -> Path:
    return pdf_factory("REPLIM150324.pdf", 5)


@pytest.fixture()
def nested_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "REPLIM150324-nested.pdf"
    path.write_bytes(build_nested_pdf())
    return path


@pytest.fixture()
def object_stream_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "REPLIM150324-objstm.pdf"
    path.write_bytes(build_object_stream_pdf(3))
    return path


@pytest.fixture()
def empty_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "REPLIM010199.pdf"
    path.write_bytes(
        assemble_pdf(
            {
                1: b"<< /Type /Catalog /Pages 2 0 R >>",
                2: b"<< /Type /Pages /Kids [] /Count 0 >>",
            }
        )
    )
    return path


@pytest.fixture()
def malformed_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "REPLIM020224.pdf"
    path.write_bytes(b"this is not a pdf at all")
    return path


@pytest.fixture()
def output_root(tmp_path: Path) -> Path:
    return tmp_path / "output"


@pytest.fixture()
def read_fonts() -> Callable[[Path], List[str]]:
    return lambda path: base_fonts(Path(path).read_bytes())
