"""Document source: file selection, validation and preview rendering."""

import io
import logging
import mimetypes
import os
import tempfile
from pathlib import Path

from PIL import Image

from .domain.errors import EmptyDocumentError, UnsupportedDocumentError
from .domain.models import PDF_MIME_TYPE, DocumentInput, is_accepted_mime_type

logger = logging.getLogger(__name__)

PREVIEW_MAX_SIZE = (1200, 1200)
PDF_PREVIEW_SCALE = 1.5


def detect_mime_type(path: Path, data: bytes) -> str | None:
    """Guess from the filename, then from the bytes for unknown suffixes."""
    mime_type, _ = mimetypes.guess_type(path.name)
    if mime_type:
        return mime_type
    if data.startswith(b"%PDF-"):
        return PDF_MIME_TYPE
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format or "")
    except Exception:
        return None


def load_document(path: Path) -> DocumentInput:
    """Read a file the user picked.

    Raises UnsupportedDocumentError for anything that is not an image or
    a PDF, EmptyDocumentError for empty files.
    """
    data = path.read_bytes()
    mime_type = detect_mime_type(path, data)

    if not is_accepted_mime_type(mime_type):
        logger.warning(f"Rejected {path.name}: unsupported type {mime_type}")
        raise UnsupportedDocumentError()
    if not data:
        raise EmptyDocumentError(f"Document is empty: {path.name}")

    return DocumentInput(data=data, mime_type=mime_type, name=path.name)


def _render_pdf_first_page(data: bytes) -> bytes:
    import fitz  # PyMuPDF

    with fitz.open(stream=data, filetype="pdf") as pdf:
        page = pdf.load_page(0)
        pixmap = page.get_pixmap(matrix=fitz.Matrix(PDF_PREVIEW_SCALE, PDF_PREVIEW_SCALE))
        return pixmap.tobytes("png")


def _render_image(data: bytes) -> bytes:
    with Image.open(io.BytesIO(data)) as img:
        img.thumbnail(PREVIEW_MAX_SIZE)
        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGB")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()


def render_preview(document: DocumentInput) -> bytes | None:
    """Render a PNG preview, or None if it cannot be produced.

    Preview failures never block digitization.
    """
    try:
        if document.is_pdf:
            return _render_pdf_first_page(document.data)
        return _render_image(document.data)
    except Exception as e:
        logger.warning(f"Preview failed for {document.name or '<unnamed>'}: {e}")
        return None


class DocumentSource:
    """Holds the current selection and its temporary preview file."""

    def __init__(self) -> None:
        self.document: DocumentInput | None = None
        self.preview_path: Path | None = None

    def select(self, path: Path) -> DocumentInput:
        """Load a file and render its preview, replacing any selection."""
        document = load_document(path)
        self.clear()
        self.document = document

        preview = render_preview(document)
        if preview is not None:
            fd, name = tempfile.mkstemp(prefix="lecturelens-preview-", suffix=".png")
            with os.fdopen(fd, "wb") as f:
                f.write(preview)
            self.preview_path = Path(name)
            logger.debug(f"Preview written: {self.preview_path}")

        return document

    def clear(self) -> None:
        """Release the preview file and reset the selection."""
        if self.preview_path is not None:
            self.preview_path.unlink(missing_ok=True)
            self.preview_path = None
        self.document = None
