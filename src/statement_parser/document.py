from __future__ import annotations

import io
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import pdfplumber

from .errors import InvalidInput

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF"

_KIND_BY_SUFFIX = {
    ".csv": "csv",
    ".pdf": "pdf",
}
_KIND_BY_CONTENT_TYPE = {
    "text/csv": "csv",
    "application/csv": "csv",
    "application/pdf": "pdf",
}


@dataclass(frozen=True)
class StatementDocument:
    """
    In-memory upload handed over by the caller.
    - content: raw bytes as uploaded
    - filename / content_type: hints only, never trusted over the bytes
    - text: PDF text already extracted upstream (skips pdfplumber)
    """

    content: bytes
    filename: str = ""
    content_type: Optional[str] = None
    text: Optional[str] = None

    @classmethod
    def from_path(cls, path, content_type: Optional[str] = None) -> "StatementDocument":
        path = Path(path)
        if content_type is None:
            content_type, _ = mimetypes.guess_type(path.name)
        return cls(content=path.read_bytes(), filename=path.name, content_type=content_type)

    @classmethod
    def from_pdf_text(cls, text: str, filename: str = "statement.pdf") -> "StatementDocument":
        return cls(content=b"", filename=filename, content_type="application/pdf", text=text)

    @property
    def suffix(self) -> str:
        return Path(self.filename or "").suffix.lower()

    @property
    def has_pdf_signature(self) -> bool:
        return self.content.lstrip()[:4] == PDF_SIGNATURE

    @property
    def kind(self) -> Optional[str]:
        """
        File-kind tag ("pdf", "csv") from, in order: the bytes, the
        filename, the content type.
        """
        if self.has_pdf_signature:
            return "pdf"
        by_name = _KIND_BY_SUFFIX.get(self.suffix)
        if by_name:
            return by_name
        ctype = (self.content_type or "").split(";")[0].strip().lower()
        return _KIND_BY_CONTENT_TYPE.get(ctype)

    def pdf_pages(self, max_pages: Optional[int] = None) -> List[str]:
        """
        Page texts, layout-preserving so column offsets survive.
        Raises InvalidInput when the bytes are not a readable PDF.
        """
        if self.text is not None:
            pages = self.text.split("\f")
            return pages[:max_pages] if max_pages else pages

        if not self.has_pdf_signature:
            raise InvalidInput(f"Not a PDF document: {self.filename or '<buffer>'}")

        try:
            with pdfplumber.open(io.BytesIO(self.content)) as pdf:
                pages = pdf.pages if max_pages is None else pdf.pages[:max_pages]
                texts = [p.extract_text(layout=True) or "" for p in pages]
        except Exception as exc:
            raise InvalidInput(f"Unreadable PDF {self.filename or '<buffer>'}: {exc}") from exc

        # Heuristic: a scanned PDF has no text layer at all
        if not any(t.strip() for t in texts):
            logger.warning("PDF %s has no extractable text (scanned?)", self.filename)
        return texts

    def pdf_lines(self, max_pages: Optional[int] = None) -> List[str]:
        lines: List[str] = []
        for page in self.pdf_pages(max_pages):
            lines.extend(page.splitlines())
        return lines
