from __future__ import annotations

from typing import Iterable, Optional


class StatementParserError(Exception):
    """Base for every document-level failure raised by the parser."""


class InvalidInput(StatementParserError):
    """The buffer is not a well-formed instance of the claimed document type."""


class NoCompatibleExtractor(StatementParserError):
    def __init__(self, filename: str, supported_formats: Iterable[str]):
        self.filename = filename
        self.supported_formats = list(supported_formats)
        formats = ", ".join(self.supported_formats) or "none registered"
        super().__init__(
            f"No compatible extractor found for file: {filename}. "
            f"Supported formats: {formats}"
        )


class ExtractorNotFound(StatementParserError, KeyError):
    def __init__(self, extractor_id: str):
        self.extractor_id = extractor_id
        super().__init__(f"Extractor not found: {extractor_id}")

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return self.args[0]


class UnsupportedDocument(StatementParserError):
    def __init__(self, extractor_id: str, extractor_name: str, filename: str):
        self.extractor_id = extractor_id
        self.filename = filename
        super().__init__(f'Extractor "{extractor_name}" does not support file: {filename}')


class AmountError(StatementParserError, ValueError):
    """
    Raised by the amount normalizer.
    - reason "empty": blank input or a lone "-"
    - reason "unparseable": the cleaned text is not a finite number
    """

    def __init__(self, text: Optional[str], reason: str = "unparseable"):
        self.text = text
        self.reason = reason
        super().__init__(f"Invalid amount ({reason}): {text!r}")
