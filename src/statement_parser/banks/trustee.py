from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from ..models import ExtractorConfig
from ..positional import PositionalTextExtractor, RecordStart


HEADER_RE = re.compile(r"\bDate\s+Description\s+Amount\s+Currency\b")
DATE_RE = re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")
# 4.50, -500.00, 1234.56, 1,234.56, (12.00)
AMOUNT_TOKEN_RE = re.compile(r"^[-+]?\(?\$?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}\)?$")
CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True)
class ColumnLayout:
    """Character offsets taken from the column header line."""

    description_start: int
    currency_start: int

    def split(self, line: str):
        date = line[: self.description_start].strip()
        body = line[self.description_start : self.currency_start].rstrip()
        currency = line[self.currency_start :].strip()
        return date, body, currency


class TrusteeExtractor(PositionalTextExtractor):
    """
    Trustee card statements (pdfplumber layout text).
    Fixed-width table: Date | Description ... Amount | Currency.
    Charges print positive and payments/refunds negative, hence invert_sign.
    """

    id = "trustee-pdf"
    name = "Trustee PDF Statement Parser"
    institution = "Trustee"

    header_patterns = (
        re.compile(r"\btrustee\b", re.IGNORECASE),
        re.compile(r"card\s+number", re.IGNORECASE),
    )
    footer_re = re.compile(r"^(total\b|end of statement)", re.IGNORECASE)
    period_re = re.compile(r"statement\s+period:?\s*(.+)$", re.IGNORECASE)
    card_re = re.compile(r"card\s+number:?\s*([0-9*Xx•][0-9*Xx• ]{6,}[0-9])", re.IGNORECASE)

    @classmethod
    def default_config(cls) -> ExtractorConfig:
        return ExtractorConfig(currency="USD", invert_sign=True, date_format="%m/%d/%Y")

    def format_description(self) -> str:
        return "Trustee card statement PDF: Date, Description, Amount, Currency columns"

    def _column_header(self, line: str) -> Optional[ColumnLayout]:
        m = HEADER_RE.search(line)
        if not m:
            return None
        return ColumnLayout(
            description_start=line.index("Description", m.start()),
            currency_start=line.index("Currency", m.start()),
        )

    def _match_record(self, line: str, layout: Optional[ColumnLayout]) -> Optional[RecordStart]:
        if layout is None:
            return None
        date, body, currency = layout.split(line)
        if not DATE_RE.match(date):
            return None

        parts = body.rsplit(None, 1)
        if len(parts) != 2 or not AMOUNT_TOKEN_RE.match(parts[1]):
            return None
        description, amount = parts

        return RecordStart(
            date_text=date,
            amount_text=amount,
            description=description.strip(),
            currency=currency if CURRENCY_RE.match(currency) else None,
        )

    def _continuation_text(self, line: str, layout: Optional[ColumnLayout]) -> str:
        if layout is None:
            return line.strip()
        date, body, _ = layout.split(line)
        # text in the date column means it's not a wrapped description
        if date:
            return ""
        return body.strip()

    def _has_record_prefix(self, line: str, layout: Optional[ColumnLayout]) -> bool:
        if layout is None:
            return False
        date, _, _ = layout.split(line)
        return bool(DATE_RE.match(date))
