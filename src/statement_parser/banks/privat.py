from __future__ import annotations

import re
from typing import Optional

from ..models import ExtractorConfig
from ..positional import PositionalTextExtractor, RecordStart


HEADER_RE = re.compile(r"^\s*(date|дата)\b.*\b(description|опис)\b.*\b(amount|сума)\b", re.IGNORECASE)

# 01.03.2024 08:15  Silpo supermarket   -1 234,56  UAH  [balance ...]
RECORD_RE = re.compile(
    r"^\s*(?P<date>\d{2}\.\d{2}\.\d{4})\s+(?P<time>\d{2}:\d{2}(?::\d{2})?)\s+"
    r"(?P<desc>.*?)\s+"
    r"(?P<amount>[-+\u2212]?\d+(?:[ \u00a0\u202f]\d{3})*,\d{2})\s+"
    r"(?P<currency>[A-Z]{3})\b"
)
RECORD_PREFIX_RE = re.compile(r"^\s*\d{2}\.\d{2}\.\d{4}\s+\d{2}:\d{2}")


class PrivatExtractor(PositionalTextExtractor):
    """
    PrivatBank card statements.
    Records are anchored by date+time at line start, amounts use comma
    decimals and space-grouped thousands; expenses print negative.
    """

    id = "privat-pdf"
    name = "PrivatBank PDF Statement Parser"
    institution = "PrivatBank"

    header_patterns = (re.compile(r"privat\s*bank|приватбанк", re.IGNORECASE),)
    footer_re = re.compile(
        r"^(balance at the end of (the )?period|end of statement|вихідний залишок)", re.IGNORECASE
    )
    period_re = re.compile(
        r"(?:statement for the period|виписка за період)\s*(?:from\s+|з\s+)?(.+)$", re.IGNORECASE
    )
    card_re = re.compile(r"(?:card\s+number|картка)[:\s]*([0-9*Xx•][0-9*Xx• ]{6,}[0-9])", re.IGNORECASE)

    @classmethod
    def default_config(cls) -> ExtractorConfig:
        return ExtractorConfig(currency="UAH", invert_sign=False, date_format="%d.%m.%Y %H:%M")

    def format_description(self) -> str:
        return "PrivatBank statement PDF: Date, Time, Description, Amount, Currency[, Balance]"

    def _column_header(self, line: str) -> Optional[bool]:
        return True if HEADER_RE.search(line) else None

    def _match_record(self, line: str, layout) -> Optional[RecordStart]:
        m = RECORD_RE.match(line)
        if not m:
            return None
        return RecordStart(
            date_text=f"{m.group('date')} {m.group('time')}",
            # typographic minus shows up in some exports
            amount_text=m.group("amount").replace("\u2212", "-"),
            description=m.group("desc").strip(),
            currency=m.group("currency"),
        )

    def _has_record_prefix(self, line: str, layout) -> bool:
        return bool(RECORD_PREFIX_RE.match(line))
