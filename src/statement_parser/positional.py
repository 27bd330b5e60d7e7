from __future__ import annotations

import logging
import re
from abc import abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Pattern, Tuple, Union

from .amounts import try_parse_amount
from .dates import parse_flexible_date
from .document import StatementDocument
from .errors import InvalidInput
from .extractor import StatementExtractor, batch_of
from .models import ExtractionBatch, ParsedTransaction, RowSkip, StatementSummary

logger = logging.getLogger(__name__)

HAS_LETTER_RE = re.compile(r"[^\W\d_]")


class ScanState(Enum):
    SEEK_HEADER = "seek_header"
    SEEK_FIRST_RECORD = "seek_first_record"
    ACCUMULATE = "accumulate"
    CONTINUATION = "continuation"
    END_OF_STATEMENT = "end_of_statement"


@dataclass(frozen=True)
class RecordStart:
    date_text: str
    amount_text: str
    description: str
    currency: Optional[str] = None


@dataclass
class _OpenRecord:
    line_no: int
    start: RecordStart
    extra: List[str] = field(default_factory=list)
    dropped: int = 0

    def raw(self) -> Dict[str, Any]:
        return {
            "line": self.line_no,
            "date": self.start.date_text,
            "amount": self.start.amount_text,
            "currency": self.start.currency,
            "description": [self.start.description] + self.extra,
            "dropped_lines": self.dropped,
        }


RowOutcome = Union[ParsedTransaction, RowSkip]


class PositionalTextExtractor(StatementExtractor):
    """
    Stateful line scanner for PDF text:
    - a record starts on a line matching the institution's date+amount pattern
    - following lines without that prefix are appended to its description,
      up to max_continuation_lines (extra lines are counted in raw_fields)
    - a line with the record's date prefix that fails the full pattern
      becomes a RowSkip
    - statement header lines give period and masked card number
    - footer markers (or end of input) close the statement
    Subclasses provide the patterns plus _column_header() and _match_record().
    """

    supported_formats = ("pdf",)

    header_patterns: ClassVar[Tuple[Pattern, ...]] = ()
    footer_re: ClassVar[Optional[Pattern]] = None
    noise_re: ClassVar[Pattern] = re.compile(
        r"^(page\s+\d+(\s+of\s+\d+)?|continued( on next page)?|стор\.?\s*\d+)$", re.IGNORECASE
    )
    period_re: ClassVar[Optional[Pattern]] = None
    card_re: ClassVar[Optional[Pattern]] = None

    probe_pages: ClassVar[int] = 1
    max_continuation_lines: ClassVar[int] = 4

    # ---- hooks -------------------------------------------------------------

    @abstractmethod
    def _column_header(self, line: str) -> Optional[Any]:
        """Layout context when `line` is the table's column header, else None."""

    @abstractmethod
    def _match_record(self, line: str, layout: Any) -> Optional[RecordStart]:
        ...

    def _has_record_prefix(self, line: str, layout: Any) -> bool:
        """True when `line` opens with a record date but did not match as a whole record."""
        return False

    def _continuation_text(self, line: str, layout: Any) -> str:
        return line.strip()

    # ---- probe -------------------------------------------------------------

    def supports(self, document: StatementDocument) -> bool:
        if document.kind != "pdf":
            return False
        try:
            lines = document.pdf_lines(max_pages=self.probe_pages)
        except InvalidInput:
            return False
        return self._has_header_markers("\n".join(lines))

    def _has_header_markers(self, text: str) -> bool:
        return bool(self.header_patterns) and all(p.search(text) for p in self.header_patterns)

    # ---- extraction --------------------------------------------------------

    def extract(self, document: StatementDocument) -> ExtractionBatch:
        lines = document.pdf_lines()
        if not self._has_header_markers("\n".join(lines)):
            logger.warning("%s: header markers not found in %s", self.id, document.filename or "<buffer>")

        summary = StatementSummary(institution=self.institution)
        outcomes: List[RowOutcome] = []
        state = ScanState.SEEK_HEADER
        layout: Any = None
        current: Optional[_OpenRecord] = None

        def flush() -> None:
            nonlocal current
            if current is not None:
                outcomes.append(self._finish(current))
            current = None

        for line_no, raw_line in enumerate(lines, start=1):
            line = raw_line.rstrip()
            stripped = line.strip()
            if not stripped:
                continue

            if state in (ScanState.SEEK_HEADER, ScanState.SEEK_FIRST_RECORD):
                self._collect_summary(stripped, summary)

            # a repeated column header means a new page of the same table
            header_layout = self._column_header(line)
            if header_layout is not None:
                flush()
                layout = header_layout
                state = ScanState.SEEK_FIRST_RECORD
                continue

            if state is ScanState.SEEK_HEADER:
                continue

            if self.footer_re is not None and self.footer_re.search(stripped):
                flush()
                state = ScanState.END_OF_STATEMENT
                break

            if self.noise_re.search(stripped):
                continue

            record = self._match_record(line, layout)
            if record is not None:
                flush()
                current = _OpenRecord(line_no=line_no, start=record)
                state = ScanState.ACCUMULATE
                continue

            # dated line whose amount or layout is off: skip it, never glue it on
            if self._has_record_prefix(line, layout):
                flush()
                outcomes.append(
                    RowSkip(
                        row=line_no,
                        reason=f"Unrecognized record line: {stripped[:80]!r}",
                        raw={"line": line_no, "text": stripped},
                    )
                )
                state = ScanState.ACCUMULATE
                continue

            if state is ScanState.SEEK_FIRST_RECORD:
                continue

            # ACCUMULATE / CONTINUATION: line without a date+amount prefix
            text = self._continuation_text(line, layout)
            if current is None or not HAS_LETTER_RE.search(text):
                logger.debug("%s: line %d ignored: %r", self.id, line_no, stripped[:60])
                continue
            if len(current.extra) >= self.max_continuation_lines:
                current.dropped += 1
                logger.warning(
                    "%s: record at line %d has more than %d continuation lines, dropped line %d: %r",
                    self.id, current.line_no, self.max_continuation_lines, line_no, stripped[:60],
                )
                continue
            current.extra.append(text)
            state = ScanState.CONTINUATION

        flush()

        if state is ScanState.SEEK_HEADER:
            logger.warning("%s: no transaction table found in %s", self.id, document.filename or "<buffer>")

        batch = batch_of(self.id, outcomes, summary=summary)
        for skip in batch.skipped:
            logger.warning("%s: record at line %d skipped: %s", self.id, skip.row, skip.reason)
        logger.info(
            "%s: %d transactions, %d skipped records (period=%s)",
            self.id, len(batch.transactions), len(batch.skipped), summary.period,
        )
        return batch

    def _collect_summary(self, line: str, summary: StatementSummary) -> None:
        if summary.period is None and self.period_re is not None:
            m = self.period_re.search(line)
            if m:
                summary.period = m.group(1).strip()
        if summary.card_number is None and self.card_re is not None:
            m = self.card_re.search(line)
            if m:
                summary.card_number = " ".join(m.group(1).split())

    def _finish(self, record: _OpenRecord) -> RowOutcome:
        start = record.start
        when = parse_flexible_date(start.date_text, self.config.date_format)
        if when is None:
            return RowSkip(row=record.line_no, reason=f"Invalid date: {start.date_text!r}", raw=record.raw())

        amount = try_parse_amount(start.amount_text)
        if amount is None:
            return RowSkip(row=record.line_no, reason=f"Invalid amount: {start.amount_text!r}", raw=record.raw())

        description = " ".join([start.description] + record.extra)
        return self._build_transaction(when, amount, description, currency=start.currency, raw=record.raw())
