from __future__ import annotations

import csv
import io
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from .amounts import try_parse_amount
from .dates import parse_flexible_date
from .document import StatementDocument
from .errors import InvalidInput
from .extractor import StatementExtractor, batch_of
from .models import ExtractionBatch, ParsedTransaction, RowSkip, TabularConfig

logger = logging.getLogger(__name__)

ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")
CURRENCY_RE = re.compile(r"^[A-Za-z]{3}$")

RowOutcome = Union[ParsedTransaction, RowSkip]


class GenericCsvExtractor(StatementExtractor):
    id = "generic-csv"
    name = "Generic CSV Parser"
    institution = "Generic"
    supported_formats = ("csv",)

    config: TabularConfig

    @classmethod
    def default_config(cls) -> TabularConfig:
        return TabularConfig()

    def format_description(self) -> str:
        c = self.config
        return (
            f"Generic CSV format with columns: {c.date_column}, {c.amount_column}, "
            f"{c.description_column} (delimiter {c.delimiter!r})"
        )

    # ---- probe -------------------------------------------------------------

    def supports(self, document: StatementDocument) -> bool:
        if document.kind != "csv" or document.has_pdf_signature:
            return False

        try:
            text = _decode(document.content[: self.config.probe_bytes])
        except InvalidInput:
            return False

        # don't hand a half line to the trial parse
        if len(document.content) > self.config.probe_bytes and "\n" in text:
            text = text[: text.rfind("\n")]

        try:
            frame = self._read_frame(text, nrows=2)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError):
            return False

        if frame.empty:
            return False
        if self.config.has_header:
            wanted = {self.config.date_column, self.config.amount_column, self.config.description_column}
            return wanted.issubset(set(frame.columns))
        return True

    # ---- extraction --------------------------------------------------------

    def extract(self, document: StatementDocument) -> ExtractionBatch:
        if document.has_pdf_signature:
            raise InvalidInput(f"{document.filename or '<buffer>'} is a PDF, not a delimited text file")
        text = _decode(document.content)
        bad_lines: List[RowSkip] = []

        def on_bad_line(fields: List[str]) -> None:
            bad_lines.append(
                # pandas does not report the line number here
                RowSkip(row=0, reason=f"unexpected field count ({len(fields)})", raw=fields)
            )
            return None

        try:
            frame = self._read_frame(text, on_bad_lines=on_bad_line)
        except pd.errors.EmptyDataError:
            frame = pd.DataFrame()
        except pd.errors.ParserError as exc:
            raise InvalidInput(f"CSV parsing error in {document.filename or '<buffer>'}: {exc}") from exc

        outcomes: List[RowOutcome] = []
        for idx, record in enumerate(frame.to_dict("records"), start=1):
            outcome = self._parse_row(idx, record)
            if isinstance(outcome, RowSkip):
                logger.warning("Failed to parse row %s: %s", idx, outcome.reason)
            outcomes.append(outcome)

        for skip in bad_lines:
            logger.warning("Malformed CSV line skipped: %s", skip.raw)
        outcomes.extend(bad_lines)

        batch = batch_of(self.id, outcomes)
        logger.info(
            "%s: %d transactions, %d skipped rows from %s",
            self.id, len(batch.transactions), len(batch.skipped), document.filename or "<buffer>",
        )
        return batch

    def _read_frame(self, text: str, nrows: Optional[int] = None, on_bad_lines: Any = "error") -> pd.DataFrame:
        return pd.read_csv(
            io.StringIO(text),
            sep=self.config.delimiter,
            header=0 if self.config.has_header else None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            skipinitialspace=True,
            engine="python",
            nrows=nrows,
            on_bad_lines=on_bad_lines,
        )

    def _parse_row(self, row_number: int, record: Dict[Any, Any]) -> RowOutcome:
        c = self.config
        raw = {k: ("" if pd.isna(v) else str(v)) for k, v in record.items()}

        date_text = raw.get(c.date_column)
        amount_text = raw.get(c.amount_column)
        if date_text is None or amount_text is None:
            return RowSkip(row=row_number, reason="missing date or amount column", raw=raw)

        when = parse_flexible_date(date_text, c.date_format)
        if when is None:
            return RowSkip(row=row_number, reason=f"Invalid date: {date_text!r}", raw=raw)

        amount = try_parse_amount(amount_text)
        if amount is None:
            return RowSkip(row=row_number, reason=f"Invalid amount: {amount_text!r}", raw=raw)

        currency = c.currency
        if c.currency_column is not None:
            value = (raw.get(c.currency_column) or "").strip()
            if value:
                if not CURRENCY_RE.match(value):
                    return RowSkip(row=row_number, reason=f"Invalid currency: {value!r}", raw=raw)
                currency = value

        description = raw.get(c.description_column, "")
        return self._build_transaction(when, amount, description, currency=currency, raw=raw)

    # ---- serialization -----------------------------------------------------

    def to_csv(self, transactions: Sequence[ParsedTransaction]) -> str:
        """
        Writes the transactions' original rows back out with this extractor's
        delimiter and header settings. Parsing the output again yields the
        same transactions in the same order.
        """
        rows = [t.raw_fields for t in transactions if t.raw_fields is not None]
        frame = pd.DataFrame(rows)
        return frame.to_csv(
            sep=self.config.delimiter,
            index=False,
            header=self.config.has_header,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )


def _decode(content: bytes) -> str:
    if b"\x00" in content:
        raise InvalidInput("Binary content is not a delimited text document")
    for encoding in ENCODINGS:
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    raise InvalidInput("Could not decode CSV file with any known encoding")
