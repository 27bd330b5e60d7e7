from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class TransactionKind(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class ParsedTransaction(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: datetime = Field(..., description="Document-local date and time, no tz conversion")
    amount: float = Field(..., ge=0, description="Magnitude only. Sign lives in kind")
    kind: TransactionKind = Field(..., serialization_alias="type")
    description: str
    currency: str = Field(..., pattern=r"^[A-Z]{3}$")
    merchant_name: Optional[str] = Field(None, serialization_alias="merchantName")
    category_guess: Optional[str] = Field(None, serialization_alias="categoryGuess")
    fingerprint: str
    raw_fields: Optional[Dict[Union[str, int], Any]] = Field(None, serialization_alias="rawFields")

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict, dates as ISO-8601 strings."""
        return self.model_dump(mode="json", by_alias=True)


class ExtractorConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: str = "USD"
    invert_sign: bool = False
    date_format: Optional[str] = Field(None, description="strptime format tried before the common list")


class TabularConfig(ExtractorConfig):
    date_column: Union[str, int] = "Date"
    amount_column: Union[str, int] = "Amount"
    description_column: Union[str, int] = "Description"
    currency_column: Optional[Union[str, int]] = None
    delimiter: str = ","
    has_header: bool = True
    probe_bytes: int = 1024


class ExtractorDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    institution: str
    supported_formats: Tuple[str, ...]
    description: str = ""


class ValidationIssue(BaseModel):
    code: str
    message: str
    row: Optional[int] = None
    field: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)


class RowSkip(BaseModel):
    row: int = Field(..., description="1-based data row or text line number, 0 when unknown")
    reason: str
    raw: Optional[Any] = None


class StatementSummary(BaseModel):
    institution: str
    period: Optional[str] = None
    card_number: Optional[str] = None


class ExtractionBatch(BaseModel):
    extractor_id: str
    transactions: List[ParsedTransaction] = Field(default_factory=list)
    skipped: List[RowSkip] = Field(default_factory=list)
    summary: Optional[StatementSummary] = None

    def to_payload(self) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
        """
        Wire shape:
        - positional-text sources (summary present): {transactions, period, cardNumber}
        - tabular sources: flat list of transactions
        """
        rows = [t.to_wire() for t in self.transactions]
        if self.summary is None:
            return rows
        return {
            "transactions": rows,
            "period": self.summary.period,
            "cardNumber": self.summary.card_number,
        }
