from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, ClassVar, Iterable, List, Optional, Sequence, Tuple

from .amounts import determine_kind
from .categories import DEFAULT_RULES, CategoryRuleSet
from .document import StatementDocument
from .fingerprint import fingerprint
from .models import (
    ExtractionBatch,
    ExtractorConfig,
    ExtractorDescriptor,
    ParsedTransaction,
    RowSkip,
    ValidationIssue,
    ValidationResult,
)


class StatementExtractor(ABC):
    """
    Capability interface shared by every extractor.
    Implementations keep no per-document state on self, so one instance can
    serve concurrent callers.
    """

    id: ClassVar[str]
    name: ClassVar[str]
    institution: ClassVar[str]
    supported_formats: ClassVar[Tuple[str, ...]]

    def __init__(self, config: Optional[ExtractorConfig] = None, rules: CategoryRuleSet = DEFAULT_RULES):
        self.config = config if config is not None else self.default_config()
        self.rules = rules

    @classmethod
    def default_config(cls) -> ExtractorConfig:
        return ExtractorConfig()

    @abstractmethod
    def supports(self, document: StatementDocument) -> bool:
        """Cheap, side-effect free probe."""

    @abstractmethod
    def extract(self, document: StatementDocument) -> ExtractionBatch:
        ...

    @abstractmethod
    def format_description(self) -> str:
        ...

    def descriptor(self) -> ExtractorDescriptor:
        return ExtractorDescriptor(
            id=self.id,
            name=self.name,
            institution=self.institution,
            supported_formats=self.supported_formats,
            description=self.format_description(),
        )

    def validate(
        self, transactions: Sequence[ParsedTransaction], skipped: Iterable[RowSkip] = ()
    ) -> ValidationResult:
        return validate_transactions(transactions, skipped)

    def _build_transaction(
        self,
        when: datetime,
        signed_amount: float,
        description: str,
        currency: Optional[str] = None,
        raw: Any = None,
    ) -> ParsedTransaction:
        description = " ".join((description or "").split()) or "Unknown"
        return ParsedTransaction(
            date=when,
            amount=abs(signed_amount),
            kind=determine_kind(signed_amount, self.config.invert_sign),
            description=description,
            currency=(currency or self.config.currency).strip().upper(),
            merchant_name=description,
            category_guess=self.rules.detect(description),
            fingerprint=fingerprint(when, signed_amount, description),
            raw_fields=raw,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


def validate_transactions(
    transactions: Sequence[ParsedTransaction], skipped: Iterable[RowSkip] = ()
) -> ValidationResult:
    """
    - errors: empty result, missing date
    - warnings: zero amount, blank description, skipped rows
    """
    errors: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []

    if not transactions:
        errors.append(ValidationIssue(code="empty_result", message="No transactions found in document"))

    for i, t in enumerate(transactions, start=1):
        if t.date is None:
            errors.append(ValidationIssue(code="invalid_date", row=i, field="date", message="Invalid or missing date"))
        if t.amount == 0:
            warnings.append(ValidationIssue(code="zero_amount", row=i, field="amount", message="Transaction amount is zero"))
        if not t.description.strip():
            warnings.append(ValidationIssue(code="empty_description", row=i, field="description", message="Missing description"))

    for skip in skipped:
        warnings.append(ValidationIssue(code="unparseable_row", row=skip.row, message=f"Row skipped: {skip.reason}"))

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def batch_of(extractor_id: str, outcomes: Iterable[Any], summary=None) -> ExtractionBatch:
    """Splits per-row outcomes (ParsedTransaction | RowSkip) into a batch."""
    batch = ExtractionBatch(extractor_id=extractor_id, summary=summary)
    for outcome in outcomes:
        if isinstance(outcome, RowSkip):
            batch.skipped.append(outcome)
        else:
            batch.transactions.append(outcome)
    return batch
