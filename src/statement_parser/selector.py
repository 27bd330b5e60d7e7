from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Union

from .document import StatementDocument
from .errors import ExtractorNotFound, NoCompatibleExtractor, UnsupportedDocument
from .extractor import validate_transactions
from .models import (
    ExtractionBatch,
    ExtractorDescriptor,
    ParsedTransaction,
    RowSkip,
    ValidationResult,
)
from .registry import ExtractorRegistry

logger = logging.getLogger(__name__)


class ExtractorSelector:
    """
    Picks an extractor for a document and runs it.
    - parse(): auto-detect through the registry probes
    - parse_with(): a user-forced bank profile, still probed
    """

    def __init__(self, registry: ExtractorRegistry):
        self.registry = registry

    def parse_batch(self, document: StatementDocument) -> ExtractionBatch:
        extractor = self.registry.find_compatible(document)
        if extractor is None:
            raise NoCompatibleExtractor(document.filename or "<buffer>", self.registry.supported_formats())

        logger.info("Using extractor: %s for file: %s", extractor.name, document.filename or "<buffer>")
        return extractor.extract(document)

    def parse(self, document: StatementDocument) -> List[ParsedTransaction]:
        return self.parse_batch(document).transactions

    def parse_batch_with(self, document: StatementDocument, extractor_id: str) -> ExtractionBatch:
        extractor = self.registry.get(extractor_id)
        if extractor is None:
            raise ExtractorNotFound(extractor_id)

        if not extractor.supports(document):
            raise UnsupportedDocument(extractor.id, extractor.name, document.filename or "<buffer>")

        logger.info("Using requested extractor: %s for file: %s", extractor.name, document.filename or "<buffer>")
        return extractor.extract(document)

    def parse_with(self, document: StatementDocument, extractor_id: str) -> List[ParsedTransaction]:
        return self.parse_batch_with(document, extractor_id).transactions

    def validate(
        self,
        result: Union[ExtractionBatch, Sequence[ParsedTransaction]],
        skipped: Iterable[RowSkip] = (),
    ) -> ValidationResult:
        if isinstance(result, ExtractionBatch):
            return validate_transactions(result.transactions, list(result.skipped) + list(skipped))
        return validate_transactions(result, skipped)

    def supported_formats(self) -> List[str]:
        return self.registry.supported_formats()

    def available_extractors(self) -> List[ExtractorDescriptor]:
        return [e.descriptor() for e in self.registry.all()]
