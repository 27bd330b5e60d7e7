from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional, Tuple

from .banks.privat import PrivatExtractor
from .banks.trustee import TrusteeExtractor
from .config import Settings, get_settings
from .document import StatementDocument
from .extractor import StatementExtractor
from .tabular import GenericCsvExtractor

logger = logging.getLogger(__name__)


class ExtractorRegistry:
    """
    Ordered set of extractors. Registration order is selection priority:
    institution-specific extractors go before the generic fallback.

    Mutations are serialized; readers work on a snapshot so a probe never
    sees a half-applied register/unregister.
    """

    def __init__(self, extractors: Iterable[StatementExtractor] = ()):
        self._lock = threading.Lock()
        self._extractors = {}
        for extractor in extractors:
            self.register(extractor)

    def register(self, extractor: StatementExtractor) -> None:
        with self._lock:
            if extractor.id in self._extractors:
                # dict keeps the original position, so priority is unchanged
                logger.warning('Extractor with id "%s" already registered. Overwriting.', extractor.id)
            self._extractors[extractor.id] = extractor
        logger.debug("Registered extractor: %s (%s)", extractor.name, extractor.id)

    def unregister(self, extractor_id: str) -> bool:
        with self._lock:
            return self._extractors.pop(extractor_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._extractors.clear()

    def _snapshot(self) -> Tuple[StatementExtractor, ...]:
        with self._lock:
            return tuple(self._extractors.values())

    def get(self, extractor_id: str) -> Optional[StatementExtractor]:
        with self._lock:
            return self._extractors.get(extractor_id)

    def all(self) -> List[StatementExtractor]:
        return list(self._snapshot())

    def by_institution(self, institution: str) -> List[StatementExtractor]:
        wanted = institution.lower()
        return [e for e in self._snapshot() if e.institution.lower() == wanted]

    def by_format(self, tag: str) -> List[StatementExtractor]:
        wanted = tag.lower()
        return [e for e in self._snapshot() if wanted in e.supported_formats]

    def supported_formats(self) -> List[str]:
        formats: List[str] = []
        for extractor in self._snapshot():
            for tag in extractor.supported_formats:
                if tag not in formats:
                    formats.append(tag)
        return formats

    def find_compatible(self, document: StatementDocument) -> Optional[StatementExtractor]:
        """First extractor, in registration order, whose probe accepts the document."""
        for extractor in self._snapshot():
            if extractor.supports(document):
                return extractor
        return None

    def __len__(self) -> int:
        return len(self._snapshot())

    def __contains__(self, extractor_id: object) -> bool:
        with self._lock:
            return extractor_id in self._extractors


def build_default_registry(settings: Optional[Settings] = None) -> ExtractorRegistry:
    """
    Registers the built-in extractors in priority order:
    Trustee PDF, PrivatBank PDF, generic CSV.
    """
    settings = settings or get_settings()
    return ExtractorRegistry(
        [
            TrusteeExtractor(),
            PrivatExtractor(),
            GenericCsvExtractor(settings.tabular_config()),
        ]
    )
