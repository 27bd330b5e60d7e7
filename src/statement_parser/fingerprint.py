from __future__ import annotations

import hashlib
from datetime import date, datetime
from typing import Iterable, List, Set

from .models import ParsedTransaction


def normalize_description(description: str) -> str:
    return (description or "").strip().casefold()


def _iso(value: date) -> str:
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return value.isoformat(timespec="seconds")


def fingerprint(value_date: date, amount: float, description: str) -> str:
    """
    SHA256 hex of "{ISO date}|{amount:.2f}|{normalized description}".
    Identical triples always collide; that is what makes re-imports dedupe.
    """
    raw = f"{_iso(value_date)}|{amount:.2f}|{normalize_description(description)}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def filter_new(transactions: Iterable[ParsedTransaction], seen: Set[str]) -> List[ParsedTransaction]:
    """
    Drops transactions whose fingerprint is already in `seen` (the caller's
    per-user, per-institution set) and repeats within the same batch.
    `seen` itself is not modified.
    """
    batch_seen: Set[str] = set()
    fresh: List[ParsedTransaction] = []
    for t in transactions:
        if t.fingerprint in seen or t.fingerprint in batch_seen:
            continue
        batch_seen.add(t.fingerprint)
        fresh.append(t)
    return fresh
