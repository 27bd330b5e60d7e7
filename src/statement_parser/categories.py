"""
Keyword rule engine that guesses a spending category from a description.

Rule sets are immutable: extending one with `with_rule` / `add_category_rule`
returns a new set, so a set handed to an extractor never changes under it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel


class CategorySuggestion(BaseModel):
    category: str
    confidence: float


@dataclass(frozen=True)
class CategoryRule:
    category: str
    keywords: Tuple[str, ...]

    def match_count(self, lowered: str) -> int:
        return sum(1 for kw in self.keywords if kw.lower() in lowered)


@dataclass(frozen=True)
class CategoryRuleSet:
    rules: Tuple[CategoryRule, ...]

    def detect(self, description: Optional[str]) -> Optional[str]:
        """First rule in table order with any matching keyword."""
        if not description:
            return None
        lowered = description.lower()
        for rule in self.rules:
            if any(kw.lower() in lowered for kw in rule.keywords):
                return rule.category
        return None

    def confidence(self, description: Optional[str], category: str) -> float:
        if not description or not category:
            return 0.0
        for rule in self.rules:
            if rule.category == category:
                return _score(rule.match_count(description.lower()))
        return 0.0

    def suggest(self, description: Optional[str]) -> List[CategorySuggestion]:
        """Every matching rule, highest confidence first, ties in table order."""
        if not description:
            return []
        lowered = description.lower()
        suggestions = []
        for rule in self.rules:
            count = rule.match_count(lowered)
            if count > 0:
                suggestions.append(CategorySuggestion(category=rule.category, confidence=_score(count)))
        # sorted() is stable, so equal scores keep table order
        return sorted(suggestions, key=lambda s: -s.confidence)

    def with_rule(self, category: str, keywords: Iterable[str]) -> "CategoryRuleSet":
        keywords = tuple(keywords)
        rules = []
        found = False
        for rule in self.rules:
            if rule.category == category:
                rules.append(CategoryRule(category, rule.keywords + keywords))
                found = True
            else:
                rules.append(rule)
        if not found:
            rules.append(CategoryRule(category, keywords))
        return CategoryRuleSet(tuple(rules))

    def categories(self) -> List[str]:
        return [r.category for r in self.rules]


def _score(match_count: int) -> float:
    return min(round(match_count * 0.3, 10), 1.0)


DEFAULT_RULES = CategoryRuleSet(
    (
        CategoryRule(
            "Food & Dining",
            (
                "restaurant", "cafe", "coffee", "starbucks", "mcdonald", "burger",
                "pizza", "food", "dining", "delivery", "uber eats", "doordash",
                "grubhub", "postmates", "bakery", "bar", "pub", "lunch", "dinner",
            ),
        ),
        CategoryRule(
            "Shopping",
            (
                "amazon", "walmart", "target", "ebay", "store", "shop", "mall",
                "clothing", "shoes", "fashion", "retail", "purchase", "buy",
            ),
        ),
        CategoryRule(
            "Transport",
            (
                "uber", "lyft", "taxi", "gas", "fuel", "parking", "transit",
                "metro", "bus", "train", "airline", "flight", "car", "vehicle",
                "toll", "transportation",
            ),
        ),
        CategoryRule(
            "Bills & Utilities",
            (
                "electric", "water", "gas", "internet", "phone", "mobile",
                "utility", "bill", "payment", "insurance", "rent", "mortgage",
                "subscription", "netflix", "spotify", "hulu",
            ),
        ),
        CategoryRule(
            "Entertainment",
            (
                "movie", "cinema", "theater", "concert", "event", "ticket",
                "game", "gaming", "entertainment", "music", "streaming",
            ),
        ),
        CategoryRule(
            "Healthcare",
            (
                "pharmacy", "doctor", "hospital", "medical", "health", "dental",
                "clinic", "prescription", "medicine", "cvs", "walgreens",
            ),
        ),
        CategoryRule(
            "Education",
            (
                "school", "university", "college", "course", "tuition", "education",
                "book", "learning", "training", "udemy", "coursera",
            ),
        ),
        CategoryRule(
            "Salary",
            (
                "salary", "payroll", "wage", "income", "deposit", "direct dep",
                "payment received",
            ),
        ),
    )
)


def detect_category(description: Optional[str], rules: CategoryRuleSet = DEFAULT_RULES) -> Optional[str]:
    return rules.detect(description)


def suggested_categories(
    description: Optional[str], rules: CategoryRuleSet = DEFAULT_RULES
) -> List[CategorySuggestion]:
    return rules.suggest(description)


def category_confidence(
    description: Optional[str], category: str, rules: CategoryRuleSet = DEFAULT_RULES
) -> float:
    return rules.confidence(description, category)


def add_category_rule(
    category: str, keywords: Iterable[str], rules: CategoryRuleSet = DEFAULT_RULES
) -> CategoryRuleSet:
    return rules.with_rule(category, keywords)
