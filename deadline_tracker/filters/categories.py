"""Keyword-based category assignment for scraped deadlines."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern

from deadline_tracker.scraper.models import (
    ACADEMIC,
    ADD_DROP,
    FINANCIAL_AID,
    OTHER,
    REGISTRATION,
)


@dataclass(frozen=True)
class CategoryRule:
    name: str
    pattern: Pattern[str]


# First match wins; registration must stay ahead of the fee keywords.
DEFAULT_RULES = (
    CategoryRule(REGISTRATION, re.compile(r"registration|register|enroll")),
    CategoryRule(ADD_DROP, re.compile(r"add|drop|withdrawal|change.*course")),
    CategoryRule(
        FINANCIAL_AID,
        re.compile(r"financial aid|payment|tuition|fee|u[-\s]?pass|upass"),
    ),
    CategoryRule(
        ACADEMIC,
        re.compile(
            r"grades? due|grades? available|gpa|s/ns|pass/fail|incomplete|final grades"
            r"|first day of instruction|last day of instruction|start of instruction"
            r"|classes begin|classes start|classes end|end of term"
        ),
    ),
)

SLUG_CATEGORIES = (
    ("application-deadlines", REGISTRATION),
    ("registration-deadlines", REGISTRATION),
    ("grade-deadlines", ACADEMIC),
    ("dates-of-instruction", ACADEMIC),
    ("tuition-fee-assessment", FINANCIAL_AID),
    ("u-pass", FINANCIAL_AID),
)


def categorize(
    event_text: Optional[str],
    heading_text: Optional[str],
    rules: Iterable[CategoryRule] = DEFAULT_RULES,
) -> str:
    """Return the first rule name matching the title plus table heading."""
    combined = f"{event_text or ''} {heading_text or ''}".lower()
    for rule in rules:
        if rule.pattern.search(combined):
            return rule.name
    return OTHER


def category_from_slug(slug: Optional[str]) -> str:
    """Default category implied by a calendar page slug."""
    if not slug:
        return OTHER
    for fragment, category in SLUG_CATEGORIES:
        if fragment in slug:
            return category
    return OTHER
