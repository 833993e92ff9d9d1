"""
Keyword rules for commentguard.

Defines the three ordered keyword tables used for the fast first-pass
classification of comments:

- override: trusted denylist, forces a terminal Spam verdict
- high: maps to Spam (still subject to confirmation)
- medium: maps to Suspicious

Matching is a case-insensitive substring test. English-only (EN).
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Sequence


class Tier(str, enum.Enum):
    """Classification outcome."""
    SPAM = "spam"
    SUSPICIOUS = "suspicious"
    SAFE = "safe"


# Default keyword tables, evaluated in list order
KEYWORD_TABLES = {
    "override": [
        # Known scam persona names
        "vitali",
    ],
    "high": [
        # Money / urgency
        "buy now", "click here", "free money", "make money fast", "earn cash",
        "get rich", "claim your prize", "limited time offer", "act now",
        # Self promotion
        "subscribe to my channel", "check out my channel", "sub4sub",
        # Off-platform contact
        "onlyfans", "whatsapp me", "text me at",
    ],
    "medium": [
        "telegram", "dm me", "check out", "visit my", "link in bio",
        "click link", "follow me", "check my channel", "new video",
        "sub back", "subscribe",
    ],
}


@dataclass
class KeywordTables:
    """Ordered override/high/medium keyword lists (stored lowercase)."""
    override: List[str] = field(default_factory=list)
    high: List[str] = field(default_factory=list)
    medium: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.override = _normalize_keywords(self.override)
        self.high = _normalize_keywords(self.high)
        self.medium = _normalize_keywords(self.medium)

    @classmethod
    def default(cls) -> "KeywordTables":
        return cls(
            override=list(KEYWORD_TABLES["override"]),
            high=list(KEYWORD_TABLES["high"]),
            medium=list(KEYWORD_TABLES["medium"]),
        )


@dataclass
class KeywordMatch:
    """Result of the keyword pass for a single text."""
    tier: Tier
    keyword: Optional[str] = None
    table: Optional[str] = None

    @property
    def terminal(self) -> bool:
        """True for override matches, which are never escalated."""
        return self.table == "override"


def _normalize_keywords(keywords: Sequence[str]) -> List[str]:
    # Blank entries would match every text
    return [k.lower() for k in keywords if k and k.strip()]


def _first_match(text_lower: str, keywords: Sequence[str]) -> Optional[str]:
    for keyword in keywords:
        if keyword in text_lower:
            return keyword
    return None


def match_keywords(text: str, tables: Optional[KeywordTables] = None) -> KeywordMatch:
    """
    Run the keyword pass over a text.

    Args:
        text: Comment text
        tables: Keyword tables (defaults to KEYWORD_TABLES)

    Returns:
        KeywordMatch with the tier and the first matching keyword, if any
    """
    if not text or not text.strip():
        return KeywordMatch(tier=Tier.SAFE)

    if tables is None:
        tables = KeywordTables.default()

    text_lower = text.lower()

    for table_name, tier in (
        ("override", Tier.SPAM),
        ("high", Tier.SPAM),
        ("medium", Tier.SUSPICIOUS),
    ):
        keyword = _first_match(text_lower, getattr(tables, table_name))
        if keyword is not None:
            return KeywordMatch(tier=tier, keyword=keyword, table=table_name)

    return KeywordMatch(tier=Tier.SAFE)


def classify(text: str, tables: Optional[KeywordTables] = None) -> Tier:
    """Classify a text by keywords alone."""
    return match_keywords(text, tables).tier
