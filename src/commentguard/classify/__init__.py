"""
Classification module for commentguard.

Handles keyword tiering of comments and escalation to the external
classifier.
"""

from .rules import (
    classify,
    match_keywords,
    Tier,
    KeywordTables,
    KeywordMatch,
    KEYWORD_TABLES,
)
from .hybrid import ClassificationResult, classify_comment, classify_with_external, parse_response

__all__ = [
    "classify",
    "match_keywords",
    "Tier",
    "KeywordTables",
    "KeywordMatch",
    "KEYWORD_TABLES",
    "ClassificationResult",
    "classify_comment",
    "classify_with_external",
    "parse_response",
]
