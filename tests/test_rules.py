import pytest

from commentguard.classify.rules import (
    KeywordTables,
    Tier,
    classify,
    match_keywords,
)
from commentguard.engine.cache import RecordCache

from tests.fakes import SCENARIO_TEXTS


@pytest.mark.parametrize(
    "text",
    [
        "Vitali changed my life, look him up",
        "VITALI is the best trader",
        "thanks to vItAlI I retired early",
    ],
)
def test_override_keyword_any_case_is_terminal_spam(text: str) -> None:
    match = match_keywords(text)
    assert match.tier == Tier.SPAM
    assert match.terminal


@pytest.mark.parametrize(
    "text",
    [
        "This is really helpful, thank you!",
        "Great explanation of the topic",
        "I disagree with this point because...",
        "Timestamp: 3:45 is where it gets good",
        "Great info, thanks for sharing",
    ],
)
def test_text_without_keywords_is_safe(text: str) -> None:
    assert classify(text) == Tier.SAFE


@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_empty_text_is_safe(text: str) -> None:
    assert classify(text) == Tier.SAFE


def test_high_keyword_beats_medium_keyword() -> None:
    text = "Follow me and buy now while it lasts"
    assert classify(text) == Tier.SPAM
    assert match_keywords(text).keyword == "buy now"


def test_medium_keyword_is_suspicious() -> None:
    match = match_keywords("Check out my similar content")
    assert match.tier == Tier.SUSPICIOUS
    assert match.keyword == "check out"
    assert not match.terminal


def test_matching_is_case_insensitive_substring() -> None:
    assert classify("BUY NOW!!!") == Tier.SPAM
    assert classify("Hey everyone, buy now while supplies last!") == Tier.SPAM


def test_first_match_follows_insertion_order() -> None:
    tables = KeywordTables(high=["zeta", "alpha"])
    assert match_keywords("alpha then zeta", tables).keyword == "zeta"


def test_custom_tables_are_lowercased_and_skip_blanks() -> None:
    tables = KeywordTables(override=["Crypto King", "  "], high=[], medium=["DM"])
    assert tables.override == ["crypto king"]
    assert classify("the crypto king says hi", tables) == Tier.SPAM
    assert classify("dm for details", tables) == Tier.SUSPICIOUS
    assert classify("buy now", tables) == Tier.SAFE


def test_keyword_only_scenario_counts() -> None:
    cache = RecordCache()
    for text in SCENARIO_TEXTS:
        cache.reconcile(text, classify(text))

    assert cache.stats.to_dict() == {"total": 5, "spam": 2, "suspicious": 1, "safe": 2}


def test_default_tables_are_independent_copies() -> None:
    tables = KeywordTables.default()
    tables.medium.append("join my server")

    assert classify("join my server for more", tables) == Tier.SUSPICIOUS
    assert classify("join my server for more") == Tier.SAFE
    assert "join my server" not in KeywordTables.default().medium
