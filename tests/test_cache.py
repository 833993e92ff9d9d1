import random

from commentguard.classify.rules import Tier
from commentguard.engine.cache import RecordCache, ReconcileOutcome, fingerprint


def assert_consistent(cache: RecordCache) -> None:
    stats = cache.stats
    assert stats.total == stats.spam + stats.suspicious + stats.safe
    assert stats.total == len(cache)
    for tier in Tier:
        assert getattr(stats, tier.value) == len(cache.by_tier(tier))


def test_fingerprint_strips_but_keeps_case() -> None:
    assert fingerprint("  Buy Now!  \n") == "Buy Now!"
    assert fingerprint(None) == ""


def test_insert_counts_total_and_tier() -> None:
    cache = RecordCache()
    outcome = cache.reconcile("hello", Tier.SAFE, source_handle="h1")

    assert outcome == ReconcileOutcome.INSERTED
    assert cache.stats.to_dict() == {"total": 1, "spam": 0, "suspicious": 0, "safe": 1}
    record = cache.get("hello")
    assert record.source_handle == "h1"
    assert record.updated_at is not None


def test_suspicious_to_safe_moves_counters_keeps_total() -> None:
    cache = RecordCache()
    cache.reconcile("check out my stuff", Tier.SUSPICIOUS, source_handle="h1")

    outcome = cache.reconcile("check out my stuff", Tier.SAFE, from_escalation=True, epoch=cache.epoch)

    assert outcome == ReconcileOutcome.RECLASSIFIED
    assert cache.stats.to_dict() == {"total": 1, "spam": 0, "suspicious": 0, "safe": 1}
    assert cache.get("check out my stuff").source_handle == "h1"


def test_same_tier_is_unchanged() -> None:
    cache = RecordCache()
    cache.reconcile("x", Tier.SPAM)
    assert cache.reconcile("x", Tier.SPAM) == ReconcileOutcome.UNCHANGED
    assert cache.stats.spam == 1


def test_escalation_for_missing_record_is_stale() -> None:
    cache = RecordCache()
    outcome = cache.reconcile("gone", Tier.SPAM, from_escalation=True)

    assert outcome == ReconcileOutcome.STALE
    assert len(cache) == 0
    assert cache.stats.total == 0


def test_escalation_from_previous_epoch_is_stale() -> None:
    cache = RecordCache()
    cache.reconcile("again", Tier.SUSPICIOUS)
    old_epoch = cache.epoch
    cache.clear()
    cache.reconcile("again", Tier.SUSPICIOUS)

    outcome = cache.reconcile("again", Tier.SAFE, from_escalation=True, epoch=old_epoch)

    assert outcome == ReconcileOutcome.STALE
    assert cache.get("again").tier == Tier.SUSPICIOUS


def test_locked_record_ignores_escalation() -> None:
    cache = RecordCache()
    cache.reconcile("vitali", Tier.SPAM, locked=True)

    outcome = cache.reconcile("vitali", Tier.SAFE, from_escalation=True, epoch=cache.epoch)

    assert outcome == ReconcileOutcome.UNCHANGED
    assert cache.get("vitali").tier == Tier.SPAM


def test_clear_resets_everything() -> None:
    cache = RecordCache()
    for i in range(4):
        cache.reconcile(f"text {i}", Tier.SPAM)

    cache.clear()

    assert len(cache) == 0
    assert cache.stats.to_dict() == {"total": 0, "spam": 0, "suspicious": 0, "safe": 0}
    assert cache.epoch == 1


def test_invariant_holds_after_mixed_operations() -> None:
    rng = random.Random(1234)
    cache = RecordCache()
    texts = [f"comment {i}" for i in range(30)]
    tiers = list(Tier)

    for _ in range(500):
        op = rng.random()
        text = rng.choice(texts)
        tier = rng.choice(tiers)
        if op < 0.5:
            cache.reconcile(text, tier)
        elif op < 0.95:
            cache.reconcile(text, tier, from_escalation=True, epoch=cache.epoch)
        else:
            cache.clear()
        assert_consistent(cache)
