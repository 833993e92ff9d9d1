"""
Presentation sinks and run reports.

The engine never touches presentation state itself. It tells a sink which
handle got which tier, when all markers must go, and what the stats are.
"""

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, Protocol

from .classify.rules import Tier
from .engine.cache import Record, Stats


class PresentationSink(Protocol):
    def apply(self, source_handle: Any, tier: Tier) -> None:
        ...

    def clear_all(self) -> None:
        ...

    def update_stats(self, stats: Stats, external_enabled: bool) -> None:
        ...


TAGS = {
    Tier.SPAM: "[SPAM]",
    Tier.SUSPICIOUS: "[SUSPICIOUS]",
    Tier.SAFE: "[SAFE]",
}


class ConsoleSink:
    """
    Prints markers to the console.

    Keeps the current marker per handle so repeated applies of the same
    tier are printed once. Safe markers are only printed when show_safe is set.
    """

    def __init__(self, show_safe: bool = False, show_stats: bool = True):
        self.show_safe = show_safe
        self.show_stats = show_stats
        self.marks: Dict[Any, Tier] = {}
        self.last_stats = Stats()

    def apply(self, source_handle: Any, tier: Tier) -> None:
        if self.marks.get(source_handle) == tier:
            return
        self.marks[source_handle] = tier

        if tier == Tier.SAFE and not self.show_safe:
            return
        print(f"   {TAGS[tier]} {source_handle}")

    def clear_all(self) -> None:
        self.marks.clear()

    def update_stats(self, stats: Stats, external_enabled: bool) -> None:
        if stats == self.last_stats:
            return
        self.last_stats = stats.copy()

        if self.show_stats:
            mode = "llm" if external_enabled else "keywords"
            print(
                f"[STATS] total={stats.total} spam={stats.spam} "
                f"suspicious={stats.suspicious} safe={stats.safe} ({mode})"
            )


def write_report(
    stats: Stats,
    records: Iterable[Record],
    report_dir: str,
    external_enabled: bool = False,
) -> str:
    """
    Write a classification report to a JSON file.

    Args:
        stats: Stats snapshot
        records: Cached records
        report_dir: Report directory path
        external_enabled: Whether the external classifier was used

    Returns:
        Path to report file
    """
    Path(report_dir).mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    report_path = os.path.join(report_dir, f"classification_report_{timestamp}.json")

    report = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "external_enabled": external_enabled,
        "summary": stats.to_dict(),
        "records": [
            {
                "text": record.fingerprint,
                "tier": record.tier.value,
                "handle": record.source_handle,
                "locked": record.locked,
                "updated_at": record.updated_at.isoformat() if record.updated_at else None,
            }
            for record in records
        ],
    }

    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False, default=str)

    return report_path
