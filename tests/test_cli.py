import json
import sys

import pytest

from commentguard import cli
from commentguard.config import EngineConfig

from tests.fakes import SCENARIO_TEXTS


def run_cli(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["commentguard", *argv])
    return cli.main()


def test_classify_keywords_only_with_report(monkeypatch, capsys, tmp_path) -> None:
    comments = tmp_path / "comments.txt"
    comments.write_text("\n".join(SCENARIO_TEXTS) + "\n\n", encoding="utf-8")
    report_dir = tmp_path / "reports"

    code = run_cli(
        monkeypatch,
        "classify", "--no-llm",
        "--file", str(comments),
        "--report-dir", str(report_dir),
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "Mode: keywords only" in out
    assert "Total comments: 5" in out
    assert "[SPAM] Spam: 2" in out
    assert "[SUSPICIOUS] Suspicious: 1" in out
    assert "[SAFE] Safe: 2" in out

    reports = list(report_dir.glob("classification_report_*.json"))
    assert len(reports) == 1
    report = json.loads(reports[0].read_text(encoding="utf-8"))
    assert report["summary"] == {"total": 5, "spam": 2, "suspicious": 1, "safe": 2}
    assert report["external_enabled"] is False
    assert {r["tier"] for r in report["records"]} == {"spam", "suspicious", "safe"}


def test_classify_requires_input(monkeypatch, capsys) -> None:
    assert run_cli(monkeypatch, "classify", "--no-llm") == 1
    assert "Nothing to classify" in capsys.readouterr().out


def test_classify_with_bad_config(monkeypatch, capsys, tmp_path) -> None:
    config = tmp_path / "bad.yaml"
    config.write_text("batch_size: 0\n", encoding="utf-8")

    code = run_cli(monkeypatch, "--config", str(config), "classify", "--no-llm", "--text", "hi")

    assert code == 1
    assert "Failed to load configuration" in capsys.readouterr().out


def test_watch_requires_telegram_credentials(monkeypatch, capsys) -> None:
    for name in ("TG_API_ID", "TG_API_HASH", "TG_PHONE"):
        monkeypatch.delenv(name, raising=False)

    assert run_cli(monkeypatch, "watch", "--chat", "somechat") == 1
    assert "Missing required environment variables" in capsys.readouterr().out


def test_no_command_prints_help(monkeypatch, capsys) -> None:
    assert run_cli(monkeypatch) == 1
    assert "classify" in capsys.readouterr().out


def test_null_timeout_reaches_classifier() -> None:
    classifier = cli.build_classifier(EngineConfig(classify_timeout_s=None))
    assert classifier.timeout is None

    classifier = cli.build_classifier(EngineConfig(classify_timeout_s=5.0))
    assert classifier.timeout == 5.0
