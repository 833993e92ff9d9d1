"""
CLI entrypoint for commentguard.

Provides command-line interface for one-shot classification, probing the
local LLM, and watching a Telegram chat live.
"""

import sys
import os
import argparse
import asyncio
import logging
from typing import List

from dotenv import load_dotenv

from commentguard.capability import Availability, OllamaClassifier
from commentguard.config import EngineConfig, load_config
from commentguard.engine import CommentMonitor, ScanEngine
from commentguard.sinks import ConsoleSink, write_report
from commentguard.sources import StaticSource
from commentguard.telegram import TelegramSource, connect, create_client, parse_chat


# Load environment variables from .env file
load_dotenv()


def build_classifier(config: EngineConfig) -> OllamaClassifier:
    return OllamaClassifier(
        base_url=config.ollama_url,
        model=config.ollama_model,
        timeout=config.classify_timeout_s,
    )


def read_texts(args) -> List[str]:
    """Collect texts from --text values and/or a file (one per line, '-' for stdin)."""
    texts = list(args.text or [])

    if args.file:
        if args.file == "-":
            lines = sys.stdin.read().splitlines()
        else:
            with open(args.file, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        texts.extend(line for line in lines if line.strip())

    return texts


def print_summary(engine: ScanEngine) -> None:
    """Print classification summary to console."""
    stats = engine.get_stats()

    print("\n" + "=" * 60)
    print("CLASSIFICATION SUMMARY")
    print("=" * 60)

    print(f"\nMode: {'keywords + llm' if engine.external_enabled else 'keywords only'}")
    print(f"Total comments: {stats.total}")
    print(f"[SPAM] Spam: {stats.spam}")
    print(f"[SUSPICIOUS] Suspicious: {stats.suspicious}")
    print(f"[SAFE] Safe: {stats.safe}")


async def classify_command(args) -> int:
    """
    Execute the classify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"[ERROR] Failed to load configuration: {e}")
        return 1

    try:
        texts = read_texts(args)
    except OSError as e:
        print(f"[ERROR] Failed to read input: {e}")
        return 1

    if not texts:
        print("[ERROR] Nothing to classify (use --text or --file)")
        return 1

    classifier = None if args.no_llm else build_classifier(config)
    engine = ScanEngine(
        StaticSource.from_texts(texts),
        ConsoleSink(show_safe=args.show_safe, show_stats=False),
        config,
        classifier,
    )

    try:
        if classifier is not None:
            print(f"[INFO] Probing {config.ollama_model} at {config.ollama_url}...")
            await engine.start()
            if engine.external_enabled:
                print("[OK] LLM escalation enabled")
            else:
                print(f"[WARN] LLM unavailable ({engine.capability.state.value}), using keywords only")

        print(f"\n[INFO] Classifying {len(texts)} comment(s)")
        engine.scan()
        await engine.wait_idle()

        print_summary(engine)

        if args.report_dir:
            report_path = write_report(
                engine.get_stats(),
                engine.cache,
                args.report_dir,
                external_enabled=engine.external_enabled,
            )
            print(f"\n[REPORT] Report written to: {report_path}")

        return 0

    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Classification cancelled by user")
        return 130

    except Exception as e:
        print(f"\n[ERROR] Classification failed: {e}")
        logging.getLogger(__name__).debug("Classification failed", exc_info=True)
        return 1

    finally:
        await engine.close()


async def probe_command(args) -> int:
    """Execute the probe command."""
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"[ERROR] Failed to load configuration: {e}")
        return 1

    classifier = build_classifier(config)
    availability = await classifier.probe()

    if availability == Availability.AVAILABLE:
        print(f"[OK] {config.ollama_model} is available at {config.ollama_url}")
        return 0

    if availability == Availability.DOWNLOADABLE:
        print(f"[WARN] Ollama is running but {config.ollama_model} is not pulled")
        print(f"  Run: ollama pull {config.ollama_model}")
        return 1

    print(f"[ERROR] Ollama not reachable at {config.ollama_url}")
    return 1


async def watch_command(args) -> int:
    """
    Execute the watch command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, 1 for error)
    """
    # Load environment variables
    api_id = os.getenv("TG_API_ID")
    api_hash = os.getenv("TG_API_HASH")
    phone = os.getenv("TG_PHONE")
    session_dir = os.getenv("TG_SESSION_DIR", "./data/telegram_session")

    # Validate required environment variables
    if not api_id or not api_hash or not phone:
        print("[ERROR] Missing required environment variables.")
        print("\nPlease set the following in your .env file:")
        print("  - TG_API_ID")
        print("  - TG_API_HASH")
        print("  - TG_PHONE")
        print("\nGet API credentials from: https://my.telegram.org/apps")
        return 1

    try:
        api_id = int(api_id)
    except ValueError:
        print(f"[ERROR] Invalid TG_API_ID: '{api_id}' must be an integer")
        return 1

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"[ERROR] Failed to load configuration: {e}")
        return 1

    client = create_client(api_id, api_hash, phone, session_dir)
    classifier = None if args.no_llm else build_classifier(config)
    engine = None
    monitor = None
    source = None

    try:
        print("[INFO] Connecting to Telegram...")
        await connect(client)

        entity = await client.get_entity(parse_chat(args.chat))
        source = TelegramSource(client, entity, limit=args.limit)
        fetched = await source.refresh()
        print(f"[OK] Watching {args.chat} ({fetched} recent message(s))")

        engine = ScanEngine(source, ConsoleSink(show_safe=args.show_safe), config, classifier)
        monitor = CommentMonitor(engine)
        source.attach(monitor.notify_change)
        monitor.start(context_id=getattr(entity, "id", args.chat))

        # LLM comes up in the background; suspicious comments get re-analyzed when ready
        capability_task = asyncio.create_task(engine.start())

        await client.run_until_disconnected()
        await capability_task
        return 0

    except KeyboardInterrupt:
        print("\n\n[INTERRUPTED] Watch stopped by user")
        return 130

    except Exception as e:
        print(f"\n[ERROR] Watch failed: {e}")
        logging.getLogger(__name__).debug("Watch failed", exc_info=True)
        return 1

    finally:
        if monitor is not None:
            monitor.stop()
        if source is not None:
            source.detach()
        if engine is not None:
            await engine.close()
        await client.disconnect()


def main():
    """Main CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="commentguard - Spam triage for comment streams",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Classify a few comments with keywords only
  commentguard classify --no-llm --text "Buy now!" --text "Great explanation"

  # Classify a file, escalating keyword hits to the local LLM
  commentguard classify --file comments.txt --report-dir data/reports

  # Check the local LLM
  commentguard probe

  # Watch a Telegram chat
  commentguard watch --chat some_public_group

Environment Variables:
  OLLAMA_URL         Ollama server URL (default: http://localhost:11434)
  OLLAMA_MODEL       Model tag (default: llama3.2:3b)
  TG_API_ID          Telegram API ID (watch) - get from my.telegram.org
  TG_API_HASH        Telegram API hash (watch)
  TG_PHONE           Phone number for the monitoring account (watch)
  TG_SESSION_DIR     Session file directory (default: ./data/telegram_session)
        """,
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to commentguard.yaml (default: built-in settings)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # classify command
    classify_parser = subparsers.add_parser(
        "classify",
        help="Classify comments from the command line or a file",
    )

    classify_parser.add_argument(
        "--text",
        type=str,
        action="append",
        help="Comment text (repeatable)",
    )

    classify_parser.add_argument(
        "--file",
        type=str,
        help="File with one comment per line ('-' for stdin)",
    )

    classify_parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Keyword classification only",
    )

    classify_parser.add_argument(
        "--show-safe",
        action="store_true",
        help="Also print comments classified as safe",
    )

    classify_parser.add_argument(
        "--report-dir",
        type=str,
        default=None,
        help="Write a JSON report to this directory",
    )

    # probe command
    subparsers.add_parser(
        "probe",
        help="Check that the local LLM is reachable and pulled",
    )

    # watch command
    watch_parser = subparsers.add_parser(
        "watch",
        help="Watch a Telegram chat and classify messages live",
    )

    watch_parser.add_argument(
        "--chat",
        type=str,
        required=True,
        help="Chat id, public handle or link",
    )

    watch_parser.add_argument(
        "--limit",
        type=int,
        default=200,
        help="Recent messages to backfill (default: 200)",
    )

    watch_parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Keyword classification only",
    )

    watch_parser.add_argument(
        "--show-safe",
        action="store_true",
        help="Also print messages classified as safe",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "classify":
        return asyncio.run(classify_command(args))
    elif args.command == "probe":
        return asyncio.run(probe_command(args))
    elif args.command == "watch":
        return asyncio.run(watch_command(args))
    else:
        print(f"[ERROR] Unknown command: {args.command}")
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
