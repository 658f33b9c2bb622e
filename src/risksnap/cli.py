"""Command-line interface for landing-page risk snapshots."""

import sys
import json
import logging
from typing import Optional

from risksnap.config import RiskThresholds, settings
from risksnap.constants import CATEGORY_LABELS
from risksnap.database import get_store
from risksnap.errors import RiskSnapshotError
from risksnap.fetcher import PageFetcher, normalize_url
from risksnap.logging_config import setup_logging
from risksnap.models import SnapshotRecord
from risksnap.snapshot import RiskSnapshotService

logger = logging.getLogger(__name__)

RISK_ICONS = {"low": "🟢", "moderate": "🟡", "high": "🔴"}


def print_risk_snapshot(record: SnapshotRecord):
    """Print a risk snapshot in a formatted way.

    Args:
        record: Snapshot to print
    """
    result = record.result

    print(f"\n{'=' * 60}")
    print(f"Risk Snapshot for: {result.url}")
    print(f"{'=' * 60}")
    print(f"\n{RISK_ICONS.get(result.overall_risk, '')} Overall Risk: {result.overall_risk.upper()}")

    print(f"\nRisk Breakdown:")
    for key, category in result.risk_breakdown.items():
        print(f"  {RISK_ICONS.get(category.level, '')} {CATEGORY_LABELS.get(key, key)}: {category.level}")
        print(f"      {category.explanation}")
        for signal in category.signals:
            print(f"      - {signal}")

    if result.strengths:
        print(f"\n✅ Strengths:")
        for strength in result.strengths:
            print(f"  • {strength}")

    if result.issues:
        print(f"\n⚠️  Issues:")
        for issue in result.issues:
            print(f"  • [{issue.priority}] {issue.category}: {issue.issue}")

    if result.recommendations:
        print(f"\n💡 Recommendations:")
        for rec in result.recommendations:
            print(f"  • ({rec.effort}) {rec.recommendation}")

    if record.id is not None:
        print(f"\nSaved as snapshot #{record.id}")

    print(f"\n{'=' * 60}\n")


def _write_json(payload, output_file: Optional[str]):
    output = json.dumps(payload, indent=2, default=str)
    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def analyze_command(args):
    """Analyze one or more URLs and report their risk snapshot."""
    thresholds = (
        RiskThresholds.from_file(args.thresholds)
        if args.thresholds
        else RiskThresholds.from_env()
    )
    try:
        store = get_store(args.db_url) if args.save else None
    except (RiskSnapshotError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    service = RiskSnapshotService(
        fetcher=PageFetcher(user_agent=settings.USER_AGENT, timeout=args.timeout),
        store=store,
        thresholds=thresholds,
    )

    results = []
    failures = 0
    try:
        for url in args.urls:
            try:
                record = service.analyze_url(url, save=args.save)
            except RiskSnapshotError as e:
                failures += 1
                logger.error(f"Analysis of {url} failed: {e}")
                if args.output == "text":
                    print(f"\n❌ Analysis failed for {url}: {e}. Please check the URL and retry.")
                else:
                    results.append({"url": url, "error": str(e)})
                continue

            if args.output == "text":
                print_risk_snapshot(record)
            else:
                results.append(record.to_dict())
    finally:
        if store:
            store.close()

    if args.output == "json":
        _write_json(results, args.output_file)

    if failures:
        sys.exit(1)


def history_command(args):
    """Show stored snapshots for a URL."""
    try:
        url = normalize_url(args.url)
        store = get_store(args.db_url)
    except (RiskSnapshotError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)

    try:
        records = store.get_snapshots_for_url(url)
    except RiskSnapshotError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        store.close()

    if not records:
        print(f"No stored snapshots found for: {url}")
        sys.exit(0)

    if args.output == "json":
        _write_json([record.to_dict() for record in records], args.output_file)
    else:
        print(f"\n{'=' * 60}")
        print(f"Snapshot History for: {url}")
        print(f"{'=' * 60}\n")

        for record in records:
            levels = record.result.category_levels()
            print(f"#{record.id}  {record.created_at:%Y-%m-%d %H:%M}  overall: {record.result.overall_risk}")
            for key, level in levels.items():
                print(f"    {CATEGORY_LABELS.get(key, key)}: {level}")
            print(f"    Issues: {len(record.result.issues)}")
            print("-" * 30)


def main():
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Risk Snapshot - assess landing-page risk from its HTML markup"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    analyze_parser = subparsers.add_parser(
        "analyze", help="Analyze one or more landing pages."
    )
    analyze_parser.add_argument(
        "urls", nargs="+", help="URLs to analyze (scheme optional, https assumed)"
    )
    analyze_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    analyze_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    analyze_parser.add_argument(
        "--save",
        action="store_true",
        help="Store results in the snapshot database",
    )
    analyze_parser.add_argument(
        "--db-url",
        help="Snapshot database URL (default: DATABASE_URL or sqlite:///risk_snapshots.db)",
    )
    analyze_parser.add_argument(
        "--thresholds",
        help="JSON file with custom rule thresholds",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=int,
        default=settings.FETCH_TIMEOUT,
        help=f"Fetch timeout in seconds (default: {settings.FETCH_TIMEOUT})",
    )
    analyze_parser.set_defaults(func=analyze_command)

    history_parser = subparsers.add_parser(
        "history", help="Show stored snapshots for a URL."
    )
    history_parser.add_argument("url", help="The analyzed URL")
    history_parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    history_parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )
    history_parser.add_argument(
        "--db-url",
        help="Snapshot database URL (default: DATABASE_URL or sqlite:///risk_snapshots.db)",
    )
    history_parser.set_defaults(func=history_command)

    args = parser.parse_args()

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
