"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

import orjson

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config, Config
from src.logging_conf import setup_logging
from src.jobs.runner import build_runner

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Mercado Livre complete sales sync")

    parser.add_argument(
        "--account",
        required=True,
        help="Integration account id (any label when using ML_ACCESS_TOKEN)",
    )
    parser.add_argument(
        "--date-from",
        default=None,
        help="Only orders created at or after this ISO-8601 date",
    )
    parser.add_argument(
        "--date-to",
        default=None,
        help="Only orders created at or before this ISO-8601 date",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=config.DEFAULT_LIMIT,
        help=f"Maximum orders fetched (default: {config.DEFAULT_LIMIT})",
    )

    # Mode flags
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Enrich only, write nothing",
    )
    parser.add_argument(
        "--local",
        action="store_true",
        help="Write to the local SQLite store instead of Supabase",
    )

    # Performance arguments
    parser.add_argument(
        "--order-concurrency",
        type=int,
        default=None,
        help=f"Orders enriched at the same time (default: {config.ORDER_CONCURRENCY})",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help=f"Extra attempts per upstream call (default: {config.MAX_RETRIES})",
    )
    parser.add_argument(
        "--output",
        choices=["summary", "json"],
        default="summary",
        help="Print a summary or the full result as JSON",
    )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    setup_logging()
    args = parse_args(argv)

    if args.max_retries is not None:
        config.MAX_RETRIES = args.max_retries

    has_supabase = bool(config.SUPABASE_URL and config.SUPABASE_SERVICE_ROLE)
    try:
        Config.validate(require_supabase=False, require_token=not has_supabase)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Complete Sales Sync Starting")
    logger.info(f"Account: {args.account}")
    logger.info(f"Dates: {args.date_from or '-'} .. {args.date_to or '-'}")
    logger.info(f"Limit: {args.limit}")
    logger.info(f"Order concurrency: {args.order_concurrency or config.ORDER_CONCURRENCY}")
    logger.info(f"Dry-run: {args.dry_run}")
    logger.info("=" * 60)

    runner = build_runner(
        dry_run=args.dry_run,
        local=args.local,
        order_concurrency=args.order_concurrency,
    )
    try:
        result = asyncio.run(
            runner.run_batch(args.account, args.date_from, args.date_to, args.limit)
        )
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)

    if args.output == "json":
        sys.stdout.write(orjson.dumps(result.to_response(), option=orjson.OPT_INDENT_2).decode() + "\n")
    elif result.success:
        print(f"{result.count} sales synced in {result.duration_ms}ms")
        print(f"Endpoints: {', '.join(result.endpoints_accessed)}")
        if result.failed_orders:
            print(f"Skipped orders: {', '.join(result.failed_orders)}")
        if result.section_errors:
            print(f"Section errors: {result.section_errors}")
    else:
        print(f"Sync failed: {result.error}", file=sys.stderr)

    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
