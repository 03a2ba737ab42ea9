#!/usr/bin/env python3
"""
Command-line interface for the red-zone stats pipeline.

Usage:
    redzone-stats init                              # Apply database migrations
    redzone-stats refresh --season 2024 --week 5    # Recompute and store a week
    redzone-stats refresh --season 2024 --week 5 --json
    redzone-stats show --season 2024 --week 5       # Print stored rows
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from .core.config import Settings, get_settings

logger = logging.getLogger("redzone_stats.cli")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def get_db(settings: Settings):
    """Get an async database connection manager."""
    from .pg_async import AsyncPostgresDB

    return AsyncPostgresDB(
        connection_string=settings.db_url or None,
        max_pool_size=settings.database_pool_size,
    )


async def cmd_init_async(args: argparse.Namespace, settings: Settings) -> int:
    """Apply pending migrations."""
    from .schema import run_migrations

    async with get_db(settings) as db:
        applied = await run_migrations(db, force=args.force)
    logger.info("Database ready (%d migration(s) applied)", applied)
    return 0


async def cmd_refresh_async(args: argparse.Namespace, settings: Settings) -> int:
    """Recompute red-zone stats for one week."""
    from .redzone.refresh import refresh_red_zone_stats

    result = await refresh_red_zone_stats(args.season, args.week, settings=settings)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, default=str))
    else:
        status = "OK" if result.success else "FAILED"
        print(f"\nRed zone refresh {args.season} week {args.week}: {status}")
        print("=" * 50)
        print(f"Games found:   {result.games_found}")
        print(f"Games failed:  {result.games_failed}")
        print(f"Drives:        {result.drives_counted}")
        print(f"Teams written: {result.record_count}")
        print(f"Duration:      {result.duration_seconds:.1f}s")
        for warning in result.warnings:
            print(f"  warning: {warning}")
        if result.error:
            print(f"Error: {result.error}")

    return 0 if result.success else 1


async def cmd_show_async(args: argparse.Namespace, settings: Settings) -> int:
    """Print the stored rows for one week."""
    from .repositories import get_repository

    async with get_db(settings) as db:
        rows = await get_repository(db).find_week(args.season, args.week)

    if not rows:
        print(f"No red zone stats stored for {args.season} week {args.week}")
        return 0

    print(f"\n{args.season} week {args.week} - Red zone")
    print("=" * 72)
    print(f"{'Team':<6}{'Att':>5}{'TD':>5}{'FG':>5}{'TD%':>9}   {'OppAtt':>7}{'OppTD':>6}{'OppFG':>6}{'OppTD%':>9}")
    for r in rows:
        td_rate = f"{r.td_rate}" if r.td_rate is not None else "-"
        opp_rate = f"{r.opp_td_rate}" if r.opp_td_rate is not None else "-"
        print(
            f"{r.team_abbreviation:<6}{r.attempts:>5}{r.touchdowns:>5}{r.field_goals:>5}{td_rate:>9}   "
            f"{r.opp_attempts:>7}{r.opp_touchdowns:>6}{r.opp_field_goals:>6}{opp_rate:>9}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redzone-stats",
        description="NFL red zone stats CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Apply database migrations")
    init_parser.add_argument("--force", action="store_true", help="Re-run applied migrations")

    # refresh command
    refresh_parser = subparsers.add_parser("refresh", help="Recompute red zone stats for a week")
    refresh_parser.add_argument("--season", type=int, required=True, help="Season year")
    refresh_parser.add_argument("--week", type=int, required=True, help="Regular-season week")
    refresh_parser.add_argument("--json", action="store_true", help="Print the result as JSON")

    # show command
    show_parser = subparsers.add_parser("show", help="Show stored red zone stats for a week")
    show_parser.add_argument("--season", type=int, required=True, help="Season year")
    show_parser.add_argument("--week", type=int, required=True, help="Week number")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings)

    commands = {
        "init": cmd_init_async,
        "refresh": cmd_refresh_async,
        "show": cmd_show_async,
    }

    try:
        return asyncio.run(commands[args.command](args, settings))
    except ValueError as e:
        # Raised by AsyncPostgresDB when no database URL is configured
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
