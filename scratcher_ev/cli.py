"""Command-line entry point: rank games, collect snapshots, report trends."""

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from scratcher_ev.collector import collect_snapshots, fetch_all_games, rank_games, require_games
from scratcher_ev.config import Settings
from scratcher_ev.errors import EmptyBatchFailure
from scratcher_ev.fetcher import PageFetcher
from scratcher_ev.game_list import GameSource
from scratcher_ev.models import GameWithEV
from scratcher_ev.store import JsonSnapshotStore
from scratcher_ev.trends import TrendReport, analyze_store


def format_currency(value: float) -> str:
    """Format currency for display"""
    if value >= 1_000_000:
        return f"${value/1_000_000:.1f}M"
    elif value >= 1_000:
        return f"${value/1_000:.0f}K"
    else:
        return f"${value:.2f}"


def print_banner(title: str) -> None:
    print("=" * 60)
    print(title)
    print("=" * 60)
    print(f"Started at: {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M:%S')} UTC")
    print()


def print_games(games: List[GameWithEV], top: int) -> None:
    print(f"\nTop {min(top, len(games))} of {len(games)} games by current EV:")
    for i, game in enumerate(games[:top], 1):
        m = game.metrics
        print(f"  #{i}: {game.name} (${game.price})")
        print(f"      EV: {format_currency(m.current_ev)} now / {format_currency(m.initial_ev)} at start"
              f" | per $: {m.ev_per_dollar:.3f} | net: {m.net_current_ev:+.2f}")


def print_trends(report: TrendReport) -> None:
    print("\nRising Stars (EV growth):")
    for r in report.rising_stars:
        print(f"  {r.name} (${r.price}): {r.change_percent:+.2f}% -> {format_currency(r.current_ev)}")
    print("\nHigh Volume (estimated sales):")
    for h in report.high_volume:
        print(f"  {h.name} (${h.price}): {h.daily_velocity:,} tickets/day, {format_currency(h.daily_revenue)}/day")
    print("\nPrize Cliffs (top prizes claimed):")
    for p in report.prize_cliffs:
        print(f"  {p.name}: top -{p.top_lost}, second -{p.second_lost},"
              f" {p.remaining_top} x {format_currency(p.top_tier_value)} left")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scratcher-ev", description=__doc__)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    games = sub.add_parser("games", help="scrape games and rank them by current EV")
    games.add_argument("--limit", type=int, default=None, help="only fetch the first N games")
    games.add_argument("--top", type=int, default=10)
    games.add_argument("--json", action="store_true", help="print JSON instead of a summary")

    sub.add_parser("collect", help="scrape all games and append one snapshot per game")

    trends = sub.add_parser("trends", help="analyze the trailing snapshot window")
    trends.add_argument("--days", type=float, default=None, help="window size in days")
    trends.add_argument("--json", action="store_true")
    return parser


def main(argv: Optional[Sequence[str]] = None, settings: Optional[Settings] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = settings or Settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    source = GameSource(base_url=settings.base_url)
    store = JsonSnapshotStore(settings.snapshot_path)

    if args.command == "trends":
        config = settings.trend_config()
        if args.days is not None:
            config = replace(config, window_days=args.days)
        report = analyze_store(store, config)
        if args.json:
            print(json.dumps(report.to_dict(), indent=2))
        else:
            print_banner("Scratcher Trend Report")
            print_trends(report)
        return 0

    fetcher = PageFetcher(timeout=settings.fetch_timeout)
    try:
        if args.command == "collect":
            print_banner("Scratcher Snapshot Collection")
            count = collect_snapshots(fetcher, source, store, max_workers=settings.max_workers)
            print(f"Stored {count} snapshots to {settings.snapshot_path}")
            return 0

        games = rank_games(require_games(
            fetch_all_games(fetcher, source, args.limit, settings.max_workers)))
        if args.json:
            print(json.dumps({"games": [g.to_dict() for g in games], "count": len(games)}, indent=2))
        else:
            print_banner("Scratcher EV Monitor")
            print_games(games, args.top)
        return 0
    except EmptyBatchFailure as e:
        print(f"\nERROR: {e}", file=sys.stderr)
        return 1
    finally:
        fetcher.close()


if __name__ == "__main__":
    sys.exit(main())
