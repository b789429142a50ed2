"""
Trend detection over daily game snapshots.

Three independent signals are read off the oldest and newest snapshot of
each game inside the window:

- Rising stars: current EV grew by more than a noise floor
- High volume: estimated remaining tickets dropped, giving a sales rate
- Prize cliffs: top or second tier prizes were claimed

Analysis never raises. Games with fewer than two snapshots are skipped.
"""

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from scratcher_ev.models import HighVolumeGame, PrizeCliff, RisingStar, Snapshot

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 3600


@dataclass(frozen=True)
class TrendConfig:
    ev_growth_threshold_percent: float = 0.5
    min_elapsed_days: float = 0.1
    window_days: float = 7.0


@dataclass
class TrendReport:
    rising_stars: List[RisingStar] = field(default_factory=list)
    high_volume: List[HighVolumeGame] = field(default_factory=list)
    prize_cliffs: List[PrizeCliff] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risingStars": [r.to_dict() for r in self.rising_stars],
            "highVolume": [h.to_dict() for h in self.high_volume],
            "prizeCliffs": [p.to_dict() for p in self.prize_cliffs],
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def group_by_game(snapshots: Iterable[Snapshot]) -> Dict[str, List[Snapshot]]:
    """
    Group snapshots by game id, each history sorted oldest first.

    Snapshots without a game id cannot be tied to one game and are left out.
    """
    grouped: Dict[str, List[Snapshot]] = OrderedDict()
    skipped = 0
    for snap in snapshots:
        if not snap.game_id:
            skipped += 1
            continue
        grouped.setdefault(snap.game_id, []).append(snap)
    if skipped:
        logger.debug("Ignored %d snapshots without a game id", skipped)
    for history in grouped.values():
        history.sort(key=lambda s: s.timestamp)
    return grouped


def ev_change_percent(oldest: Snapshot, newest: Snapshot) -> float:
    if not oldest.current_ev:
        return 0.0
    return (newest.current_ev - oldest.current_ev) / oldest.current_ev * 100


def detect_rising_star(history: Sequence[Snapshot], config: TrendConfig) -> Optional[RisingStar]:
    oldest, newest = history[0], history[-1]
    change = ev_change_percent(oldest, newest)
    if change <= config.ev_growth_threshold_percent:
        return None
    return RisingStar(
        game_id=newest.game_id,
        name=newest.name,
        price=newest.price,
        change_percent=change,
        current_ev=newest.current_ev,
        history=[(s.timestamp, s.current_ev) for s in history],
    )


def detect_high_volume(history: Sequence[Snapshot], config: TrendConfig) -> Optional[HighVolumeGame]:
    oldest, newest = history[0], history[-1]
    days_elapsed = (newest.timestamp - oldest.timestamp).total_seconds() / SECONDS_PER_DAY
    if days_elapsed <= config.min_elapsed_days:
        return None
    # Inventory estimates are noisy and can rise; those are not sales.
    tickets_sold = oldest.estimated_remaining_tickets - newest.estimated_remaining_tickets
    if tickets_sold <= 0:
        return None
    daily_velocity = round_half_up(tickets_sold / days_elapsed)
    return HighVolumeGame(
        game_id=newest.game_id,
        name=newest.name,
        price=newest.price,
        daily_velocity=daily_velocity,
        daily_revenue=daily_velocity * newest.price,
    )


def detect_prize_cliff(history: Sequence[Snapshot]) -> Optional[PrizeCliff]:
    oldest, newest = history[0], history[-1]
    top_lost = oldest.top_tier_remaining - newest.top_tier_remaining
    second_lost = oldest.second_tier_remaining - newest.second_tier_remaining
    if top_lost <= 0 and second_lost <= 0:
        return None
    return PrizeCliff(
        game_id=newest.game_id,
        name=newest.name,
        top_lost=top_lost,
        second_lost=second_lost,
        remaining_top=newest.top_tier_remaining,
        top_tier_value=newest.top_tier_value,
    )


def analyze(histories_by_game: Mapping[str, Sequence[Snapshot]],
            config: Optional[TrendConfig] = None) -> TrendReport:
    """Classify games into rising stars, high volume and prize cliffs"""
    config = config or TrendConfig()
    report = TrendReport()

    for game_id, history in histories_by_game.items():
        if len(history) < 2:
            continue

        rising = detect_rising_star(history, config)
        if rising:
            report.rising_stars.append(rising)

        volume = detect_high_volume(history, config)
        if volume:
            report.high_volume.append(volume)

        cliff = detect_prize_cliff(history)
        if cliff:
            report.prize_cliffs.append(cliff)

    report.rising_stars.sort(key=lambda r: r.change_percent, reverse=True)
    report.high_volume.sort(key=lambda h: h.daily_revenue, reverse=True)
    # Top tier losses outrank any second tier loss.
    report.prize_cliffs.sort(key=lambda p: p.top_lost, reverse=True)

    logger.debug(
        "Trends over %d games: %d rising, %d high volume, %d cliffs",
        len(histories_by_game), len(report.rising_stars),
        len(report.high_volume), len(report.prize_cliffs),
    )
    return report


def analyze_store(store, config: Optional[TrendConfig] = None,
                  now: Optional[datetime] = None) -> TrendReport:
    """Run the analysis over the store's trailing window"""
    config = config or TrendConfig()
    now = now or datetime.now(timezone.utc)
    since = now - timedelta(days=config.window_days)
    snapshots = store.query_range(since)
    if not snapshots:
        return TrendReport()
    return analyze(group_by_game(snapshots), config)
