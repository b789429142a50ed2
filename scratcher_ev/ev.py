"""
Expected value model for scratcher games.

Ticket print runs are not published, so they are estimated from the prize
table: a tier with odds of 1 in N and C prizes implies roughly C * N tickets.
Each tier gives its own estimate and the median is used, so a single grand
prize tier with extreme odds cannot drag the estimate around.
"""

from statistics import median as _median
from typing import Iterable, List

from scratcher_ev.models import DerivedMetrics, Game, GameWithEV


def median(values: Iterable[float]) -> float:
    values = list(values)
    if not values:
        return 0.0
    return float(_median(values))


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator, or 0.0 when the denominator is zero"""
    if not denominator:
        return 0.0
    return numerator / denominator


def estimate_total_tickets(game: Game) -> float:
    return median(t.count_at_start * t.odds for t in game.prize_tiers)


def estimate_remaining_tickets(game: Game) -> float:
    return median(t.count_remaining * t.odds for t in game.prize_tiers)


def calculate_metrics(game: Game) -> DerivedMetrics:
    total_tickets = estimate_total_tickets(game)
    remaining_tickets = estimate_remaining_tickets(game)

    initial_pool = sum(t.prize_value * t.count_at_start for t in game.prize_tiers)
    remaining_pool = sum(t.prize_value * t.count_remaining for t in game.prize_tiers)

    initial_ev = safe_ratio(initial_pool, total_tickets)
    current_ev = safe_ratio(remaining_pool, remaining_tickets)

    return DerivedMetrics(
        estimated_total_tickets=total_tickets,
        estimated_remaining_tickets=remaining_tickets,
        initial_ev=initial_ev,
        current_ev=current_ev,
        ev_per_dollar=safe_ratio(current_ev, game.price),
        net_initial_ev=initial_ev - game.price,
        net_current_ev=current_ev - game.price,
    )


def calculate_ev(game: Game) -> GameWithEV:
    return GameWithEV(game=game, metrics=calculate_metrics(game))


def calculate_ev_for_games(games: Iterable[Game]) -> List[GameWithEV]:
    return [calculate_ev(game) for game in games]
