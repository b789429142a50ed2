"""Data structures shared by the extraction, EV and trend engines."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class PrizeTier:
    """Represents a single prize tier"""
    label: str
    prize_value: float
    odds: float
    count_at_start: int
    count_remaining: int
    odds_text: str = ""

    @property
    def is_valid(self) -> bool:
        return self.prize_value > 0 and self.odds > 0 and self.count_at_start > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "prize": self.label,
            "prizeValue": self.prize_value,
            "odds": self.odds,
            "oddsText": self.odds_text,
            "prizesAtStart": self.count_at_start,
            "prizesRemaining": self.count_remaining,
        }


@dataclass
class Game:
    """One scratcher game as parsed from its page"""
    name: str
    game_id: str
    price: int
    overall_odds: float
    url: str
    prize_tiers: List[PrizeTier] = field(default_factory=list)
    overall_odds_text: str = "1 in 1"
    last_updated: str = ""

    def get_top_tier(self) -> Optional[PrizeTier]:
        """First tier in page order, which the sites list as the top prize"""
        return self.prize_tiers[0] if self.prize_tiers else None

    def get_second_tier(self) -> Optional[PrizeTier]:
        return self.prize_tiers[1] if len(self.prize_tiers) > 1 else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "gameNumber": self.game_id,
            "price": self.price,
            "overallOdds": self.overall_odds_text,
            "overallOddsValue": self.overall_odds,
            "url": self.url,
            "prizeTiers": [t.to_dict() for t in self.prize_tiers],
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True)
class DerivedMetrics:
    """EV figures computed from a game's prize tiers"""
    estimated_total_tickets: float
    estimated_remaining_tickets: float
    initial_ev: float
    current_ev: float
    ev_per_dollar: float
    net_initial_ev: float
    net_current_ev: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "estimatedTotalTickets": self.estimated_total_tickets,
            "estimatedRemainingTickets": self.estimated_remaining_tickets,
            "initialEV": self.initial_ev,
            "currentEV": self.current_ev,
            "evPerDollar": self.ev_per_dollar,
            "netInitialEV": self.net_initial_ev,
            "netCurrentEV": self.net_current_ev,
        }


@dataclass
class GameWithEV:
    """A game paired with its derived EV metrics"""
    game: Game
    metrics: DerivedMetrics

    @property
    def name(self) -> str:
        return self.game.name

    @property
    def game_id(self) -> str:
        return self.game.game_id

    @property
    def price(self) -> int:
        return self.game.price

    @property
    def prize_tiers(self) -> List[PrizeTier]:
        return self.game.prize_tiers

    @property
    def current_ev(self) -> float:
        return self.metrics.current_ev

    @property
    def ev_per_dollar(self) -> float:
        return self.metrics.ev_per_dollar

    def to_dict(self) -> Dict[str, Any]:
        data = self.game.to_dict()
        data.update(self.metrics.to_dict())
        return data


@dataclass(frozen=True)
class Snapshot:
    """One timestamped observation of a game, appended once per collection run"""
    game_id: str
    name: str
    price: int
    timestamp: datetime
    current_ev: float
    estimated_remaining_tickets: float
    top_tier_remaining: int
    second_tier_remaining: int
    top_tier_value: float
    ev_per_dollar: float = 0.0

    @classmethod
    def from_game(cls, game: GameWithEV, timestamp: datetime) -> "Snapshot":
        top = game.game.get_top_tier()
        second = game.game.get_second_tier()
        return cls(
            game_id=game.game_id,
            name=game.name,
            price=game.price,
            timestamp=timestamp,
            current_ev=game.current_ev,
            estimated_remaining_tickets=game.metrics.estimated_remaining_tickets,
            top_tier_remaining=top.count_remaining if top else 0,
            second_tier_remaining=second.count_remaining if second else 0,
            top_tier_value=top.prize_value if top else 0.0,
            ev_per_dollar=game.ev_per_dollar,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "name": self.name,
            "price": self.price,
            "timestamp": self.timestamp.isoformat(),
            "currentEV": self.current_ev,
            "evPerDollar": self.ev_per_dollar,
            "estimatedRemainingTickets": self.estimated_remaining_tickets,
            "topTierRemaining": self.top_tier_remaining,
            "secondTierRemaining": self.second_tier_remaining,
            "topTierValue": self.top_tier_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        timestamp = datetime.fromisoformat(data["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return cls(
            game_id=str(data.get("gameId", "")),
            name=data.get("name", ""),
            price=int(data.get("price", 0)),
            timestamp=timestamp,
            current_ev=float(data.get("currentEV", 0.0)),
            estimated_remaining_tickets=float(data.get("estimatedRemainingTickets", 0.0)),
            top_tier_remaining=int(data.get("topTierRemaining", 0)),
            second_tier_remaining=int(data.get("secondTierRemaining", 0)),
            top_tier_value=float(data.get("topTierValue", 0.0)),
            ev_per_dollar=float(data.get("evPerDollar", 0.0)),
        )


@dataclass
class RisingStar:
    """Game whose current EV grew over the window"""
    game_id: str
    name: str
    price: int
    change_percent: float
    current_ev: float
    history: List[Tuple[datetime, float]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "name": self.name,
            "price": self.price,
            "changePercent": self.change_percent,
            "currentEV": self.current_ev,
            "history": [{"date": ts.isoformat(), "ev": ev} for ts, ev in self.history],
        }


@dataclass
class HighVolumeGame:
    """Game ranked by inferred daily ticket sales"""
    game_id: str
    name: str
    price: int
    daily_velocity: int
    daily_revenue: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "name": self.name,
            "price": self.price,
            "dailyVelocity": self.daily_velocity,
            "dailyRevenue": self.daily_revenue,
        }


@dataclass
class PrizeCliff:
    """Game that lost top or second tier prizes over the window"""
    game_id: str
    name: str
    top_lost: int
    second_lost: int
    remaining_top: int
    top_tier_value: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "name": self.name,
            "topTierLost": self.top_lost,
            "secondTierLost": self.second_lost,
            "remainingTop": self.remaining_top,
            "topTierValue": self.top_tier_value,
        }
