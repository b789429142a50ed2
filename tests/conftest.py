# Shared helpers: sample pages, a fake fetcher and snapshot factories
from datetime import datetime, timedelta, timezone

from scratcher_ev.errors import FetchFailure
from scratcher_ev.models import Game, PrizeTier, Snapshot

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)

POKER_NIGHTS_URL = "https://www.calottery.com/scratchers/$5/poker-nights-1694"

THREE_COLUMN_PAGE = """
<html><body>
<h1>Poker Nights (1694)</h1>
<div><span>Overall Odds:</span> <span>1 in 3.54</span></div>
<p>Data Last Updated: Oct 1, 2026</p>
<table>
  <thead><tr><th>Prize</th><th>Odds</th><th>Prizes Remaining</th></tr></thead>
  <tbody>
    <tr><td>$250,000</td><td>1 in 1,200,000</td><td>2 of 4</td></tr>
    <tr><td>$100</td><td>1 in 1,000</td><td>905 of 935</td></tr>
    <tr><td>Free Ticket</td><td>1 in 10</td><td>90,000 of 100,000</td></tr>
  </tbody>
</table>
</body></html>
"""

FOUR_COLUMN_PAGE = """
<html><body>
<div data-test="game-name">Power 10s</div>
<table>
  <tr><td>$5</td><td>1 in 10</td><td>935</td><td>905</td></tr>
  <tr><td>$50</td><td>1 in 500</td><td>40</td><td>12</td></tr>
</table>
</body></html>
"""

NO_TABLE_PAGE = """
<html><body><h1>Coming Soon</h1><p>Prize information is not available.</p></body></html>
"""


def game_page(name: str, rows) -> str:
    """Build a minimal three column game page"""
    body = "".join(
        f"<tr><td>{prize}</td><td>{odds}</td><td>{remaining} of {start}</td></tr>"
        for prize, odds, remaining, start in rows
    )
    return (
        f"<html><body><h1>{name}</h1><table>"
        f"<tr><th>Prize</th><th>Odds</th><th>Remaining</th></tr>{body}"
        f"</table></body></html>"
    )


class FakeFetcher:
    """Serves canned pages; anything unknown fails like a 404"""

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.requested = []

    def fetch_text(self, url: str) -> str:
        self.requested.append(url)
        if url not in self.pages:
            raise FetchFailure(url, "404 Not Found")
        return self.pages[url]

    def close(self):
        pass


def make_tier(value, odds, start, remaining, label=None):
    return PrizeTier(
        label=label or f"${value:,.0f}",
        prize_value=value,
        odds=odds,
        count_at_start=start,
        count_remaining=remaining,
    )


def make_game(tiers, price=5, name="Test Game", game_id="1000"):
    return Game(
        name=name,
        game_id=game_id,
        price=price,
        overall_odds=3.5,
        url=f"https://www.calottery.com/scratchers/${price}/test-game-{game_id}",
        prize_tiers=list(tiers),
    )


def make_snapshot(game_id="1000", days=0.0, current_ev=10.0, remaining=1000.0,
                  top=5, second=10, price=5, name=None, top_value=1_000_000.0):
    return Snapshot(
        game_id=game_id,
        name=name or f"Game {game_id}",
        price=price,
        timestamp=BASE_TIME + timedelta(days=days),
        current_ev=current_ev,
        estimated_remaining_tickets=remaining,
        top_tier_remaining=top,
        second_tier_remaining=second,
        top_tier_value=top_value,
    )
