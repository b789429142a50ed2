"""
Game page extraction.

Scratcher pages are not consistent from game to game, so every field is
resolved through an ordered list of strategies. The first strategy that
returns something wins; strategies are never combined. The only hard
failure is a page with no usable prize tiers.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, TypeVar
from urllib.parse import unquote, urlparse

from bs4 import BeautifulSoup

from scratcher_ev.errors import ExtractionFailure
from scratcher_ev.models import Game, PrizeTier
from scratcher_ev.parsing import (
    parse_count_pair,
    parse_int,
    parse_number,
    parse_odds_denominator,
    parse_prize_value,
)


T = TypeVar('T')
Strategy = Callable[[BeautifulSoup, str], Optional[T]]

DEFAULT_ODDS_TEXT = "1 in 1"

_URL_PRICE = re.compile(r'/\$(\d+)/')
_URL_TRAILING_DIGITS = re.compile(r'-(\d+)$')
_NAME_NUMBER = re.compile(r'\((\d+)\)')
_PAGE_PRICE = re.compile(r'(?:Ticket\s*Price|Price:)\s*:?\s*\$?\s*(\d[\d,.]*)', re.IGNORECASE)
_ONE_IN_N = re.compile(r'1\s+in\s+([\d.,]+)', re.IGNORECASE)
_OVERALL_ODDS_LABEL = re.compile(r'overall\s+odds', re.IGNORECASE)
_LAST_UPDATED_LABEL = re.compile(r'(?:Data\s+)?Last\s+Updated', re.IGNORECASE)


def _url_path(url: str) -> str:
    return unquote(urlparse(url).path).rstrip('/')


def name_from_url(url: str) -> str:
    """Last path segment with separators as spaces and the game number dropped"""
    last_part = _url_path(url).split('/')[-1]
    return re.sub(r'\d+$', '', last_part.replace('-', ' ')).strip()


def price_from_url(url: str) -> int:
    match = _URL_PRICE.search(_url_path(url) + '/')
    return int(match.group(1)) if match else 0


def first_result(strategies: Sequence[Strategy], soup: BeautifulSoup, url: str) -> Optional[T]:
    """Run strategies in order and return the first non-empty result"""
    for strategy in strategies:
        result = strategy(soup, url)
        if result:
            return result
    return None


# --- name ---

def _name_from_heading(soup: BeautifulSoup, url: str) -> Optional[str]:
    heading = soup.find('h1')
    return heading.get_text(strip=True) if heading else None


def _name_from_test_attribute(soup: BeautifulSoup, url: str) -> Optional[str]:
    element = soup.find(attrs={'data-test': 'game-name'})
    return element.get_text(strip=True) if element else None


def _name_from_url(soup: BeautifulSoup, url: str) -> Optional[str]:
    return name_from_url(url) or None


NAME_STRATEGIES: List[Strategy] = [_name_from_heading, _name_from_test_attribute, _name_from_url]


# --- identifier ---

def _id_from_name(name: str, url: str) -> Optional[str]:
    match = _NAME_NUMBER.search(name)
    return match.group(1) if match else None


def _id_from_url(name: str, url: str) -> Optional[str]:
    match = _URL_TRAILING_DIGITS.search(_url_path(url))
    return match.group(1) if match else None


ID_STRATEGIES = [_id_from_name, _id_from_url]


# --- price ---

def _price_from_url(soup: BeautifulSoup, url: str) -> Optional[int]:
    return price_from_url(url) or None


def _price_from_page_text(soup: BeautifulSoup, url: str) -> Optional[int]:
    match = _PAGE_PRICE.search(soup.get_text(' '))
    return parse_int(match.group(1)) if match else None


PRICE_STRATEGIES: List[Strategy] = [_price_from_url, _price_from_page_text]


# --- labelled text blocks ---

def _labelled_text(soup: BeautifulSoup, label: re.Pattern, value: Optional[re.Pattern] = None) -> Optional[str]:
    """
    Find the text block around a label.

    Labels and values usually sit in sibling elements, so the text node,
    its parent and its grandparent are tried in turn. With no value pattern
    the label's own element text is returned.
    """
    for node in soup.find_all(string=label):
        parent = node.parent
        if value is None:
            return parent.get_text(' ', strip=True) if parent is not None else str(node).strip()
        texts = [str(node).strip()]
        if parent is not None:
            texts.append(parent.get_text(' ', strip=True))
            if parent.parent is not None:
                texts.append(parent.parent.get_text(' ', strip=True))
        for text in texts:
            if value.search(text):
                return text
    return None


def extract_overall_odds(soup: BeautifulSoup):
    """Return (odds_text, denominator); ("1 in 1", 1.0) when absent"""
    text = _labelled_text(soup, _OVERALL_ODDS_LABEL, _ONE_IN_N)
    if not text:
        return DEFAULT_ODDS_TEXT, 1.0
    match = _ONE_IN_N.search(text)
    denominator = parse_number(match.group(1).replace(',', ''))
    if denominator <= 0:
        return DEFAULT_ODDS_TEXT, 1.0
    return text, denominator


def extract_last_updated(soup: BeautifulSoup) -> str:
    return _labelled_text(soup, _LAST_UPDATED_LABEL) or ""


# --- prize tables ---

def _header_texts(table) -> List[str]:
    return [cell.get_text(strip=True).lower() for cell in table.select('th, thead td')]


def _column_count(table, headers: List[str]) -> int:
    if headers:
        return len(headers)
    return max((len(row.find_all('td')) for row in table.find_all('tr')), default=0)


def table_qualifies(table) -> bool:
    """Prize tables name prize and odds columns, or have at least four columns"""
    headers = _header_texts(table)
    has_prize = any('prize' in h for h in headers)
    has_odds = any('odd' in h for h in headers)
    return (has_prize and has_odds) or _column_count(table, headers) >= 4


def parse_tier_row(cells: List[str], ticket_price: int) -> Optional[PrizeTier]:
    """Parse one table row into a PrizeTier, or None if it is not a valid tier"""
    if len(cells) < 3:
        return None
    prize_text, odds_text = cells[0], cells[1]
    if 'prize' in prize_text.lower() and 'odd' in odds_text.lower():
        return None

    if len(cells) == 3:
        remaining, at_start = parse_count_pair(cells[2])
    else:
        at_start = parse_int(cells[2])
        remaining = parse_int(cells[3])

    tier = PrizeTier(
        label=prize_text,
        prize_value=parse_prize_value(prize_text, ticket_price),
        odds=parse_odds_denominator(odds_text) or 0.0,
        count_at_start=at_start,
        count_remaining=remaining,
        odds_text=odds_text,
    )
    return tier if tier.is_valid else None


def extract_prize_tiers(soup: BeautifulSoup, ticket_price: int) -> List[PrizeTier]:
    tiers = []
    for table in soup.find_all('table'):
        if not table_qualifies(table):
            continue
        for row in table.find_all('tr'):
            cells = [td.get_text(strip=True) for td in row.find_all('td')]
            if not cells:
                continue
            tier = parse_tier_row(cells, ticket_price)
            if tier:
                tiers.append(tier)
    return tiers


@dataclass
class GameBuilder:
    """Accumulates scraped fields and only yields a Game once it has prize tiers"""
    url: str
    name: str = ""
    game_id: str = ""
    price: int = 0
    overall_odds: float = 1.0
    overall_odds_text: str = DEFAULT_ODDS_TEXT
    last_updated: str = ""
    prize_tiers: List[PrizeTier] = field(default_factory=list)

    def build(self) -> Game:
        if not self.prize_tiers:
            raise ExtractionFailure(self.url)
        return Game(
            name=self.name,
            game_id=self.game_id,
            price=self.price,
            overall_odds=self.overall_odds,
            url=self.url,
            prize_tiers=list(self.prize_tiers),
            overall_odds_text=self.overall_odds_text,
            last_updated=self.last_updated,
        )


def extract_game(html: str, source_url: str) -> Game:
    """
    Parse a game page into a Game.

    Raises ExtractionFailure when no table yields a valid prize tier. Every
    other missing field falls back to an empty string or zero.
    """
    soup = BeautifulSoup(html, 'html.parser')
    builder = GameBuilder(url=source_url)

    builder.name = first_result(NAME_STRATEGIES, soup, source_url) or ""
    for strategy in ID_STRATEGIES:
        game_id = strategy(builder.name, source_url)
        if game_id:
            builder.game_id = game_id
            break
    builder.price = first_result(PRICE_STRATEGIES, soup, source_url) or 0
    builder.overall_odds_text, builder.overall_odds = extract_overall_odds(soup)
    builder.last_updated = extract_last_updated(soup)
    builder.prize_tiers = extract_prize_tiers(soup, builder.price)

    return builder.build()
