"""Number parsing helpers for scraped prize table text."""

import re
from typing import Optional, Tuple

_NON_NUMERIC = re.compile(r'[^0-9.]')
_LEADING_FLOAT = re.compile(r'\d*\.?\d*')
_ONE_IN_N = re.compile(r'1\s+in\s+([\d.,]+)', re.IGNORECASE)
_FIRST_NUMBER = re.compile(r'([\d,]+)')
_COUNT_PAIR = re.compile(r'(\d[\d,]*)\s+of\s+(\d[\d,]*)', re.IGNORECASE)


def parse_number(text: str) -> float:
    """
    Strip everything but digits and dots, then parse as a float.

    "$250,000" -> 250000.0, "" -> 0.0. Anything after a second dot is
    ignored, so "1.2.3" reads as 1.2.
    """
    if not text:
        return 0.0
    cleaned = _NON_NUMERIC.sub('', text)
    match = _LEADING_FLOAT.match(cleaned)
    candidate = match.group(0) if match else ''
    try:
        return float(candidate)
    except ValueError:
        return 0.0


def parse_int(text: str) -> int:
    return int(parse_number(text))


def parse_prize_value(prize_text: str, ticket_price: float) -> float:
    """Parse a prize cell; free ticket prizes are worth the ticket price"""
    lowered = prize_text.lower()
    if 'free' in lowered or 'ticket' in lowered:
        return float(ticket_price)
    return parse_number(prize_text)


def parse_odds_denominator(odds_text: str) -> Optional[float]:
    """Return N from "1 in N", or the first number in the cell, else None"""
    match = _ONE_IN_N.search(odds_text)
    if match:
        value = parse_number(match.group(1).replace(',', ''))
        return value if value > 0 else None
    match = _FIRST_NUMBER.search(odds_text)
    if match:
        value = parse_number(match.group(1))
        return value if value > 0 else None
    return None


def parse_count_pair(text: str) -> Tuple[int, int]:
    """Parse "905 of 935" into (remaining, at_start); (0, 0) if no match"""
    match = _COUNT_PAIR.search(text)
    if not match:
        return 0, 0
    return parse_int(match.group(1)), parse_int(match.group(2))
