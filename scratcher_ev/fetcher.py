"""HTTP access to the scratcher listing and game pages."""

import logging
import re
import time
from typing import List, Optional

import requests
from bs4 import BeautifulSoup

from scratcher_ev.errors import FetchFailure
from scratcher_ev.extract import name_from_url
from scratcher_ev.game_list import GameLink, GameSource

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'

_GAME_HREF = re.compile(r'/scratchers/\$\d+/[\w-]+-\d+')
_HREF_PRICE = re.compile(r'/scratchers/\$(\d+)/')


class PageFetcher:
    """Fetches page text with a fixed identity header and no caching"""

    def __init__(self, timeout: float = 20.0, max_retries: int = 1, delay_seconds: float = 0.5,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.delay = delay_seconds
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': USER_AGENT,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Cache-Control': 'no-cache',
        })

    def fetch_text(self, url: str) -> str:
        """Return the page body or raise FetchFailure; timeouts count as failures"""
        last_error = ""
        for attempt in range(self.max_retries):
            try:
                response = self.session.get(url, timeout=self.timeout)
                response.raise_for_status()
                return response.text
            except requests.RequestException as e:
                last_error = str(e)
                logger.debug("Attempt %d/%d for %s failed: %s", attempt + 1, self.max_retries, url, e)
                if attempt < self.max_retries - 1:
                    time.sleep(self.delay * 2)
        raise FetchFailure(url, last_error)

    def close(self) -> None:
        self.session.close()


def parse_listing_links(html: str, source: GameSource) -> List[GameLink]:
    """Pull every priced game link off the listing page, deduped by URL"""
    soup = BeautifulSoup(html, 'html.parser')
    links = []
    seen = set()

    for anchor in soup.find_all('a', href=True):
        href = anchor['href']
        if not _GAME_HREF.search(href):
            continue
        price_match = _HREF_PRICE.search(href)
        price = int(price_match.group(1)) if price_match else 0
        if price <= 0:
            continue
        url = source.absolute_url(href)
        if url in seen:
            continue
        seen.add(url)
        name = anchor.get_text(strip=True) or name_from_url(href)
        links.append(GameLink(name=name, url=url, price=price))

    return links


def get_all_game_links(fetcher, source: GameSource) -> List[GameLink]:
    """
    Listing page links followed by any known games it did not mention.

    A listing page that cannot be fetched still leaves the known games.
    """
    try:
        links = parse_listing_links(fetcher.fetch_text(source.listing_url), source)
    except FetchFailure as e:
        logger.warning("Listing page unavailable, using known games only: %s", e)
        links = []

    seen = {link.url for link in links}
    for url in source.known_games:
        if url not in seen:
            seen.add(url)
            links.append(GameLink.from_url(url))

    logger.info("Found %d unique games", len(links))
    return links
