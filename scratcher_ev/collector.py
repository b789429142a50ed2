"""
Batch pipeline: fetch game pages in parallel, extract, compute EV, snapshot.

Each game is an independent unit of work. A page that fails to download or
has no prize table is logged and dropped, so a batch may come back shorter
than requested. Only a batch with no usable games at all is an error.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from scratcher_ev.cache import ResultCache
from scratcher_ev.errors import EmptyBatchFailure, ExtractionFailure, FetchFailure
from scratcher_ev.ev import calculate_ev
from scratcher_ev.extract import extract_game
from scratcher_ev.fetcher import get_all_game_links
from scratcher_ev.game_list import GameLink, GameSource
from scratcher_ev.models import GameWithEV, Snapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


def process_link(fetcher, link: GameLink) -> Optional[GameWithEV]:
    """Fetch, extract and price one game; None if any step fails"""
    try:
        html = fetcher.fetch_text(link.url)
        return calculate_ev(extract_game(html, link.url))
    except (FetchFailure, ExtractionFailure) as e:
        logger.warning("Skipping %s: %s", link.name or link.url, e)
    except Exception:
        logger.exception("Unexpected error processing %s", link.url)
    return None


def fetch_games(fetcher, links: Sequence[GameLink],
                max_workers: int = DEFAULT_MAX_WORKERS) -> List[GameWithEV]:
    """
    Process links in parallel and keep the games that made it through.

    The fetcher is shared by every worker thread, so it must be safe to call
    concurrently; a requests.Session used only for GET is.
    """
    if not links:
        return []
    workers = max(1, min(max_workers, len(links)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(lambda link: process_link(fetcher, link), links))

    games = [game for game in results if game is not None]
    logger.info("Extracted %d of %d games", len(games), len(links))
    return games


def fetch_all_games(fetcher, source: GameSource, limit: Optional[int] = None,
                    max_workers: int = DEFAULT_MAX_WORKERS) -> List[GameWithEV]:
    links = get_all_game_links(fetcher, source)
    if limit:
        links = links[:limit]
    logger.info("Fetching %d games...", len(links))
    return fetch_games(fetcher, links, max_workers=max_workers)


def require_games(games: List[GameWithEV]) -> List[GameWithEV]:
    if not games:
        raise EmptyBatchFailure("Scraper returned no games")
    return games


def rank_games(games: List[GameWithEV]) -> List[GameWithEV]:
    """Best current EV first"""
    return sorted(games, key=lambda g: g.current_ev, reverse=True)


def dedupe_games(games: Sequence[GameWithEV]) -> List[GameWithEV]:
    """Keep the first game per game id; games without an id are kept as they are"""
    seen = set()
    unique = []
    for game in games:
        if game.game_id:
            if game.game_id in seen:
                logger.debug("Dropping duplicate game %s from %s", game.game_id, game.game.url)
                continue
            seen.add(game.game_id)
        unique.append(game)
    return unique


def build_snapshots(games: Sequence[GameWithEV], timestamp: Optional[datetime] = None) -> List[Snapshot]:
    timestamp = timestamp or datetime.now(timezone.utc)
    return [Snapshot.from_game(game, timestamp) for game in games]


def collect_snapshots(fetcher, source: GameSource, store, now: Optional[datetime] = None,
                      max_workers: int = DEFAULT_MAX_WORKERS) -> int:
    """
    One scheduled collection run.

    Every game gets exactly one snapshot, all sharing the run's timestamp.
    Returns the number of snapshots written; raises EmptyBatchFailure if
    nothing could be scraped.
    """
    games = dedupe_games(require_games(fetch_all_games(fetcher, source, max_workers=max_workers)))
    snapshots = build_snapshots(games, now)
    for snapshot in snapshots:
        store.append(snapshot)
    logger.info("Stored %d snapshots", len(snapshots))
    return len(snapshots)


def games_listing(fetcher, source: GameSource, limit: Optional[int] = None,
                  max_workers: int = DEFAULT_MAX_WORKERS) -> Dict[str, Any]:
    games = rank_games(require_games(fetch_all_games(fetcher, source, limit, max_workers)))
    return {
        "games": [g.to_dict() for g in games],
        "count": len(games),
        "lastFetched": datetime.now(timezone.utc).isoformat(),
    }


def cache_key(limit: Optional[int]) -> str:
    return f"games:limit:{limit}" if limit else "games:all"


def cached_games(cache: ResultCache, fetcher, source: GameSource, limit: Optional[int] = None,
                 refresh: bool = False, max_workers: int = DEFAULT_MAX_WORKERS) -> Dict[str, Any]:
    """Games listing served from the cache unless refresh is set or it expired"""
    key = cache_key(limit)
    if not refresh:
        cached = cache.get(key)
        if cached is not None:
            meta = cache.get_metadata(key)
            return dict(cached, cache={
                "hit": True,
                "age": int(meta.age) if meta else 0,
                "ttl": int(meta.ttl) if meta else 0,
            })

    data = games_listing(fetcher, source, limit, max_workers)
    cache.set(key, data)
    logger.info("Cached %s for %.0f minutes", key, cache.default_ttl / 60)
    return dict(data, cache={"hit": False, "age": 0, "ttl": int(cache.default_ttl)})
