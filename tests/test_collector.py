"""Tests for the batch fetch / snapshot pipeline."""
import logging
from dataclasses import replace
from datetime import datetime, timezone

import pytest

from scratcher_ev.cache import ResultCache
from scratcher_ev.collector import (
    build_snapshots,
    cache_key,
    cached_games,
    collect_snapshots,
    dedupe_games,
    fetch_all_games,
    fetch_games,
    games_listing,
    process_link,
    rank_games,
)
from scratcher_ev.errors import EmptyBatchFailure
from scratcher_ev.game_list import GameLink, GameSource
from scratcher_ev.store import MemorySnapshotStore
from tests.conftest import NO_TABLE_PAGE, FakeFetcher, game_page

BASE = "https://lottery.test"


def game_url(price, slug, number):
    return f"{BASE}/scratchers/${price}/{slug}-{number}"


def sample_pages(count=5):
    pages = {}
    links = []
    for i in range(count):
        url = game_url(5, f"game-{chr(ord('a') + i)}", 1000 + i)
        pages[url] = game_page(f"Game {i} ({1000 + i})", [
            ("$10,000", "1 in 100,000", 2, 4),
            ("$20", "1 in 50", 900 - 10 * i, 1000),
            ("$5", "1 in 10", 4000, 5000),
        ])
        links.append(GameLink.from_url(url))
    return pages, links


def test_failed_fetches_are_dropped_not_raised():
    pages, links = sample_pages(5)
    del pages[links[1].url]
    del pages[links[3].url]
    games = fetch_games(FakeFetcher(pages), links, max_workers=4)
    assert len(games) == 3
    assert [g.game_id for g in games] == ["1000", "1002", "1004"]


def test_extraction_failures_are_dropped():
    pages, links = sample_pages(3)
    pages[links[0].url] = NO_TABLE_PAGE
    games = fetch_games(FakeFetcher(pages), links)
    assert [g.game_id for g in games] == ["1001", "1002"]


def test_unexpected_errors_are_isolated():
    class BrokenFetcher(FakeFetcher):
        def fetch_text(self, url):
            raise RuntimeError("boom")

    _, links = sample_pages(1)
    assert process_link(BrokenFetcher(), links[0]) is None


def test_fetch_games_empty_links():
    assert fetch_games(FakeFetcher(), []) == []


def test_fetch_all_games_merges_listing_and_known_games():
    pages, links = sample_pages(3)
    listing = f'<a href="{links[0].url[len(BASE):]}">Game A</a>'
    pages[f"{BASE}/en/scratchers"] = listing
    source = GameSource(base_url=BASE, known_games=(links[1].url, links[2].url))

    games = fetch_all_games(FakeFetcher(pages), source)
    assert sorted(g.game_id for g in games) == ["1000", "1001", "1002"]


def test_fetch_all_games_limit():
    pages, links = sample_pages(4)
    source = GameSource(base_url=BASE, known_games=tuple(link.url for link in links))
    fetcher = FakeFetcher(pages)
    games = fetch_all_games(fetcher, source, limit=2)
    assert len(games) == 2
    # listing page + two game pages
    assert len(fetcher.requested) == 3


def test_build_snapshots_share_timestamp_and_tier_counts():
    pages, links = sample_pages(2)
    games = fetch_games(FakeFetcher(pages), links)
    now = datetime(2026, 10, 18, tzinfo=timezone.utc)
    snapshots = build_snapshots(games, now)

    assert {s.timestamp for s in snapshots} == {now}
    first = snapshots[0]
    assert first.game_id == "1000"
    assert first.top_tier_remaining == 2
    assert first.second_tier_remaining == 900
    assert first.top_tier_value == 10000.0
    assert first.estimated_remaining_tickets == games[0].metrics.estimated_remaining_tickets


def test_collect_snapshots_appends_one_per_game():
    pages, links = sample_pages(3)
    source = GameSource(base_url=BASE, known_games=tuple(link.url for link in links))
    store = MemorySnapshotStore()
    now = datetime(2026, 10, 18, tzinfo=timezone.utc)

    count = collect_snapshots(FakeFetcher(pages), source, store, now=now)
    assert count == 3
    assert len(store.query_range(now)) == 3


def test_collect_snapshots_empty_batch_raises():
    source = GameSource(base_url=BASE, known_games=(game_url(5, "gone", 1),))
    store = MemorySnapshotStore()
    with pytest.raises(EmptyBatchFailure):
        collect_snapshots(FakeFetcher(), source, store)
    assert len(store) == 0


def test_rank_games_best_ev_first():
    pages, links = sample_pages(3)
    games = fetch_games(FakeFetcher(pages), links)
    ranked = rank_games(games)
    evs = [g.current_ev for g in ranked]
    assert evs == sorted(evs, reverse=True)


def test_games_listing_shape():
    pages, links = sample_pages(2)
    source = GameSource(base_url=BASE, known_games=tuple(link.url for link in links))
    data = games_listing(FakeFetcher(pages), source)
    assert data["count"] == 2
    assert "currentEV" in data["games"][0]
    assert "lastFetched" in data


def test_cache_key():
    assert cache_key(None) == "games:all"
    assert cache_key(5) == "games:limit:5"


def test_cached_games_hits_and_refresh():
    pages, links = sample_pages(2)
    source = GameSource(base_url=BASE, known_games=tuple(link.url for link in links))
    fetcher = FakeFetcher(pages)
    cache = ResultCache(default_ttl=600)

    first = cached_games(cache, fetcher, source)
    assert first["cache"]["hit"] is False
    requests_after_first = len(fetcher.requested)

    second = cached_games(cache, fetcher, source)
    assert second["cache"]["hit"] is True
    assert second["count"] == 2
    assert len(fetcher.requested) == requests_after_first

    third = cached_games(cache, fetcher, source, refresh=True)
    assert third["cache"]["hit"] is False
    assert len(fetcher.requested) > requests_after_first


def test_same_game_under_two_urls_gets_one_snapshot():
    page = game_page("Poker Nights (1694)", [
        ("$1,000", "1 in 10,000", 3, 5),
        ("$10", "1 in 20", 4000, 5000),
    ])
    listed = f"{BASE}/en/scratchers/$5/poker-nights-1694"
    known = game_url(5, "poker-nights", 1694)
    fetcher = FakeFetcher({
        f"{BASE}/en/scratchers": '<a href="/en/scratchers/$5/poker-nights-1694">Poker Nights</a>',
        listed: page,
        known: page,
    })
    source = GameSource(base_url=BASE, known_games=(known,))
    store = MemorySnapshotStore()
    now = datetime(2026, 10, 18, tzinfo=timezone.utc)

    assert collect_snapshots(fetcher, source, store, now=now) == 1
    assert [s.game_id for s in store.query_range(now)] == ["1694"]
    assert fetcher.requested.count(listed) == 1


def test_dedupe_keeps_games_without_id():
    pages, links = sample_pages(2)
    games = fetch_games(FakeFetcher(pages), links)
    unnamed = replace(games[0], game=replace(games[0].game, game_id=""))
    result = dedupe_games([games[0], games[1], games[0], unnamed, unnamed])
    assert [g.game_id for g in result] == ["1000", "1001", "", ""]


def test_extraction_failure_logged_once(caplog):
    url = game_url(5, "empty", 1)
    with caplog.at_level(logging.WARNING, logger="scratcher_ev"):
        assert process_link(FakeFetcher({url: NO_TABLE_PAGE}), GameLink.from_url(url)) is None
    assert len(caplog.records) == 1
    assert "Skipping" in caplog.records[0].getMessage()
