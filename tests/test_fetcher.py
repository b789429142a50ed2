"""Tests for page fetching and listing page parsing."""
from unittest import mock

import pytest
import requests

from scratcher_ev.errors import FetchFailure
from scratcher_ev.fetcher import USER_AGENT, PageFetcher, get_all_game_links, parse_listing_links
from scratcher_ev.game_list import GameSource
from tests.conftest import FakeFetcher

BASE = "https://lottery.test"

LISTING_PAGE = f"""
<html><body>
<a href="/scratchers/$5/poker-nights-1694">Poker Nights</a>
<a href="/scratchers/$5/poker-nights-1694">Poker Nights again</a>
<a href="{BASE}/scratchers/$10/power-10s-1686"></a>
<a href="/scratchers/$0/bad-price-1">Bad</a>
<a href="/about">About</a>
<a>No href</a>
</body></html>
"""


def make_response(text="", status=200):
    response = mock.Mock()
    response.text = text
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    else:
        response.raise_for_status.return_value = None
    return response


def test_fetcher_sets_identity_header():
    fetcher = PageFetcher(session=requests.Session())
    assert fetcher.session.headers["User-Agent"] == USER_AGENT


def test_fetch_text_success():
    session = requests.Session()
    fetcher = PageFetcher(timeout=5, session=session)
    with mock.patch.object(session, "get", return_value=make_response("<html>ok</html>")) as get:
        assert fetcher.fetch_text("https://lottery.test/a") == "<html>ok</html>"
    get.assert_called_once_with("https://lottery.test/a", timeout=5)


def test_http_error_becomes_fetch_failure():
    session = requests.Session()
    fetcher = PageFetcher(session=session)
    with mock.patch.object(session, "get", return_value=make_response(status=404)):
        with pytest.raises(FetchFailure) as exc:
            fetcher.fetch_text("https://lottery.test/missing")
    assert exc.value.url == "https://lottery.test/missing"


def test_timeout_becomes_fetch_failure():
    session = requests.Session()
    fetcher = PageFetcher(session=session)
    with mock.patch.object(session, "get", side_effect=requests.Timeout("read timed out")):
        with pytest.raises(FetchFailure):
            fetcher.fetch_text("https://lottery.test/slow")


def test_retries_before_failing():
    session = requests.Session()
    fetcher = PageFetcher(session=session, max_retries=2, delay_seconds=0)
    responses = [requests.ConnectionError("reset"), make_response("fine")]
    with mock.patch.object(session, "get", side_effect=responses) as get:
        assert fetcher.fetch_text("https://lottery.test/flaky") == "fine"
    assert get.call_count == 2


def test_parse_listing_links():
    links = parse_listing_links(LISTING_PAGE, GameSource(base_url=BASE))
    assert [(l.name, l.url, l.price) for l in links] == [
        ("Poker Nights", f"{BASE}/scratchers/$5/poker-nights-1694", 5),
        ("power 10s", f"{BASE}/scratchers/$10/power-10s-1686", 10),
    ]


def test_known_games_appended_after_listing():
    source = GameSource(base_url=BASE, known_games=(
        f"{BASE}/scratchers/$5/poker-nights-1694",
        f"{BASE}/scratchers/$30/7s-1692",
    ))
    fetcher = FakeFetcher({source.listing_url: LISTING_PAGE})
    links = get_all_game_links(fetcher, source)
    assert [l.url for l in links] == [
        f"{BASE}/scratchers/$5/poker-nights-1694",
        f"{BASE}/scratchers/$10/power-10s-1686",
        f"{BASE}/scratchers/$30/7s-1692",
    ]
    assert links[-1].name == "7s"


def test_listing_failure_falls_back_to_known_games():
    source = GameSource(base_url=BASE, known_games=(f"{BASE}/scratchers/$30/7s-1692",))
    links = get_all_game_links(FakeFetcher(), source)
    assert [l.price for l in links] == [30]
