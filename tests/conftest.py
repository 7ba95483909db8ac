"""Shared fixtures: a fake xkcd upstream served through httpx.MockTransport."""

import re

import httpx
import pytest

from services.cache import TTLCache
from services.fetcher import XKCDFetcher
from services.xkcd import XKCDService

BASE_URL = "https://xkcd.test"

_ID_PATH = re.compile(r"^/(\d+)/info\.0\.json$")


def make_raw_comic(num: int, title: str | None = None, transcript: str | None = "", **extra) -> dict:
    """Build an upstream-shaped payload; transcript=None drops the field."""
    raw = {
        "num": num,
        "title": title if title is not None else f"Comic {num}",
        "img": f"https://imgs.xkcd.test/comics/{num}.png",
        "alt": f"Alt text {num}",
        "year": "2024",
        "month": "1",
        "day": str(num % 28 + 1),
        "safe_title": title if title is not None else f"Comic {num}",
    }
    if transcript is not None:
        raw["transcript"] = transcript
    raw.update(extra)
    return raw


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FixedRandom:
    """Deterministic stand-in for the random module."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class FakeXKCD:
    """In-memory xkcd upstream. Records every requested path."""

    def __init__(self):
        self.comics: dict[int, dict] = {}
        self.latest_id: int | None = None
        self.status_overrides: dict[str, int] = {}
        self.broken_paths: set[str] = set()
        self.raising: dict[str, type[httpx.RequestError]] = {}
        self.requests: list[str] = []

    def add(self, raw: dict) -> dict:
        self.comics[raw["num"]] = raw
        if self.latest_id is None or raw["num"] > self.latest_id:
            self.latest_id = raw["num"]
        return raw

    def add_range(self, first: int, last: int, **kwargs) -> None:
        for num in range(first, last + 1):
            self.add(make_raw_comic(num, **kwargs))

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(path)

        if path in self.raising:
            raise self.raising[path](f"upstream failure on {path}", request=request)
        if path in self.broken_paths:
            raise httpx.ConnectError("Connection refused", request=request)
        if path in self.status_overrides:
            return httpx.Response(self.status_overrides[path])

        if path == "/info.0.json":
            if self.latest_id is None:
                return httpx.Response(404)
            return httpx.Response(200, json=self.comics[self.latest_id])

        match = _ID_PATH.match(path)
        if match and int(match.group(1)) in self.comics:
            return httpx.Response(200, json=self.comics[int(match.group(1))])
        return httpx.Response(404)


@pytest.fixture
def upstream() -> FakeXKCD:
    return FakeXKCD()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def http_client(upstream):
    return httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))


@pytest.fixture
def fetcher(http_client) -> XKCDFetcher:
    return XKCDFetcher(http_client, base_url=BASE_URL)


@pytest.fixture
def cache(clock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture
def service(fetcher, cache) -> XKCDService:
    return XKCDService(fetcher, cache=cache, rng=FixedRandom(0.5))
