"""xkcd JSON API client.

One outbound GET per call against the fixed info endpoint:

    {base_url}/info.0.json          latest comic
    {base_url}/{id}/info.0.json     specific comic

Request and HTTP failures are translated into typed ComicErrors. No caching
happens here; that is XKCDService's job.
"""

import json
import logging
from typing import Literal, TypedDict

import httpx

from errors import FetchError, HttpError, NotFoundError, ParseError

logger = logging.getLogger(__name__)

LATEST = "latest"

REQUIRED_FIELDS = ("num", "title", "img", "alt")


class ComicRecord(TypedDict):
    id: int
    title: str
    img: str
    alt: str
    transcript: str
    # Passed through as upstream sends them; None when omitted.
    year: str | None
    month: str | None
    day: str | None
    safe_title: str | None


def process_comic(raw: dict) -> ComicRecord:
    """Map a raw xkcd payload onto the canonical comic record."""
    return {
        "id": raw["num"],
        "title": raw["title"],
        "img": raw["img"],
        "alt": raw["alt"],
        "transcript": raw.get("transcript") or "",
        "year": raw.get("year"),
        "month": raw.get("month"),
        "day": raw.get("day"),
        "safe_title": raw.get("safe_title"),
    }


class XKCDFetcher:
    def __init__(self, client: httpx.AsyncClient, base_url: str = "https://xkcd.com"):
        self.client = client
        self.base_url = base_url.rstrip("/")

    def url_for(self, comic_id: int | Literal["latest"]) -> str:
        if comic_id == LATEST:
            return f"{self.base_url}/info.0.json"
        return f"{self.base_url}/{comic_id}/info.0.json"

    async def fetch_raw(self, comic_id: int | Literal["latest"]) -> dict:
        """Fetch the raw payload for a comic id or the "latest" sentinel."""
        url = self.url_for(comic_id)
        logger.debug("GET %s", url)
        try:
            resp = await self.client.get(url)
        except httpx.RequestError as e:
            logger.warning("xkcd request failed for %s: %s", url, e)
            raise FetchError(e) from e

        if resp.status_code == 404 and comic_id != LATEST:
            raise NotFoundError(comic_id)
        if not resp.is_success:
            raise HttpError(resp.status_code, resp.reason_phrase)

        try:
            payload = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ParseError(f"Invalid JSON from {url}: {e}") from e

        if not isinstance(payload, dict):
            raise ParseError(f"Expected a JSON object from {url}")
        missing = [field for field in REQUIRED_FIELDS if field not in payload]
        if missing:
            raise ParseError(f"Comic payload missing fields: {', '.join(missing)}")
        num = payload["num"]
        if isinstance(num, bool) or not isinstance(num, int) or num < 1:
            raise ParseError(f"Comic payload has invalid num: {num!r}")
        return payload

    async def fetch(self, comic_id: int | Literal["latest"]) -> ComicRecord:
        return process_comic(await self.fetch_raw(comic_id))
