"""
Catalogue sources.

A source delivers the full item list and the list of category labels
through two independent coroutines. Two implementations are provided:

* ``FakeStoreSource`` talks to a Fake Store compatible HTTP API
  (``/products`` and ``/products/categories``) with ``httpx``.

* ``LocalCatalogSource`` reads the same JSON shape from a file on
  disk. It is used for offline development and tests, and derives the
  category list from the items themselves.

Whatever goes wrong while fetching (transport errors, non-200
responses, undecodable bodies, payloads of the wrong shape) surfaces
as ``FetchFailure``. Individual malformed entries inside an otherwise
valid list are logged and skipped.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, List, Optional, Protocol, Union

import httpx
from pydantic import ValidationError

from .schemas import Item, Rating

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://fakestoreapi.com"


class FetchFailure(Exception):
    """Raised when the catalogue or its categories cannot be fetched."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class CatalogSource(Protocol):
    async def fetch_all(self) -> List[Item]:
        ...

    async def fetch_categories(self) -> List[str]:
        ...

    async def aclose(self) -> None:
        ...


def _parse_item(entry: Any) -> Item:
    """Map one wire entry onto ``Item``.

    Raises ``ValueError`` (``ValidationError`` included) when the entry
    is not an object or misses required fields.
    """
    if not isinstance(entry, dict):
        raise ValueError(f"expected an object, got {type(entry).__name__}")
    raw_rating = entry.get("rating")
    rating = Rating(**raw_rating) if isinstance(raw_rating, dict) else Rating()
    return Item(
        id=entry.get("id"),
        title=entry.get("title") or "",
        price=entry.get("price"),
        description=entry.get("description") or "",
        category=entry.get("category"),
        image_url=entry.get("image") or "",
        rating=rating,
    )


def parse_items(data: Any) -> List[Item]:
    """Convert a decoded ``/products`` payload into items.

    The payload must be a list. Entries that fail validation and
    entries repeating an id already seen are dropped; the order of the
    remaining entries is kept.
    """
    if not isinstance(data, list):
        raise FetchFailure(f"expected a list of items, got {type(data).__name__}")
    items: List[Item] = []
    seen_ids = set()
    for index, entry in enumerate(data):
        try:
            item = _parse_item(entry)
        except (ValueError, ValidationError) as exc:
            logger.warning("Skipping malformed catalogue entry #%d: %s", index, exc)
            continue
        if item.id in seen_ids:
            logger.warning("Skipping duplicate catalogue id %s", item.id)
            continue
        seen_ids.add(item.id)
        items.append(item)
    return items


def parse_categories(data: Any) -> List[str]:
    if not isinstance(data, list):
        raise FetchFailure(f"expected a list of categories, got {type(data).__name__}")
    return [c for c in data if isinstance(c, str) and c]


def distinct_categories(items: List[Item]) -> List[str]:
    """Categories of ``items`` without duplicates, in first-seen order."""
    categories: List[str] = []
    for item in items:
        if item.category not in categories:
            categories.append(item.category)
    return categories


class FakeStoreSource:
    """HTTP catalogue source.

    An ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``); injected clients are left open; a client
    created here is closed by ``aclose()``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    async def _get_json(self, path: str) -> Any:
        """GET ``path`` below the base URL and decode the JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchFailure(f"request to {url} failed: {exc}") from exc
        if response.status_code != 200:
            raise FetchFailure(
                f"request to {url} returned status {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise FetchFailure(f"invalid JSON from {url}: {exc}") from exc

    async def fetch_all(self) -> List[Item]:
        return parse_items(await self._get_json("/products"))

    async def fetch_categories(self) -> List[str]:
        return parse_categories(await self._get_json("/products/categories"))

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


class LocalCatalogSource:
    """Catalogue read from a JSON file holding a list of items.

    The file is read and parsed once per load, in a worker thread:
    ``fetch_all`` and ``fetch_categories`` started together share the
    same read, and the categories are derived from the parsed items.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._pending: Optional[asyncio.Future] = None

    def _read(self) -> List[Item]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except OSError as exc:
            raise FetchFailure(f"cannot read {self.path}: {exc}") from exc
        except ValueError as exc:
            raise FetchFailure(f"invalid JSON in {self.path}: {exc}") from exc
        return parse_items(data)

    async def _items(self) -> List[Item]:
        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(asyncio.to_thread(self._read))
        # Shielded so that cancelling one caller does not abort the read
        # the other caller is waiting on.
        return await asyncio.shield(self._pending)

    async def fetch_all(self) -> List[Item]:
        return list(await self._items())

    async def fetch_categories(self) -> List[str]:
        return distinct_categories(await self._items())

    async def aclose(self) -> None:
        return None
