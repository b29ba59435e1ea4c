import asyncio
from typing import List, Optional

import pytest

from storefront.catalog.schemas import Item, Rating
from storefront.catalog.source import FetchFailure
from storefront.catalog.store import CatalogStore


def make_item(item_id: int, price: float, category: str, title: Optional[str] = None) -> Item:
    return Item(
        id=item_id,
        title=title or f"Item {item_id}",
        price=price,
        description=f"Description of item {item_id}",
        category=category,
        image_url=f"https://img.example/{item_id}.jpg",
        rating=Rating(rate=4.0, count=10),
    )


class StubSource:
    """In-memory source. ``release`` must be set before fetches return
    when ``blocking`` is true."""

    def __init__(
        self,
        items: List[Item],
        categories: Optional[List[str]] = None,
        items_error: Optional[FetchFailure] = None,
        categories_error: Optional[FetchFailure] = None,
        blocking: bool = False,
    ):
        self.items = items
        self.categories = categories if categories is not None else sorted({i.category for i in items})
        self.items_error = items_error
        self.categories_error = categories_error
        self.release = asyncio.Event() if blocking else None
        self.fetch_all_calls = 0
        self.closed = False

    async def fetch_all(self) -> List[Item]:
        self.fetch_all_calls += 1
        if self.release is not None:
            await self.release.wait()
        if self.items_error is not None:
            raise self.items_error
        return list(self.items)

    async def fetch_categories(self) -> List[str]:
        if self.categories_error is not None:
            raise self.categories_error
        return list(self.categories)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def scenario_items() -> List[Item]:
    return [
        make_item(1, 10, "a"),
        make_item(2, 5, "b"),
        make_item(3, 20, "a"),
    ]


@pytest.fixture
def scenario_store(scenario_items) -> CatalogStore:
    return CatalogStore.build(scenario_items, ["a", "b"])


@pytest.fixture
def mixed_items() -> List[Item]:
    # Repeated prices check that sorting keeps ties in source order.
    return [
        make_item(10, 30, "shoes"),
        make_item(11, 15, "hats"),
        make_item(12, 30, "hats"),
        make_item(13, 5, "shoes"),
        make_item(14, 15, "shoes"),
        make_item(15, 99.5, "bags"),
        make_item(16, 5, "hats"),
        make_item(17, 42, "shoes"),
        make_item(18, 15, "bags"),
    ]


@pytest.fixture
def mixed_store(mixed_items) -> CatalogStore:
    return CatalogStore.build(mixed_items, ["shoes", "hats", "bags"])
