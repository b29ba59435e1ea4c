"""
In-memory catalogue snapshot.

``CatalogStore`` holds the last catalogue that was fetched
successfully. It is immutable: a load produces a whole new store and
the controller swaps it in with a single assignment, so readers never
see items from one fetch next to categories from another.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .schemas import Item
from .source import CatalogSource, FetchFailure
from .view_state import ALL_CATEGORIES

logger = logging.getLogger(__name__)


class CatalogStore(BaseModel):
    model_config = ConfigDict(frozen=True)

    items: Tuple[Item, ...] = ()
    # Ordered for display; "all" is always first.
    categories: Tuple[str, ...] = (ALL_CATEGORIES,)

    @classmethod
    def empty(cls) -> "CatalogStore":
        return cls()

    @classmethod
    def build(cls, items: Iterable[Item], categories: Iterable[str] = ()) -> "CatalogStore":
        """Create a store, prefixing the synthetic ``"all"`` category.

        ``categories`` is trusted as given: it is not checked against
        the categories the items actually use. Duplicates are dropped.
        """
        labels = [ALL_CATEGORIES]
        for category in categories:
            if category not in labels:
                labels.append(category)
        return cls(items=tuple(items), categories=tuple(labels))

    def get(self, item_id: int) -> Optional[Item]:
        return next((item for item in self.items if item.id == item_id), None)


async def _fetch_categories(source: CatalogSource) -> Tuple[Tuple[str, ...], Optional[FetchFailure]]:
    try:
        return tuple(await source.fetch_categories()), None
    except FetchFailure as exc:
        logger.warning("Category fetch failed, only %r will be offered: %s", ALL_CATEGORIES, exc)
        return (), exc


async def load_catalog(source: CatalogSource) -> Tuple[CatalogStore, Optional[FetchFailure]]:
    """Fetch items and categories from ``source`` concurrently.

    Parameters
    ----------
    source : CatalogSource
        Where to fetch from.

    Returns
    -------
    Tuple[CatalogStore, Optional[FetchFailure]]
        The new store and the category failure, if the category list
        could not be fetched. In that case the store offers ``"all"``
        only.

    Raises
    ------
    FetchFailure
        When the item list cannot be fetched. The category fetch is
        cancelled and awaited first, and nothing is built, so the
        caller keeps its previous store.
    """
    items_task = asyncio.create_task(source.fetch_all())
    categories_task = asyncio.create_task(_fetch_categories(source))
    try:
        items = await items_task
    except BaseException:
        # Nothing may stay in flight once this returns or raises.
        categories_task.cancel()
        await asyncio.gather(categories_task, return_exceptions=True)
        raise
    categories, categories_error = await categories_task
    store = CatalogStore.build(items, categories)
    logger.info(
        "Loaded catalogue: %d items, %d categories",
        len(store.items),
        len(store.categories) - 1,
    )
    return store, categories_error
