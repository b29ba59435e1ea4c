"""
Filter, sort and paginate the catalogue into the list shown on screen.

Every function here is pure: the same store and view state always give
the same tuple in the same order, so callers may cache the result
until either input is replaced.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from .schemas import Item
from .store import CatalogStore
from .view_state import ALL_CATEGORIES, SortKey, ViewState


def filter_items(items: Iterable[Item], category: str) -> Tuple[Item, ...]:
    """Keep the items of ``category`` in source order.

    ``"all"`` keeps everything.
    """
    if category == ALL_CATEGORIES:
        return tuple(items)
    return tuple(item for item in items if item.category == category)


def sort_items(items: Iterable[Item], sort_key: SortKey) -> Tuple[Item, ...]:
    # sorted() is stable, also with reverse=True, so equal prices keep
    # their relative order.
    if sort_key == SortKey.PRICE_ASC:
        return tuple(sorted(items, key=lambda item: item.price))
    if sort_key == SortKey.PRICE_DESC:
        return tuple(sorted(items, key=lambda item: item.price, reverse=True))
    return tuple(items)


def filtered_count(store: CatalogStore, view: ViewState) -> int:
    return len(filter_items(store.items, view.selected_category))


def project(store: CatalogStore, view: ViewState) -> Tuple[Item, ...]:
    """Return the items to render for ``view``.

    Parameters
    ----------
    store : CatalogStore
        The last successfully loaded catalogue.
    view : ViewState
        Active category, sort order and page cursor.

    Returns
    -------
    Tuple[Item, ...]
        At most ``view.page_size * view.current_page`` items: the
        filtered set, sorted, cut after the current page.
    """
    filtered = filter_items(store.items, view.selected_category)
    ordered = sort_items(filtered, view.sort_key)
    return ordered[: view.limit]
