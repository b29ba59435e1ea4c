"""
Pydantic schema definitions for the catalog module.

``Item`` mirrors one product as the remote catalogue serves it. Items
are frozen: once fetched they are never edited, only replaced together
with the rest of the catalogue. ``CatalogView`` is the read-only
snapshot handed to the presentation layer after every intent, and
``LoadResult`` reports the outcome of a catalogue load.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .view_state import SortKey


class Rating(BaseModel):
    """Average customer rating and number of reviews for an item."""

    model_config = ConfigDict(frozen=True)

    rate: float = Field(default=0.0, ge=0, le=5)
    count: int = Field(default=0, ge=0)


class Item(BaseModel):
    """A single catalogue entry.

    ``image_url`` is delivered as ``image`` by the remote source; the
    sources map it explicitly. ``price`` is never negative. Items
    without a rating get an empty one (0.0 from 0 reviews) so the
    detail view always has something to show.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    price: float = Field(ge=0)
    description: str = ""
    category: str
    image_url: str = ""
    rating: Rating = Field(default_factory=Rating)


class CatalogView(BaseModel):
    """What the presentation layer renders.

    ``total`` is the size of the filtered set, so ``has_more`` tells a
    list view whether scrolling to the end should request more items.
    ``expanded_item`` carries the detail of the expanded card, if any.
    """

    items: List[Item]
    categories: List[str]
    selected_category: str
    sort_key: SortKey
    page: int
    page_size: int
    total: int
    has_more: bool
    is_loading: bool
    expanded_id: Optional[int] = None
    expanded_item: Optional[Item] = None


class LoadResult(BaseModel):
    """Outcome of ``CatalogController.load()``."""

    loaded: bool = False
    # True when another load was already in flight and nothing was fetched.
    skipped: bool = False
    item_count: int = 0
    category_count: int = 0
    error: Optional[str] = None
    categories_error: Optional[str] = None
