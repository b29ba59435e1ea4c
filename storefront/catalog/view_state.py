"""
User-controlled view state and the intents that change it.

``ViewState`` is immutable. Each intent is a plain function that takes
the current state (plus whatever catalogue facts it needs) and returns
the next state, or the same object when the intent is rejected. The
controller is the only caller; nothing else replaces the state.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Collection, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "all"
DEFAULT_PAGE_SIZE = 5


class SortKey(str, Enum):
    NONE = "none"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class ViewState(BaseModel):
    """Filter, sort, pagination cursor and expanded card."""

    model_config = ConfigDict(frozen=True)

    selected_category: str = ALL_CATEGORIES
    sort_key: SortKey = SortKey.NONE
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    current_page: int = Field(default=1, ge=1)
    expanded_id: Optional[int] = None

    @property
    def limit(self) -> int:
        """Number of items the current page cursor allows on screen."""
        return self.page_size * self.current_page


def set_category(view: ViewState, category: str, categories: Collection[str]) -> ViewState:
    """Select ``category`` and rewind pagination to the first page.

    Labels that are not in ``categories`` are ignored and the state is
    returned unchanged.
    """
    if category not in categories:
        logger.info("Ignoring unknown category %r", category)
        return view
    return view.model_copy(update={"selected_category": category, "current_page": 1})


def set_sort(view: ViewState, sort_key: SortKey) -> ViewState:
    return view.model_copy(update={"sort_key": SortKey(sort_key)})


def toggle_sort(view: ViewState) -> ViewState:
    # The sort button only flips between the two price orders.
    if view.sort_key == SortKey.PRICE_ASC:
        return set_sort(view, SortKey.PRICE_DESC)
    return set_sort(view, SortKey.PRICE_ASC)


def load_more(view: ViewState, total: int) -> ViewState:
    """Advance one page if the filtered set has items beyond the cursor.

    ``total`` is the size of the filtered set. Once every item is on
    screen repeated calls leave the state untouched.
    """
    if total <= view.limit:
        return view
    return view.model_copy(update={"current_page": view.current_page + 1})


def toggle_expand(view: ViewState, item_id: int, displayed_ids: Collection[int]) -> ViewState:
    if item_id not in displayed_ids:
        logger.debug("Ignoring expand for item %s which is not displayed", item_id)
        return view
    expanded = None if view.expanded_id == item_id else item_id
    return view.model_copy(update={"expanded_id": expanded})


def collapse_hidden(view: ViewState, displayed_ids: Collection[int]) -> ViewState:
    """Clear ``expanded_id`` when its item has left the displayed list."""
    if view.expanded_id is None or view.expanded_id in displayed_ids:
        return view
    return view.model_copy(update={"expanded_id": None})
