"""
Catalogue controller.

``CatalogController`` is the single owner of the catalogue store and
of the view state. The presentation layer reads ``snapshot()`` and
calls the intent methods; it never touches either piece of state
directly. After every intent and every store replacement the displayed
list is recomputed from scratch.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from .projection import filtered_count, project
from .schemas import CatalogView, Item, LoadResult
from .source import CatalogSource, FetchFailure
from .store import CatalogStore, load_catalog
from . import view_state as intents
from .view_state import DEFAULT_PAGE_SIZE, SortKey, ViewState

logger = logging.getLogger(__name__)


class CatalogController:
    def __init__(
        self,
        source: CatalogSource,
        page_size: int = DEFAULT_PAGE_SIZE,
        store: Optional[CatalogStore] = None,
    ):
        self.source = source
        self._store = store or CatalogStore.empty()
        self._view = ViewState(page_size=page_size)
        self._is_loading = False
        self._displayed: Tuple[Item, ...] = ()
        self._total = 0
        self._recompute()

    @property
    def store(self) -> CatalogStore:
        return self._store

    @property
    def view(self) -> ViewState:
        return self._view

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def displayed(self) -> Tuple[Item, ...]:
        return self._displayed

    def _recompute(self) -> None:
        self._displayed = project(self._store, self._view)
        self._total = filtered_count(self._store, self._view)
        self._view = intents.collapse_hidden(self._view, {item.id for item in self._displayed})

    def _apply(self, intent: str, view: ViewState) -> None:
        if view is self._view:
            return
        self._view = view
        self._recompute()
        logger.debug(
            "%s -> category=%s sort=%s page=%d expanded=%s (%d/%d shown)",
            intent,
            view.selected_category,
            view.sort_key.value,
            view.current_page,
            self._view.expanded_id,
            len(self._displayed),
            self._total,
        )

    async def load(self) -> LoadResult:
        """Fetch the catalogue and replace the store.

        Only one load runs at a time: a call made while another is in
        flight returns a skipped result without contacting the source.
        A failed item fetch is logged and leaves the store as it was.
        """
        if self._is_loading:
            logger.info("Catalogue load already in progress; not starting another")
            return LoadResult(skipped=True)

        self._is_loading = True
        try:
            store, categories_error = await load_catalog(self.source)
        except FetchFailure as exc:
            logger.error("Error fetching catalogue: %s", exc)
            return LoadResult(error=str(exc))
        finally:
            self._is_loading = False

        self._store = store
        if self._view.selected_category not in store.categories:
            self._view = self._view.model_copy(
                update={"selected_category": intents.ALL_CATEGORIES, "current_page": 1}
            )
        self._recompute()
        return LoadResult(
            loaded=True,
            item_count=len(store.items),
            category_count=len(store.categories),
            categories_error=str(categories_error) if categories_error else None,
        )

    def set_category(self, category: str) -> None:
        self._apply("set_category", intents.set_category(self._view, category, self._store.categories))

    def set_sort(self, sort_key: SortKey) -> None:
        self._apply("set_sort", intents.set_sort(self._view, sort_key))

    def toggle_sort(self) -> None:
        self._apply("toggle_sort", intents.toggle_sort(self._view))

    def load_more(self) -> None:
        if self._is_loading:
            logger.debug("Ignoring load_more while the catalogue is loading")
            return
        self._apply("load_more", intents.load_more(self._view, self._total))

    def toggle_expand(self, item_id: int) -> None:
        displayed_ids = {item.id for item in self._displayed}
        self._apply("toggle_expand", intents.toggle_expand(self._view, item_id, displayed_ids))

    def snapshot(self) -> CatalogView:
        view = self._view
        expanded_item = next(
            (item for item in self._displayed if item.id == view.expanded_id),
            None,
        )
        return CatalogView(
            items=list(self._displayed),
            categories=list(self._store.categories),
            selected_category=view.selected_category,
            sort_key=view.sort_key,
            page=view.current_page,
            page_size=view.page_size,
            total=self._total,
            has_more=self._total > len(self._displayed),
            is_loading=self._is_loading,
            expanded_id=view.expanded_id,
            expanded_item=expanded_item,
        )
