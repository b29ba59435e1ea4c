"""
Route definitions for the catalogue view.

Endpoints under /api/catalog:
- GET  /view                      : what the list screen shows right now
- POST /category                  : select a category (resets to page 1)
- POST /sort                      : choose a sort order
- POST /sort/toggle               : flip between ascending and descending price
- POST /more                      : show one more page
- POST /items/{item_id}/toggle    : expand or collapse an item card
- GET  /items/{item_id}           : full detail of one catalogue item

Every intent answers with the new view so a client can render it
without a second round trip. Handlers are coroutines: they all run on
the event loop thread, one at a time, which is what keeps the
controller free of locks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from .controller import CatalogController
from .schemas import CatalogView, Item
from .view_state import SortKey

router = APIRouter(prefix="/api/catalog", tags=["catalog"])


class CategoryRequest(BaseModel):
    category: str


class SortRequest(BaseModel):
    sort_key: SortKey


def get_controller(request: Request) -> CatalogController:
    return request.app.state.controller


@router.get("/view", response_model=CatalogView)
async def read_view(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    return controller.snapshot()


@router.post("/category", response_model=CatalogView)
async def change_category(
    body: CategoryRequest,
    controller: CatalogController = Depends(get_controller),
) -> CatalogView:
    controller.set_category(body.category)
    return controller.snapshot()


@router.post("/sort", response_model=CatalogView)
async def change_sort(
    body: SortRequest,
    controller: CatalogController = Depends(get_controller),
) -> CatalogView:
    controller.set_sort(body.sort_key)
    return controller.snapshot()


@router.post("/sort/toggle", response_model=CatalogView)
async def flip_sort(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    controller.toggle_sort()
    return controller.snapshot()


@router.post("/more", response_model=CatalogView)
async def load_more(controller: CatalogController = Depends(get_controller)) -> CatalogView:
    controller.load_more()
    return controller.snapshot()


@router.post("/items/{item_id}/toggle", response_model=CatalogView)
async def toggle_item(
    item_id: int,
    controller: CatalogController = Depends(get_controller),
) -> CatalogView:
    controller.toggle_expand(item_id)
    return controller.snapshot()


@router.get("/items/{item_id}", response_model=Item)
async def get_item(
    item_id: int,
    controller: CatalogController = Depends(get_controller),
) -> Item:
    item = controller.store.get(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Item not found")
    return item
