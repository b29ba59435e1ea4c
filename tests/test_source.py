import json
import logging
from pathlib import Path

import httpx
import pytest

from storefront.catalog.source import (
    FakeStoreSource,
    FetchFailure,
    LocalCatalogSource,
    distinct_categories,
    parse_items,
)
from storefront.config import SAMPLE_DATA_FILE

PRODUCTS = [
    {
        "id": 1,
        "title": "Backpack",
        "price": 109.95,
        "description": "Everyday pack",
        "category": "men's clothing",
        "image": "https://img.example/1.jpg",
        "rating": {"rate": 3.9, "count": 120},
    },
    {
        "id": 2,
        "title": "Bracelet",
        "price": 695,
        "description": "Dragon chain",
        "category": "jewelery",
        "image": "https://img.example/2.jpg",
        "rating": {"rate": 4.6, "count": 400},
    },
]
CATEGORIES = ["electronics", "jewelery", "men's clothing", "women's clothing"]


def make_source(handler) -> FakeStoreSource:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FakeStoreSource("https://store.example/", client=client)


def routes(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/products":
        return httpx.Response(200, json=PRODUCTS)
    if request.url.path == "/products/categories":
        return httpx.Response(200, json=CATEGORIES)
    return httpx.Response(404)


@pytest.mark.asyncio
async def test_fetch_all_maps_wire_fields():
    source = make_source(routes)
    items = await source.fetch_all()
    assert [item.id for item in items] == [1, 2]
    first = items[0]
    assert first.image_url == "https://img.example/1.jpg"
    assert first.price == 109.95
    assert first.rating.rate == 3.9
    assert first.rating.count == 120


@pytest.mark.asyncio
async def test_fetch_categories_returns_source_list_verbatim():
    source = make_source(routes)
    assert await source.fetch_categories() == CATEGORIES


@pytest.mark.asyncio
async def test_non_200_raises_with_status_code():
    source = make_source(lambda request: httpx.Response(503))
    with pytest.raises(FetchFailure) as excinfo:
        await source.fetch_all()
    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_transport_error_raises_fetch_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    source = make_source(handler)
    with pytest.raises(FetchFailure) as excinfo:
        await source.fetch_categories()
    assert excinfo.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_raises_fetch_failure():
    source = make_source(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(FetchFailure):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_wrong_payload_shape_raises_fetch_failure():
    source = make_source(lambda request: httpx.Response(200, json={"products": PRODUCTS}))
    with pytest.raises(FetchFailure):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_injected_client_is_not_closed():
    client = httpx.AsyncClient(transport=httpx.MockTransport(routes))
    source = FakeStoreSource("https://store.example", client=client)
    await source.aclose()
    assert not client.is_closed
    await client.aclose()


def test_parse_items_skips_malformed_and_duplicate_entries():
    data = [
        PRODUCTS[0],
        {"id": 3, "title": "No price", "category": "x"},
        {"id": 4, "title": "Negative", "price": -1, "category": "x"},
        "not an object",
        dict(PRODUCTS[0], title="Duplicate"),
        PRODUCTS[1],
    ]
    items = parse_items(data)
    assert [item.id for item in items] == [1, 2]
    assert items[0].title == "Backpack"


def test_parse_items_defaults_missing_rating():
    item = parse_items([{"id": 9, "title": "Plain", "price": 1, "category": "x"}])[0]
    assert item.rating.rate == 0
    assert item.rating.count == 0
    assert item.image_url == ""


@pytest.mark.asyncio
async def test_local_source_reads_file_and_derives_categories(tmp_path: Path):
    path = tmp_path / "products.json"
    path.write_text(json.dumps(PRODUCTS + [dict(PRODUCTS[0], id=3)]), encoding="utf-8")
    source = LocalCatalogSource(path)
    items = await source.fetch_all()
    assert [item.id for item in items] == [1, 2, 3]
    assert await source.fetch_categories() == ["men's clothing", "jewelery"]


@pytest.mark.asyncio
async def test_local_source_missing_file(tmp_path: Path):
    source = LocalCatalogSource(tmp_path / "absent.json")
    with pytest.raises(FetchFailure):
        await source.fetch_all()


@pytest.mark.asyncio
async def test_local_source_bad_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("[{", encoding="utf-8")
    with pytest.raises(FetchFailure):
        await LocalCatalogSource(path).fetch_categories()


@pytest.mark.asyncio
async def test_bundled_sample_catalogue_loads():
    items = await LocalCatalogSource(SAMPLE_DATA_FILE).fetch_all()
    assert len(items) == 8
    assert distinct_categories(items) == ["men's clothing", "jewelery", "electronics", "women's clothing"]


@pytest.mark.asyncio
async def test_local_source_reads_file_once_per_load(tmp_path: Path, monkeypatch, caplog):
    from storefront.catalog.store import load_catalog

    path = tmp_path / "products.json"
    path.write_text(json.dumps(PRODUCTS + [{"id": 7, "title": "No price", "category": "x"}]), encoding="utf-8")
    source = LocalCatalogSource(path)
    reads = []
    original_read = LocalCatalogSource._read

    def counting_read(self):
        reads.append(self.path)
        return original_read(self)

    monkeypatch.setattr(LocalCatalogSource, "_read", counting_read)
    caplog.set_level(logging.WARNING, logger="storefront.catalog.source")

    store, categories_error = await load_catalog(source)

    assert categories_error is None
    assert [item.id for item in store.items] == [1, 2]
    assert store.categories == ("all", "men's clothing", "jewelery")
    assert len(reads) == 1
    skipped = [r for r in caplog.records if "Skipping malformed" in r.getMessage()]
    assert len(skipped) == 1
