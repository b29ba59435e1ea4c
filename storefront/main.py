# storefront/main.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from .catalog import CatalogController, catalog_router
from .catalog.source import CatalogSource
from .config import Settings, build_source, configure_logging, get_settings


def create_app(settings: Optional[Settings] = None, source: Optional[CatalogSource] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        catalog_source = source or build_source(settings)
        controller = CatalogController(catalog_source, page_size=settings.PAGE_SIZE)
        app.state.controller = controller
        await controller.load()
        try:
            yield
        finally:
            # The source is only closed here when this app created it.
            if source is None:
                await catalog_source.aclose()

    app = FastAPI(
        title="Storefront catalogue",
        description=(
            "Product catalogue with category filter, price sort, "
            "incremental loading and a single expanded item."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(catalog_router)

    @app.get("/")
    async def health_check(request: Request):
        controller: CatalogController = request.app.state.controller
        return {
            "status": "ok",
            "items": len(controller.store.items),
            "loading": controller.is_loading,
        }

    return app


app = create_app()


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Serve ``app`` with uvicorn (``pip install storefront-catalog[server]``)."""
    import uvicorn

    configure_logging(get_settings().LOG_LEVEL)
    uvicorn.run(app, host=host, port=port, log_config=None)
