"""
Catalog package for the storefront.

The pieces, from the bottom up: ``source`` fetches products and
category labels, ``store`` keeps the last catalogue that loaded,
``view_state`` holds what the shopper picked (category, price order,
how far they scrolled, which card is open) and ``projection`` turns
the two into the list on screen. ``controller`` owns all of that
state, and ``router`` exposes it over HTTP.
"""

from .controller import CatalogController  # noqa: F401
from .router import router as catalog_router  # noqa: F401
