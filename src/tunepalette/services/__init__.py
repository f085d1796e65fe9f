"""Services facade for the palette.

The palette depends on these classes only, never on the catalog client
or its schemas directly.
"""

from tunepalette.services.search import SearchGateway, SearchService

__all__ = ["SearchGateway", "SearchService"]
