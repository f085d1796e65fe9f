"""Catalog search: remote client, payload schemas and result classification."""

from tunepalette.search.classifier import classify
from tunepalette.search.client import CatalogSearchClient, parse_search_response

__all__ = ["CatalogSearchClient", "classify", "parse_search_response"]
