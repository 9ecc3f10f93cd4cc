"""Search index generation."""

from .indexer import build_search_index, write_search_index

__all__ = ["build_search_index", "write_search_index"]
