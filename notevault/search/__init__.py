from .index import IndexState, SearchIndex

__all__ = ["IndexState", "SearchIndex"]
