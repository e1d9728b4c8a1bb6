"""Content stores that answer load-items broadcasts."""

from content_core.stores.memory import InMemoryContentStore

__all__ = ["InMemoryContentStore"]
