"""Work item document store and its live cache."""

from proflow.store.base import ItemStore
from proflow.store.cache import ItemCache
from proflow.store.sql import SqlItemStore

__all__ = ["ItemStore", "ItemCache", "SqlItemStore"]
