"""Services package: store resolution and caching."""
from .resolver import StoreResolver

__all__ = ["StoreResolver"]
