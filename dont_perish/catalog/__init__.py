"""
Catalog input and in-memory lifecycle.

Modules
-------
loader  : load_catalog() -- JSON / CSV files -> validated Product list.
session : InventorySession -- add / update / ignore / sell / delete.
"""

from dont_perish.catalog.loader import load_catalog
from dont_perish.catalog.session import InventorySession, ProductNotFoundError

__all__ = ["InventorySession", "ProductNotFoundError", "load_catalog"]
