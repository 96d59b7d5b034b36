"""
Repository subpackage for the expiry notification feature.
"""

from .grocery_repository import (
    ExpiryStore,
    GroceryRepository,
    grocery_repository,
)

__all__ = ["ExpiryStore", "GroceryRepository", "grocery_repository"]
