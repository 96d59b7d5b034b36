"""
HTTP routes for the expiry notification feature.
"""

from .router import router

__all__ = ["router"]
