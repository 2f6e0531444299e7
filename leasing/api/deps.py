"""Shared FastAPI dependencies."""

from leasing.services.cache import ViewCache, view_cache


def get_view_cache() -> ViewCache:
    """Process-wide read-model cache."""
    return view_cache
