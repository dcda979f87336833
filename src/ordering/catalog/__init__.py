"""Catalog adapter abstraction: pluggable product lookups for checkout."""

from ordering import settings

_catalog_instance = None


def get_catalog():
    """Return the configured catalog adapter (singleton).

    Uses InMemoryCatalog by default. Other adapters are selected via the
    CATALOG_ADAPTER environment variable.
    """
    global _catalog_instance
    if _catalog_instance is None:
        adapter = settings.CATALOG_ADAPTER
        if adapter == "memory":
            from ordering.catalog.memory_adapter import InMemoryCatalog

            _catalog_instance = InMemoryCatalog()
        else:
            raise ValueError(f"Unknown catalog adapter: {adapter}")
    return _catalog_instance


def reset_catalog():
    """Reset the catalog singleton (useful for testing)."""
    global _catalog_instance
    _catalog_instance = None
