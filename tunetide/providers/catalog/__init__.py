"""Catalog provider implementations."""

from tunetide.providers.catalog.sqlite_catalog_provider import SQLiteCatalogProvider

__all__ = ["SQLiteCatalogProvider"]
