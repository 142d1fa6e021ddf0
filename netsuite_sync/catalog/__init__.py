"""Mapping catalog package."""

from .loader import catalog_load_mappings, catalog_parse_mappings

__all__ = ["catalog_load_mappings", "catalog_parse_mappings"]
