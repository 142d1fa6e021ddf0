"""Mapping catalog loader for saved-search to destination-table pairings.

Catalog file shape::

    {"mappings": [{"searchId": "...", "type": "...", "name": "...", "table": "...", "method": "..."}]}
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

from netsuite_sync.db import db_validate_table_name
from netsuite_sync.domain import MappingCatalogError, MappingEntry, SyncValidationError

_CATALOG_FIELDS: tuple[tuple[str, str], ...] = (
    ("searchId", "source_id"),
    ("table", "destination_table"),
    ("name", "display_name"),
    ("type", "kind"),
    ("method", "write_method"),
)


def catalog_parse_mappings(payload: Any) -> tuple[MappingEntry, ...]:
    """Validate a decoded catalog document and build mapping entries.

    Args:
        payload: Decoded JSON document.

    Returns:
        tuple[MappingEntry, ...]: Entries in catalog order.

    Raises:
        MappingCatalogError: Raised when the document shape, any entry, or the entry count is invalid.
    """

    if not isinstance(payload, dict) or not isinstance(payload.get("mappings"), list):
        raise MappingCatalogError("catalog must be an object with a 'mappings' array", field="mappings")

    raw_entries = payload["mappings"]
    if len(raw_entries) == 0:
        raise MappingCatalogError("catalog must contain at least one mapping", field="mappings")

    entries: list[MappingEntry] = []
    for entry_index, raw_entry in enumerate(raw_entries):
        if not isinstance(raw_entry, dict):
            raise MappingCatalogError(f"mapping {entry_index} must be an object", entry_index=entry_index)

        values: dict[str, str] = {}
        for catalog_field, entry_field in _CATALOG_FIELDS:
            raw_value = raw_entry.get(catalog_field)
            text_value = str(raw_value).strip() if raw_value is not None else ""
            if not text_value:
                raise MappingCatalogError(
                    f"mapping {entry_index} is missing required field '{catalog_field}'",
                    entry_index=entry_index,
                    field=catalog_field,
                )
            values[entry_field] = text_value

        try:
            db_validate_table_name(values["destination_table"])
        except SyncValidationError as error:
            raise MappingCatalogError(
                f"mapping {entry_index} has invalid table name {values['destination_table']!r}",
                entry_index=entry_index,
                field="table",
            ) from error

        entries.append(MappingEntry(**values))

    return tuple(entries)


def catalog_load_mappings(catalog_path: str | Path) -> tuple[MappingEntry, ...]:
    """Read and validate the mapping catalog file.

    Args:
        catalog_path: Path of the catalog JSON file.

    Returns:
        tuple[MappingEntry, ...]: Entries in catalog order.

    Raises:
        MappingCatalogError: Raised when the file is unreadable, not JSON, or invalid.
    """

    resolved_path = Path(catalog_path)
    try:
        payload = json.loads(resolved_path.read_text(encoding="utf-8"))
    except OSError as error:
        raise MappingCatalogError(f"mapping catalog not readable: {resolved_path}") from error
    except json.JSONDecodeError as error:
        raise MappingCatalogError(f"mapping catalog is not valid JSON: {resolved_path} ({error})") from error

    entries = catalog_parse_mappings(payload)
    logger.info(f"Loaded {len(entries)} mappings from {resolved_path}")
    return entries
