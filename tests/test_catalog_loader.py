"""Tests for mapping catalog loading and validation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from netsuite_sync.catalog import catalog_load_mappings, catalog_parse_mappings
from netsuite_sync.domain import MappingCatalogError, MappingEntry
from netsuite_sync.mapping import TABLE_IDENTIFIER_COLUMNS

_BUNDLED_CATALOG = Path(__file__).resolve().parents[1] / "mappings" / "searchToTable.json"


def _entry(**overrides: object) -> dict[str, object]:
    entry: dict[str, object] = {
        "searchId": "customsearch_sync_invoices",
        "type": "transaction",
        "name": "Invoices",
        "table": "invoices",
        "method": "upsert",
    }
    entry.update(overrides)
    return entry


def test_catalog_parse_mappings_keeps_order_and_fields() -> None:
    """Build entries in catalog order with every field mapped."""

    entries = catalog_parse_mappings({"mappings": [_entry(), _entry(table="partners", name="Partners")]})

    assert entries[0] == MappingEntry(
        source_id="customsearch_sync_invoices",
        destination_table="invoices",
        display_name="Invoices",
        kind="transaction",
        write_method="upsert",
    )
    assert [entry.destination_table for entry in entries] == ["invoices", "partners"]


@pytest.mark.parametrize(
    ("payload", "expected_field", "expected_index"),
    [
        ([], "mappings", None),
        ({"mappings": {}}, "mappings", None),
        ({"mappings": []}, "mappings", None),
        ({"mappings": [_entry(), "not-an-object"]}, None, 1),
        ({"mappings": [_entry(searchId="  ")]}, "searchId", 0),
        ({"mappings": [_entry(), _entry(method=None)]}, "method", 1),
        ({"mappings": [_entry(table="invoices; drop table")]}, "table", 0),
    ],
)
def test_catalog_parse_mappings_rejects_invalid_documents(
    payload: object,
    expected_field: str | None,
    expected_index: int | None,
) -> None:
    """Name the offending entry and field for every invalid catalog shape.

    Args:
        payload: Decoded catalog candidate.
        expected_field: Field reported by the error.
        expected_index: Entry index reported by the error.

    Returns:
        None: Assertions validate error attributes.

    Raises:
        AssertionError: Raised when validation metadata differs.
    """

    with pytest.raises(MappingCatalogError) as error_info:
        catalog_parse_mappings(payload)

    assert error_info.value.field == expected_field
    assert error_info.value.entry_index == expected_index
    assert error_info.value.error_kind == "catalog"


def test_catalog_load_mappings_reports_unreadable_and_malformed_files(tmp_path: Path) -> None:
    malformed_path = tmp_path / "catalog.json"
    malformed_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(MappingCatalogError, match="not readable"):
        catalog_load_mappings(tmp_path / "missing.json")
    with pytest.raises(MappingCatalogError, match="not valid JSON"):
        catalog_load_mappings(malformed_path)


def test_catalog_load_mappings_reads_json_file(tmp_path: Path) -> None:
    catalog_path = tmp_path / "catalog.json"
    catalog_path.write_text(json.dumps({"mappings": [_entry()]}), encoding="utf-8")

    assert len(catalog_load_mappings(catalog_path)) == 1


def test_catalog_bundled_file_covers_every_known_table() -> None:
    """Ship one catalog entry per table with explicit normalization."""

    entries = catalog_load_mappings(_BUNDLED_CATALOG)

    assert {entry.destination_table for entry in entries} == set(TABLE_IDENTIFIER_COLUMNS)
    assert all(entry.write_method == "upsert" for entry in entries)
