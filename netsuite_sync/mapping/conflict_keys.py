"""Conflict-column policy for destination upserts."""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

DEFAULT_CONFLICT_COLUMN: Final[str] = "id"
LINE_KEY_CONFLICT_COLUMN: Final[str] = "pkey"

TABLE_IDENTIFIER_COLUMNS: Final[Mapping[str, str]] = MappingProxyType(
    {
        "cash_sales": "cash_sale_internal_id",
        "credit_memos": "credit_memo_internal_id",
        "customers": "customer_internal_id",
        "invoices": "invoice_internal_id",
        "invoices_detailed": "invoice_internal_id",
        "item_fulfillments": "item_fulfillment_internal_id",
        "item_fulfillments_detailed": "item_fulfillment_internal_id",
        "partners": "partner_internal_id",
        "sales_orders": "sales_order_internal_id",
        "sales_orders_detailed": "sales_order_internal_id",
        "forecast": "pkey",
    }
)

# Line-item tables repeat the parent id per line, so they upsert on the composite line key.
LINE_KEY_TABLES: Final[frozenset[str]] = frozenset(
    {"invoices_detailed", "item_fulfillments_detailed", "sales_orders_detailed"}
)


def mapping_table_identifier_column(destination_table: str) -> str:
    """Return the identifier column recorded for a table, defaulting to `id`."""

    return TABLE_IDENTIFIER_COLUMNS.get(destination_table, DEFAULT_CONFLICT_COLUMN)


def mapping_resolve_conflict_column(destination_table: str) -> str:
    """Resolve the upsert conflict column for one destination table.

    Args:
        destination_table: Destination table name.

    Returns:
        str: Conflict column name; `pkey` for line-item tables, `id` for unknown tables.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if destination_table in LINE_KEY_TABLES:
        return LINE_KEY_CONFLICT_COLUMN
    return mapping_table_identifier_column(destination_table)
