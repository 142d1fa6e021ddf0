"""Table normalization descriptors and the registry that resolves them.

Explicit descriptors cover every catalogued destination table. Tables without
an explicit descriptor fall through to the heuristic descriptor, which infers
field types from column names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from netsuite_sync.domain import RawRow, SyncValidationError, TypedRow

from .coercion import mapping_as_date, mapping_as_float, mapping_as_integer, mapping_as_string
from .interfaces import (
    IDENTIFIER_STRATEGIES,
    IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
    IDENTIFIER_STRATEGY_SOURCE,
    IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
    Coercion,
    FieldRule,
    TableDescriptorPort,
)

LINE_KEY_COLUMN = "pkey"
TIMESTAMP_COLUMN = "timestamp"


@dataclass(frozen=True)
class ExplicitTableDescriptor:
    """Field-by-field normalization descriptor for one known destination table.

    Attributes:
        table_name: Destination table name.
        field_rules: Ordered field projections.
        identifier_column: Destination column carrying the row identifier.
        identifier_strategy: How the identifier is obtained (`source`,
            `synthetic_sequential`, `composite_line_key`).
        line_key_parent_field: Source column holding the parent id for composite line keys.
    """

    table_name: str
    field_rules: tuple[FieldRule, ...]
    identifier_column: str
    identifier_strategy: str = IDENTIFIER_STRATEGY_SOURCE
    line_key_parent_field: str | None = None

    def __post_init__(self) -> None:
        if self.identifier_strategy not in IDENTIFIER_STRATEGIES:
            raise ValueError(f"unsupported identifier_strategy: {self.identifier_strategy}")
        if self.identifier_strategy == IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY and not self.line_key_parent_field:
            raise ValueError("composite line keys require line_key_parent_field")

    def descriptor_normalize_row(self, raw_row: RawRow, row_index: int, timestamp: str) -> TypedRow:
        """Project one raw row through the field rules and apply the identifier strategy.

        Args:
            raw_row: Raw source row.
            row_index: Zero-based position of the row within its batch.
            timestamp: ISO-8601 UTC normalization time.

        Returns:
            TypedRow: Typed destination row carrying `timestamp`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        typed_row: TypedRow = {}
        for field_rule in self.field_rules:
            typed_row[field_rule.destination_field] = field_rule.coercion(field_rule.rule_pick_source_value(raw_row))

        if self.identifier_strategy == IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL:
            # Only stable while the source returns rows in the same order.
            if typed_row.get(self.identifier_column) is None:
                typed_row[self.identifier_column] = row_index + 1
        elif self.identifier_strategy == IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY:
            typed_row[LINE_KEY_COLUMN] = self._descriptor_build_line_key(raw_row, row_index)

        typed_row[TIMESTAMP_COLUMN] = timestamp
        return typed_row

    def _descriptor_build_line_key(self, raw_row: RawRow, row_index: int) -> str:
        """Return the source line key, or `"{parent}_{line}"` with positional fallbacks."""

        source_key = mapping_as_integer(raw_row.get(LINE_KEY_COLUMN))
        if source_key is not None:
            return str(source_key)

        parent_id = mapping_as_integer(raw_row.get(self.line_key_parent_field or ""))
        line_id = mapping_as_integer(raw_row.get("line_id"))
        parent_part = parent_id if parent_id is not None else row_index + 1
        line_part = line_id if line_id is not None else row_index + 1
        return f"{parent_part}_{line_part}"

    def descriptor_synthetic_id_collisions(self, raw_rows: list[RawRow], typed_rows: list[TypedRow]) -> list[Any]:
        """Return positional identifiers that equal an identifier the source supplied.

        Args:
            raw_rows: Raw rows in source order.
            typed_rows: Rows produced by `descriptor_normalize_row` for the same batch.

        Returns:
            list[Any]: Colliding identifier values in ascending order; empty for other strategies.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if self.identifier_strategy != IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL:
            return []

        identifier_rule = next(
            (rule for rule in self.field_rules if rule.destination_field == self.identifier_column),
            None,
        )
        source_ids: set[Any] = set()
        synthetic_ids: set[Any] = set()
        for raw_row, typed_row in zip(raw_rows, typed_rows):
            source_value = None
            if identifier_rule is not None:
                source_value = identifier_rule.coercion(identifier_rule.rule_pick_source_value(raw_row))
            if source_value is None:
                synthetic_ids.add(typed_row.get(self.identifier_column))
            else:
                source_ids.add(source_value)
        return sorted(synthetic_ids & source_ids)


class HeuristicTableDescriptor:
    """Name-driven normalization for tables without an explicit descriptor."""

    table_name = "*"

    def descriptor_normalize_row(self, raw_row: RawRow, row_index: int, timestamp: str) -> TypedRow:
        """Coerce every source column by its name and add a synthetic `id` when no identifier exists.

        Args:
            raw_row: Raw source row.
            row_index: Zero-based position of the row within its batch.
            timestamp: ISO-8601 UTC normalization time.

        Returns:
            TypedRow: Typed destination row carrying `timestamp`.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        typed_row: TypedRow = {}
        for column_name, value in raw_row.items():
            lowered_name = column_name.lower()
            if lowered_name == "id" or "_id" in lowered_name or " id" in lowered_name or "internal_id" in lowered_name:
                typed_row[column_name] = mapping_as_integer(value)
            elif "amount" in lowered_name or "price" in lowered_name or "total" in lowered_name:
                typed_row[column_name] = mapping_as_float(value)
            elif "date" in lowered_name:
                typed_row[column_name] = mapping_as_date(value)
            else:
                typed_row[column_name] = mapping_as_string(value)

        has_internal_identifier = any("internal_id" in column_name.lower() for column_name in typed_row)
        if typed_row.get("id") is None and not has_internal_identifier:
            typed_row["id"] = row_index + 1

        typed_row[TIMESTAMP_COLUMN] = timestamp
        return typed_row

    def descriptor_synthetic_id_collisions(self, raw_rows: list[RawRow], typed_rows: list[TypedRow]) -> list[Any]:
        """Return positional `id` values that equal an `id` the source supplied."""

        source_ids: set[Any] = set()
        synthetic_ids: set[Any] = set()
        for raw_row, typed_row in zip(raw_rows, typed_rows):
            if "id" not in typed_row:
                continue
            source_value = mapping_as_integer(raw_row.get("id"))
            if source_value is None:
                synthetic_ids.add(typed_row["id"])
            else:
                source_ids.add(source_value)
        return sorted(synthetic_ids & source_ids)


class NormalizationRegistry:
    """Resolve destination tables to normalization descriptors."""

    def __init__(
        self,
        descriptors: Mapping[str, TableDescriptorPort],
        default_descriptor: TableDescriptorPort | None = None,
    ):
        """Initialize registry.

        Args:
            descriptors: Explicit descriptors keyed by destination table name.
            default_descriptor: Descriptor for unregistered tables; heuristic when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when descriptors is None.
        """

        if descriptors is None:
            raise ValueError("descriptors must not be None")

        self._descriptors = dict(descriptors)
        self._default_descriptor = default_descriptor or HeuristicTableDescriptor()

    def registry_resolve(self, destination_table: str) -> TableDescriptorPort:
        """Return the descriptor registered for a table, or the default descriptor.

        Args:
            destination_table: Destination table name.

        Returns:
            TableDescriptorPort: Resolved descriptor.

        Raises:
            SyncValidationError: Raised when the table name is blank.
        """

        normalized_table = (destination_table or "").strip()
        if not normalized_table:
            raise SyncValidationError("destination_table must not be blank", field="destination_table")
        return self._descriptors.get(normalized_table, self._default_descriptor)

    def registry_has_explicit(self, destination_table: str) -> bool:
        """Return whether the table has an explicit descriptor."""

        return destination_table in self._descriptors

    def registry_tables(self) -> tuple[str, ...]:
        """Return explicitly registered table names in sorted order."""

        return tuple(sorted(self._descriptors))


def _rule(field_name: str, coercion: Coercion = mapping_as_string, *fallbacks: str, destination: str | None = None) -> FieldRule:
    return FieldRule(
        source_field=field_name,
        destination_field=destination or field_name,
        coercion=coercion,
        fallback_source_fields=tuple(fallbacks),
    )


def _transaction_header_rules(identifier_column: str) -> tuple[FieldRule, ...]:
    return (
        _rule(identifier_column, mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("po_number"),
        _rule("nuorder_order_number"),
        _rule("created_from"),
        _rule("name"),
        _rule("amount", mapping_as_float),
        _rule("status"),
        _rule("customer_internal_id", mapping_as_integer),
    )


def _line_item_rules() -> tuple[FieldRule, ...]:
    return (
        _rule("item_name"),
        _rule("design"),
        _rule("class"),
        _rule("upc_code"),
        _rule("quantity", mapping_as_integer),
    )


CASH_SALES_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="cash_sales",
    field_rules=(
        *_transaction_header_rules("cash_sale_internal_id"),
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("partner_internal_id", mapping_as_integer),
    ),
    identifier_column="cash_sale_internal_id",
)

CREDIT_MEMOS_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="credit_memos",
    field_rules=(
        *_transaction_header_rules("credit_memo_internal_id"),
        # Stored as text in the destination schema.
        _rule("sales_order_internal_id"),
        _rule("partner_internal_id", mapping_as_integer),
    ),
    identifier_column="credit_memo_internal_id",
)

CUSTOMERS_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="customers",
    field_rules=(
        _rule("customer_internal_id", mapping_as_integer),
        _rule("number", mapping_as_integer),
        _rule("company_name"),
        _rule("terms"),
        _rule("partner"),
        _rule("wholesale_customer_segment"),
        _rule("price_level"),
        _rule("account_rating"),
        _rule("email"),
        _rule("phone"),
        _rule("default_billing_address"),
        _rule("default_shipping_address"),
        _rule("tw_email_of_primary_contact"),
        _rule("tw_email_of_billing_contact"),
        _rule("tw_email_of_billing_contact_2"),
        _rule("primary_currency"),
        _rule("hold_orders_for_cc_info"),
        _rule("ar_red_flag"),
        _rule("partner_internal_id", mapping_as_integer),
    ),
    identifier_column="customer_internal_id",
    identifier_strategy=IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
)

INVOICES_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="invoices",
    field_rules=(
        *_transaction_header_rules("invoice_internal_id"),
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("payment_link"),
        _rule("partner_internal_id", mapping_as_integer),
        _rule("due_date", mapping_as_date),
    ),
    identifier_column="invoice_internal_id",
)

INVOICES_DETAILED_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="invoices_detailed",
    field_rules=(
        _rule("invoice_internal_id", mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("po_number"),
        _rule("nuorder_order_number"),
        _rule("name"),
        _rule("status"),
        *_line_item_rules(),
        _rule("amount", mapping_as_float),
        _rule("customer_internal_id", mapping_as_integer),
        _rule("sales_order_number", mapping_as_string, "created_from"),
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("sku"),
    ),
    identifier_column=LINE_KEY_COLUMN,
    identifier_strategy=IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
    line_key_parent_field="invoice_internal_id",
)

ITEM_FULFILLMENTS_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="item_fulfillments",
    field_rules=(
        _rule("item_fulfillment_internal_id", mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("created_from"),
        _rule("nuorder_order_number"),
        _rule("po_check_number"),
        _rule("name"),
        _rule("amount", mapping_as_float),
        _rule("status"),
        _rule("tracking_numbers"),
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("customer_internal_id", mapping_as_integer),
    ),
    identifier_column="item_fulfillment_internal_id",
)

ITEM_FULFILLMENTS_DETAILED_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="item_fulfillments_detailed",
    field_rules=(
        _rule("item_fulfillment_internal_id", mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("name"),
        _rule("status"),
        *_line_item_rules(),
        _rule("sku"),
        _rule("customer_internal_id", mapping_as_integer),
    ),
    identifier_column=LINE_KEY_COLUMN,
    identifier_strategy=IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
    line_key_parent_field="item_fulfillment_internal_id",
)

PARTNERS_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="partners",
    field_rules=(
        _rule("partner_internal_id", mapping_as_integer),
        _rule("name"),
        _rule("email"),
        _rule("phone"),
        _rule("office_phone"),
        _rule("fax"),
        _rule("code"),
        _rule("alt_email"),
    ),
    identifier_column="partner_internal_id",
    identifier_strategy=IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
)

SALES_ORDERS_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="sales_orders",
    field_rules=(
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("po_number"),
        _rule("nuorder_order_number"),
        _rule("customer_name", mapping_as_string, "name"),
        _rule("amount", mapping_as_float),
        _rule("status"),
        _rule("customer_internal_id", mapping_as_integer),
        _rule("ship_date", mapping_as_date),
        _rule("ship_date_end", mapping_as_date),
        _rule("partner_internal_id", mapping_as_integer),
    ),
    identifier_column="sales_order_internal_id",
)

SALES_ORDERS_DETAILED_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="sales_orders_detailed",
    field_rules=(
        _rule("sales_order_internal_id", mapping_as_integer),
        _rule("date", mapping_as_date),
        _rule("document_number"),
        _rule("po_number"),
        _rule("nuorder_order_number"),
        _rule("customer_name", mapping_as_string, "name"),
        _rule("status"),
        *_line_item_rules(),
        _rule("amount", mapping_as_float),
        _rule("line_id", mapping_as_integer),
        _rule("customer_internal_id", mapping_as_integer),
        _rule("sku"),
    ),
    identifier_column=LINE_KEY_COLUMN,
    identifier_strategy=IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
    line_key_parent_field="sales_order_internal_id",
)

FORECAST_DESCRIPTOR = ExplicitTableDescriptor(
    table_name="forecast",
    field_rules=(
        _rule("month", mapping_as_date),
        _rule("sales_rep", mapping_as_string, "partner", destination="partner"),
        _rule("forecasted_amount", mapping_as_float),
        _rule("partner_internal_id", mapping_as_integer, "partner_id"),
        _rule(LINE_KEY_COLUMN, mapping_as_integer),
    ),
    identifier_column=LINE_KEY_COLUMN,
    identifier_strategy=IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
)

DEFAULT_TABLE_DESCRIPTORS: tuple[ExplicitTableDescriptor, ...] = (
    CASH_SALES_DESCRIPTOR,
    CREDIT_MEMOS_DESCRIPTOR,
    CUSTOMERS_DESCRIPTOR,
    INVOICES_DESCRIPTOR,
    INVOICES_DETAILED_DESCRIPTOR,
    ITEM_FULFILLMENTS_DESCRIPTOR,
    ITEM_FULFILLMENTS_DETAILED_DESCRIPTOR,
    PARTNERS_DESCRIPTOR,
    SALES_ORDERS_DESCRIPTOR,
    SALES_ORDERS_DETAILED_DESCRIPTOR,
    FORECAST_DESCRIPTOR,
)


def mapping_build_default_registry() -> NormalizationRegistry:
    """Build the registry of every explicit descriptor with the heuristic default.

    Returns:
        NormalizationRegistry: Registry resolving all catalogued destination tables.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return NormalizationRegistry(
        descriptors={descriptor.table_name: descriptor for descriptor in DEFAULT_TABLE_DESCRIPTORS},
        default_descriptor=HeuristicTableDescriptor(),
    )
