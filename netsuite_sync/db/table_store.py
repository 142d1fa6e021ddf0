"""SQLAlchemy table store issuing dialect-native upserts against reflected destination tables."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, MetaData, Table, delete, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import NoSuchTableError, SQLAlchemyError

from netsuite_sync.domain import TypedRow

from .interfaces import UNDEFINED_TABLE_CODE, StoreError, StoreResponse, TableStorePort

UNDEFINED_COLUMN_CODE = "42703"

_DIALECT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class SQLAlchemyTableStore(TableStorePort):
    """Table-scoped store operations that report failures in the response envelope."""

    def __init__(self, engine: Engine, schema: str | None = None):
        """Initialize table store.

        Args:
            engine: SQLAlchemy engine used for all store operations.
            schema: Optional schema holding destination tables.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: Raised when engine is invalid or its dialect lacks upsert support.
        """

        if engine is None:
            raise ValueError("engine must not be None")
        dialect_name = engine.dialect.name
        if dialect_name not in _DIALECT_INSERTS:
            raise ValueError(f"dialect {dialect_name} does not support ON CONFLICT upserts")

        self._engine = engine
        self._schema = schema
        self._insert = _DIALECT_INSERTS[dialect_name]
        self._tables: dict[str, Table] = {}

    def store_upsert(
        self,
        table: str,
        rows: list[TypedRow],
        on_conflict: str,
        ignore_duplicates: bool = False,
    ) -> StoreResponse:
        """Insert one chunk with `ON CONFLICT (on_conflict)` update or skip semantics.

        Columns present in only some rows are written as NULL for the others.

        Args:
            table: Destination table name.
            rows: Typed rows for one chunk.
            on_conflict: Conflict column name.
            ignore_duplicates: Skip colliding rows instead of updating them.

        Returns:
            StoreResponse: Returned rows, or store error.

        Raises:
            RuntimeError: Store failures are reported in the response, never raised.
        """

        if not rows:
            return StoreResponse(data=[], count=0)

        try:
            target = self._store_reflect_table(table)
            column_names = self._store_union_columns(rows)
            missing_columns = [name for name in (*column_names, on_conflict) if name not in target.c]
            if missing_columns:
                return StoreResponse(
                    error=StoreError(
                        message=f"columns not found in {table}: {', '.join(sorted(set(missing_columns)))}",
                        code=UNDEFINED_COLUMN_CODE,
                    )
                )

            filled_rows = [{name: row.get(name) for name in column_names} for row in rows]
            statement = self._insert(target).values(filled_rows)
            update_columns = {
                name: statement.excluded[name] for name in column_names if name != on_conflict
            }
            if ignore_duplicates or not update_columns:
                statement = statement.on_conflict_do_nothing(index_elements=[on_conflict])
            else:
                statement = statement.on_conflict_do_update(index_elements=[on_conflict], set_=update_columns)
            statement = statement.returning(*(target.c[name] for name in column_names))

            with self._engine.begin() as connection:
                returned_rows = [dict(row) for row in connection.execute(statement).mappings().all()]
            return StoreResponse(data=returned_rows, count=len(returned_rows))
        except SQLAlchemyError as error:
            return StoreResponse(error=self._store_map_error(error))

    def store_count(self, table: str) -> StoreResponse:
        """Return the exact row count of one table."""

        try:
            target = self._store_reflect_table(table)
            with self._engine.connect() as connection:
                row_count = connection.execute(select(func.count()).select_from(target)).scalar_one()
            return StoreResponse(count=int(row_count))
        except SQLAlchemyError as error:
            return StoreResponse(error=self._store_map_error(error))

    def store_probe(self, table: str) -> StoreResponse:
        """Read at most one row of one table."""

        try:
            target = self._store_reflect_table(table)
            with self._engine.connect() as connection:
                probe_rows = [dict(row) for row in connection.execute(select(target).limit(1)).mappings().all()]
            return StoreResponse(data=probe_rows, count=len(probe_rows))
        except SQLAlchemyError as error:
            return StoreResponse(error=self._store_map_error(error))

    def store_delete_all(self, table: str) -> StoreResponse:
        """Delete every row of one table and report the deleted row count."""

        try:
            target = self._store_reflect_table(table)
            with self._engine.begin() as connection:
                deleted_count = connection.execute(delete(target)).rowcount
            return StoreResponse(count=deleted_count)
        except SQLAlchemyError as error:
            return StoreResponse(error=self._store_map_error(error))

    def _store_reflect_table(self, table: str) -> Table:
        """Return the reflected table definition, loading it once per store instance.

        Args:
            table: Destination table name.

        Returns:
            Table: Reflected SQLAlchemy table.

        Raises:
            NoSuchTableError: Raised when the table does not exist.
        """

        cached_table = self._tables.get(table)
        if cached_table is not None:
            return cached_table

        reflected_table = Table(table, MetaData(), schema=self._schema, autoload_with=self._engine)
        self._tables[table] = reflected_table
        return reflected_table

    def _store_union_columns(self, rows: list[TypedRow]) -> list[str]:
        """Return every column named by any row, in first-seen order."""

        column_names: dict[str, None] = {}
        for row in rows:
            for name in row:
                column_names.setdefault(name, None)
        return list(column_names)

    def _store_map_error(self, error: SQLAlchemyError) -> StoreError:
        """Translate a SQLAlchemy failure into a store error payload."""

        if isinstance(error, NoSuchTableError):
            return StoreError(
                message=f'relation "{error}" does not exist',
                code=UNDEFINED_TABLE_CODE,
            )

        original_error: Any = getattr(error, "orig", None)
        diagnostic = getattr(original_error, "diag", None)
        return StoreError(
            message=str(original_error or error).strip(),
            code=getattr(original_error, "sqlstate", None),
            details=getattr(diagnostic, "message_detail", None),
        )
