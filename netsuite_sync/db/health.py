"""Destination readiness check: reachability plus presence of every catalog table."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import Engine, inspect
from sqlalchemy.exc import SQLAlchemyError

from netsuite_sync.domain import HealthStatus

from .interfaces import DatabaseHealthPort


class SQLAlchemyDatabaseHealthService(DatabaseHealthPort):
    """Report whether the destination answers and holds every table the catalog writes to."""

    def __init__(self, engine: Engine, catalog_tables: Iterable[str] = (), schema: str | None = None):
        if engine is None:
            raise ValueError("engine must not be None")
        self._destination_engine = engine
        self._catalog_tables = tuple(dict.fromkeys(catalog_tables))
        self._schema = schema

    def db_connection_label(self) -> str:
        """Return the destination URL with its password masked."""

        return self._destination_engine.url.render_as_string(hide_password=True)

    def db_check_health(self) -> HealthStatus:
        """List destination tables and compare them with the catalog.

        Returns:
            HealthStatus: `ok` when every catalog table exists, `incomplete`
                naming the missing tables otherwise.

        Raises:
            ConnectionError: Raised when the destination store does not answer.
        """

        try:
            with self._destination_engine.connect() as connection:
                existing_tables = set(inspect(connection).get_table_names(schema=self._schema))
        except SQLAlchemyError as error:
            raise ConnectionError(f"destination database unreachable ({self.db_connection_label()})") from error

        missing_tables = [table for table in self._catalog_tables if table not in existing_tables]
        if missing_tables:
            return HealthStatus(status="incomplete", detail=f"missing destination tables: {', '.join(missing_tables)}")
        return HealthStatus(
            status="ok",
            detail=f"{len(self._catalog_tables)} catalog tables present in {self._schema or 'default'} schema",
        )
