"""Database layer package for destination-store access."""

from .destination_writer import (
	DEFAULT_CHUNK_SIZE,
	DestinationTableWriter,
	db_validate_conflict_column,
	db_validate_table_name,
)
from .health import SQLAlchemyDatabaseHealthService
from .interfaces import (
	UNDEFINED_TABLE_CODE,
	DatabaseHealthPort,
	DestinationWriteError,
	DestinationWriterPort,
	StoreError,
	StoreResponse,
	TableStorePort,
	UpsertResult,
)
from .session import db_create_engine, db_normalize_database_url
from .table_store import SQLAlchemyTableStore

__all__ = [
	"DEFAULT_CHUNK_SIZE",
	"DatabaseHealthPort",
	"DestinationTableWriter",
	"DestinationWriteError",
	"DestinationWriterPort",
	"SQLAlchemyDatabaseHealthService",
	"SQLAlchemyTableStore",
	"StoreError",
	"StoreResponse",
	"TableStorePort",
	"UNDEFINED_TABLE_CODE",
	"UpsertResult",
	"db_create_engine",
	"db_normalize_database_url",
	"db_validate_conflict_column",
	"db_validate_table_name",
]
