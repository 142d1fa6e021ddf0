"""Domain models used across application layer boundaries."""

from .errors import MappingCatalogError, SyncError, SyncValidationError, domain_error_kind
from .models import (
	HealthStatus,
	MappingEntry,
	RawRow,
	SourcePage,
	SyncErrorEntry,
	SyncRunStats,
	TypedRow,
)
from .timeline import domain_build_sync_event, domain_utc_now_iso

__all__ = [
	"HealthStatus",
	"MappingCatalogError",
	"MappingEntry",
	"RawRow",
	"SourcePage",
	"SyncError",
	"SyncErrorEntry",
	"SyncRunStats",
	"SyncValidationError",
	"TypedRow",
	"domain_build_sync_event",
	"domain_error_kind",
	"domain_utc_now_iso",
]
