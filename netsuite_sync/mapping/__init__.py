"""Mapping layer package for record normalization and conflict-key policy."""

from .coercion import mapping_as_date, mapping_as_float, mapping_as_integer, mapping_as_string
from .conflict_keys import (
	DEFAULT_CONFLICT_COLUMN,
	LINE_KEY_TABLES,
	TABLE_IDENTIFIER_COLUMNS,
	mapping_resolve_conflict_column,
	mapping_table_identifier_column,
)
from .interfaces import (
	IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY,
	IDENTIFIER_STRATEGY_SOURCE,
	IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL,
	FieldRule,
	NormalizerPort,
	TableDescriptorPort,
)
from .registry import (
	DEFAULT_TABLE_DESCRIPTORS,
	ExplicitTableDescriptor,
	HeuristicTableDescriptor,
	NormalizationRegistry,
	mapping_build_default_registry,
)
from .service import RecordNormalizationService

__all__ = [
	"DEFAULT_CONFLICT_COLUMN",
	"DEFAULT_TABLE_DESCRIPTORS",
	"ExplicitTableDescriptor",
	"FieldRule",
	"HeuristicTableDescriptor",
	"IDENTIFIER_STRATEGY_COMPOSITE_LINE_KEY",
	"IDENTIFIER_STRATEGY_SOURCE",
	"IDENTIFIER_STRATEGY_SYNTHETIC_SEQUENTIAL",
	"LINE_KEY_TABLES",
	"NormalizationRegistry",
	"NormalizerPort",
	"RecordNormalizationService",
	"TABLE_IDENTIFIER_COLUMNS",
	"TableDescriptorPort",
	"mapping_as_date",
	"mapping_as_float",
	"mapping_as_integer",
	"mapping_as_string",
	"mapping_build_default_registry",
	"mapping_resolve_conflict_column",
	"mapping_table_identifier_column",
]
