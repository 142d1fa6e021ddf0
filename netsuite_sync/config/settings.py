"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PAGINATED_TABLES = "invoices_detailed,item_fulfillments_detailed,sales_orders_detailed"


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""

    error_kind = "configuration"


class AppSettings(BaseSettings):
    """Application settings for the sync runtime, scheduler and HTTP API.

    Environment variable names map directly to field names in uppercase.
    Example: `ns_account_id` reads from `NS_ACCOUNT_ID`. The destination DSN
    reads from `SUPABASE_DB_URL` or `DATABASE_URL`.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        log_level: Minimum log level for the stderr sink.
        ns_account_id: NetSuite account identifier (OAuth realm and RESTlet host).
        ns_consumer_key: Integration consumer key.
        ns_consumer_secret: Integration consumer secret.
        ns_token_id: Access token identifier.
        ns_token_secret: Access token secret.
        ns_script_id: RESTlet script identifier.
        ns_deploy_id: RESTlet deployment identifier.
        ns_request_timeout_seconds: HTTP timeout for one RESTlet page request.
        ns_page_delay_seconds: Fixed delay between successive page requests.
        database_url: Destination Postgres DSN.
        destination_schema: Optional schema holding destination tables.
        upsert_chunk_size: Maximum rows per destination upsert call.
        sync_interval_seconds: Interval between scheduled sync runs.
        sync_paginated_tables: Comma-separated tables synced page by page.
        mapping_catalog_path: Path of the mapping catalog JSON file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(default=8000, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    ns_account_id: str = Field(min_length=1)
    ns_consumer_key: str = Field(min_length=1)
    ns_consumer_secret: str = Field(min_length=1)
    ns_token_id: str = Field(min_length=1)
    ns_token_secret: str = Field(min_length=1)
    ns_script_id: str = Field(min_length=1)
    ns_deploy_id: str = Field(min_length=1)
    ns_request_timeout_seconds: float = Field(default=120.0, gt=0)
    ns_page_delay_seconds: float = Field(default=1.0, ge=0)
    database_url: str = Field(
        min_length=1,
        validation_alias=AliasChoices("supabase_db_url", "database_url"),
    )
    destination_schema: str | None = Field(default=None)
    upsert_chunk_size: int = Field(default=500, ge=1)
    sync_interval_seconds: int = Field(default=21600, ge=1)
    sync_paginated_tables: str = Field(default=DEFAULT_PAGINATED_TABLES)
    mapping_catalog_path: str = Field(default="mappings/searchToTable.json", min_length=1)

    @field_validator(
        "ns_account_id",
        "ns_consumer_key",
        "ns_consumer_secret",
        "ns_token_id",
        "ns_token_secret",
        "ns_script_id",
        "ns_deploy_id",
        "database_url",
    )
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_level = value.strip().upper()
        if normalized_level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log level: {value}")
        return normalized_level

    @field_validator("destination_schema")
    @classmethod
    def _validate_optional_schema(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped_value = value.strip()
        return stripped_value or None

    def config_paginated_tables(self) -> tuple[str, ...]:
        """Return the paginated table names parsed from the comma-separated setting.

        Returns:
            tuple[str, ...]: Non-blank table names in configured order.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return tuple(name.strip() for name in self.sync_paginated_tables.split(",") if name.strip())

    def config_masked_summary(self) -> dict[str, object]:
        """Return a log-safe settings summary with secrets masked."""

        return {
            "environment_name": self.environment_name,
            "ns_account_id": self.ns_account_id,
            "ns_consumer_key": _config_mask_secret(self.ns_consumer_key),
            "ns_consumer_secret": "***",
            "ns_token_id": _config_mask_secret(self.ns_token_id),
            "ns_token_secret": "***",
            "ns_script_id": self.ns_script_id,
            "ns_deploy_id": self.ns_deploy_id,
            "destination_schema": self.destination_schema,
            "upsert_chunk_size": self.upsert_chunk_size,
            "sync_interval_seconds": self.sync_interval_seconds,
            "sync_paginated_tables": list(self.config_paginated_tables()),
            "mapping_catalog_path": self.mapping_catalog_path,
        }


def _config_mask_secret(value: str) -> str:
    if len(value) <= 8:
        return "***"
    return f"{value[:4]}...{value[-4:]}"


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when required settings are missing or invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
