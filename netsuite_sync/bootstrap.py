"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

import sys

from fastapi import FastAPI
from loguru import logger
from sqlalchemy import Engine

from netsuite_sync.adapters import NetSuiteOAuthSigner, NetSuiteRestletReader
from netsuite_sync.api import create_api_application
from netsuite_sync.catalog import catalog_load_mappings
from netsuite_sync.config import AppSettings, config_load_settings
from netsuite_sync.db import (
    DestinationTableWriter,
    SQLAlchemyDatabaseHealthService,
    SQLAlchemyTableStore,
    db_create_engine,
)
from netsuite_sync.jobs import SyncJobOrchestrator, SyncOrchestratorConfig
from netsuite_sync.mapping import RecordNormalizationService

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def bootstrap_configure_logging(log_level: str = "INFO") -> None:
    """Replace loguru's default sink with one stderr sink at the configured level.

    Args:
        log_level: Minimum log level.

    Returns:
        None: Logging is configured as a side effect.

    Raises:
        ValueError: Raised when the level is unknown to loguru.
    """

    logger.remove()
    logger.add(sys.stderr, level=log_level.upper(), format=LOG_FORMAT, backtrace=False, diagnose=False)


def bootstrap_load_settings() -> AppSettings:
    """Load settings, configure logging, and log a masked settings summary.

    Returns:
        AppSettings: Validated runtime settings.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    bootstrap_configure_logging(settings.log_level)
    logger.info(f"Loaded configuration: {settings.config_masked_summary()}")
    return settings


def bootstrap_create_source_reader(settings: AppSettings) -> NetSuiteRestletReader:
    """Build the signed RESTlet reader from settings."""

    signer = NetSuiteOAuthSigner(
        account_id=settings.ns_account_id,
        consumer_key=settings.ns_consumer_key,
        consumer_secret=settings.ns_consumer_secret,
        token_id=settings.ns_token_id,
        token_secret=settings.ns_token_secret,
    )
    return NetSuiteRestletReader(
        account_id=settings.ns_account_id,
        script_id=settings.ns_script_id,
        deploy_id=settings.ns_deploy_id,
        signer=signer,
        request_timeout_seconds=settings.ns_request_timeout_seconds,
        page_delay_seconds=settings.ns_page_delay_seconds,
    )


def bootstrap_create_destination_writer(settings: AppSettings, engine: Engine) -> DestinationTableWriter:
    """Build the chunked destination writer over a reflected-table store."""

    store = SQLAlchemyTableStore(engine=engine, schema=settings.destination_schema)
    return DestinationTableWriter(store=store, chunk_size=settings.upsert_chunk_size)


def bootstrap_create_sync_orchestrator(
    settings: AppSettings | None = None,
    engine: Engine | None = None,
) -> SyncJobOrchestrator:
    """Build a fully wired sync orchestrator for CLI, scheduler, handler and API surfaces.

    Args:
        settings: Optional preloaded settings; loaded from environment when omitted.
        engine: Optional shared engine; created from settings when omitted and disposed by `job_close`.

    Returns:
        SyncJobOrchestrator: Orchestrator over the loaded mapping catalog.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        MappingCatalogError: Raised when the mapping catalog is missing or invalid.
    """

    resolved_settings = settings or bootstrap_load_settings()
    mappings = catalog_load_mappings(resolved_settings.mapping_catalog_path)
    resolved_engine = engine or db_create_engine(database_url=resolved_settings.database_url)
    source_reader = bootstrap_create_source_reader(resolved_settings)
    resource_closers = [source_reader.adapter_close]
    if engine is None:
        resource_closers.append(resolved_engine.dispose)
    return SyncJobOrchestrator(
        source_reader=source_reader,
        normalizer=RecordNormalizationService(),
        destination_writer=bootstrap_create_destination_writer(resolved_settings, resolved_engine),
        mappings=mappings,
        config=SyncOrchestratorConfig(paginated_tables=resolved_settings.config_paginated_tables()),
        resource_closers=resource_closers,
    )


def bootstrap_create_destination_writer_from_settings() -> DestinationTableWriter:
    """Build a destination writer for maintenance commands."""

    settings = bootstrap_load_settings()
    engine = db_create_engine(database_url=settings.database_url)
    return bootstrap_create_destination_writer(settings, engine)


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        MappingCatalogError: Raised when the mapping catalog is missing or invalid.
    """

    resolved_settings = settings or bootstrap_load_settings()
    engine = db_create_engine(database_url=resolved_settings.database_url)
    sync_orchestrator = bootstrap_create_sync_orchestrator(settings=resolved_settings, engine=engine)
    return create_api_application(
        settings=resolved_settings,
        db_health_service=SQLAlchemyDatabaseHealthService(
            engine=engine,
            catalog_tables=[mapping.destination_table for mapping in sync_orchestrator.job_mappings()],
            schema=resolved_settings.destination_schema,
        ),
        sync_orchestrator=sync_orchestrator,
        mappings=sync_orchestrator.job_mappings(),
    )
