"""
Core utilities and configuration for the report migration system.

This package provides foundational components used throughout the pipeline:

Modules:
    config: Application configuration and environment variable management
    database: Async engine creation for source and destination databases
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import create_job_engines
    from core.exceptions import ExtractionError, LoadError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Engines for one job
    source_engine, destination_engine = create_job_engines("user_profile")
"""

__all__ = [
    "settings",
    "create_engine",
    "create_job_engines",
    "setup_logging",
    # Exceptions
    "MigrationException",
    "ConnectionSetupError",
    "SchemaError",
    "ExtractionError",
    "EnrichmentError",
    "RemoteLookupError",
    "LookupQueryError",
    "TransformationError",
    "LoadError",
    "UpsertError",
    "DeleteInsertError",
    "UnsupportedDialectError",
]
