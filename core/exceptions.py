"""
Custom exceptions for the migration pipeline with structured error context.

This module provides the exception hierarchy used throughout the
migration pipeline. Each exception carries context information for
debugging and for the run summary.

Exception Hierarchy:
    MigrationException (base)
    ├── ConnectionSetupError   (fatal)
    ├── SchemaError            (fatal)
    ├── ExtractionError        (fatal)
    ├── EnrichmentError
    │   ├── RemoteLookupError
    │   └── LookupQueryError
    ├── TransformationError
    └── LoadError
        ├── UpsertError
        ├── DeleteInsertError
        └── UnsupportedDialectError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class MigrationException(Exception):
    """
    Base exception for all migration-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (pipeline, record key, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Fatal Errors (abort the run)
# ============================================================================

class ConnectionSetupError(MigrationException):
    """
    Exception raised when the source or destination connection cannot be opened.

    Context should include:
        - side: "source" or "destination"
        - database: Host/database part of the URL (no credentials)
    """
    pass


class SchemaError(MigrationException):
    """
    Exception raised when destination tables cannot be ensured.

    Context should include:
        - tables: Names of the tables being created
    """
    pass


class ExtractionError(MigrationException):
    """
    Exception raised when the bulk source query fails.

    Context should include:
        - pipeline: Name of the entity pipeline
    """
    pass


# ============================================================================
# Enrichment Errors (converted to empty results at the lookup boundary)
# ============================================================================

class EnrichmentError(MigrationException):
    """Base exception for enrichment lookup failures."""
    pass


class RemoteLookupError(EnrichmentError):
    """
    Exception raised when a remote API lookup fails.

    Context should include:
        - url: The endpoint that failed
        - status_code: HTTP status code (if applicable)
        - lookup_key: The key that was looked up
    """
    pass


class LookupQueryError(EnrichmentError):
    """
    Exception raised when a joined or attribute-store lookup query fails.

    Context should include:
        - lookup: Name of the lookup
        - lookup_key: The key that was looked up
    """
    pass


# ============================================================================
# Per-record Errors
# ============================================================================

class TransformationError(MigrationException):
    """
    Exception raised when a source row cannot be mapped to its destination shape.

    Context should include:
        - entity: Entity type being transformed
        - record_key: Key of the source row
    """
    pass


class LoadError(MigrationException):
    """Base exception for destination write failures."""
    pass


class UpsertError(LoadError):
    """
    Exception raised when an upsert fails.

    Context should include:
        - table_name: Destination table
        - record_key: Key of the record being written
    """
    pass


class DeleteInsertError(LoadError):
    """
    Exception raised when a delete-then-insert write fails.

    Context should include:
        - table_name: Destination table
        - record_key: Key of the record being written
    """
    pass


class UnsupportedDialectError(LoadError):
    """Exception raised when the destination dialect has no upsert construct."""
    pass
