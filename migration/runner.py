"""
Migration Runner - Orchestrates one migration run over a connection pair.

This module provides batch orchestration with:
- Exactly two connections (source, destination) held for the whole run
- Idempotent destination schema creation at run start
- Per-record failure isolation (a failed record never aborts the batch)
- Fatal handling of connection setup and extraction failures
- Connections released exactly once, whatever the outcome
"""

from typing import Any, Dict, List, Optional, Sequence
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
import logging

from migration.base import EntityPipeline
from migration.resolvers.base import SourceLookup
from models.base import metadata, RunState
from core.logging import get_pipeline_logger
from core.exceptions import (
    MigrationException,
    ConnectionSetupError,
    SchemaError,
    ExtractionError,
)

logger = logging.getLogger(__name__)


class MigrationRunner:
    """
    Batch runner for one or more entity pipelines sharing a connection pair.

    State machine:
        IDLE → CONNECTING → SCHEMA_ENSURED → (EXTRACTING → PROCESSING)* →
        COMPLETED | FAILED

    Responsibilities:
    - Open the source connection in AUTOCOMMIT mode so a failed lookup
      query never aborts later lookups
    - Ensure every destination table of every pipeline exists
    - Pull each pipeline's full row set in one query
    - Drive each row through enrich → transform → write sequentially
    - Report aggregate counts per pipeline
    """

    def __init__(self, source_engine: AsyncEngine, destination_engine: AsyncEngine):
        self.source_engine = source_engine
        self.destination_engine = destination_engine
        self.state = RunState.IDLE

    async def run(self, pipelines: Sequence[EntityPipeline]) -> Dict[str, Dict[str, Any]]:
        """
        Run pipelines in order over one source and one destination connection.

        Args:
            pipelines: Entity pipelines to run, in order

        Returns:
            Mapping of pipeline name to run statistics:
            - status: "success" or "partial_success"
            - records_extracted: Number of source rows read
            - records_loaded: Number of records written
            - records_failed: Number of records skipped after an error
            - error_details: Per-record error details (if any)

        Raises:
            ConnectionSetupError: If either connection cannot be opened
            SchemaError: If destination tables cannot be created
            ExtractionError: If a bulk extraction query fails
            MigrationException: For any other run-level failure
        """
        source: Optional[AsyncConnection] = None
        destination: Optional[AsyncConnection] = None
        results: Dict[str, Dict[str, Any]] = {}

        try:
            # --------------------------------------------------
            # CONNECTING
            # --------------------------------------------------
            self.state = RunState.CONNECTING
            source = await self._connect(self.source_engine, "source", autocommit=True)
            destination = await self._connect(self.destination_engine, "destination")

            # --------------------------------------------------
            # SCHEMA
            # --------------------------------------------------
            await self._ensure_schema(destination, pipelines)
            self.state = RunState.SCHEMA_ENSURED

            # --------------------------------------------------
            # PIPELINES
            # --------------------------------------------------
            lookup = SourceLookup(source)
            for pipeline in pipelines:
                results[pipeline.name] = await self._run_pipeline(pipeline, lookup, destination)

            self.state = RunState.COMPLETED
            return results

        except MigrationException as e:
            self.state = RunState.FAILED
            logger.error(
                f"Migration run failed: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            raise

        except Exception as e:
            self.state = RunState.FAILED
            logger.exception("Unexpected error in migration run")
            raise MigrationException(
                "Unexpected error in migration run",
                context={"pipelines": [p.name for p in pipelines]},
                original_exception=e
            )

        finally:
            await self._close(destination, "destination")
            await self._close(source, "source")
            logger.info(
                f"Migration run finished in state {self.state.value}: "
                + (", ".join(
                    f"{name}={result['records_loaded']}/{result['records_extracted']}"
                    for name, result in results.items()
                ) or "no pipelines completed")
            )

    async def _connect(self, engine: AsyncEngine, side: str, autocommit: bool = False) -> AsyncConnection:
        """Open one connection; failure is fatal to the run"""
        try:
            connection = await engine.connect()
        except Exception as e:
            raise ConnectionSetupError(
                f"Could not connect to {side} database",
                context={"side": side, "database": engine.url.render_as_string(hide_password=True)},
                original_exception=e
            )

        if autocommit:
            try:
                connection = await connection.execution_options(isolation_level="AUTOCOMMIT")
            except Exception as e:
                await connection.close()
                raise ConnectionSetupError(
                    f"Could not configure {side} connection",
                    context={"side": side},
                    original_exception=e
                )

        logger.info(f"Connected to {side} database")
        return connection

    async def _ensure_schema(self, destination: AsyncConnection, pipelines: Sequence[EntityPipeline]):
        """CREATE TABLE IF NOT EXISTS for every destination table"""
        tables: List[Table] = []
        for pipeline in pipelines:
            for table in pipeline.tables:
                if table not in tables:
                    tables.append(table)

        try:
            await destination.run_sync(metadata.create_all, tables=tables, checkfirst=True)
            await destination.commit()
        except Exception as e:
            raise SchemaError(
                "Failed to ensure destination tables",
                context={"tables": [t.name for t in tables]},
                original_exception=e
            )

        logger.info(f"Destination tables ensured: {', '.join(t.name for t in tables)}")

    async def _run_pipeline(
        self,
        pipeline: EntityPipeline,
        lookup: SourceLookup,
        destination: AsyncConnection
    ) -> Dict[str, Any]:
        """Extract a pipeline's rows and process them one at a time"""
        log = get_pipeline_logger(__name__, pipeline.name)
        records_loaded = 0
        records_failed = 0
        error_details = []

        # --------------------------------------------------
        # EXTRACTING
        # --------------------------------------------------
        self.state = RunState.EXTRACTING
        try:
            result = await lookup.connection.execute(pipeline.extract_query)
            rows = [dict(row) for row in result.mappings().all()]
        except Exception as e:
            raise ExtractionError(
                "Extraction query failed",
                context={"pipeline": pipeline.name},
                original_exception=e
            )

        records_extracted = len(rows)
        log.info(f"Found {records_extracted} records to migrate")

        # --------------------------------------------------
        # PROCESSING
        # --------------------------------------------------
        self.state = RunState.PROCESSING
        for row in rows:
            record_key = pipeline.record_key(row)
            try:
                await pipeline.process(lookup, destination, row)
                records_loaded += 1
                log.debug(f"Processed record {record_key}")

            except Exception as e:
                records_failed += 1

                error_detail = {
                    "pipeline": pipeline.name,
                    "record_key": str(record_key),
                    "error_type": type(e).__name__,
                    "error_message": str(e)
                }
                error_details.append(error_detail)

                log.error(
                    f"Record {record_key} failed: {str(e)}",
                    extra={"error_context": error_detail}
                )

        result = {
            "status": "success" if records_failed == 0 else "partial_success",
            "records_extracted": records_extracted,
            "records_loaded": records_loaded,
            "records_failed": records_failed
        }

        if error_details:
            result["error_details"] = error_details

        log.info(
            f"Completed: {result['status']} - "
            f"Extracted: {records_extracted}, Loaded: {records_loaded}, Failed: {records_failed}"
        )

        return result

    async def _close(self, connection: Optional[AsyncConnection], side: str):
        if connection is None:
            return
        try:
            await connection.close()
            logger.info(f"Closed {side} connection")
        except Exception as e:
            logger.warning(f"Error closing {side} connection: {str(e)}")
