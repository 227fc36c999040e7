"""
Record-level migration pipeline components.

This package contains everything needed to move records from the legacy
source schema into the destination report schema:

Modules:
    base: Generic EntityPipeline and EnrichmentStep definitions
    runner: MigrationRunner that owns the connection pair and the run state
    pipelines: Per-entity pipeline factories and the job registry

Subpackages:
    resolvers: Enrichment lookups (remote API, joined tables, attribute store)
    extractors: Best-effort identifier extraction for attribute values
    transformers: Source row + enrichment → destination record mapping
    loaders: Idempotent writers (upsert, delete-then-insert)

Architecture:
    Every entity follows the same per-record sequence:

    1. Enrich - Resolve supplementary data; failures degrade to empty results
    2. Transform - Map to the destination record with explicit defaults
    3. Load - Write idempotently, keyed by the source identifier

    A failed record is logged and skipped; only connection setup, schema
    creation and the bulk extraction query abort a run.

Usage:
    from migration.pipelines import build_job
    from migration.runner import MigrationRunner

Example:
    source_engine, destination_engine = create_job_engines("user_profile")

    runner = MigrationRunner(source_engine, destination_engine)
    results = await runner.run(build_job("user_profile"))

    print(f"Loaded {results['user_profile']['records_loaded']} records")
"""

__all__ = [
    "EntityPipeline",
    "EnrichmentStep",
    "MigrationRunner",
    "build_job",
    "JOBS",
]
