"""
Generic entity pipeline definition
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
from pydantic import BaseModel
from sqlalchemy import Table
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Select
from migration.resolvers.base import EnrichmentResolver, SourceLookup
from migration.transformers.entity_transformer import EntityTransformer


class RecordLoader(Protocol):
    table: Table

    async def write(self, connection: AsyncConnection, record: BaseModel) -> None:
        ...


@dataclass
class EnrichmentStep:
    """One enrichment lookup: its result is stored under ``name``"""
    name: str
    resolver: EnrichmentResolver
    key_field: str  # Source row field used as the lookup key


@dataclass
class EntityPipeline:
    """
    Resolver → Extractor → Transformer → Writer for one entity.

    Every migrated entity is an instance of this class, parameterized by
    its extraction query, enrichment steps, transformer and writer.
    """
    name: str
    extract_query: Select
    key_field: str  # Source row field identifying a record
    transformer: EntityTransformer
    loader: RecordLoader
    enrichments: List[EnrichmentStep] = field(default_factory=list)
    tables: List[Table] = field(default_factory=list)  # Destination tables ensured at run start

    def __post_init__(self):
        if not self.tables:
            self.tables = [self.loader.table]

    def record_key(self, row: Dict[str, Any]) -> Optional[Any]:
        return row.get(self.key_field)

    async def enrich(self, lookup: SourceLookup, row: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
        """Run every enrichment step for a row, in order"""
        enrichment = {}
        for step in self.enrichments:
            enrichment[step.name] = await step.resolver.resolve(lookup, row.get(step.key_field))
        return enrichment

    async def process(
        self,
        lookup: SourceLookup,
        destination: AsyncConnection,
        row: Dict[str, Any]
    ) -> BaseModel:
        """Enrich, transform and write one source row"""
        enrichment = await self.enrich(lookup, row)
        record = self.transformer.transform(row, enrichment)
        await self.loader.write(destination, record)
        return record
