"""
Attribute-store resolvers: raw location values and their display names
"""

import asyncio
from typing import Any, Dict, Mapping, Optional
from uuid import UUID
from sqlalchemy import Text, cast, select
from migration.resolvers.base import EnrichmentResolver, SourceLookup
from migration.extractors.field_extractor import extract_id
from models.base import LocationLevel
from models.source import field_values, location_tables
from core.config import settings
import logging

logger = logging.getLogger(__name__)


class AttributeStoreResolver(EnrichmentResolver):
    """
    Raw attribute-store values for a fixed set of well-known fields.

    The field-id mapping (``{"state": "<fieldId>", ...}``) is injected;
    it defaults to ``settings.LOCATION_FIELD_IDS``. Values are returned as
    text (``"{42}"``, ``"[42]"``, ``"42"``). Every mapped name is present
    in the result, None when the item has no value for it.
    """

    name = "attribute_store"

    def __init__(self, field_ids: Optional[Mapping[str, str]] = None):
        mapping = field_ids if field_ids is not None else settings.LOCATION_FIELD_IDS
        self.field_ids = {name: UUID(str(field_id)) for name, field_id in mapping.items()}
        self._names_by_field = {str(field_id): name for name, field_id in self.field_ids.items()}

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        values = {name: None for name in self.field_ids}
        if key is None or not self.field_ids:
            return values

        stmt = (
            select(
                field_values.c.field_id.label("field_id"),
                # Text whatever the legacy column type; extract_id parses every shape
                cast(field_values.c.value, Text).label("value"),
            )
            .where(
                field_values.c.item_id == key,
                field_values.c.field_id.in_(list(self.field_ids.values()))
            )
        )

        rows = await lookup.fetch_all(stmt, f"Error fetching attribute values for {key}")
        for row in rows:
            name = self._names_by_field.get(str(row["field_id"]))
            if name is not None:
                values[name] = row["value"]

        logger.debug(f"Raw attribute values for {key}: {values}")
        return values


class LocationNameResolver(EnrichmentResolver):
    """
    State, district, block and village names of a user or cohort.

    Raw attribute values are decoded with ``extract_id`` and the four
    reference-table lookups run concurrently. Misses resolve to None.
    """

    name = "location"

    def __init__(self, attributes: Optional[AttributeStoreResolver] = None):
        self.attributes = attributes or AttributeStoreResolver()

    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        raw_values = await self.attributes.resolve(lookup, key)

        levels = list(LocationLevel)
        names = await asyncio.gather(*[
            self._location_name(lookup, level, raw_values.get(level.value))
            for level in levels
        ])
        return {level.value: name for level, name in zip(levels, names)}

    async def _location_name(
        self,
        lookup: SourceLookup,
        level: LocationLevel,
        raw_value: Any
    ) -> Optional[str]:
        """Look up one location name by its decoded id"""
        location_id = extract_id(raw_value)
        if not location_id:
            return None

        table = location_tables[level]
        stmt = select(table.c.name.label("name")).where(table.c.id == location_id)

        row = await lookup.fetch_first(stmt, f"Error querying {level.value} {location_id}")
        name = row["name"] if row is not None else None
        logger.debug(f"Found {level.value} name for id {location_id}: {name}")
        return name
