"""
Abstract base class for enrichment resolvers and the shared source lookup
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from sqlalchemy.engine import RowMapping
from sqlalchemy.ext.asyncio import AsyncConnection
from sqlalchemy.sql import Executable
from core.exceptions import LookupQueryError
import asyncio
import logging

logger = logging.getLogger(__name__)


class SourceLookup:
    """
    Read-only query helper over the run's single source connection.

    A connection executes one statement at a time, so concurrent lookups
    (e.g. the four location names of a record) are serialized on a lock.
    """

    def __init__(self, connection: AsyncConnection):
        self.connection = connection
        self._lock = asyncio.Lock()

    async def fetch_all(
        self,
        stmt: Executable,
        error_message: str,
        default: Optional[List[RowMapping]] = None
    ) -> List[RowMapping]:
        """
        Run a lookup query, converting any failure into ``default``.

        Args:
            stmt: Parameterized SELECT statement
            error_message: Prefix of the warning logged on failure
            default: Rows returned on failure (empty list when omitted)

        Returns:
            Result rows as mappings
        """
        async with self._lock:
            try:
                result = await self.connection.execute(stmt)
                return list(result.mappings().all())
            except Exception as e:
                error = LookupQueryError(error_message, original_exception=e)
                logger.warning(
                    f"{error_message}: {str(e)}",
                    extra={"error_context": error.to_dict()}
                )
                return [] if default is None else default

    async def fetch_first(self, stmt: Executable, error_message: str) -> Optional[RowMapping]:
        """Return the first row of a lookup, or None on miss or failure"""
        rows = await self.fetch_all(stmt, error_message)
        return rows[0] if rows else None


class EnrichmentResolver(ABC):
    """
    Fetch supplementary data for one record key.

    Contract:
    - Returns a plain dict; an empty dict means "nothing found"
    - Never raises; query and network failures are logged as warnings
      and resolve to the same result as a miss
    """

    name: str = "enrichment"

    @abstractmethod
    async def resolve(self, lookup: SourceLookup, key: Any) -> Dict[str, Any]:
        """
        Resolve enrichment data for a record.

        Args:
            lookup: Source lookup bound to the run's source connection
            key: Lookup key taken from the source row

        Returns:
            Enrichment result (possibly empty)
        """
        pass
