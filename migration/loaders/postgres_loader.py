"""
Load destination records with idempotent write disciplines
"""

from typing import Any, Callable, Dict, Sequence
from pydantic import BaseModel
from sqlalchemy import Table, delete, insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncConnection
from core.exceptions import DeleteInsertError, LoadError, UnsupportedDialectError, UpsertError
import logging

logger = logging.getLogger(__name__)

# Dialects with an INSERT ... ON CONFLICT DO UPDATE construct
UPSERT_INSERTS: Dict[str, Callable] = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _column_values(table: Table, record: BaseModel) -> Dict[Any, Any]:
    """Map a record's fields onto the table's columns by key"""
    values = record.model_dump()
    return {table.c[key]: value for key, value in values.items() if key in table.c}


class UpsertLoader:
    """
    Insert a record, or overwrite every mutable column of the existing row.

    Ensures:
    - No duplicate rows on repeated runs (conflict on the key columns)
    - Columns named in ``immutable`` keep their first written value
    - One statement per record, committed on its own
    """

    def __init__(self, table: Table, key_columns: Sequence[str], immutable: Sequence[str] = ()):
        self.table = table
        self.key_columns = list(key_columns)
        self.immutable = set(immutable)

    async def write(self, connection: AsyncConnection, record: BaseModel) -> None:
        """
        Upsert one record.

        Raises:
            UnsupportedDialectError: If the destination has no upsert construct
            UpsertError: If the statement fails
        """
        dialect = connection.dialect.name
        insert_factory = UPSERT_INSERTS.get(dialect)
        if insert_factory is None:
            raise UnsupportedDialectError(
                f"No upsert support for dialect {dialect}",
                context={"table_name": self.table.name, "dialect": dialect}
            )

        values = _column_values(self.table, record)
        stmt = insert_factory(self.table).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[self.table.c[key] for key in self.key_columns],
            set_={
                column: stmt.excluded[column.key]
                for column in values
                if column.key not in self.key_columns and column.key not in self.immutable
            }
        )

        record_key = self._record_key(values)
        try:
            async with connection.begin():
                await connection.execute(stmt)
        except Exception as e:
            raise UpsertError(
                f"Failed to upsert into {self.table.name}",
                context={"table_name": self.table.name, "record_key": record_key},
                original_exception=e
            )

        logger.debug(f"Upserted {self.table.name} record {record_key}")

    def _record_key(self, values: Dict[Any, Any]) -> str:
        return ",".join(str(values.get(self.table.c[key])) for key in self.key_columns)


class DeleteInsertLoader:
    """
    Replace the rows for a record's key: delete by key, then insert.

    Used for tables without a uniqueness constraint on the key. Both
    statements run in one transaction, so a failure leaves the previous
    rows in place. A record without a key is rejected before anything is
    deleted.
    """

    def __init__(self, table: Table, key_column: str):
        self.table = table
        self.key_column = key_column

    async def write(self, connection: AsyncConnection, record: BaseModel) -> None:
        """
        Delete-then-insert one record.

        Raises:
            LoadError: If the record has no key value
            DeleteInsertError: If either statement fails
        """
        values = _column_values(self.table, record)
        key_column = self.table.c[self.key_column]
        record_key = values.get(key_column)

        if record_key is None:
            raise LoadError(
                f"Refusing to write {self.table.name} record without {self.key_column}",
                context={"table_name": self.table.name}
            )

        try:
            async with connection.begin():
                await connection.execute(delete(self.table).where(key_column == record_key))
                await connection.execute(insert(self.table).values(values))
        except Exception as e:
            raise DeleteInsertError(
                f"Failed to replace {self.table.name} record",
                context={"table_name": self.table.name, "record_key": str(record_key)},
                original_exception=e
            )

        logger.debug(f"Replaced {self.table.name} record {record_key}")
