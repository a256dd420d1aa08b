"""
PostgreSQL-backed record store
"""

from typing import Optional, Dict, Any

from people_shared.models.person import PersonRecord
from people_shared.utils.postgres_client import PostgresClient

from ..errors import PersonNotFoundError
from ..work_queue import PersonWorkQueue
from .base import PersonStore

# Column names match PersonRecord attribute names
COLUMNS = (
    "email",
    "first_name",
    "last_name",
    "phone",
    "street_address",
    "city",
    "zipcode",
    "join_date",
    "image_url",
    "description",
    "created_by",
    "created_by_id",
)


def _db_id(person_id: str) -> int:
    try:
        return int(person_id)
    except (TypeError, ValueError):
        raise PersonNotFoundError(person_id, f"invalid person id {person_id!r}")


def _row_to_record(row: Dict[str, Any]) -> PersonRecord:
    return PersonRecord.model_validate(row)


class PostgresPersonStore(PersonStore):
    """
    Stores people in the `people` table, one row per person
    """

    def __init__(
        self,
        db: PostgresClient,
        work_queue: Optional[PersonWorkQueue] = None,
        table: str = "people"
    ):
        super().__init__(work_queue)
        self.db = db
        self.table = table

    async def read(self, person_id: str) -> PersonRecord:
        row = await self.db.fetchrow(
            f"SELECT * FROM {self.table} WHERE id = $1",
            _db_id(person_id)
        )
        if not row:
            raise PersonNotFoundError(person_id)
        return _row_to_record(row)

    async def _insert(self, record: PersonRecord) -> PersonRecord:
        values = [getattr(record, column) for column in COLUMNS]
        placeholders = ", ".join(f"${i}" for i in range(1, len(COLUMNS) + 1))
        row = await self.db.fetchrow(
            f"INSERT INTO {self.table} ({', '.join(COLUMNS)}) "
            f"VALUES ({placeholders}) RETURNING *",
            *values
        )
        return _row_to_record(row)

    async def _replace(self, person_id: str, record: PersonRecord) -> PersonRecord:
        values = [getattr(record, column) for column in COLUMNS]
        assignments = ", ".join(f"{column} = ${i}" for i, column in enumerate(COLUMNS, 1))
        row = await self.db.fetchrow(
            f"UPDATE {self.table} SET {assignments} "
            f"WHERE id = ${len(COLUMNS) + 1} RETURNING *",
            *values,
            _db_id(person_id)
        )
        if not row:
            raise PersonNotFoundError(person_id)
        return _row_to_record(row)

    async def delete(self, person_id: str) -> None:
        await self.db.execute(
            f"DELETE FROM {self.table} WHERE id = $1",
            _db_id(person_id)
        )
