"""
Persistence gateway - thin query layer over a pooled SQLAlchemy session.

Every operation returns a GatewayResult instead of raising. Callers decide
how a failure is presented; the gateway itself does not tell "no row" apart
from "query failed".
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy import Table, and_, delete, insert, text, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

from .database import Base

logger = logging.getLogger(__name__)

Statement = Union[str, Executable]


class GatewayError(Exception):
    """A request the gateway refuses before reaching the database"""


@dataclass
class GatewayResult:
    success: bool
    data: Any = None
    error: Optional[str] = None
    insert_id: Optional[int] = None
    affected_rows: int = 0

    @classmethod
    def failure(cls, error: str) -> "GatewayResult":
        return cls(success=False, error=error)


def _returns_rows(result) -> bool:
    # ORM-executed SELECTs come back as iterator results without cursor metadata
    if isinstance(result, CursorResult):
        return result.returns_rows
    return True


class PersistenceGateway:
    """Generic execute/find/insert/update/delete over one session"""

    def __init__(self, db: Session):
        self.db = db

    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise GatewayError(f"Unknown table: {name}") from None

    def _fail(self, operation: str, error: Exception) -> GatewayResult:
        logger.error(f"❌ Database {operation} error: {error}")
        self.db.rollback()
        return GatewayResult.failure(str(error))

    def execute(self, statement: Statement, params: Optional[dict] = None) -> GatewayResult:
        """
        Run a parameterized statement.

        SELECT-like statements return their rows as a list of dicts in
        ``data``; everything else commits and reports ``affected_rows``.
        """
        if isinstance(statement, str):
            statement = text(statement)
        try:
            result = self.db.execute(statement, params or {})
            if _returns_rows(result):
                rows = [dict(row) for row in result.mappings().all()]
                return GatewayResult(success=True, data=rows)
            self.db.commit()
            return GatewayResult(success=True, data=[], affected_rows=result.rowcount)
        except Exception as e:
            return self._fail("query", e)

    def find_one(self, statement: Statement, params: Optional[dict] = None) -> GatewayResult:
        result = self.execute(statement, params)
        if result.success and result.data:
            return GatewayResult(success=True, data=result.data[0])
        return GatewayResult(success=False, data=None, error=result.error)

    def insert_record(self, table: str, data: dict) -> GatewayResult:
        """Insert one row and return its generated primary key as ``insert_id``"""
        try:
            result = self.db.execute(insert(self._table(table)).values(**data))
            self.db.commit()
            insert_id = result.inserted_primary_key[0] if result.inserted_primary_key else None
            return GatewayResult(success=True, insert_id=insert_id, affected_rows=1)
        except Exception as e:
            return self._fail("insert", e)

    def update_record(self, table: str, data: dict, where: dict) -> GatewayResult:
        """Update rows whose columns equal every value in ``where``"""
        try:
            tbl = self._table(table)
            stmt = update(tbl).where(self._conditions(tbl, where)).values(**data)
            result = self.db.execute(stmt)
            self.db.commit()
            return GatewayResult(success=True, affected_rows=result.rowcount)
        except Exception as e:
            return self._fail("update", e)

    def delete_record(self, table: str, where: dict) -> GatewayResult:
        try:
            tbl = self._table(table)
            result = self.db.execute(delete(tbl).where(self._conditions(tbl, where)))
            self.db.commit()
            return GatewayResult(success=True, affected_rows=result.rowcount)
        except Exception as e:
            return self._fail("delete", e)

    @staticmethod
    def _conditions(tbl: Table, where: dict):
        if not where:
            # Refuse unbounded UPDATE/DELETE
            raise GatewayError("A where condition is required")
        try:
            return and_(*[tbl.c[column] == value for column, value in where.items()])
        except KeyError as e:
            raise GatewayError(f"Unknown column in where condition: {e}") from None
