"""
SQLAlchemy implementation of the livestock repository.

Works against any relational engine SQLAlchemy supports (PostgreSQL in
production, SQLite in tests).
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Tuple

from sqlalchemy.orm import Session

from ..domain.entities import Livestock, entity_from_row, normalize_values
from ..models import LivestockRecord
from .livestock_repository import ILivestockRepository


class SqlAlchemyLivestockRepository(ILivestockRepository):
    """Livestock persistence over a SQLAlchemy session."""

    def __init__(self, db: Session):
        """
        Initialize repository.

        Args:
            db: SQLAlchemy database session scoped to one request
        """
        self.db = db

    async def create(self, values: Mapping[str, Any]) -> Livestock:
        record = LivestockRecord(**normalize_values(values))
        self.db.add(record)
        self.db.flush()
        return entity_from_row(record)

    async def find_by_id(self, livestock_id: str) -> Optional[Livestock]:
        record = self.db.get(LivestockRecord, livestock_id)
        if record is None:
            return None
        return entity_from_row(record)

    async def find_many(
        self,
        criteria: Mapping[str, Any],
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[List[Livestock], int]:
        query = self.db.query(LivestockRecord)
        for name, value in normalize_values(criteria).items():
            if value is not None:
                query = query.filter(getattr(LivestockRecord, name) == value)

        total = query.count()

        query = query.order_by(LivestockRecord.created_at, LivestockRecord.id)
        query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)

        return [entity_from_row(record) for record in query.all()], total

    async def update(
        self, livestock_id: str, changes: Mapping[str, Any]
    ) -> Optional[Livestock]:
        record = self.db.get(LivestockRecord, livestock_id)
        if record is None:
            return None

        for name, value in normalize_values(changes).items():
            setattr(record, name, value)

        self.db.flush()
        self.db.refresh(record)
        return entity_from_row(record)

    async def delete(self, livestock_id: str) -> bool:
        record = self.db.get(LivestockRecord, livestock_id)
        if record is None:
            return False

        self.db.delete(record)
        self.db.flush()
        return True

    @contextmanager
    def transaction(self) -> Iterator[None]:
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
