"""
Storage port consumed by the tournament engine.

The engine only relies on per-row atomicity: every method below touches a
single row (or inserts one batch) and commits immediately. Multi-row
consistency is achieved by the engine's guards and by the standings
recomputation path, never by long transactions.
"""
import abc
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clanleague.core.exceptions import DuplicateRow, StoreError

logger = logging.getLogger(__name__)


class DataStore(abc.ABC):
    """Generic CRUD/query interface. ORM model classes play the role of tables."""

    @abc.abstractmethod
    def insert_many(self, model, rows: List[Dict[str, Any]]) -> List[str]:
        """Insert all rows as one batch and return their ids.

        Raises DuplicateRow when a uniqueness constraint rejects the batch.
        """

    @abc.abstractmethod
    def get(self, model, row_id: str):
        pass

    @abc.abstractmethod
    def query(self, model, order_by: Optional[Sequence[str]] = None, **filters) -> List[Any]:
        """Rows whose columns equal ``filters``. ``order_by`` names columns, ``-`` prefix for descending."""

    @abc.abstractmethod
    def count(self, model, **filters) -> int:
        pass

    @abc.abstractmethod
    def update(self, model, row_id: str, patch: Dict[str, Any], expected: Optional[Dict[str, Any]] = None) -> bool:
        """Apply ``patch`` if the row still has the ``expected`` column values.

        Returns False when no row matched, which is how callers detect that a
        concurrent writer got there first.
        """

    @abc.abstractmethod
    def increment(self, model, row_id: str, deltas: Dict[str, int]) -> bool:
        """Add ``deltas`` to counter columns in a single atomic row update."""

    @abc.abstractmethod
    def delete(self, model, row_id: str) -> bool:
        pass


class SqlAlchemyDataStore(DataStore):

    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRow(f"Constraint violation: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Store failure: {e}") from e

    def _ordering(self, model, order_by: Optional[Sequence[str]]):
        clauses = []
        for name in order_by or ():
            if name.startswith("-"):
                clauses.append(getattr(model, name[1:]).desc())
            else:
                clauses.append(getattr(model, name).asc())
        return clauses

    def insert_many(self, model, rows: List[Dict[str, Any]]) -> List[str]:
        objects = [model(**row) for row in rows]
        try:
            self.db.add_all(objects)
            self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateRow(f"Constraint violation inserting into {model.__tablename__}: {e.orig}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Store failure inserting into {model.__tablename__}: {e}") from e
        ids = [obj.id for obj in objects]
        self._commit()
        logger.debug("Inserted %d row(s) into %s", len(ids), model.__tablename__)
        return ids

    def get(self, model, row_id: str):
        try:
            return self.db.get(model, row_id)
        except SQLAlchemyError as e:
            raise StoreError(f"Store failure reading {model.__tablename__}: {e}") from e

    def query(self, model, order_by: Optional[Sequence[str]] = None, **filters) -> List[Any]:
        try:
            q = self.db.query(model).filter_by(**filters)
            clauses = self._ordering(model, order_by)
            if clauses:
                q = q.order_by(*clauses)
            return q.all()
        except SQLAlchemyError as e:
            raise StoreError(f"Store failure querying {model.__tablename__}: {e}") from e

    def count(self, model, **filters) -> int:
        try:
            return self.db.query(model).filter_by(**filters).count()
        except SQLAlchemyError as e:
            raise StoreError(f"Store failure counting {model.__tablename__}: {e}") from e

    def update(self, model, row_id: str, patch: Dict[str, Any], expected: Optional[Dict[str, Any]] = None) -> bool:
        q = self.db.query(model).filter(model.id == row_id)
        if expected:
            q = q.filter_by(**expected)
        try:
            matched = q.update(patch, synchronize_session=False)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Store failure updating {model.__tablename__}: {e}") from e
        self._commit()
        return matched == 1

    def increment(self, model, row_id: str, deltas: Dict[str, int]) -> bool:
        patch = {getattr(model, column): getattr(model, column) + delta for column, delta in deltas.items()}
        q = self.db.query(model).filter(model.id == row_id)
        try:
            matched = q.update(patch, synchronize_session=False)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreError(f"Store failure incrementing {model.__tablename__}: {e}") from e
        self._commit()
        return matched == 1

    def delete(self, model, row_id: str) -> bool:
        obj = self.get(model, row_id)
        if obj is None:
            return False
        self.db.delete(obj)
        self._commit()
        return True
