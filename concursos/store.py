"""
Store: persistence contract over SQLAlchemy sessions.

Responsibilities:
- Query all records of a kind, query one by its unique key.
- Insert and delete single records, committing immediately.
- Translate SQLAlchemy failures into domain errors.

Non-Responsibilities:
- No validation.
- No matching.

Invariant:
Every call runs in its own short-lived session; returned entities are
detached snapshots and remain readable after the session closes.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .database import Base, get_engine
from .errors import ConflictError, InfrastructureError

T = TypeVar("T", bound=Base)


class Store:
    """SQLite-backed store shared by the directories and the matching engine."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._engine = get_engine(self.db_path)
        self._session_factory = sessionmaker(bind=self._engine, expire_on_commit=False)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except IntegrityError:
            session.rollback()
            raise
        except SQLAlchemyError as e:
            session.rollback()
            raise InfrastructureError(f"Store operation '{operation}' failed: {e}", operation=operation) from e
        finally:
            session.close()

    def query_all(self, kind: Type[T]) -> List[T]:
        with self._session("query_all") as session:
            return list(session.scalars(select(kind).order_by(kind.id)))

    def query_by_unique_key(self, kind: Type[T], key: str) -> Optional[T]:
        column = getattr(kind, kind.__unique_key__)
        with self._session("query_by_unique_key") as session:
            return session.scalars(select(kind).where(column == key)).first()

    def insert(self, entity: T) -> T:
        """
        Persist a new entity and return it with its assigned id.

        Raises:
            ConflictError: unique key already taken
            InfrastructureError: any other storage failure
        """
        kind = type(entity)
        try:
            with self._session("insert") as session:
                session.add(entity)
                session.flush()
            return entity
        except IntegrityError as e:
            key = getattr(entity, kind.__unique_key__, None)
            if key is None or "UNIQUE" not in str(e.orig).upper():
                raise InfrastructureError(f"Store operation 'insert' failed: {e}", operation="insert") from e
            raise ConflictError(kind.__name__, key) from e

    def delete_by_id(self, kind: Type[T], record_id: int) -> bool:
        """Delete a record by id. Returns False when nothing had that id."""
        with self._session("delete_by_id") as session:
            entity = session.get(kind, record_id)
            if entity is None:
                return False
            session.delete(entity)
            return True

    def count(self, kind: Type[T]) -> int:
        with self._session("count") as session:
            return session.scalar(select(func.count()).select_from(kind))

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
