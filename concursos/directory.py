"""
Candidate and contest directories: create, list and remove registry records.

Each mutating operation commits immediately through the store.
"""

from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar

from .database import Base, Candidate, Contest, build_candidate, build_contest
from .errors import ConflictError, NotFoundError, ValidationError
from .logger import StructuredLogger, get_logger, mask_key
from .schema import validate_candidate, validate_contest
from .store import Store

T = TypeVar("T", bound=Base)


class Directory(Generic[T]):
    """Generic directory over one entity kind, keyed by its unique column."""

    kind: Type[T]
    validate: Callable[[Dict[str, Any]], List[str]]
    build: Callable[[Dict[str, Any]], T]
    mask_keys = False

    def __init__(self, store: Store, logger: Optional[StructuredLogger] = None):
        self.store = store
        self.logger = logger or get_logger()

    def list(self) -> List[T]:
        return self.store.query_all(self.kind)

    def log_key(self, key: str) -> str:
        return mask_key(key) if self.mask_keys else key

    def add(self, data: Dict[str, Any]) -> T:
        """
        Validate and persist a new record.

        Raises:
            ValidationError: malformed or missing required field
            ConflictError: unique key already registered
        """
        kind_name = self.kind.__name__
        errors = self.validate(data)
        if errors:
            self.logger.record_error("ValidationError")
            self.logger.warning(f"Rejected invalid {kind_name}", errors=errors)
            raise ValidationError(errors)

        entity = self.build(data)
        key = getattr(entity, self.kind.__unique_key__)
        if self.store.query_by_unique_key(self.kind, key) is not None:
            self.logger.record_error("ConflictError")
            self.logger.warning(f"Duplicate {kind_name}", key=self.log_key(key))
            raise ConflictError(kind_name, key)

        try:
            entity = self.store.insert(entity)
        except ConflictError:
            self.logger.record_error("ConflictError")
            raise
        self.logger.record_added()
        self.logger.info(f"{kind_name} added", id=entity.id, key=self.log_key(key))
        return entity

    def remove(self, record_id: int) -> None:
        """
        Delete a record by id.

        Raises:
            NotFoundError: no record has that id
        """
        kind_name = self.kind.__name__
        if not self.store.delete_by_id(self.kind, record_id):
            self.logger.record_error("NotFoundError")
            raise NotFoundError(kind_name, record_id)
        self.logger.record_removed()
        self.logger.info(f"{kind_name} removed", id=record_id)


class CandidateDirectory(Directory[Candidate]):
    kind = Candidate
    mask_keys = True
    validate = staticmethod(validate_candidate)
    build = staticmethod(build_candidate)


class ContestDirectory(Directory[Contest]):
    kind = Contest
    validate = staticmethod(validate_contest)
    build = staticmethod(build_contest)
