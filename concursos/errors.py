"""
Error taxonomy shared by the directories, the store and the matching engine.
"""

from typing import List, Optional


class ConcursosError(Exception):
    """Base class for all domain errors."""
    pass


class ValidationError(ConcursosError):
    """Raised when a record is malformed or misses a required field."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid record")


class ConflictError(ConcursosError):
    """Raised when a unique key (CPF or contest code) already exists."""

    def __init__(self, kind: str, key: str):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} with key '{key}' already exists")


class NotFoundError(ConcursosError):
    """Raised when a record addressed by id does not exist."""

    def __init__(self, kind: str, record_id: int):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} {record_id} not found")


class InfrastructureError(ConcursosError):
    """Raised when the store is unreachable or a storage operation fails."""

    def __init__(self, message: str, operation: Optional[str] = None):
        self.operation = operation
        super().__init__(message)
