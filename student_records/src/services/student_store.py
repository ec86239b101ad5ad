"""In-process student record storage."""

from __future__ import annotations

import abc
import logging
import threading
from typing import List, Tuple

from ..models.student import StudentRecord

logger = logging.getLogger(__name__)


class StudentStoreError(Exception):
    """Base class for record store failures."""


class RecordNotFoundError(StudentStoreError):
    """Raised when no record carries the requested id."""

    def __init__(self, student_id: int) -> None:
        self.student_id = student_id
        super().__init__(f"Student {student_id} not found")


class IntegrityError(StudentStoreError):
    """Raised when more than one record carries the same id."""

    def __init__(self, student_id: int, matches: int) -> None:
        self.student_id = student_id
        self.matches = matches
        super().__init__(f"Student {student_id} matched {matches} records")


class StudentStore(abc.ABC):
    """Storage contract used by the API routes."""

    @abc.abstractmethod
    def list(self) -> List[StudentRecord]:
        """Return every record."""

    @abc.abstractmethod
    def get(self, student_id: int) -> StudentRecord:
        """Return the single record with ``student_id``."""

    @abc.abstractmethod
    def upsert(self, record: StudentRecord) -> Tuple[StudentRecord, bool]:
        """Insert or fully replace a record; the flag is True on insert."""

    @abc.abstractmethod
    def delete(self, student_id: int) -> StudentRecord:
        """Remove and return the record with ``student_id``."""

    @abc.abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""


class InMemoryStudentStore(StudentStore):
    """List-backed store guarded by a lock; contents live as long as the process."""

    def __init__(self) -> None:
        self._records: List[StudentRecord] = []
        self._lock = threading.Lock()

    def _matches(self, student_id: int) -> List[StudentRecord]:
        return [r for r in self._records if r.student_id == student_id]

    def list(self) -> List[StudentRecord]:
        with self._lock:
            return [r.model_copy() for r in self._records]

    def get(self, student_id: int) -> StudentRecord:
        with self._lock:
            matches = self._matches(student_id)
        if not matches:
            raise RecordNotFoundError(student_id)
        if len(matches) > 1:
            raise IntegrityError(student_id, len(matches))
        return matches[0].model_copy()

    def upsert(self, record: StudentRecord) -> Tuple[StudentRecord, bool]:
        stored = record.model_copy()
        with self._lock:
            existing = self._matches(record.student_id)
            for old in existing:
                self._records.remove(old)
            self._records.append(stored)
        created = not existing
        logger.info(
            "Saved student record",
            extra={"student_id": record.student_id, "inserted": created},
        )
        return stored.model_copy(), created

    def delete(self, student_id: int) -> StudentRecord:
        with self._lock:
            matches = self._matches(student_id)
            if not matches:
                raise RecordNotFoundError(student_id)
            removed = matches[0]
            self._records.remove(removed)
        logger.info("Deleted student record", extra={"student_id": student_id})
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._records)


__all__ = [
    "StudentStore",
    "InMemoryStudentStore",
    "StudentStoreError",
    "RecordNotFoundError",
    "IntegrityError",
]
