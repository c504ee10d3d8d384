"""Enrollment service: enforces the invariants on enrollment writes.

The only invariant is uniqueness of ``(student_id, course_id)``. Every
read-check-write sequence runs under one ``asyncio.Lock`` so two concurrent
creates of the same pair cannot both pass the duplicate check.
"""

from __future__ import annotations

import asyncio
import logging

from enrollgate.exceptions import ConflictError, NotFoundError
from enrollgate.models import Enrollment
from enrollgate.storage.base import Store

logger = logging.getLogger("enrollgate.enrollments")


class EnrollmentService:
    """Single writer for the enrollment collection."""

    def __init__(self, store: Store) -> None:
        self.store = store
        self._lock = asyncio.Lock()

    async def list_all(self) -> list[Enrollment]:
        return await self.store.list_enrollments()

    async def list_for(self, student_id: str) -> list[Enrollment]:
        """Records owned by *student_id*. An empty list is a valid answer."""
        return [e for e in await self.store.list_enrollments() if e.student_id == student_id]

    async def create(self, student_id: str, course_id: str) -> Enrollment:
        """Append ``(student_id, course_id)`` unless the pair already exists.

        Raises:
            ConflictError: the pair is already enrolled; nothing is written.
        """
        async with self._lock:
            existing = await self.store.list_enrollments()
            if any(e.matches(student_id, course_id) for e in existing):
                raise ConflictError(
                    f"studentId {student_id} && courseId {course_id} already exists"
                )
            enrollment = Enrollment(student_id=student_id, course_id=course_id)
            await self.store.insert_enrollment(enrollment)

        logger.info("Enrollment created: %s -> %s", student_id, course_id)
        return enrollment

    async def delete(self, student_id: str, course_id: str) -> list[Enrollment]:
        """Remove the first record matching the pair and return what remains.

        Only one record is removed even if duplicates exist.

        Raises:
            NotFoundError: no record matches; the collection is unchanged.
        """
        async with self._lock:
            removed = await self.store.delete_enrollment(student_id, course_id)
            if not removed:
                raise NotFoundError("Enrollment does not exist")
            remaining = await self.store.list_enrollments()

        logger.info("Enrollment deleted: %s -> %s", student_id, course_id)
        return remaining

    async def reset(self) -> None:
        async with self._lock:
            await self.store.reset_enrollments()
