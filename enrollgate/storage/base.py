"""Storage protocol the enrollment and user services depend on."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from enrollgate.models import Enrollment, User


@runtime_checkable
class Store(Protocol):
    """Key/list store for users and enrollments.

    Implementations do no locking of their own; callers that need a
    read-check-write sequence to be atomic serialize it themselves.
    """

    async def list_users(self) -> list[User]:
        ...

    async def get_user(self, username: str) -> User | None:
        ...

    async def reset_users(self) -> None:
        ...

    async def list_enrollments(self) -> list[Enrollment]:
        ...

    async def insert_enrollment(self, enrollment: Enrollment) -> None:
        ...

    async def delete_enrollment(self, student_id: str, course_id: str) -> bool:
        """Remove the first record matching the pair. Return ``False`` if none did."""
        ...

    async def reset_enrollments(self) -> None:
        ...
