"""In-memory storage backend.

Holds the user and enrollment collections for the lifetime of the process.
Both collections start from the seed data below. Resetting users restores
the seed accounts; resetting enrollments empties the collection.
"""

from __future__ import annotations

import logging

from enrollgate.models import Enrollment, User
from enrollgate.rbac import Role

logger = logging.getLogger("enrollgate.storage")

SEED_USERS: tuple[User, ...] = (
    User(username="user1@abc.com", password="password1", role=Role.STUDENT, student_id="650610001"),
    User(username="user2@abc.com", password="password2", role=Role.STUDENT, student_id="650610002"),
    User(username="user3@abc.com", password="password3", role=Role.STUDENT, student_id="650610003"),
    User(username="user4@abc.com", password="password4", role=Role.ADMIN),
)

SEED_ENROLLMENTS: tuple[Enrollment, ...] = (
    Enrollment(student_id="650610001", course_id="261207"),
    Enrollment(student_id="650610001", course_id="261497"),
    Enrollment(student_id="650610002", course_id="261207"),
    Enrollment(student_id="650610003", course_id="261497"),
)


class MemoryStore:
    """List-backed store. Records are immutable, so returned lists are safe copies."""

    def __init__(
        self,
        users: tuple[User, ...] = SEED_USERS,
        enrollments: tuple[Enrollment, ...] = SEED_ENROLLMENTS,
    ) -> None:
        self._seed_users = users
        self._seed_enrollments = enrollments
        self._users: list[User] = list(users)
        self._enrollments: list[Enrollment] = list(enrollments)

    # -- users -----------------------------------------------------------

    async def list_users(self) -> list[User]:
        return list(self._users)

    async def get_user(self, username: str) -> User | None:
        for user in self._users:
            if user.username == username:
                return user
        return None

    async def reset_users(self) -> None:
        self._users = list(self._seed_users)
        logger.info("User store reset to %d seed records", len(self._users))

    # -- enrollments -----------------------------------------------------

    async def list_enrollments(self) -> list[Enrollment]:
        return list(self._enrollments)

    async def insert_enrollment(self, enrollment: Enrollment) -> None:
        self._enrollments.append(enrollment)

    async def delete_enrollment(self, student_id: str, course_id: str) -> bool:
        for index, enrollment in enumerate(self._enrollments):
            if enrollment.matches(student_id, course_id):
                del self._enrollments[index]
                return True
        return False

    async def reset_enrollments(self) -> None:
        self._enrollments = []
        logger.info("Enrollment store cleared")

    async def restore_seed(self) -> None:
        """Put both collections back to the seed data (startup and tests)."""
        self._users = list(self._seed_users)
        self._enrollments = list(self._seed_enrollments)
