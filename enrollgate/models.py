"""Pydantic data models for enrollgate records.

Field names are snake_case in Python and camelCase on the wire
(``studentId``, ``courseId``), matching the JSON API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from enrollgate.rbac import Principal, Role


class User(BaseModel):
    """A login-capable account. Owned by the store; never mutated by the core."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str
    password: str
    role: Role
    student_id: str | None = Field(default=None, alias="studentId")

    def to_principal(self) -> Principal:
        return Principal(identity=self.username, role=self.role, owned_id=self.student_id)

    def to_public(self, *, redact_password: bool = True) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json")
        if redact_password:
            data.pop("password", None)
        return data


class Enrollment(BaseModel):
    """One student enrolled in one course. ``(student_id, course_id)`` is unique."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    student_id: str = Field(alias="studentId")
    course_id: str = Field(alias="courseId")

    def matches(self, student_id: str, course_id: str) -> bool:
        return self.student_id == student_id and self.course_id == course_id

    def to_public(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
