"""Enrollment routes.

  GET    /enrollments               — ADMIN: every enrollment
  POST   /enrollments/reset         — ADMIN: empty the collection
  GET    /enrollments/{student_id}  — any role, owner or ADMIN: one student's enrollments
  POST   /enrollments/{student_id}  — STUDENT owner: enroll in a course
  DELETE /enrollments/{student_id}  — STUDENT owner (body studentId): drop a course
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from enrollgate.chain import require_admin, require_any_role, require_student
from enrollgate.enrollments import EnrollmentService
from enrollgate.rbac import Principal, ensure_can_access

router = APIRouter(prefix="/enrollments", tags=["Enrollments"])

_ID_PATTERN = r"^[A-Za-z0-9_-]+$"


class EnrollmentRequest(BaseModel):
    course_id: str = Field(alias="courseId", min_length=1, max_length=32, pattern=_ID_PATTERN)


class DropEnrollmentRequest(BaseModel):
    student_id: str = Field(alias="studentId", min_length=1, max_length=32, pattern=_ID_PATTERN)
    course_id: str = Field(alias="courseId", min_length=1, max_length=32, pattern=_ID_PATTERN)


def get_enrollment_service(request: Request) -> EnrollmentService:
    return request.app.state.enrollment_service


@router.get("", summary="List all enrollments")
async def list_enrollments(
    principal: Principal = Depends(require_admin),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    enrollments = await service.list_all()
    return {
        "success": True,
        "message": "Enrollments Information",
        "data": [e.to_public() for e in enrollments],
    }


@router.post("/reset", summary="Clear the enrollment collection")
async def reset_enrollments(
    principal: Principal = Depends(require_admin),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    await service.reset()
    return {"success": True, "message": "enrollments database has been reset"}


@router.get("/{student_id}", summary="List one student's enrollments")
async def get_student_enrollments(
    student_id: str,
    principal: Principal = Depends(require_any_role),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    ensure_can_access(principal, student_id)
    enrollments = await service.list_for(student_id)
    return {
        "success": True,
        "message": "Student Information",
        "data": [e.to_public() for e in enrollments],
    }


@router.post("/{student_id}", status_code=status.HTTP_201_CREATED, summary="Enroll in a course")
async def create_enrollment(
    student_id: str,
    body: EnrollmentRequest,
    principal: Principal = Depends(require_student),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    ensure_can_access(principal, student_id)
    enrollment = await service.create(student_id, body.course_id)
    return {
        "success": True,
        "message": f"Student {student_id} && {body.course_id} has been added successfully",
        "data": enrollment.to_public(),
    }


@router.delete("/{student_id}", summary="Drop a course")
async def delete_enrollment(
    student_id: str,
    body: DropEnrollmentRequest,
    principal: Principal = Depends(require_student),
    service: EnrollmentService = Depends(get_enrollment_service),
):
    ensure_can_access(
        principal,
        body.student_id,
        message="You are not allowed to modify another student's data",
    )
    remaining = await service.delete(body.student_id, body.course_id)
    return {
        "success": True,
        "message": (
            f"StudentId {body.student_id} && Course {body.course_id} "
            "has been deleted successfully"
        ),
        "data": [e.to_public() for e in remaining],
    }
