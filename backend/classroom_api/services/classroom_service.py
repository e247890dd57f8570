"""Classroom service: ownership-checked CRUD over classrooms, students and attendance records.

Every mutating operation loads the classroom first, fails with NotFoundError
when it is missing, then consults the ownership guard. Existence is always
checked before authorization.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from classroom_api.exceptions import NotFoundError, InvariantViolationError
from classroom_api.middleware.rbac import ensure_can_modify
from classroom_api.models.classroom import generate_id
from classroom_api.schemas.classroom import (
    ClassroomCreate,
    ClassroomUpdate,
    ClassroomResponse,
    ClassroomSummaryResponse,
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    AttendanceRecordCreate,
    AttendanceRecordResponse,
)

logger = logging.getLogger(__name__)

STUDENTS = "students"
ATTENDANCE_RECORDS = "attendance_records"

# Fields a patch may touch; anything else (createdBy, ids, timestamps) is dropped
CLASSROOM_PATCH_FIELDS = ("name", "start_year", "end_year", "image_url", "students")
STUDENT_PATCH_FIELDS = ("name", "adm_no", "image_url")


def _as_changes(body: Union[BaseModel, Mapping[str, Any]]) -> Dict[str, Any]:
    if isinstance(body, BaseModel):
        return body.model_dump(exclude_unset=True)
    return dict(body)


def _patch(changes: Mapping[str, Any], allowed: tuple) -> Dict[str, Any]:
    return {key: changes[key] for key in allowed if key in changes}


def _check_year_range(start_year: int, end_year: int) -> None:
    if start_year > end_year:
        raise InvariantViolationError("End year must be greater than or equal to the start year")


def _new_student(student: Union[StudentCreate, Mapping[str, Any]]) -> Dict[str, Any]:
    fields = student.model_dump() if isinstance(student, BaseModel) else dict(student)
    return {
        "id": generate_id(),
        "name": fields["name"],
        "adm_no": fields["adm_no"],
        "image_url": fields["image_url"],
    }


class ClassroomService:
    """Business rules for classrooms; persistence is delegated to the injected store."""

    def __init__(self, store):
        self.store = store

    async def _get_for_update(self, classroom_id: str, user) -> ClassroomResponse:
        classroom = await self.store.find_by_id(classroom_id)
        if classroom is None:
            raise NotFoundError("Classroom not found")
        ensure_can_modify(user, classroom)
        return classroom

    # ─── Classrooms ──────────────────────────────────────────────────────────

    async def create_classroom(self, body: ClassroomCreate, user) -> ClassroomResponse:
        _check_year_range(body.start_year, body.end_year)
        document = {
            "name": body.name,
            "start_year": body.start_year,
            "end_year": body.end_year,
            "image_url": body.image_url,
            "students": [_new_student(s) for s in body.students or []],
            "created_by": user.id,
        }
        classroom = await self.store.insert(document)
        logger.info("Classroom %s created by user %s", classroom.id, user.id)
        return classroom

    async def get_all_classrooms(self, user) -> List[ClassroomSummaryResponse]:
        """The caller's own classrooms, latest end year first."""
        return await self.store.find_by_owner(user.id, sort_by="end_year", descending=True)

    async def get_classroom_by_id(self, classroom_id: str) -> Optional[ClassroomResponse]:
        return await self.store.find_by_id(classroom_id)

    async def update_classroom_by_id(
        self,
        classroom_id: str,
        body: Union[ClassroomUpdate, Mapping[str, Any]],
        user,
    ) -> ClassroomResponse:
        """
        Apply a partial update. Only CLASSROOM_PATCH_FIELDS are written; a
        ``students`` list replaces the whole sequence with freshly identified
        students. The year range is checked against the merged values.
        """
        classroom = await self._get_for_update(classroom_id, user)
        patch = _patch(_as_changes(body), CLASSROOM_PATCH_FIELDS)
        if not patch:
            return classroom

        _check_year_range(
            patch.get("start_year", classroom.start_year),
            patch.get("end_year", classroom.end_year),
        )
        if "students" in patch:
            patch["students"] = [_new_student(s) for s in patch["students"]]

        updated = await self.store.replace_fields(classroom_id, patch)
        if updated is None:
            raise NotFoundError("Classroom not found")
        logger.info("Classroom %s updated by user %s (%s)", classroom_id, user.id, ", ".join(sorted(patch)))
        return updated

    async def delete_classroom_by_id(self, classroom_id: str, user) -> None:
        await self._get_for_update(classroom_id, user)
        await self.store.remove(classroom_id)
        logger.info("Classroom %s deleted by user %s", classroom_id, user.id)

    # ─── Students ────────────────────────────────────────────────────────────

    async def add_student(self, classroom_id: str, body: StudentCreate, user) -> StudentResponse:
        await self._get_for_update(classroom_id, user)
        student = _new_student(body)
        await self.store.append_to_sequence(classroom_id, STUDENTS, student)
        logger.info("Student %s added to classroom %s", student["id"], classroom_id)
        return StudentResponse(**student)

    async def update_student(
        self,
        classroom_id: str,
        student_id: str,
        body: Union[StudentUpdate, Mapping[str, Any]],
        user,
    ) -> None:
        await self._get_for_update(classroom_id, user)
        fields = _patch(_as_changes(body), STUDENT_PATCH_FIELDS)
        matched = await self.store.update_matching_in_sequence(classroom_id, STUDENTS, student_id, fields)
        if not matched:
            raise NotFoundError("Student not found")
        logger.info("Student %s in classroom %s updated", student_id, classroom_id)

    async def delete_student(self, classroom_id: str, student_id: str, user) -> None:
        await self._get_for_update(classroom_id, user)
        removed = await self.store.remove_matching_from_sequence(classroom_id, STUDENTS, student_id)
        if not removed:
            raise NotFoundError("Student not found")
        logger.info("Student %s removed from classroom %s", student_id, classroom_id)

    # ─── Attendance ──────────────────────────────────────────────────────────

    async def add_attendance_record(
        self,
        classroom_id: str,
        body: AttendanceRecordCreate,
        user,
    ) -> AttendanceRecordResponse:
        await self._get_for_update(classroom_id, user)
        record = {
            "id": generate_id(),
            "day": body.day,
            "presentees": list(dict.fromkeys(body.presentees)),
        }
        await self.store.append_to_sequence(classroom_id, ATTENDANCE_RECORDS, record)
        logger.info("Attendance record %s added to classroom %s", record["id"], classroom_id)
        return AttendanceRecordResponse(**record)

    async def delete_attendance_record(self, classroom_id: str, attendance_id: str, user) -> None:
        await self._get_for_update(classroom_id, user)
        removed = await self.store.remove_matching_from_sequence(classroom_id, ATTENDANCE_RECORDS, attendance_id)
        if not removed:
            raise NotFoundError("Attendance record not found")
        logger.info("Attendance record %s removed from classroom %s", attendance_id, classroom_id)
