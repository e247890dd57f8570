"""
Classroom API routes.

Routes:
    POST   /api/v1/classrooms                                        — Create classroom
    GET    /api/v1/classrooms                                        — List own classrooms
    GET    /api/v1/classrooms/{classroom_id}                         — Get classroom (public)
    PATCH  /api/v1/classrooms/{classroom_id}                         — Update classroom (owner/admin)
    DELETE /api/v1/classrooms/{classroom_id}                         — Delete classroom (owner/admin)
    POST   /api/v1/classrooms/{classroom_id}/students                — Add student (owner/admin)
    PATCH  /api/v1/classrooms/{classroom_id}/students/{student_id}   — Update student (owner/admin)
    DELETE /api/v1/classrooms/{classroom_id}/students/{student_id}   — Remove student (owner/admin)
    POST   /api/v1/classrooms/{classroom_id}/attendance              — Add attendance record (owner/admin)
    DELETE /api/v1/classrooms/{classroom_id}/attendance/{attendance_id} — Remove attendance record (owner/admin)
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from classroom_api.database import get_db
from classroom_api.exceptions import ClassroomError, ErrorKind
from classroom_api.models.user import User
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
from classroom_api.services.classroom_service import ClassroomService
from classroom_api.services.classroom_store import ClassroomStore
from classroom_api.middleware.rbac import get_current_user

router = APIRouter(prefix="/api/v1/classrooms", tags=["Classrooms"])


def get_classroom_service(db: AsyncSession = Depends(get_db)) -> ClassroomService:
    return ClassroomService(ClassroomStore(db))


def _http_error(exc: ClassroomError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())


@router.post("", response_model=ClassroomResponse, status_code=status.HTTP_201_CREATED)
async def create_classroom(
    body: ClassroomCreate,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    """Create a classroom owned by the caller."""
    try:
        return await service.create_classroom(body, current_user)
    except ClassroomError as e:
        raise _http_error(e)


@router.get("", response_model=List[ClassroomSummaryResponse])
async def list_classrooms(
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    """List the caller's classrooms, latest end year first."""
    return await service.get_all_classrooms(current_user)


@router.get("/{classroom_id}", response_model=ClassroomResponse)
async def get_classroom(
    classroom_id: str,
    service: ClassroomService = Depends(get_classroom_service),
):
    """Get a classroom with its students and attendance records."""
    classroom = await service.get_classroom_by_id(classroom_id)
    if classroom is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"kind": ErrorKind.NOT_FOUND.value, "message": "Classroom not found"},
        )
    return classroom


@router.patch("/{classroom_id}", response_model=ClassroomResponse)
async def update_classroom(
    classroom_id: str,
    body: ClassroomUpdate,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        return await service.update_classroom_by_id(classroom_id, body, current_user)
    except ClassroomError as e:
        raise _http_error(e)


@router.delete("/{classroom_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_classroom(
    classroom_id: str,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        await service.delete_classroom_by_id(classroom_id, current_user)
    except ClassroomError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{classroom_id}/students", response_model=StudentResponse, status_code=status.HTTP_201_CREATED)
async def add_student(
    classroom_id: str,
    body: StudentCreate,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        return await service.add_student(classroom_id, body, current_user)
    except ClassroomError as e:
        raise _http_error(e)


@router.patch("/{classroom_id}/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_student(
    classroom_id: str,
    student_id: str,
    body: StudentUpdate,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        await service.update_student(classroom_id, student_id, body, current_user)
    except ClassroomError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{classroom_id}/students/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_student(
    classroom_id: str,
    student_id: str,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        await service.delete_student(classroom_id, student_id, current_user)
    except ClassroomError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{classroom_id}/attendance",
    response_model=AttendanceRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_attendance_record(
    classroom_id: str,
    body: AttendanceRecordCreate,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        return await service.add_attendance_record(classroom_id, body, current_user)
    except ClassroomError as e:
        raise _http_error(e)


@router.delete("/{classroom_id}/attendance/{attendance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attendance_record(
    classroom_id: str,
    attendance_id: str,
    service: ClassroomService = Depends(get_classroom_service),
    current_user: User = Depends(get_current_user),
):
    try:
        await service.delete_attendance_record(classroom_id, attendance_id, current_user)
    except ClassroomError as e:
        raise _http_error(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
