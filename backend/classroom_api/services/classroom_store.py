"""Classroom entity store backed by SQLAlchemy.

Students and attendance records are addressed as named sequences of their
parent classroom. Appending to, updating in and removing from a sequence are
each issued as one statement matching the parent id and the element id, so
concurrent writers to the same classroom never overwrite each other.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import select, insert, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from classroom_api.models.classroom import Classroom, ClassroomStudent, AttendanceRecord
from classroom_api.schemas.classroom import ClassroomResponse, ClassroomSummaryResponse

_SEQUENCES = {
    "students": ClassroomStudent,
    "attendance_records": AttendanceRecord,
}

_SORTABLE = {
    "end_year": Classroom.end_year,
    "start_year": Classroom.start_year,
    "name": Classroom.name,
    "created_at": Classroom.created_at,
}


def _sequence_model(field: str):
    try:
        return _SEQUENCES[field]
    except KeyError:
        raise ValueError(f"Unknown classroom sequence: {field}") from None


class ClassroomStore:
    """Persistence for classrooms and their embedded sequences."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, classroom_id: str) -> Optional[Classroom]:
        result = await self.db.execute(
            select(Classroom)
            .options(
                selectinload(Classroom.students),
                selectinload(Classroom.attendance_records),
            )
            .where(Classroom.id == classroom_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _touch(self, classroom_id: str) -> None:
        await self.db.execute(
            update(Classroom)
            .where(Classroom.id == classroom_id)
            .values(updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

    async def insert(self, document: Dict[str, Any]) -> ClassroomResponse:
        """Insert a classroom; the store assigns its id and timestamps."""
        classroom = Classroom(
            name=document.get("name"),
            start_year=document["start_year"],
            end_year=document["end_year"],
            image_url=document.get("image_url"),
            created_by=document["created_by"],
            students=[ClassroomStudent(**s) for s in document.get("students") or []],
        )
        self.db.add(classroom)
        await self.db.flush()
        return await self.find_by_id(classroom.id)

    async def find_by_id(self, classroom_id: str) -> Optional[ClassroomResponse]:
        classroom = await self._load(classroom_id)
        if classroom is None:
            return None
        return ClassroomResponse.model_validate(classroom)

    async def find_by_owner(
        self,
        owner_id: int,
        sort_by: str = "end_year",
        descending: bool = True,
    ) -> List[ClassroomSummaryResponse]:
        """Summaries of every classroom owned by ``owner_id``; sequences are never loaded."""
        column = _SORTABLE[sort_by]
        result = await self.db.execute(
            select(
                Classroom.id,
                Classroom.name,
                Classroom.start_year,
                Classroom.end_year,
                Classroom.image_url,
            )
            .where(Classroom.created_by == owner_id)
            .order_by(column.desc() if descending else column.asc(), Classroom.created_at.desc())
        )
        return [ClassroomSummaryResponse.model_validate(row) for row in result.all()]

    async def replace_fields(self, classroom_id: str, fields: Dict[str, Any]) -> Optional[ClassroomResponse]:
        """Overwrite top-level fields; a ``students`` entry replaces the whole sequence."""
        classroom = await self._load(classroom_id)
        if classroom is None:
            return None

        fields = dict(fields)
        if "students" in fields:
            classroom.students = [ClassroomStudent(**s) for s in fields.pop("students")]
        for key, value in fields.items():
            setattr(classroom, key, value)

        classroom.updated_at = datetime.now(timezone.utc)
        await self.db.flush()
        return await self.find_by_id(classroom_id)

    async def remove(self, classroom_id: str) -> None:
        classroom = await self._load(classroom_id)
        if classroom is None:
            return
        await self.db.delete(classroom)
        await self.db.flush()

    async def append_to_sequence(self, classroom_id: str, field: str, item: Dict[str, Any]) -> None:
        model = _sequence_model(field)
        await self.db.execute(insert(model).values(classroom_id=classroom_id, **item))
        await self._touch(classroom_id)

    async def update_matching_in_sequence(
        self,
        classroom_id: str,
        field: str,
        match_id: str,
        fields: Dict[str, Any],
    ) -> int:
        """Set ``fields`` on the element ``match_id``. Returns the number of elements matched."""
        model = _sequence_model(field)
        result = await self.db.execute(
            update(model)
            .where(model.classroom_id == classroom_id, model.id == match_id)
            .values(**fields, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            await self._touch(classroom_id)
        return result.rowcount

    async def remove_matching_from_sequence(self, classroom_id: str, field: str, match_id: str) -> int:
        model = _sequence_model(field)
        result = await self.db.execute(
            delete(model)
            .where(model.classroom_id == classroom_id, model.id == match_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            await self._touch(classroom_id)
        return result.rowcount
