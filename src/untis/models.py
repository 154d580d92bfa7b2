"""Pydantic models for the client's domain results.

All models are frozen: they are built once from a validated response and
never mutated afterwards. Datetimes are timezone-naive.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Absence(BaseModel):
    """One absence record of the authenticated student."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    excused: bool


class SchoolYear(BaseModel):
    """The school year the server considers current."""

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "2023/2024"
    start_date: datetime  # midnight
    end_date: datetime  # midnight


class TimetableEntry(BaseModel):
    """A single resolved class period from the weekly timetable."""

    model_config = ConfigDict(frozen=True)

    start_date: datetime
    end_date: datetime
    subject: str  # Subject element name, e.g. "M", "D", "E"
    cancelled: bool = False


class Credentials(BaseModel):
    """Session id and person id issued by a successful login."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(repr=False)
    person_id: int
