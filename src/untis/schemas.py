"""Pydantic schemas for raw WebUntis responses.

These validate response bodies at the boundary so a shape change on the
server surfaces as ProtocolError instead of an AttributeError/KeyError deep in
the normalizer. Field names follow Python conventions; aliases carry the
server's camelCase names. Unknown fields are ignored.

Weekly timetable response shape (REST, formatId=1):

    {"data": {"result": {"data": {
        "elementIds": [<personId>],
        "elements": [{"type": 3, "id": 9, "name": "M", "longName": ...}, ...],
        "elementPeriods": {"<personId>": [
            {"date": 20230911, "startTime": 800, "endTime": 845,
             "elements": [{"type": 3, "id": 9}, ...],
             "is": {"cancelled": false, "standard": true}}, ...
        ]}
    }}}}

Element types: 1 = class, 2 = teacher/staff, 3 = subject, 4 = room,
5 = student. Element ids are only unique within a type.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.untis.errors import ProtocolError

SCHEMA_VERSION = 1

ELEMENT_TYPE_CLASS = 1
ELEMENT_TYPE_TEACHER = 2
ELEMENT_TYPE_SUBJECT = 3
ELEMENT_TYPE_ROOM = 4
ELEMENT_TYPE_STUDENT = 5


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


SchemaT = TypeVar("SchemaT", bound=_Schema)


# --- JSON-RPC ---


class RpcErrorBody(_Schema):
    code: int | None = None
    message: str = ""


class RpcResponse(_Schema):
    result: Any = None
    error: RpcErrorBody | None = None


class AuthenticateResult(_Schema):
    session_id: str = Field(alias="sessionId", min_length=1)
    person_id: int = Field(alias="personId", gt=0)


class SchoolyearResult(_Schema):
    name: str = Field(min_length=1)
    start_date: int | str = Field(alias="startDate")
    end_date: int | str = Field(alias="endDate")


# --- REST: absences ---


class RawAbsence(_Schema):
    start_date: int | str = Field(alias="startDate")
    start_time: int | str = Field(alias="startTime")
    end_date: int | str = Field(alias="endDate")
    end_time: int | str = Field(alias="endTime")
    is_excused: bool = Field(alias="isExcused")


class AbsencesData(_Schema):
    absences: list[RawAbsence]


class AbsencesResponse(_Schema):
    data: AbsencesData


# --- REST: weekly timetable ---


class RawElement(_Schema):
    type: int
    id: int
    name: str | None = None


class RawElementRef(_Schema):
    type: int
    id: int


class PeriodFlags(_Schema):
    cancelled: bool | None = None


class RawPeriod(_Schema):
    date: int | str
    start_time: int | str = Field(alias="startTime")
    end_time: int | str = Field(alias="endTime")
    elements: list[RawElementRef] = Field(default_factory=list)
    flags: PeriodFlags | None = Field(default=None, alias="is")

    @property
    def cancelled(self) -> bool:
        # Also set for substituted lessons
        return bool(self.flags and self.flags.cancelled)


class WeeklyTimetableData(_Schema):
    elements: list[RawElement] = Field(default_factory=list)
    element_ids: list[int] = Field(default_factory=list, alias="elementIds")
    element_periods: dict[str, list[RawPeriod]] = Field(
        default_factory=dict, alias="elementPeriods"
    )

    def periods(self) -> list[RawPeriod]:
        """Periods of the element the timetable was requested for.

        Returns an empty list when the server sent no element ids or no
        periods for the first one (e.g. holiday weeks).
        """
        if not self.element_ids:
            return []
        return self.element_periods.get(str(self.element_ids[0]), [])


class _WeeklyResult(_Schema):
    data: WeeklyTimetableData


class _WeeklyBody(_Schema):
    result: _WeeklyResult


class WeeklyTimetableResponse(_Schema):
    data: _WeeklyBody

    @property
    def timetable(self) -> WeeklyTimetableData:
        return self.data.result.data


def parse_response(schema: type[SchemaT], payload: Any, context: str) -> SchemaT:
    """Validate payload against schema, raising ProtocolError on mismatch.

    Args:
        schema: Schema class to validate against.
        payload: Parsed JSON (or an RPC result).
        context: Short label for the error message, e.g. "absences".
    """
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise ProtocolError(
            f"Unexpected {context} response (schema v{SCHEMA_VERSION}): {e}"
        ) from e
