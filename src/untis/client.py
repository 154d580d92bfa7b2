"""UntisClient - read-only access to a WebUntis student account.

Composes the session, request builder, response schemas and timetable
normalizer into four operations:

    authenticate(username, password)      RPC  authenticate
    get_current_schoolyear()              RPC  getCurrentSchoolyear
    get_absences(start_date, end_date)    REST /api/classreg/absences/students
    get_timetable_week(day)               REST /api/public/timetable/weekly/data

Each operation issues exactly one request. Errors are raised unchanged to the
caller; nothing is cached or retried.

Usage:
    async with AiohttpRequester() as requester:
        client = UntisClient("borglinz", requester)
        await client.authenticate(username, password)
        week = await client.get_timetable_week(date.today())
"""

from datetime import date

from src.untis.config import DEFAULT_BASE_URL, UntisConfig, get_config
from src.untis.errors import AlreadyAuthenticatedError, InvalidArgumentError
from src.untis.logging import get_logger
from src.untis.models import Absence, Credentials, SchoolYear, TimetableEntry
from src.untis.rpc import REST_HEADERS, call_rpc, rest_url, rpc_url, send_request
from src.untis.schemas import (
    ELEMENT_TYPE_STUDENT,
    AbsencesResponse,
    AuthenticateResult,
    SchoolyearResult,
    WeeklyTimetableResponse,
    parse_response,
)
from src.untis.session import Session
from src.untis.timecodec import (
    HOUR_OFFSET,
    format_compact_date,
    parse_compact_date,
    parse_compact_datetime,
    start_of_iso_week,
)
from src.untis.timetable import normalize_timetable
from src.untis.transport import HttpRequester

logger = get_logger(__name__)

ABSENCES_PATH = "/api/classreg/absences/students"
TIMETABLE_PATH = "/api/public/timetable/weekly/data"

# excuseStatusId=-1 returns excused and unexcused absences
ALL_EXCUSE_STATUSES = -1
TIMETABLE_FORMAT_ID = 1


class UntisClient:
    """Client for one school and one student account.

    Each instance holds its own Session; use a new instance to log in again
    or to talk to another school.
    """

    def __init__(
        self,
        school: str,
        requester: HttpRequester,
        *,
        base_url: str = DEFAULT_BASE_URL,
        hour_offset: int = HOUR_OFFSET,
    ) -> None:
        self._session = Session(school)
        self._requester = requester
        self.base_url = base_url.rstrip("/")
        self.hour_offset = hour_offset

    @classmethod
    def from_config(
        cls, requester: HttpRequester, config: UntisConfig | None = None
    ) -> "UntisClient":
        """Build a client from UntisConfig (environment / .env)."""
        config = config or get_config()
        return cls(
            config.untis_school,
            requester,
            base_url=config.untis_base_url,
            hour_offset=config.untis_hour_offset,
        )

    @property
    def school(self) -> str:
        return self._session.school

    @property
    def person_id(self) -> int | None:
        return self._session.person_id

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def _rpc_url(self) -> str:
        return rpc_url(self.base_url, self._session.school)

    async def authenticate(self, username: str, password: str) -> Credentials:
        """Log in and establish the session.

        This is the only call made without a session cookie.

        Returns:
            The session id and person id issued by the server.

        Raises:
            InvalidArgumentError: If username or password is empty.
            AlreadyAuthenticatedError: If this client is already logged in.
            RpcError: If the server rejects the credentials.
            ProtocolError: If sessionId or personId is missing from the result.
        """
        if not username or not password:
            raise InvalidArgumentError("username and password are required")
        if self._session.is_authenticated:
            raise AlreadyAuthenticatedError(
                "Client already authenticated; create a new client to re-authenticate"
            )

        result = await call_rpc(
            self._requester,
            self._rpc_url,
            "authenticate",
            {"user": username, "password": password},
        )
        login = parse_response(AuthenticateResult, result, "authenticate")

        self._session.establish(login.session_id, login.person_id)
        return Credentials(session_id=login.session_id, person_id=login.person_id)

    async def get_current_schoolyear(self) -> SchoolYear:
        """Get the school year the server considers current.

        Raises:
            UnauthenticatedError: If authenticate() has not succeeded.
            ProtocolError: If name, startDate or endDate is missing.
        """
        headers = self._session.credential_headers()

        result = await call_rpc(
            self._requester, self._rpc_url, "getCurrentSchoolyear", headers=headers
        )
        year = parse_response(SchoolyearResult, result, "getCurrentSchoolyear")

        return SchoolYear(
            name=year.name,
            start_date=parse_compact_date(year.start_date),
            end_date=parse_compact_date(year.end_date),
        )

    async def get_absences(self, start_date: date, end_date: date) -> list[Absence]:
        """Get excused and unexcused absences between two dates (inclusive).

        Raises:
            UnauthenticatedError: If authenticate() has not succeeded.
            InvalidArgumentError: If either date is missing.
            ProtocolError: If the response has no absences list.
        """
        headers = {**REST_HEADERS, **self._session.credential_headers()}
        if start_date is None or end_date is None:
            raise InvalidArgumentError("start_date and end_date are required")

        url = rest_url(
            self.base_url,
            ABSENCES_PATH,
            {
                "studentId": self._session.person_id,
                "excuseStatusId": ALL_EXCUSE_STATUSES,
                "includeTodaysAbsence": True,
                "startDate": format_compact_date(start_date),
                "endDate": format_compact_date(end_date),
            },
        )
        payload = await send_request(self._requester, url, headers=headers)
        response = parse_response(AbsencesResponse, payload, "absences")

        absences = [
            Absence(
                start_date=parse_compact_datetime(raw.start_date, raw.start_time, self.hour_offset),
                end_date=parse_compact_datetime(raw.end_date, raw.end_time, self.hour_offset),
                excused=raw.is_excused,
            )
            for raw in response.data.absences
        ]
        logger.info("absences_fetched", count=len(absences))
        return absences

    async def get_timetable_week(self, day: date) -> list[TimetableEntry]:
        """Get the student's timetable for the ISO week containing day.

        Raises:
            UnauthenticatedError: If authenticate() has not succeeded.
            InvalidArgumentError: If day is missing.
            ProtocolError: If the response does not match the weekly schema.
            MissingReferenceError: If a period references an unknown subject.
        """
        headers = {**REST_HEADERS, **self._session.credential_headers()}
        if day is None:
            raise InvalidArgumentError("day is required")

        # The server returns the following week unless date is a Monday
        monday = start_of_iso_week(day)
        url = rest_url(
            self.base_url,
            TIMETABLE_PATH,
            {
                "elementType": ELEMENT_TYPE_STUDENT,
                "elementId": self._session.person_id,
                "date": format_compact_date(monday, "-"),
                "formatId": TIMETABLE_FORMAT_ID,
            },
        )
        payload = await send_request(self._requester, url, headers=headers)
        response = parse_response(WeeklyTimetableResponse, payload, "weekly timetable")

        entries = normalize_timetable(response.timetable, self.hour_offset)
        logger.info(
            "timetable_fetched",
            week=format_compact_date(monday, "-"),
            entries=len(entries),
        )
        return entries
