"""Session state for one authenticated WebUntis client.

A Session is created empty when the client is constructed and established
exactly once by a successful authenticate call. Re-authentication is not
supported; callers create a new client instead.
"""

from src.untis.errors import (
    AlreadyAuthenticatedError,
    InvalidArgumentError,
    UnauthenticatedError,
)
from src.untis.logging import get_logger

logger = get_logger(__name__)

SESSION_COOKIE = "JSESSIONID"

# Session ids observed so far are 32 hex characters. Other lengths still work.
EXPECTED_SESSION_ID_LENGTH = 32


class Session:
    """School, person id and session id for a single client instance."""

    def __init__(self, school: str) -> None:
        if not school:
            raise InvalidArgumentError("school is required")
        self.school = school
        self.person_id: int | None = None
        self.session_id: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.person_id is not None and self.session_id is not None

    def establish(self, session_id: str, person_id: int) -> None:
        """Store the credentials returned by a successful authenticate call.

        Raises:
            AlreadyAuthenticatedError: If the session was established before.
        """
        if self.is_authenticated:
            raise AlreadyAuthenticatedError(
                "Session already established; create a new client to re-authenticate"
            )

        if len(session_id) != EXPECTED_SESSION_ID_LENGTH:
            logger.warning(
                "unusual_session_id_length",
                length=len(session_id),
                expected=EXPECTED_SESSION_ID_LENGTH,
            )

        self.session_id = session_id
        self.person_id = person_id
        logger.info("authenticated", school=self.school, person_id=person_id)

    def require_authenticated(self) -> None:
        """Raise UnauthenticatedError unless both person id and session id are set."""
        if not self.is_authenticated:
            raise UnauthenticatedError("Unauthenticated client; call authenticate() first")

    def credential_headers(self) -> dict[str, str]:
        """Headers carrying the session id as the JSESSIONID cookie."""
        self.require_authenticated()
        return {"Cookie": f"{SESSION_COOKIE}={self.session_id}"}

    def __repr__(self) -> str:
        # Never include the session id
        return (
            f"Session(school={self.school!r}, person_id={self.person_id!r}, "
            f"authenticated={self.is_authenticated})"
        )
