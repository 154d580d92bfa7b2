"""Error hierarchy for the WebUntis client.

Every error is raised to the immediate caller; the client never retries or
recovers internally. The Transient/Permanent split lets callers classify
failures when wrapping calls in their own retry policy.

Example usage with tenacity:
    @retry(retry=retry_if_exception_type(TransientError), stop=stop_after_attempt(3))
    async def fetch_week(client: UntisClient, day: date):
        ...
"""


class UntisError(Exception):
    """Base exception for all WebUntis client errors."""

    pass


class TransientError(UntisError):
    """Failure that may succeed if the caller repeats the request."""

    pass


class PermanentError(UntisError):
    """Failure that won't succeed on retry without changing inputs or state."""

    pass


class InvalidArgumentError(PermanentError, ValueError):
    """A required input is missing or empty. Checked before any network call."""

    pass


class UnauthenticatedError(PermanentError):
    """The operation needs an established session and there is none."""

    pass


class AlreadyAuthenticatedError(PermanentError):
    """authenticate() was called on a client whose session is already set.

    Re-authentication is not supported; create a new client instead.
    """

    pass


class RequestFailedError(TransientError):
    """The transport reported a non-success status.

    Attributes:
        status: HTTP status code, or None when the request never got a response.
        body: Raw response body (or the transport error text).
    """

    def __init__(self, status: int | None, body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"Request failed (status={status}): {body[:200]}")


class ProtocolError(PermanentError):
    """Response parsed but lacks required fields or has an unexpected shape."""

    pass


class RpcError(ProtocolError):
    """JSON-RPC error object returned with a success status.

    WebUntis reports bad credentials this way (code -8504).
    """

    def __init__(self, code: int | None, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"RPC error {code}: {message}")


class MalformedDateError(PermanentError, ValueError):
    """A compact YYYYMMDD date does not parse."""

    pass


class MalformedTimeError(PermanentError, ValueError):
    """A compact HHMM time does not parse."""

    pass


class MissingReferenceError(PermanentError):
    """A timetable period references an element absent from the index."""

    pass
