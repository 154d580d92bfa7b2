"""Shared fixtures: a recording stub transport and canned WebUntis payloads."""

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from src.untis.client import UntisClient
from src.untis.transport import BufferedResponse

SCHOOL = "borglinz"
SESSION_ID = "0123456789ABCDEF0123456789ABCDEF"
PERSON_ID = 4711


@dataclass
class RecordedCall:
    url: str
    method: str
    headers: dict[str, str]
    body: str | None

    @property
    def json_body(self) -> Any:
        return json.loads(self.body) if self.body else None


@dataclass
class StubRequester:
    """HttpRequester that replays queued responses and records every call."""

    responses: list[BufferedResponse] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def queue(self, payload: Any, status: int = 200) -> None:
        body = payload if isinstance(payload, str) else json.dumps(payload)
        self.responses.append(BufferedResponse(status=status, body=body))

    async def __call__(self, url, *, method="GET", headers=None, body=None):
        self.calls.append(RecordedCall(url, method, dict(headers or {}), body))
        if not self.responses:
            raise AssertionError(f"Unexpected request: {method} {url}")
        return self.responses.pop(0)


def rpc_result(result: Any) -> dict:
    return {"jsonrpc": "2.0", "id": "x", "result": result}


@pytest.fixture
def requester() -> StubRequester:
    return StubRequester()


@pytest.fixture
def client(requester: StubRequester) -> UntisClient:
    return UntisClient(SCHOOL, requester)


@pytest.fixture
async def authenticated_client(
    client: UntisClient, requester: StubRequester
) -> UntisClient:
    requester.queue(rpc_result({"sessionId": SESSION_ID, "personId": PERSON_ID}))
    await client.authenticate("student", "secret")
    requester.calls.clear()
    return client


@pytest.fixture
def weekly_payload() -> dict:
    """Weekly timetable response for PERSON_ID with three periods."""
    return {
        "data": {
            "result": {
                "data": {
                    "elementIds": [PERSON_ID],
                    "elements": [
                        {"type": 1, "id": 9, "name": "5A"},
                        {"type": 2, "id": 9, "name": "HUB"},
                        {"type": 3, "id": 9, "name": "Math", "longName": "Mathematics"},
                        {"type": 3, "id": 12, "name": "English"},
                        {"type": 4, "id": 9, "name": "R101"},
                        {"type": 5, "id": PERSON_ID, "name": "Student"},
                    ],
                    "elementPeriods": {
                        str(PERSON_ID): [
                            {
                                "date": 20230912,
                                "startTime": 800,
                                "endTime": 845,
                                "elements": [{"type": 3, "id": 12}],
                                "is": {"standard": True},
                            },
                            {
                                "date": 20230911,
                                "startTime": 850,
                                "endTime": 935,
                                "elements": [
                                    {"type": 1, "id": 9},
                                    {"type": 2, "id": 9},
                                    {"type": 3, "id": 9},
                                    {"type": 4, "id": 9},
                                ],
                                "is": {"cancelled": True},
                            },
                            {
                                "date": 20230911,
                                "startTime": 755,
                                "endTime": 845,
                                "elements": [{"type": 3, "id": 12}],
                            },
                        ]
                    },
                }
            }
        }
    }
