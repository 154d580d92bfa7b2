"""Request construction and sending for the WebUntis RPC and REST endpoints.

RPC:  POST {base}/jsonrpc.do?school={school}, JSON-RPC 2.0 envelope,
      response {"result": ...} or {"error": {"code", "message"}}.
REST: GET {base}/api/..., query string parameters, JSON response.

Authenticated calls pass the session id as the JSESSIONID cookie; the caller
supplies those headers (see Session.credential_headers).
"""

import json
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlencode

from src.untis.errors import ProtocolError, RequestFailedError, RpcError
from src.untis.logging import get_logger
from src.untis.schemas import RpcResponse, parse_response
from src.untis.transport import HttpRequester

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"

# Headers the web frontend sends to the REST API
REST_HEADERS: dict[str, str] = {
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
}

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _base36(value: int) -> str:
    digits = []
    while True:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
        if value == 0:
            return "".join(reversed(digits))


def correlation_id() -> str:
    """Timestamp-derived request id; only used to correlate log lines."""
    return _base36(time.time_ns())


def build_rpc_request(method: str, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a JSON-RPC 2.0 request body."""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": dict(params or {}),
        "id": correlation_id(),
    }


def rpc_url(base_url: str, school: str) -> str:
    return f"{base_url}/jsonrpc.do?{urlencode({'school': school})}"


def rest_url(base_url: str, path: str, params: Mapping[str, Any]) -> str:
    """Build a REST URL; booleans are encoded as lowercase true/false."""
    query = {
        key: str(value).lower() if isinstance(value, bool) else value
        for key, value in params.items()
    }
    return f"{base_url}{path}?{urlencode(query)}"


async def send_request(
    requester: HttpRequester,
    url: str,
    *,
    method: str = "GET",
    headers: Mapping[str, str] | None = None,
    body: str | None = None,
) -> Any:
    """Send one request and return the parsed JSON body.

    Raises:
        RequestFailedError: If the transport reports a non-success status.
        ProtocolError: If a success response is not valid JSON.
    """
    response = await requester(url, method=method, headers=headers, body=body)
    logger.info("untis_request", method=method, url=url, ok=response.ok, status=response.status)

    if not response.ok:
        text = await response.text()
        logger.error("untis_request_failed", method=method, url=url, status=response.status)
        raise RequestFailedError(response.status, text)

    try:
        return await response.json()
    except ValueError as e:
        raise ProtocolError(f"Response from {url} is not valid JSON") from e


async def call_rpc(
    requester: HttpRequester,
    url: str,
    method: str,
    params: Mapping[str, Any] | None = None,
    *,
    headers: Mapping[str, str] | None = None,
) -> Any:
    """Call a JSON-RPC method and return its result.

    Raises:
        RpcError: If the server answered with a JSON-RPC error object.
        ProtocolError: If the response has neither result nor error.
    """
    envelope = build_rpc_request(method, params)
    request_headers = {"Content-Type": "application/json", **(headers or {})}

    payload = await send_request(
        requester,
        url,
        method="POST",
        headers=request_headers,
        body=json.dumps(envelope),
    )

    response = parse_response(RpcResponse, payload, f"RPC {method}")
    if response.error is not None:
        logger.warning(
            "untis_rpc_error",
            rpc_method=method,
            code=response.error.code,
            rpc_id=envelope["id"],
        )
        raise RpcError(response.error.code, response.error.message)
    if response.result is None:
        raise ProtocolError(f"RPC {method} response has no result")
    return response.result
