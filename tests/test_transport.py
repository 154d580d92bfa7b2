import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from src.untis.errors import RequestFailedError
from src.untis.rpc import send_request
from src.untis.transport import AiohttpRequester, BufferedResponse


async def _echo(request: web.Request) -> web.Response:
    body = await request.text()
    return web.json_response(
        {
            "method": request.method,
            "cookie": request.headers.get("Cookie"),
            "body": body,
        }
    )


async def _latin1_error(request: web.Request) -> web.Response:
    return web.Response(
        status=500,
        body="<html><body>Anmeldung Ungültig</body></html>".encode("latin-1"),
        content_type="text/html",
    )


async def _forbidden(request: web.Request) -> web.Response:
    return web.Response(status=403, text="no right")


async def _slow(request: web.Request) -> web.Response:
    await asyncio.sleep(0.5)
    return web.json_response({})


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_route("*", "/echo", _echo)
    app.router.add_get("/latin1", _latin1_error)
    app.router.add_get("/forbidden", _forbidden)
    app.router.add_get("/slow", _slow)
    async with TestServer(app) as test_server:
        yield test_server


class TestBufferedResponse:
    @pytest.mark.parametrize("status,ok", [(200, True), (204, True), (302, False), (401, False), (500, False)])
    def test_ok(self, status, ok):
        assert BufferedResponse(status=status, body="").ok is ok

    async def test_text_and_json(self):
        response = BufferedResponse(status=200, body='{"result": [1, 2]}')
        assert await response.text() == '{"result": [1, 2]}'
        assert await response.json() == {"result": [1, 2]}

    async def test_invalid_json_raises_value_error(self):
        with pytest.raises(ValueError):
            await BufferedResponse(status=200, body="<html>").json()


class TestAiohttpRequester:
    async def test_must_be_entered(self):
        requester = AiohttpRequester()
        with pytest.raises(RuntimeError):
            await requester("https://example.invalid/")

    async def test_owns_and_closes_session(self):
        async with AiohttpRequester() as requester:
            session = requester._session
            assert isinstance(session, aiohttp.ClientSession)
        assert session.closed
        assert requester._session is None

    async def test_borrowed_session_left_open(self):
        async with aiohttp.ClientSession() as session:
            async with AiohttpRequester(session) as requester:
                assert requester._session is session
            assert not session.closed

    async def test_success_returns_buffered_response(self, server):
        async with AiohttpRequester() as requester:
            response = await requester(
                str(server.make_url("/echo")),
                method="POST",
                headers={"Cookie": "JSESSIONID=abc", "Content-Type": "application/json"},
                body='{"id": 1}',
            )

        assert isinstance(response, BufferedResponse)
        assert response.ok
        assert response.status == 200
        assert await response.json() == {
            "method": "POST",
            "cookie": "JSESSIONID=abc",
            "body": '{"id": 1}',
        }

    async def test_non_success_is_returned_not_raised(self, server):
        async with AiohttpRequester() as requester:
            response = await requester(str(server.make_url("/forbidden")))

        assert not response.ok
        assert response.status == 403
        assert await response.text() == "no right"

    async def test_undecodable_error_body_becomes_request_failed(self, server):
        async with AiohttpRequester() as requester:
            with pytest.raises(RequestFailedError) as exc_info:
                await send_request(requester, str(server.make_url("/latin1")))

        assert exc_info.value.status == 500
        assert "Anmeldung Ung" in exc_info.value.body

    async def test_connection_refused(self):
        url = f"http://127.0.0.1:{unused_port()}/echo"
        async with AiohttpRequester() as requester:
            with pytest.raises(RequestFailedError) as exc_info:
                await requester(url)
        assert exc_info.value.status is None

    async def test_timeout(self, server):
        async with AiohttpRequester(timeout=0.05) as requester:
            with pytest.raises(RequestFailedError) as exc_info:
                await requester(str(server.make_url("/slow")))
        assert exc_info.value.status is None
        assert exc_info.value.body
