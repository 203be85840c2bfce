"""HTTP gateway against a mocked transport."""
import json
import httpx
import pytest
from tasktrack.client.errors import ApiError
from tasktrack.client.events import AuthEvent
from tasktrack.client.gateway import TaskTrackClient

USER = {"id": 1, "email": "mario@example.com", "name": "Mario", "surname": "Rossi"}
BOARD = {"id": 4, "title": "Università", "icon": "university", "theme": "purple"}


def session(access, refresh="refresh-1"):
    return {"success": True, "data": {"access_token": access, "refresh_token": refresh, "user": USER}}


def make_client(handler):
    client = TaskTrackClient(base_url="http://tasktrack.test", transport=httpx.MockTransport(handler))
    events = []
    client.events.subscribe(lambda event, data=None: events.append(event))
    return client, events


@pytest.mark.asyncio
async def test_sign_in_stores_tokens_and_sends_bearer():
    seen_headers = []

    def handler(request):
        if request.url.path == "/auth/login":
            assert json.loads(request.content) == {"email": "mario@example.com", "password": "secret123"}
            return httpx.Response(200, json=session("access-1"))
        seen_headers.append(request.headers.get("authorization"))
        return httpx.Response(200, json={"success": True, "data": [BOARD]})

    client, events = make_client(handler)
    async with client:
        user = await client.sign_in_with_password("mario@example.com", "secret123")
        boards = await client.list_boards()

    assert user.id == "1"
    assert events == [AuthEvent.SIGNED_IN]
    assert seen_headers == ["Bearer access-1"]
    assert boards[0].id == "4"
    assert boards[0].stats.deadlines == 0


@pytest.mark.asyncio
async def test_error_envelope_raises_api_error():
    def handler(request):
        return httpx.Response(409, json={"success": False, "error": "Email already exists"})

    client, _ = make_client(handler)
    async with client:
        with pytest.raises(ApiError) as exc_info:
            await client.sign_up("mario@example.com", "secret123", "Mario", "Rossi")

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Email already exists"


@pytest.mark.asyncio
async def test_get_board_returns_none_on_404():
    def handler(request):
        return httpx.Response(404, json={"success": False, "error": "Board not found"})

    client, _ = make_client(handler)
    async with client:
        assert await client.get_board("missing") is None


@pytest.mark.asyncio
async def test_expired_token_is_refreshed_once():
    def handler(request):
        if request.url.path == "/auth/refresh":
            return httpx.Response(200, json=session("access-2", "refresh-2"))
        if request.headers.get("authorization") == "Bearer access-1":
            return httpx.Response(401, json={"success": False, "error": "Could not validate credentials"})
        return httpx.Response(200, json={"success": True, "data": []})

    client, events = make_client(handler)
    client.access_token = "access-1"
    client.refresh_token = "refresh-1"
    async with client:
        assert await client.list_tasks("4") == []

    assert client.access_token == "access-2"
    assert client.refresh_token == "refresh-2"
    assert events == [AuthEvent.TOKEN_REFRESHED]


@pytest.mark.asyncio
async def test_failed_refresh_signs_out():
    def handler(request):
        return httpx.Response(401, json={"success": False, "error": "Invalid refresh token"})

    client, events = make_client(handler)
    client.access_token = "access-1"
    client.refresh_token = "refresh-1"
    async with client:
        with pytest.raises(ApiError) as exc_info:
            await client.list_boards()

    assert exc_info.value.status_code == 401
    assert client.access_token is None
    assert events == [AuthEvent.SIGNED_OUT]


@pytest.mark.asyncio
async def test_sign_out_clears_session_even_if_logout_fails():
    def handler(request):
        return httpx.Response(500, json={"success": False, "error": "Internal server error"})

    client, events = make_client(handler)
    client.access_token = "access-1"
    async with client:
        await client.sign_out()

    assert not client.is_authenticated
    assert events == [AuthEvent.SIGNED_OUT]


@pytest.mark.asyncio
async def test_upload_attachment_is_multipart():
    captured = {}

    def handler(request):
        captured["content_type"] = request.headers["content-type"]
        captured["body"] = request.content
        return httpx.Response(201, json={"success": True, "data": {
            "id": 8, "name": "notes.txt", "file_path": "3/1717_notes.txt", "file_size": 5, "file_type": "text/plain",
        }})

    client, _ = make_client(handler)
    client.access_token = "access-1"
    async with client:
        attachment = await client.upload_attachment("3", "notes.txt", b"hello", "text/plain")

    assert captured["content_type"].startswith("multipart/form-data")
    assert b"hello" in captured["body"]
    assert attachment.id == "8"


@pytest.mark.asyncio
async def test_transport_error_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client, _ = make_client(handler)
    async with client:
        with pytest.raises(ApiError) as exc_info:
            await client.list_boards()

    assert exc_info.value.status_code == 0
