"""Tests for the Antbox HTTP client.

Tests coverage for:
- src/antx/client/client.py
- src/antx/client/errors.py
- src/antx/client/types.py
"""

from __future__ import annotations

import hashlib
import json

import httpx
import pytest

from antx.client import AntboxClient, AntboxError, AuthenticationError, HttpError
from antx.client.types import FOLDER_MIMETYPE, ChatMessage, ChatMessagePart, last_model_text


class Recorder:
    """MockTransport handler that records requests and replays canned responses."""

    def __init__(self, *responses: httpx.Response) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


def make_client(recorder: Recorder, **kwargs) -> AntboxClient:
    return AntboxClient("http://antbox.test/", transport=httpx.MockTransport(recorder), **kwargs)


class TestAuthentication:
    """Tests for credentials on requests."""

    async def test_api_key_header(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[]))
        async with make_client(recorder, api_key="secret") as client:
            await client.list_agents()

        assert recorder.last.headers["X-API-Key"] == "secret"
        assert "Authorization" not in recorder.last.headers

    async def test_jwt_wins_over_api_key(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[]))
        async with make_client(recorder, api_key="secret", jwt="token") as client:
            await client.list_agents()

        assert recorder.last.headers["Authorization"] == "Bearer token"
        assert "X-API-Key" not in recorder.last.headers

    async def test_login_sends_password_digest(self) -> None:
        """Test that login posts the SHA-256 hex digest and keeps the JWT."""
        recorder = Recorder(httpx.Response(200, json={"jwt": "fresh"}), httpx.Response(200, json=[]))
        async with make_client(recorder, root_password="demo") as client:
            await client.login()
            await client.list_actions()

        login = recorder.requests[0]
        assert login.method == "POST"
        assert login.url.path == "/login/root"
        assert login.content.decode() == hashlib.sha256(b"demo").hexdigest()
        assert client.jwt == "fresh"
        assert recorder.last.headers["Authorization"] == "Bearer fresh"

    async def test_login_rejected(self) -> None:
        recorder = Recorder(httpx.Response(401, json={"message": "bad password"}))
        async with make_client(recorder, root_password="wrong") as client:
            with pytest.raises(HttpError) as excinfo:
                await client.login()

        assert excinfo.value.status_code == 401
        assert str(excinfo.value) == "401 bad password"

    async def test_login_without_token(self) -> None:
        recorder = Recorder(httpx.Response(200, json={}))
        async with make_client(recorder, root_password="demo") as client:
            with pytest.raises(AuthenticationError):
                await client.login()

    @pytest.mark.parametrize(
        "response",
        [httpx.Response(200), httpx.Response(200, json=["jwt"]), httpx.Response(200, json={"jwt": 7})],
    )
    async def test_login_body_without_object(self, response) -> None:
        """Test that an empty or non-object login body is a login failure."""
        async with make_client(Recorder(response), root_password="demo") as client:
            with pytest.raises(AuthenticationError, match="carried no token"):
                await client.login()

        assert client.jwt is None


class TestErrors:
    """Tests for error wrapping."""

    async def test_unexpected_status_raises_http_error(self) -> None:
        recorder = Recorder(httpx.Response(404, text="Node not found"))
        async with make_client(recorder) as client:
            with pytest.raises(HttpError) as excinfo:
                await client.get_node("missing")

        error = excinfo.value
        assert error.method == "GET"
        assert error.url == "http://antbox.test/nodes/missing"
        assert error.message == "Node not found"

    async def test_create_folder_expects_created(self) -> None:
        """Test that a 200 answer to a create is treated as a failure."""
        recorder = Recorder(httpx.Response(200, json={"uuid": "f1"}))
        async with make_client(recorder) as client:
            with pytest.raises(HttpError):
                await client.create_folder("--root--", "Docs")

    async def test_transport_error_is_wrapped(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with AntboxClient("http://antbox.test", transport=httpx.MockTransport(refuse)) as client:
            with pytest.raises(AntboxError, match="connection refused"):
                await client.list_nodes("--root--")

    async def test_invalid_json_is_an_error(self) -> None:
        recorder = Recorder(httpx.Response(200, text="<html>"))
        async with make_client(recorder) as client:
            with pytest.raises(AntboxError, match="invalid JSON"):
                await client.get_node("n1")

    def test_http_error_details(self) -> None:
        error = HttpError(
            500, "POST", "http://antbox.test/nodes", body='{"error":"boom"}',
            request_body='{"title":"x"}', reason="Internal Server Error",
        )

        details = error.details()
        assert "==> Request" in details
        assert "Response <==" in details
        assert '"error": "boom"' in details
        assert str(error) == "500 boom"

    def test_http_error_without_body(self) -> None:
        error = HttpError(502, "GET", "http://antbox.test/nodes")

        assert str(error) == "GET http://antbox.test/nodes - 502"


class TestNodes:
    """Tests for node endpoints."""

    async def test_list_nodes_query(self) -> None:
        recorder = Recorder(
            httpx.Response(200, json=[{"uuid": "n1", "title": "A", "mimetype": FOLDER_MIMETYPE}])
        )
        async with make_client(recorder) as client:
            nodes = await client.list_nodes("--root--")

        assert recorder.last.url.params["parent"] == "--root--"
        assert nodes[0].is_folder

    async def test_null_fields_take_defaults(self) -> None:
        recorder = Recorder(
            httpx.Response(
                200,
                json=[
                    {"uuid": "n1", "title": None, "mimetype": None, "size": None, "permissions": None},
                    {"uuid": "n2", "title": "B", "modifiedTime": "2024-01-01T00:00:00Z"},
                ],
            )
        )
        async with make_client(recorder) as client:
            nodes = await client.list_nodes("--root--")

        assert nodes[0].title == ""
        assert nodes[0].size == 0
        assert nodes[0].permissions.group == []
        assert nodes[1].modified_time == "2024-01-01T00:00:00Z"

    async def test_malformed_record_is_antbox_error(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[{"uuid": "n1", "size": "huge"}]))
        async with make_client(recorder) as client:
            with pytest.raises(AntboxError, match="unexpected Node"):
                await client.list_nodes("--root--")

    async def test_non_list_listing_is_antbox_error(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"uuid": "n1"}))
        async with make_client(recorder) as client:
            with pytest.raises(AntboxError, match="expected a list"):
                await client.list_nodes("--root--")

    async def test_create_folder_body(self) -> None:
        recorder = Recorder(httpx.Response(201, json={"uuid": "f1", "title": "Docs"}))
        async with make_client(recorder) as client:
            node = await client.create_folder("p1", "Docs")

        assert recorder.last_json() == {"title": "Docs", "parent": "p1", "mimetype": FOLDER_MIMETYPE}
        assert node.uuid == "f1"

    async def test_find_body(self) -> None:
        recorder = Recorder(
            httpx.Response(200, json={"nodes": [{"uuid": "n1"}], "pageSize": 20, "pageToken": 1})
        )
        async with make_client(recorder) as client:
            result = await client.find_nodes([["title", "==", "Report"]], page_size=0)

        assert recorder.last.url.path == "/nodes/-/find"
        assert recorder.last_json() == {
            "filters": [["title", "==", "Report"]],
            "pageSize": 20,
            "pageToken": 1,
        }
        assert [n.uuid for n in result.nodes] == ["n1"]

    async def test_evaluate_without_nodes_is_empty(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"other": 1}))
        async with make_client(recorder) as client:
            assert await client.evaluate_node("s1") == []

    async def test_copy_body(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"uuid": "c1"}))
        async with make_client(recorder) as client:
            await client.copy_node("n1", "p2", "Copy of A")

        assert recorder.last.url.path == "/nodes/n1/-/copy"
        assert recorder.last_json() == {"to": "p2", "title": "Copy of A"}

    async def test_remove_accepts_no_content(self) -> None:
        recorder = Recorder(httpx.Response(204))
        async with make_client(recorder) as client:
            await client.remove_node("n1")

        assert recorder.last.method == "DELETE"

    async def test_upload_is_multipart(self, tmp_path) -> None:
        """Test that a new file is sent as multipart with JSON metadata."""
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        recorder = Recorder(httpx.Response(201, json={"uuid": "u1", "title": "notes.txt"}))
        async with make_client(recorder) as client:
            node = await client.create_file(path, "p1")

        request = recorder.last
        assert request.url.path == "/nodes/-/upload"
        assert request.headers["content-type"].startswith("multipart/form-data")
        body = request.content.decode()
        assert 'name="file"; filename="notes.txt"' in body
        assert "hello" in body
        assert '"parent": "p1"' in body
        assert node.uuid == "u1"

    async def test_upload_missing_file(self, tmp_path) -> None:
        recorder = Recorder(httpx.Response(201, json={}))
        async with make_client(recorder) as client:
            with pytest.raises(AntboxError, match="cannot read"):
                await client.create_file(tmp_path / "nope.txt", "p1")

        assert recorder.requests == []

    async def test_download_writes_file(self, tmp_path) -> None:
        recorder = Recorder(httpx.Response(200, content=b"\x00binary"))
        async with make_client(recorder) as client:
            target = await client.download_node("n1", tmp_path / "sub" / "file.bin")

        assert target.read_bytes() == b"\x00binary"
        assert recorder.last.url.path == "/nodes/n1/-/export"


class TestAgents:
    """Tests for the chat endpoints."""

    async def test_chat_history_response(self) -> None:
        payload = [
            {"role": "user", "parts": [{"text": "hi"}]},
            {"role": "model", "parts": [{"toolCall": {"name": "search", "args": {"q": "x"}}}]},
            {"role": "model", "parts": [{"text": "hello"}]},
        ]
        recorder = Recorder(httpx.Response(200, json=payload))
        async with make_client(recorder) as client:
            history = await client.chat_with_agent(
                "a1", "hi", temperature=0.2, max_tokens=100,
                history=[{"role": "user", "content": "before"}],
            )

        assert recorder.last.url.path == "/agents/a1/-/chat"
        assert recorder.last_json() == {
            "text": "hi",
            "options": {
                "temperature": 0.2,
                "maxTokens": 100,
                "history": [{"role": "user", "content": "before"}],
            },
        }
        assert history[1].parts[0].tool_call.name == "search"
        assert last_model_text(history) == "hello"

    async def test_legacy_response_shape(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"response": "plain answer"}))
        async with make_client(recorder) as client:
            history = await client.answer_from_agent("a1", "q")

        assert recorder.last_json() == {"text": "q"}
        assert last_model_text(history) == "plain answer"

    async def test_unknown_shape_is_empty(self) -> None:
        recorder = Recorder(httpx.Response(200, json={"something": "else"}))
        async with make_client(recorder) as client:
            assert await client.rag_chat("q") == []

    async def test_rag_options(self) -> None:
        recorder = Recorder(httpx.Response(200, json=[]))
        options = {"filters": [["parent", "==", "p1"]], "conversationId": "c1"}
        async with make_client(recorder) as client:
            await client.rag_chat("where is it?", options)

        assert recorder.last.url.path == "/agents/rag/-/chat"
        assert recorder.last_json() == {"text": "where is it?", "options": options}

    def test_last_model_text_skips_user_messages(self) -> None:
        history = [
            ChatMessage(role="model", parts=[ChatMessagePart(text="old")]),
            ChatMessage(role="user", parts=[ChatMessagePart(text="new question")]),
        ]

        assert last_model_text(history) == "old"
        assert last_model_text([]) is None


class TestDebugLogging:
    async def test_requests_logged_at_trace(self, caplog) -> None:
        recorder = Recorder(httpx.Response(200, json=[]))
        caplog.set_level(1, logger="antx")
        async with make_client(recorder, debug=True) as client:
            await client.list_aspects()

        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith(">>>>> Request\nGET http://antbox.test/aspects") for m in messages)
        assert any(m.startswith(">>>>> Response\n200") for m in messages)
