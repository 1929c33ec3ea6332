"""Async HTTP client for the Antbox API."""

from __future__ import annotations

import hashlib
import json
import mimetypes
import os
from pathlib import Path
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from antx.client.errors import AntboxError, AuthenticationError, HttpError
from antx.client.types import (
    FOLDER_MIMETYPE,
    SMART_FOLDER_MIMETYPE,
    Agent,
    Aspect,
    ChatMessage,
    DocInfo,
    Feature,
    Node,
    NodeFilter,
    NodeFilterResult,
    Template,
    User,
    parse_chat_history,
)
from antx.logging import TRACE, get_logger

log = get_logger("client")

DEFAULT_PAGE_SIZE = 20

ModelT = TypeVar("ModelT", bound=BaseModel)


class AntboxClient:
    """Authenticated gateway to an Antbox server.

    Every call either returns typed data or raises ``AntboxError``. Non-2xx
    responses raise ``HttpError``; transport failures are wrapped in
    ``AntboxError`` so commands only need one ``except`` clause.
    """

    def __init__(
        self,
        server_url: str,
        api_key: str | None = None,
        root_password: str | None = None,
        jwt: str | None = None,
        *,
        debug: bool = False,
        timeout: float = 60.0,
        verify_tls: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.api_key = api_key
        self.root_password = root_password
        self.jwt = jwt
        self.debug = debug

        event_hooks: dict[str, list[Any]] = {}
        if debug:
            event_hooks = {"request": [_log_request], "response": [_log_response]}

        self._http = httpx.AsyncClient(
            base_url=self.server_url,
            timeout=timeout,
            verify=verify_tls,
            transport=transport,
            event_hooks=event_hooks,
        )

    async def __aenter__(self) -> AntboxClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    # -- plumbing ----------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        if self.jwt:
            return {"Authorization": f"Bearer {self.jwt}"}
        if self.api_key:
            return {"X-API-Key": self.api_key}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        expected: tuple[int, ...] = (200,),
        json_body: Any = None,
        **kwargs: Any,
    ) -> httpx.Response:
        request_body = ""
        if json_body is not None:
            request_body = json.dumps(json_body)
            kwargs["content"] = request_body
            kwargs.setdefault("headers", {})["Content-Type"] = "application/json"

        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise AntboxError(f"{method} {self.server_url}{path}: {e}") from e

        if response.status_code not in expected:
            if "files" in kwargs:
                request_body = "<multipart body>"
            raise HttpError(
                status_code=response.status_code,
                method=method,
                url=str(response.request.url),
                body=response.text,
                request_body=request_body,
                reason=response.reason_phrase,
            )
        return response

    async def _get_json(self, path: str, **kwargs: Any) -> Any:
        response = await self._request("GET", path, **kwargs)
        return _decode(response)

    async def _post_json(self, path: str, body: Any, **kwargs: Any) -> Any:
        response = await self._request("POST", path, json_body=body, **kwargs)
        return _decode(response)

    # -- auth --------------------------------------------------------------

    async def login(self) -> None:
        """Exchange the root password for a JWT."""
        if not self.root_password:
            raise AuthenticationError("root password is not set")

        digest = hashlib.sha256(self.root_password.encode("utf-8")).hexdigest()
        try:
            response = await self._http.post("/login/root", content=digest)
        except httpx.HTTPError as e:
            raise AuthenticationError(f"login failed: {e}") from e
        if response.status_code != 200:
            raise HttpError(
                status_code=response.status_code,
                method="POST",
                url=str(response.request.url),
                body=response.text,
                request_body=digest,
                reason=response.reason_phrase,
            )

        data = _decode(response)
        jwt = data.get("jwt") if isinstance(data, dict) else None
        if not isinstance(jwt, str) or not jwt:
            raise AuthenticationError("login response carried no token")
        self.jwt = jwt
        log.info("Logged in as root")

    async def get_current_user(self) -> User:
        return _parse(User, await self._get_json("/users/me"))

    # -- nodes -------------------------------------------------------------

    async def get_node(self, uuid: str) -> Node:
        return _parse(Node, await self._get_json(f"/nodes/{uuid}"))

    async def list_nodes(self, parent: str) -> list[Node]:
        data = await self._get_json("/nodes", params={"parent": parent})
        return _parse_list(Node, data)

    async def create_folder(self, parent: str, title: str) -> Node:
        body = {"title": title, "parent": parent, "mimetype": FOLDER_MIMETYPE}
        return _parse(Node, await self._post_json("/nodes", body, expected=(201,)))

    async def create_smart_folder(
        self, parent: str, title: str, filters: list[NodeFilter]
    ) -> Node:
        body = {
            "title": title,
            "parent": parent,
            "mimetype": SMART_FOLDER_MIMETYPE,
            "filters": filters,
        }
        return _parse(Node, await self._post_json("/nodes", body, expected=(201,)))

    async def remove_node(self, uuid: str) -> None:
        await self._request("DELETE", f"/nodes/{uuid}", expected=(200, 204))

    async def move_node(self, uuid: str, parent: str) -> None:
        await self._request(
            "PATCH", f"/nodes/{uuid}", json_body={"parent": parent}, expected=(200, 204)
        )

    async def rename_node(self, uuid: str, title: str) -> None:
        await self._request(
            "PATCH", f"/nodes/{uuid}", json_body={"title": title}, expected=(200, 204)
        )

    async def create_file(self, path: str | Path, parent: str) -> Node:
        """Upload a local file as a new node under ``parent``."""
        file_path = Path(os.path.expanduser(str(path))).resolve()
        metadata = {"title": file_path.name, "parent": parent, "mimetype": _guess_mimetype(file_path)}
        response = await self._request(
            "POST",
            "/nodes/-/upload",
            expected=(200, 201),
            files={"file": _file_part(file_path)},
            data={"metadata": json.dumps(metadata)},
        )
        return _parse(Node, _decode(response))

    async def update_file(self, uuid: str, path: str | Path) -> Node:
        """Replace the content of an existing file node."""
        file_path = Path(os.path.expanduser(str(path))).resolve()
        response = await self._request(
            "PUT",
            f"/nodes/{uuid}/-/upload",
            files={"file": _file_part(file_path)},
        )
        return _parse(Node, _decode(response))

    async def find_nodes(
        self,
        filters: list[NodeFilter],
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: int = 1,
    ) -> NodeFilterResult:
        body = {
            "filters": filters,
            "pageSize": page_size if page_size > 0 else DEFAULT_PAGE_SIZE,
            "pageToken": page_token if page_token > 0 else 1,
        }
        return _parse(NodeFilterResult, await self._post_json("/nodes/-/find", body))

    async def evaluate_node(self, uuid: str) -> list[Node]:
        """Evaluate a smart folder; results without a node list are empty."""
        data = await self._get_json(f"/nodes/{uuid}/-/evaluate")
        if isinstance(data, dict) and isinstance(data.get("nodes"), list):
            return _parse_list(Node, data["nodes"])
        return []

    async def export_node(self, uuid: str) -> bytes:
        response = await self._request("GET", f"/nodes/{uuid}/-/export")
        return response.content

    async def download_node(self, uuid: str, path: str | Path) -> Path:
        """Write the exported node content to ``path``, creating parent dirs."""
        content = await self.export_node(uuid)
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as e:
            raise AntboxError(f"cannot write {target}: {e}") from e
        return target

    async def get_breadcrumbs(self, uuid: str) -> list[Node]:
        data = await self._get_json(f"/nodes/{uuid}/-/breadcrumbs")
        return _parse_list(Node, data)

    async def copy_node(self, uuid: str, parent: str, title: str = "") -> Node:
        body: dict[str, Any] = {"to": parent}
        if title:
            body["title"] = title
        return _parse(Node, await self._post_json(f"/nodes/{uuid}/-/copy", body))

    async def duplicate_node(self, uuid: str) -> Node:
        return _parse(Node, await self._get_json(f"/nodes/{uuid}/-/duplicate"))

    # -- features ----------------------------------------------------------

    async def list_actions(self) -> list[Feature]:
        return _parse_list(Feature, await self._get_json("/actions"))

    async def run_action(
        self, uuid: str, uuids: list[str], parameters: dict[str, Any] | None = None
    ) -> Any:
        body: dict[str, Any] = {"uuids": uuids}
        if parameters:
            body["parameters"] = parameters
        return await self._post_json(f"/actions/{uuid}/run", body)

    async def list_extensions(self) -> list[Feature]:
        return _parse_list(Feature, await self._get_json("/extensions"))

    async def run_extension(self, uuid: str, parameters: dict[str, Any]) -> Any:
        return await self._post_json(f"/extensions/{uuid}/run", parameters)

    async def list_aspects(self) -> list[Aspect]:
        return _parse_list(Aspect, await self._get_json("/aspects"))

    # -- agents ------------------------------------------------------------

    async def list_agents(self) -> list[Agent]:
        return _parse_list(Agent, await self._get_json("/agents"))

    async def chat_with_agent(
        self,
        uuid: str,
        text: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        history: list[dict[str, Any]] | None = None,
    ) -> list[ChatMessage]:
        options = _chat_options(temperature, max_tokens)
        if history:
            options["history"] = history
        return await self._chat(f"/agents/{uuid}/-/chat", text, options)

    async def answer_from_agent(
        self,
        uuid: str,
        text: str,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> list[ChatMessage]:
        options = _chat_options(temperature, max_tokens)
        return await self._chat(f"/agents/{uuid}/-/answer", text, options)

    async def rag_chat(self, text: str, options: dict[str, Any] | None = None) -> list[ChatMessage]:
        return await self._chat("/agents/rag/-/chat", text, options or {})

    async def _chat(self, path: str, text: str, options: dict[str, Any]) -> list[ChatMessage]:
        body: dict[str, Any] = {"text": text}
        if options:
            body["options"] = options
        response = await self._request("POST", path, json_body=body)
        try:
            payload = response.json()
        except ValueError:
            return []
        return parse_chat_history(payload)

    # -- templates & docs --------------------------------------------------

    async def list_templates(self) -> list[Template]:
        return _parse_list(Template, await self._get_json("/templates"))

    async def get_template(self, uuid: str) -> bytes:
        response = await self._request("GET", f"/templates/{uuid}")
        return response.content

    async def list_docs(self) -> list[DocInfo]:
        return _parse_list(DocInfo, await self._get_json("/docs"))

    async def get_doc(self, uuid: str) -> str:
        response = await self._request("GET", f"/docs/{uuid}")
        return response.text


def _chat_options(temperature: float | None, max_tokens: int | None) -> dict[str, Any]:
    options: dict[str, Any] = {}
    if temperature is not None:
        options["temperature"] = temperature
    if max_tokens is not None:
        options["maxTokens"] = max_tokens
    return options


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise AntboxError(
            f"invalid JSON from {response.request.method} {response.request.url}"
        ) from e


def _parse(model: type[ModelT], data: Any) -> ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise AntboxError(f"unexpected {model.__name__} in response: {e}") from e


def _parse_list(model: type[ModelT], data: Any) -> list[ModelT]:
    if data is None:
        return []
    if not isinstance(data, list):
        raise AntboxError(f"expected a list of {model.__name__} records in response")
    return [_parse(model, item) for item in data]


def _guess_mimetype(path: Path) -> str:
    mimetype, _ = mimetypes.guess_type(path.name)
    return mimetype or "application/octet-stream"


def _file_part(path: Path) -> tuple[str, bytes, str]:
    try:
        content = path.read_bytes()
    except OSError as e:
        raise AntboxError(f"cannot read {path}: {e}") from e
    return (path.name, content, _guess_mimetype(path))


async def _log_request(request: httpx.Request) -> None:
    body = request.content if not _is_multipart(request.headers) else b"<multipart body>"
    log.log(
        TRACE,
        ">>>>> Request\n%s %s\n%s\n\n%s",
        request.method,
        request.url,
        _format_headers(request.headers),
        body.decode("utf-8", errors="replace"),
    )


async def _log_response(response: httpx.Response) -> None:
    if _is_multipart(response.headers):
        body = "<multipart body>"
    else:
        body = (await response.aread()).decode("utf-8", errors="replace")
    log.log(
        TRACE,
        ">>>>> Response\n%s %s\n%s\n\n%s",
        response.status_code,
        response.reason_phrase,
        _format_headers(response.headers),
        body,
    )


def _is_multipart(headers: httpx.Headers) -> bool:
    return "multipart/" in headers.get("content-type", "")


def _format_headers(headers: httpx.Headers) -> str:
    return "\n".join(f"{k}: {v}" for k, v in headers.items())
