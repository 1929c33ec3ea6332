"""Antbox API type definitions."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

ROOT_UUID = "--root--"
FOLDER_MIMETYPE = "application/vnd.antbox.folder"
SMART_FOLDER_MIMETYPE = "application/vnd.antbox.smartfolder"

FOLDER_MIMETYPES = frozenset({FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE})


class FilterOperator(str, Enum):
    """Operators accepted in node filters."""

    EQUAL = "=="
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    LESS = "<"
    GREATER = ">"
    NOT_EQUAL = "!="
    MATCH = "~="
    IN = "in"
    NOT_IN = "not-in"
    CONTAINS = "contains"
    CONTAINS_ALL = "contains-all"
    CONTAINS_ANY = "contains-any"
    NOT_CONTAINS = "not-contains"
    CONTAINS_NONE = "contains-none"


# A filter is [field, operator, value]; a list of filters is AND-ed.
NodeFilter = list[Any]


class AntboxModel(BaseModel):
    """Base model for Antbox records with populate_by_name enabled.

    A JSON ``null`` is treated like a missing key, so the field keeps its
    default instead of becoming ``None``.
    """

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Permissions(AntboxModel):
    """Node permissions by audience."""

    group: list[str] = Field(default_factory=list)
    authenticated: list[str] = Field(default_factory=list)
    anonymous: list[str] = Field(default_factory=list)
    advanced: dict[str, Any] = Field(default_factory=dict)


class Node(AntboxModel):
    """A document, folder or smart folder."""

    uuid: str = ""
    title: str = ""
    mimetype: str = ""
    parent: str = ""
    fid: str = ""
    owner: str = ""
    group: str = ""
    size: int = 0
    created_time: str = Field(default="", alias="createdTime")
    modified_time: str = Field(default="", alias="modifiedTime")
    permissions: Permissions = Field(default_factory=Permissions)

    @classmethod
    def root(cls) -> Node:
        return cls(uuid=ROOT_UUID, title="root", mimetype=FOLDER_MIMETYPE)

    @property
    def is_root(self) -> bool:
        return self.uuid == ROOT_UUID

    @property
    def is_folder(self) -> bool:
        return self.mimetype in FOLDER_MIMETYPES

    @property
    def is_smart_folder(self) -> bool:
        return self.mimetype == SMART_FOLDER_MIMETYPE

    @property
    def parent_uuid(self) -> str:
        """Parent id with the empty parent normalised to the root sentinel."""
        return self.parent or ROOT_UUID


class Parameter(AntboxModel):
    """A declared feature parameter."""

    name: str = ""
    type: str = ""
    description: str = ""
    required: bool = False
    default_value: Any = Field(default=None, alias="defaultValue")


class Feature(AntboxModel):
    """A server-side feature exposed as action, extension or AI tool."""

    uuid: str = ""
    name: str = ""
    description: str = ""
    expose_action: bool = Field(default=False, alias="exposeAction")
    run_on_creates: bool = Field(default=False, alias="runOnCreates")
    run_on_updates: bool = Field(default=False, alias="runOnUpdates")
    run_manually: bool = Field(default=False, alias="runManually")
    filters: Any = None
    expose_extension: bool = Field(default=False, alias="exposeExtension")
    expose_ai_tool: bool = Field(default=False, alias="exposeAITool")
    run_as: str = Field(default="", alias="runAs")
    groups_allowed: list[str] = Field(default_factory=list, alias="groupsAllowed")
    parameters: list[Parameter] = Field(default_factory=list)
    return_type: str = Field(default="", alias="returnType")
    return_description: str = Field(default="", alias="returnDescription")
    return_content_type: str = Field(default="", alias="returnContentType")


class Agent(AntboxModel):
    """An AI agent configured on the server."""

    uuid: str = ""
    title: str = ""
    description: str = ""
    model: str = ""
    owner: str = ""
    system_instructions: str = Field(default="", alias="systemInstructions")
    temperature: float = 0.0
    max_tokens: int = Field(default=0, alias="maxTokens")
    reasoning: bool = False
    use_tools: bool = Field(default=False, alias="useTools")


class Aspect(AntboxModel):
    """A metadata aspect definition."""

    uuid: str = ""
    title: str = ""
    description: str = ""


class User(AntboxModel):
    """The authenticated user."""

    email: str = ""
    name: str = ""
    groups: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def single_group(cls, data: Any) -> Any:
        # Older servers send one "group" instead of "groups"
        if isinstance(data, dict) and not data.get("groups") and data.get("group"):
            return {**data, "groups": [data["group"]]}
        return data


class Template(AntboxModel):
    uuid: str = ""
    mimetype: str = ""
    size: int = 0


class DocInfo(AntboxModel):
    uuid: str = ""
    description: str = ""


class NodeFilterResult(AntboxModel):
    """One page of a find query."""

    nodes: list[Node] = Field(default_factory=list)
    page_size: int = Field(default=20, alias="pageSize")
    page_token: int = Field(default=1, alias="pageToken")


class ToolCall(AntboxModel):
    name: str = ""
    args: dict[str, Any] = Field(default_factory=dict)


class ToolResponse(AntboxModel):
    name: str = ""
    text: str = ""


class ChatMessagePart(AntboxModel):
    """A part of a chat message; exactly one field is usually set."""

    text: str | None = None
    tool_call: ToolCall | None = Field(default=None, alias="toolCall")
    tool_response: ToolResponse | None = Field(default=None, alias="toolResponse")


class ChatMessage(AntboxModel):
    """A message in a chat history; the server uses role "model" for replies."""

    role: str = ""
    parts: list[ChatMessagePart] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def object_parts(cls, data: Any) -> Any:
        if isinstance(data, dict) and "parts" in data:
            parts = data["parts"]
            kept = [p for p in parts if isinstance(p, dict)] if isinstance(parts, list) else []
            return {**data, "parts": kept}
        return data

    def text(self) -> str:
        """Join the text parts of the message."""
        return "\n".join(p.text for p in self.parts if p.text)


def last_model_text(history: list[ChatMessage]) -> str | None:
    """Return the first text part of the most recent model message."""
    for message in reversed(history):
        if message.role != "model":
            continue
        for part in message.parts:
            if part.text is not None:
                return part.text
    return None


def parse_chat_history(payload: Any) -> list[ChatMessage]:
    """Normalise the chat endpoints' response shapes into a message list.

    The server answers with a list of ``{role, parts}`` messages; older
    servers answer with ``{"response": "..."}``. Anything else is empty.
    """
    if isinstance(payload, list):
        return [ChatMessage.model_validate(m) for m in payload if isinstance(m, dict)]
    if isinstance(payload, dict):
        response = payload.get("response")
        if isinstance(response, str):
            return [ChatMessage(role="model", parts=[ChatMessagePart(text=response)])]
    return []
