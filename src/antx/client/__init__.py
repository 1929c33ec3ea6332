"""Antbox API client."""

from antx.client.client import AntboxClient
from antx.client.errors import AntboxError, AuthenticationError, HttpError
from antx.client.types import (
    FOLDER_MIMETYPE,
    ROOT_UUID,
    SMART_FOLDER_MIMETYPE,
    Agent,
    Aspect,
    ChatMessage,
    DocInfo,
    Feature,
    Node,
    Parameter,
    Permissions,
    Template,
    User,
)

__all__ = [
    "AntboxClient",
    "AntboxError",
    "AuthenticationError",
    "HttpError",
    "FOLDER_MIMETYPE",
    "ROOT_UUID",
    "SMART_FOLDER_MIMETYPE",
    "Agent",
    "Aspect",
    "ChatMessage",
    "DocInfo",
    "Feature",
    "Node",
    "Parameter",
    "Permissions",
    "Template",
    "User",
]
