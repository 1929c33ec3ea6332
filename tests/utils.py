"""Shared test utilities for antx tests."""

from __future__ import annotations

from io import StringIO
from typing import Any

from rich.console import Console

from antx.client.types import FOLDER_MIMETYPE, SMART_FOLDER_MIMETYPE, Node


def make_console() -> Console:
    """A console that writes plain text to a buffer."""
    return Console(file=StringIO(), width=160, color_system=None, force_terminal=False)


def output(console: Console) -> str:
    """Everything printed to a console built by ``make_console``."""
    return console.file.getvalue()


def folder(uuid: str, title: str, parent: str = "", **kwargs: Any) -> Node:
    return Node(uuid=uuid, title=title, mimetype=FOLDER_MIMETYPE, parent=parent, **kwargs)


def smart_folder(uuid: str, title: str, parent: str = "") -> Node:
    return Node(uuid=uuid, title=title, mimetype=SMART_FOLDER_MIMETYPE, parent=parent)


def document(
    uuid: str,
    title: str,
    parent: str = "",
    mimetype: str = "text/plain",
    size: int = 0,
) -> Node:
    return Node(uuid=uuid, title=title, mimetype=mimetype, parent=parent, size=size)


def node_json(node: Node) -> dict[str, Any]:
    """Wire representation of a node, as the server sends it."""
    return node.model_dump(by_alias=True)
