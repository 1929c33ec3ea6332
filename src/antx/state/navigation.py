"""Current folder and the cached listing used for completions."""

from __future__ import annotations

from antx.client.types import ROOT_UUID, Node
from antx.logging import get_logger

log = get_logger("navigation")

CURRENT_ALIAS = "."
PARENT_ALIAS = ".."


class Navigation:
    """Tracks the folder the shell is in.

    ``current`` is always a folder-like node; the root is represented by a
    synthetic node with uuid ``--root--``. ``nodes`` is the listing of the
    last folder shown by ``ls`` and only feeds completions.
    """

    def __init__(self) -> None:
        self.current: Node = Node.root()
        self.nodes: list[Node] = []

    @property
    def current_uuid(self) -> str:
        return self.current.uuid

    @property
    def parent_uuid(self) -> str:
        if self.current.is_root:
            return ROOT_UUID
        return self.current.parent_uuid

    def resolve(self, ref: str) -> str:
        """Expand ``.`` and ``..``; other references pass through."""
        if ref == CURRENT_ALIAS:
            return self.current_uuid
        if ref == PARENT_ALIAS:
            return self.parent_uuid
        return ref

    def enter(self, node: Node) -> None:
        log.debug("Entering %s (%s)", node.title, node.uuid)
        self.current = node

    def go_root(self) -> None:
        self.current = Node.root()

    def cache_listing(self, nodes: list[Node]) -> None:
        self.nodes = list(nodes)

    def cached(self, predicate=None) -> list[Node]:
        if predicate is None:
            return list(self.nodes)
        return [n for n in self.nodes if predicate(n)]
