"""Application context shared by the REPL and every command."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from rich.console import Console

from antx.client.types import Node
from antx.state import Navigation, ResourceCache, SessionManager, StateStore

if TYPE_CHECKING:
    from antx.client import AntboxClient
    from antx.config import Config
    from antx.interactive.registry import CommandRegistry

LineReader = Callable[[str], Awaitable[str]]


async def _no_input(prompt: str) -> str:
    raise EOFError


@dataclass
class AppContext:
    """Everything a command may touch, built once at startup."""

    client: AntboxClient
    registry: CommandRegistry
    store: StateStore
    config: Config | None = None
    console: Console = field(default_factory=Console)
    navigation: Navigation = field(default_factory=Navigation)
    sessions: SessionManager = field(default_factory=SessionManager)
    resources: ResourceCache = field(default_factory=ResourceCache)

    read_line: LineReader = _no_input
    """Prompt for one line of input; chat sub-loops use it. Raises EOFError."""

    exit_requested: bool = False

    def enter(self, node: Node) -> None:
        """Change folder and remember it for the next run."""
        self.navigation.enter(node)
        self.store.set_current_node(node.uuid)

    def go_root(self) -> None:
        self.navigation.go_root()
        self.store.set_current_node(self.navigation.current_uuid)

    def save_in_background(self) -> asyncio.Future[None] | None:
        """Write the state file on the default executor without waiting."""
        snapshot = self.store.state.snapshot()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.store.save(snapshot)
            return None
        return loop.run_in_executor(None, self.store.save, snapshot)
