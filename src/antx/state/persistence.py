"""Persist the current folder and command history between runs.

File layout (default ``~/.antx``)::

    <current node uuid>        # empty or --root-- means root

    <oldest command>
    ...
    <newest command>
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from antx.client.types import ROOT_UUID
from antx.logging import get_logger

log = get_logger("state")

MAX_HISTORY = 20

# Commands that only inspect state are not worth replaying
HISTORY_EXCLUDED = frozenset({"help", "status", "aliases", "exit"})


@dataclass
class CLIState:
    """What survives a restart."""

    current_node_uuid: str = ROOT_UUID
    history: list[str] = field(default_factory=list)

    def snapshot(self) -> CLIState:
        return CLIState(self.current_node_uuid, list(self.history))


class StateStore:
    """Load and save ``CLIState`` to a flat file."""

    def __init__(self, path: Path, max_history: int = MAX_HISTORY) -> None:
        self.path = path
        self.max_history = min(max(max_history, 1), MAX_HISTORY)
        self.state = CLIState()

    def load(self) -> CLIState:
        """Read the state file; a missing or unreadable file yields root."""
        if not self.path.exists():
            self.state = CLIState()
            return self.state

        try:
            lines = self.path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            log.warning("Could not read state file %s: %s", self.path, e)
            self.state = CLIState()
            return self.state

        current = lines[0].strip() if lines else ""
        history = [line for line in lines[2:] if line.strip()]
        self.state = CLIState(
            current_node_uuid=current or ROOT_UUID,
            history=history[-self.max_history :],
        )
        return self.state

    def save(self, state: CLIState | None = None) -> None:
        """Write the state file; failures are logged and otherwise ignored."""
        state = state or self.state
        history = state.history[-self.max_history :]
        content = "\n".join([state.current_node_uuid, "", *history]) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(content, encoding="utf-8")
        except OSError as e:
            log.debug("Could not save state to %s: %s", self.path, e)

    def add_to_history(self, command: str) -> bool:
        """Record a command line. Returns False when nothing was recorded."""
        command = command.strip()
        if not command:
            return False
        if command.split()[0] in HISTORY_EXCLUDED:
            return False

        history = self.state.history
        if history and history[-1] == command:
            return False
        history.append(command)
        if len(history) > self.max_history:
            del history[: len(history) - self.max_history]
        return True

    def set_current_node(self, uuid: str) -> None:
        self.state.current_node_uuid = uuid or ROOT_UUID

    @property
    def history(self) -> list[str]:
        return list(self.state.history)
