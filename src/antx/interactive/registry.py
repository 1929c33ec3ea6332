"""Command base class and the ordered command registry."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.markup import escape

from antx.client.errors import HttpError
from antx.client.types import Node
from antx.logging import get_logger

if TYPE_CHECKING:
    from antx.interactive.context import AppContext

log = get_logger("commands")


@dataclass(frozen=True)
class Suggestion:
    """A completion candidate: replacement text plus a short description."""

    text: str
    description: str = ""


class Command:
    """A shell verb.

    Subclasses set ``name``, ``description`` and ``usage`` and implement
    ``execute``. ``suggest`` receives the whole text before the cursor.
    """

    name: str = ""
    description: str = ""
    usage: str = ""

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx

    @property
    def console(self):
        return self.ctx.console

    async def execute(self, args: list[str]) -> None:
        raise NotImplementedError

    def suggest(self, text: str) -> list[Suggestion]:
        return []

    def resolve(self, ref: str) -> str:
        """Expand the ``.`` and ``..`` aliases."""
        return self.ctx.navigation.resolve(ref)

    async def refresh(self) -> None:
        """List the current folder, which also refreshes the completion cache."""
        listing = self.ctx.registry.lookup("ls")
        if listing is not None:
            await listing.execute([])

    def print_usage(self) -> None:
        self.console.print(self.usage or f"Usage: {self.name}", markup=False, highlight=False)

    def print_error(self, error: object, prefix: str = "Error") -> None:
        if isinstance(error, HttpError):
            log.debug("%s", error.details())
        self.console.print(f"[red]{prefix}:[/red] {escape(str(error))}", highlight=False)

    # -- completion helpers ----------------------------------------------

    def suggest_nodes(
        self, word: str, predicate: Callable[[Node], bool] | None = None
    ) -> list[Suggestion]:
        """Nodes from the last listing whose uuid or title starts with ``word``."""
        word = word.lower()
        suggestions = []
        for node in self.ctx.navigation.cached(predicate):
            if node.uuid.lower().startswith(word) or node.title.lower().startswith(word):
                suggestions.append(Suggestion(node.uuid, node.title))
        return suggestions

    def suggest_folders(self, word: str) -> list[Suggestion]:
        return self.suggest_nodes(word, lambda n: n.is_folder)


class CommandRegistry:
    """Commands keyed by name, iterated in registration order."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register(self, command: Command) -> None:
        self._commands[command.name] = command

    def register_all(self, commands: Iterable[Command]) -> None:
        for command in commands:
            self.register(command)

    def lookup(self, name: str) -> Command | None:
        return self._commands.get(name)

    def commands(self) -> list[Command]:
        return list(self._commands.values())

    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __len__(self) -> int:
        return len(self._commands)


def split_words(text: str) -> tuple[list[str], str]:
    """Split completion input into finished words and the word being typed.

    ``"cd fo"`` gives ``(["cd"], "fo")``; ``"cd "`` gives ``(["cd"], "")``.
    """
    words = text.split()
    if text and not text[-1].isspace() and words:
        return words[:-1], words[-1]
    return words, ""


def suggest_paths(word: str) -> list[Suggestion]:
    """Local filesystem entries matching the partial path ``word``."""
    expanded = os.path.expanduser(word) if word else "."
    if not word or word.endswith(os.sep):
        directory, prefix = expanded, ""
    else:
        directory, prefix = os.path.split(expanded)
        directory = directory or "."

    try:
        entries = sorted(os.listdir(directory))
    except OSError:
        return []

    suggestions = []
    base = word[: len(word) - len(prefix)] if prefix and word.endswith(prefix) else word
    for entry in entries:
        if not entry.startswith(prefix):
            continue
        if entry.startswith(".") and not prefix.startswith("."):
            continue
        full = os.path.join(directory, entry)
        is_dir = os.path.isdir(full)
        suggestions.append(
            Suggestion(base + entry + (os.sep if is_dir else ""), "directory" if is_dir else "file")
        )
    return suggestions
