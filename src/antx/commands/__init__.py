"""Shell commands."""

from __future__ import annotations

from typing import TYPE_CHECKING

from antx.commands.agents import AgentsCommand, AnswerCommand, ChatCommand, RagCommand
from antx.commands.features import (
    ActionsCommand,
    CallCommand,
    DocsCommand,
    ExecCommand,
    ExtensionsCommand,
    RunCommand,
    TemplateCommand,
    TemplatesCommand,
)
from antx.commands.navigation import (
    AliasesCommand,
    CdCommand,
    FindCommand,
    LsCommand,
    PwdCommand,
    StatCommand,
)
from antx.commands.nodes import (
    CloneCommand,
    CpCommand,
    DownloadCommand,
    DuplicateCommand,
    MkdirCommand,
    MksmartCommand,
    MvCommand,
    RenameCommand,
    RmCommand,
    UploadCommand,
)
from antx.commands.system import (
    ExitCommand,
    HelpCommand,
    HistoryCommand,
    ReloadCommand,
    SessionsCommand,
    StatusCommand,
    WhoamiCommand,
)

if TYPE_CHECKING:
    from antx.interactive.context import AppContext

COMMANDS = [
    LsCommand,
    CdCommand,
    PwdCommand,
    StatCommand,
    FindCommand,
    AliasesCommand,
    MkdirCommand,
    MksmartCommand,
    CpCommand,
    MvCommand,
    RenameCommand,
    RmCommand,
    DuplicateCommand,
    CloneCommand,
    UploadCommand,
    DownloadCommand,
    ActionsCommand,
    ExtensionsCommand,
    RunCommand,
    ExecCommand,
    CallCommand,
    TemplatesCommand,
    TemplateCommand,
    DocsCommand,
    AgentsCommand,
    ChatCommand,
    AnswerCommand,
    RagCommand,
    SessionsCommand,
    HistoryCommand,
    StatusCommand,
    ReloadCommand,
    WhoamiCommand,
    HelpCommand,
    ExitCommand,
]


def register_commands(ctx: AppContext) -> None:
    """Instantiate every command against ``ctx`` and register it."""
    ctx.registry.register_all(command(ctx) for command in COMMANDS)
