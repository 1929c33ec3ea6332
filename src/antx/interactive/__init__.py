"""Interactive shell: registry, dispatcher and prompt loop."""

from antx.interactive.context import AppContext
from antx.interactive.registry import Command, CommandRegistry, Suggestion
from antx.interactive.repl import Dispatcher, InteractiveRepl, ShellCompleter, tokenize

__all__ = [
    "AppContext",
    "Command",
    "CommandRegistry",
    "Dispatcher",
    "InteractiveRepl",
    "ShellCompleter",
    "Suggestion",
    "tokenize",
]
