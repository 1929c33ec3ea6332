"""Interactive REPL for antx."""

from __future__ import annotations

import asyncio
import shlex
from collections.abc import Iterable
from typing import TYPE_CHECKING

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from rich.markup import escape

from antx.client import AntboxError
from antx.client.types import ROOT_UUID
from antx.interactive.registry import Suggestion, split_words
from antx.logging import get_logger

if TYPE_CHECKING:
    from antx.interactive.context import AppContext

log = get_logger("repl")


def tokenize(line: str) -> list[str]:
    """Split a command line with shell quoting; unbalanced quotes fall back to whitespace."""
    try:
        return shlex.split(line)
    except ValueError:
        return line.split()


class Dispatcher:
    """Turns input lines into command executions and completions."""

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx

    async def dispatch(self, line: str) -> bool:
        """Run one input line. Returns True when a known command ran."""
        line = line.strip()
        if not line:
            return False

        tokens = tokenize(line)
        if not tokens:
            return False

        name, args = tokens[0], tokens[1:]
        command = self.ctx.registry.lookup(name)
        if command is None:
            self.ctx.console.print(f"Unknown command: {name}", markup=False, highlight=False)
            return False

        try:
            await command.execute(args)
        except AntboxError as e:
            self.ctx.console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        except Exception as e:
            log.exception("Command %s failed", name)
            self.ctx.console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)

        if self.ctx.store.add_to_history(line):
            self.ctx.save_in_background()
        return True

    def suggest(self, text: str) -> list[Suggestion]:
        """Completion candidates for the text before the cursor."""
        if not text.strip():
            return []

        words, current = split_words(text)
        if not words:
            prefix = current.lower()
            return [
                Suggestion(cmd.name, cmd.description)
                for cmd in self.ctx.registry.commands()
                if cmd.name.lower().startswith(prefix)
            ]

        command = self.ctx.registry.lookup(words[0])
        if command is None:
            return []
        try:
            return command.suggest(text)
        except Exception:
            log.debug("Suggestions for %s failed", words[0], exc_info=True)
            return []


class ShellCompleter(Completer):
    """prompt_toolkit adapter over ``Dispatcher.suggest``."""

    def __init__(self, dispatcher: Dispatcher) -> None:
        self.dispatcher = dispatcher

    def get_completions(
        self, document: Document, complete_event: CompleteEvent
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        _, current = split_words(text)
        for suggestion in self.dispatcher.suggest(text):
            yield Completion(
                suggestion.text,
                start_position=-len(current),
                display_meta=suggestion.description,
            )


class InteractiveRepl:
    """The antx prompt loop."""

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self.dispatcher = Dispatcher(ctx)

        history = InMemoryHistory()
        for entry in ctx.store.history:
            history.append_string(entry)

        self.session: PromptSession[str] = PromptSession(
            history=history,
            auto_suggest=AutoSuggestFromHistory(),
            completer=ShellCompleter(self.dispatcher),
            complete_while_typing=True,
        )
        # Sub-loops prompt without the command completer
        self._plain_session: PromptSession[str] = PromptSession()
        ctx.read_line = self.read_line

    @property
    def prompt(self) -> str:
        if self.ctx.config is not None:
            return self.ctx.config.shell.prompt
        return ">>> "

    async def read_line(self, prompt: str) -> str:
        """Prompt once outside the main loop; raises EOFError on Ctrl-D."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self._plain_session.prompt(prompt))

    async def restore(self) -> None:
        """Return to the folder saved by the previous run and load resources."""
        ctx = self.ctx
        saved = ctx.store.state.current_node_uuid
        if saved and saved != ROOT_UUID:
            try:
                node = await ctx.client.get_node(saved)
            except AntboxError as e:
                log.warning("Could not restore folder %s: %s", saved, e)
                ctx.go_root()
            else:
                if node.is_folder:
                    ctx.enter(node)
                else:
                    ctx.go_root()

        failed = await ctx.resources.load(ctx.client)
        if failed:
            ctx.console.print(f"[yellow]Could not load: {', '.join(failed)}[/yellow]")

    async def run(self) -> None:
        """Run the interactive REPL until ``exit`` or EOF."""
        ctx = self.ctx

        ctx.console.print("[bold]antx[/bold] - Antbox shell")
        ctx.console.print("Type [bold]help[/bold] for commands, [bold]exit[/bold] to quit.\n")

        await self.restore()
        listing = ctx.registry.lookup("ls")
        if listing is not None:
            try:
                await listing.execute([])
            except AntboxError as e:
                ctx.console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)

        loop = asyncio.get_running_loop()
        try:
            while True:
                try:
                    line = await loop.run_in_executor(
                        None,
                        lambda: self.session.prompt(self.prompt),
                    )
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break

                await self.dispatcher.dispatch(line)
                if ctx.exit_requested:
                    break
        finally:
            ctx.store.save()
