"""Shell management commands: help, history, sessions, status, reload, whoami, exit."""

from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from antx.client import AntboxError
from antx.interactive.registry import Command, Suggestion, split_words
from antx.state.persistence import HISTORY_EXCLUDED

HELP_CATEGORIES: dict[str, list[str]] = {
    "Navigation & Browsing": ["cd", "ls", "pwd", "find", "stat"],
    "File Operations": ["cp", "duplicate", "mv", "rename", "rm", "upload", "download"],
    "Folder Management": ["mkdir", "mksmart"],
    "Actions & Extensions": ["run", "call"],
    "AI & Agents": ["chat", "answer", "rag"],
    "Templates": ["template"],
    "System Management": ["reload", "status", "help", "exit"],
}

MAX_RECENT_SESSIONS = 5
MESSAGE_PREVIEW = 200


class HelpCommand(Command):
    name = "help"
    description = "Show available commands"
    usage = "Usage: help [command]"

    async def execute(self, args: list[str]) -> None:
        registry = self.ctx.registry
        out = self.console

        if args:
            command = registry.lookup(args[0])
            if command is None:
                out.print(f"Unknown command: {args[0]}\n", markup=False, highlight=False)
                out.print("Available commands:")
                for name in sorted(registry.names()):
                    out.print(f"  {name}")
                return
            out.print(f"[bold]Command:[/bold] {command.name}")
            out.print(f"[bold]Description:[/bold] {command.description}\n", highlight=False)
            command.print_usage()
            return

        out.print("[bold]Antbox CLI - Available Commands[/bold]\n")
        categorized: set[str] = set()
        for category, names in HELP_CATEGORIES.items():
            table = Table(title=category, title_justify="left", show_header=False, box=None)
            table.add_column("Command", style="bold", min_width=12)
            table.add_column("Description")
            for name in sorted(names):
                command = registry.lookup(name)
                if command is not None:
                    table.add_row(command.name, command.description)
            categorized.update(names)
            out.print(table)
            out.print()

        others = sorted(n for n in registry.names() if n not in categorized)
        if others:
            table = Table(title="Other Commands", title_justify="left", show_header=False, box=None)
            table.add_column("Command", style="bold", min_width=12)
            table.add_column("Description")
            for name in others:
                command = registry.lookup(name)
                if command is not None:
                    table.add_row(command.name, command.description)
            out.print(table)
            out.print()

        out.print(
            f"Type 'help <command>' for detailed usage information. "
            f"({len(registry)} commands total)"
        )
        out.print("Use Tab completion for command and argument suggestions.")

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) != 1:
            return []
        return [
            Suggestion(cmd.name, cmd.description)
            for cmd in self.ctx.registry.commands()
            if cmd.name.startswith(current)
        ]


class HistoryCommand(Command):
    name = "history"
    description = "Show recent command history"
    usage = (
        "Usage: history\n\n"
        "  Display the most recent commands. History is saved after each command\n"
        "  and restored on startup. Excludes: " + ", ".join(sorted(HISTORY_EXCLUDED))
    )

    async def execute(self, args: list[str]) -> None:
        if args:
            self.print_usage()
            return

        store = self.ctx.store
        history = store.history
        out = self.console
        if not history:
            out.print("No command history available.\n")
            out.print("Commands will appear here as you use the CLI.")
            return

        out.print("[bold]Command History:[/bold]")
        for i, line in enumerate(history, 1):
            out.print(f"{i:3d}  {line}", markup=False, highlight=False)
        out.print()
        out.print(f"Showing {len(history)} of last {store.max_history} commands")
        verb = "saved in" if store.path.exists() else "will be saved to"
        out.print(f"History {verb}: {store.path}", highlight=False, markup=False)


class SessionsCommand(Command):
    name = "sessions"
    description = "Manage conversation sessions"
    usage = (
        "Usage: sessions <subcommand> [args]\n\n"
        "Subcommands:\n"
        "  list                  List active sessions\n"
        "  show <id>             Show the messages of a session\n"
        "  clear <id|all>        Clear the history of a session\n"
        "  remove <id|all>       Remove a session"
    )

    SUBCOMMANDS = {
        "list": "List active sessions",
        "show": "Show session messages",
        "clear": "Clear session history",
        "remove": "Remove a session",
    }

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return

        sub, rest = args[0], args[1:]
        if sub == "list":
            self.list_sessions()
        elif sub in ("show", "clear", "remove"):
            if not rest:
                self.console.print(f"Usage: sessions {sub} <session_id>", markup=False)
                return
            getattr(self, f"{sub}_session")(rest[0])
        else:
            self.console.print(f"Unknown subcommand: {sub}", markup=False, highlight=False)
            self.print_usage()

    def list_sessions(self) -> None:
        sessions = self.ctx.sessions
        ids = sorted(sessions.list_ids())
        if not ids:
            self.console.print("No active sessions")
            return

        table = Table(title=f"Active Sessions ({len(ids)})")
        table.add_column("Session ID", style="bold")
        table.add_column("Messages", justify="right")
        for sid in ids:
            session = sessions.get(sid)
            table.add_row(escape(sid), str(len(session) if session else 0))
        self.console.print(table)

    def show_session(self, session_id: str) -> None:
        session = self.ctx.sessions.get(session_id)
        if session is None:
            self.print_error(f"Session '{session_id}' not found")
            return

        history = session.get_history()
        self.console.print(
            f"[bold]Session:[/bold] {escape(session_id)} ({len(history)} messages)\n",
            highlight=False,
        )
        for i, message in enumerate(history, 1):
            content = str(message.get("content", ""))
            if len(content) > MESSAGE_PREVIEW:
                content = content[:MESSAGE_PREVIEW] + "..."
            role = escape(str(message.get("role", "?")))
            self.console.print(f"{i}. [bold]{role}[/bold]:", highlight=False)
            self.console.print(f"   {content}", markup=False, highlight=False)

    def clear_session(self, session_id: str) -> None:
        sessions = self.ctx.sessions
        if session_id == "all":
            sessions.clear_all()
            self.console.print("All sessions cleared")
            return
        if not sessions.contains(session_id):
            self.print_error(f"Session '{session_id}' not found")
            return
        sessions.clear(session_id)
        self.console.print(f"Session '{session_id}' cleared", highlight=False, markup=False)

    def remove_session(self, session_id: str) -> None:
        sessions = self.ctx.sessions
        if session_id == "all":
            count = sessions.count()
            sessions.remove_all()
            self.console.print(f"Removed {count} sessions")
            return
        if not sessions.contains(session_id):
            self.print_error(f"Session '{session_id}' not found")
            return
        sessions.remove(session_id)
        self.console.print(f"Session '{session_id}' removed", highlight=False, markup=False)

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if len(words) == 1:
            return [Suggestion(k, v) for k, v in self.SUBCOMMANDS.items() if k.startswith(current)]
        if len(words) == 2 and words[1] in ("show", "clear", "remove"):
            suggestions = [
                Suggestion(sid, "session")
                for sid in sorted(self.ctx.sessions.list_ids())
                if sid.startswith(current)
            ]
            if words[1] != "show" and "all".startswith(current):
                suggestions.append(Suggestion("all", "every session"))
            return suggestions
        return []


class StatusCommand(Command):
    name = "status"
    description = "Show cached resources and session statistics"
    usage = "Usage: status"

    async def execute(self, args: list[str]) -> None:
        if args:
            self.print_usage()
            return

        out = self.console
        counts = self.ctx.resources.counts()
        out.print("[bold]Cached Resource Statistics[/bold]")
        table = Table()
        table.add_column("Resource")
        table.add_column("Count", justify="right")
        for name in ("aspects", "actions", "extensions", "agents"):
            table.add_row(name.capitalize(), str(counts[name]))
        total = sum(counts.values())
        table.add_row("[bold]Total[/bold]", f"[bold]{total}[/bold]")
        out.print(table)
        out.print()

        sessions = self.ctx.sessions
        ids = sorted(sessions.list_ids())
        out.print("[bold]Conversation Sessions:[/bold]")
        out.print(f"  Active sessions: {len(ids)}")
        if ids:
            lengths = {}
            for sid in ids:
                session = sessions.get(sid)
                lengths[sid] = len(session) if session else 0
            out.print(f"  Total messages:  {sum(lengths.values())}\n")
            out.print("  Recent sessions:")
            for sid in ids[:MAX_RECENT_SESSIONS]:
                out.print(f"    {sid} ({lengths[sid]} messages)", highlight=False, markup=False)
            if len(ids) > MAX_RECENT_SESSIONS:
                out.print(
                    f"    ... and {len(ids) - MAX_RECENT_SESSIONS} more "
                    "(use 'sessions list' to see all)"
                )
        else:
            out.print("  No active conversation sessions")
            out.print("  Start a conversation using 'chat' or 'rag' with -c <session_id>")

        if total == 0:
            out.print("\n[yellow]No resources loaded.[/yellow] Try running 'reload' to refresh the cache.")


class ReloadCommand(Command):
    name = "reload"
    description = "Refresh cached actions, extensions, agents and aspects"
    usage = "Usage: reload"

    async def execute(self, args: list[str]) -> None:
        if args:
            self.print_usage()
            return

        resources = self.ctx.resources
        with self.console.status("Reloading..."):
            failed = await resources.load(self.ctx.client)

        if failed:
            self.console.print(f"[yellow]Reload completed with warnings:[/yellow] failed to load {', '.join(failed)}")
            return
        counts = resources.counts()
        self.console.print("Successfully reloaded all cached data:")
        for name in ("aspects", "actions", "extensions", "agents"):
            self.console.print(f"  - {counts[name]} {name}")


class WhoamiCommand(Command):
    name = "whoami"
    description = "Show the current authenticated user"
    usage = "Usage: whoami"

    async def execute(self, args: list[str]) -> None:
        if args:
            self.print_usage()
            return

        try:
            user = await self.ctx.client.get_current_user()
        except AntboxError as e:
            self.print_error(e)
            return

        out = self.console
        out.print("Current user:")
        out.print(f"  Email : {user.email}", highlight=False, markup=False)
        if user.name:
            out.print(f"  Name  : {user.name}", highlight=False, markup=False)
        if user.groups:
            out.print(f"  Groups: {', '.join(user.groups)}", highlight=False, markup=False)


class ExitCommand(Command):
    name = "exit"
    description = "Exit the shell"
    usage = "Usage: exit"

    async def execute(self, args: list[str]) -> None:
        self.console.print("Bye!")
        self.ctx.exit_requested = True
