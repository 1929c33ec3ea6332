"""AI agent commands: agents, chat, answer, rag."""

from __future__ import annotations

import uuid as uuidlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from rich.markdown import Markdown
from rich.markup import escape

from antx.client import AntboxError
from antx.client.types import ChatMessage, last_model_text
from antx.interactive.registry import Command, Suggestion, split_words
from antx.logging import get_logger

log = get_logger("agents")

EXIT_WORDS = frozenset({"exit", "quit"})


class UsageError(ValueError):
    """Bad command-line flags; the message is shown to the user."""


@dataclass
class AgentOptions:
    temperature: float | None = None
    max_tokens: int | None = None
    conversation_id: str | None = None
    agent: str | None = None
    message: list[str] = field(default_factory=list)


def parse_agent_args(args: list[str], *, conversation: bool = True) -> AgentOptions:
    """Parse ``[-t T] [-m N] [-c ID] <agent> [message...]``.

    The first non-flag word is the agent; everything after it is the message.
    """
    opts = AgentOptions()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "-t":
            if i + 1 >= len(args):
                raise UsageError("-t requires a temperature value")
            try:
                temperature = float(args[i + 1])
            except ValueError:
                temperature = -1.0
            if not 0.0 <= temperature <= 1.0:
                raise UsageError("Temperature must be a number between 0.0 and 1.0")
            opts.temperature = temperature
            i += 2
        elif arg == "-m":
            if i + 1 >= len(args):
                raise UsageError("-m requires a max tokens value")
            try:
                max_tokens = int(args[i + 1])
            except ValueError:
                max_tokens = 0
            if max_tokens <= 0:
                raise UsageError("Max tokens must be a positive integer")
            opts.max_tokens = max_tokens
            i += 2
        elif arg == "-c" and conversation:
            if i + 1 >= len(args):
                raise UsageError("-c requires a conversation ID")
            opts.conversation_id = args[i + 1]
            i += 2
        else:
            opts.agent = arg
            opts.message = args[i + 1 :]
            break
    return opts


class _AgentCommand(Command):
    """Shared plumbing for commands that talk to an agent."""

    def agent_title(self, uuid: str) -> str:
        for agent in self.ctx.resources.agents:
            if agent.uuid == uuid:
                return agent.title or uuid
        return uuid

    def suggest_agents(self, word: str) -> list[Suggestion]:
        word = word.lower()
        return [
            Suggestion(a.uuid, a.title)
            for a in self.ctx.resources.agents
            if a.uuid.lower().startswith(word) or a.title.lower().startswith(word)
        ]

    async def ask(
        self, label: str, call: Callable[[], Awaitable[list[ChatMessage]]]
    ) -> str | None:
        """Run one round-trip under a spinner and print the reply."""
        with self.console.status(f"{escape(label)}..."):
            try:
                history = await call()
            except AntboxError as e:
                failure: AntboxError | None = e
            else:
                failure = None

        if failure is not None:
            log.debug("%s failed: %r", label, failure)
            self.console.print(f"[red]✗[/red] {escape(label)} failed")
            self.print_error(failure)
            return None

        reply = last_model_text(history)
        if reply is None:
            self.console.print("(no response)")
            return None
        self.console.print(Markdown(reply))
        return reply

    async def sub_loop(self, prompt: str, handle: Callable[[str], Awaitable[Any]]) -> None:
        """Read messages until exit, quit or EOF and pass each to ``handle``."""
        self.console.print("[dim]Type 'exit' or 'quit' to leave the conversation.[/dim]")
        while True:
            try:
                line = await self.ctx.read_line(prompt)
            except KeyboardInterrupt:
                continue
            except EOFError:
                break
            line = line.strip()
            if not line:
                continue
            if line in EXIT_WORDS:
                break
            await handle(line)

    def suggest_flags(self, text: str, flags: dict[str, str]) -> list[Suggestion]:
        words, current = split_words(text)
        return [
            Suggestion(flag, desc)
            for flag, desc in flags.items()
            if flag.startswith(current) and flag not in words
        ]


class AgentsCommand(_AgentCommand):
    name = "agents"
    description = "List available agents"
    usage = "Usage: agents"

    async def execute(self, args: list[str]) -> None:
        try:
            agents = await self.ctx.client.list_agents()
        except AntboxError as e:
            self.print_error(e, "Error listing agents")
            return
        self.ctx.resources.agents = agents

        if not agents:
            self.console.print("No agents available.")
            return

        out = self.console
        out.print(f"Available agents ({len(agents)}):\n")
        for agent in sorted(agents, key=lambda a: a.title):
            out.print(f"[bold]UUID:[/bold] {escape(agent.uuid)}", highlight=False)
            out.print(f"  Title: {agent.title}", highlight=False, markup=False)
            if agent.description:
                out.print(f"  Description: {agent.description}", highlight=False, markup=False)
            if agent.model:
                out.print(f"  Model: {agent.model}", highlight=False, markup=False)
            if agent.temperature > 0:
                out.print(f"  Temperature: {agent.temperature:.2f}")
            if agent.max_tokens > 0:
                out.print(f"  Max Tokens: {agent.max_tokens}")
            out.print()


class ChatCommand(_AgentCommand):
    name = "chat"
    description = "Chat with an agent"
    usage = (
        "Usage: chat [options] <agent_uuid> [message]\n"
        "Options:\n"
        "  -t <temperature>       Temperature for response generation (0.0-1.0)\n"
        "  -m <max_tokens>        Maximum tokens in the response\n"
        "  -c <conversation_id>   Conversation ID to continue a previous conversation\n\n"
        "Without a message, starts an interactive conversation."
    )

    async def execute(self, args: list[str]) -> None:
        if not args:
            self.print_usage()
            return
        try:
            opts = parse_agent_args(args)
        except UsageError as e:
            self.print_error(e)
            return
        if not opts.agent:
            self.print_error("Agent UUID is required")
            return

        if opts.message:
            await self.send(opts, " ".join(opts.message))
            return

        # Interactive conversations always keep history
        if not opts.conversation_id:
            opts.conversation_id = f"chat-{uuidlib.uuid4().hex[:8]}"
            self.console.print(
                f"Conversation ID: {opts.conversation_id}", highlight=False, markup=False
            )
        title = self.agent_title(opts.agent)
        await self.sub_loop(f"{title}> ", lambda line: self.send(opts, line))

    async def send(self, opts: AgentOptions, text: str) -> str | None:
        sessions = self.ctx.sessions
        history: list[dict[str, Any]] = []
        if opts.conversation_id:
            history = sessions.get_or_create(opts.conversation_id).history_as_payload()
            sessions.add_message(opts.conversation_id, "user", text)

        agent = opts.agent or ""
        reply = await self.ask(
            f"Asking {self.agent_title(agent)}",
            lambda: self.ctx.client.chat_with_agent(
                agent,
                text,
                temperature=opts.temperature,
                max_tokens=opts.max_tokens,
                history=history or None,
            ),
        )
        if reply is not None and opts.conversation_id:
            sessions.add_message(opts.conversation_id, "assistant", reply)
        return reply

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if current.startswith("-"):
            return self.suggest_flags(
                text,
                {
                    "-t": "Set temperature (0.0-1.0)",
                    "-m": "Set max tokens",
                    "-c": "Set conversation ID",
                },
            )
        if words and words[-1] == "-c":
            word = current.lower()
            return [
                Suggestion(sid, "conversation")
                for sid in sorted(self.ctx.sessions.list_ids())
                if sid.lower().startswith(word)
            ]
        if words and words[-1] in ("-t", "-m"):
            return []
        if _expecting_agent(words[1:]):
            return self.suggest_agents(current)
        return []


class AnswerCommand(_AgentCommand):
    name = "answer"
    description = "Ask an agent a one-off question"
    usage = (
        "Usage: answer [options] <agent_uuid> <question>\n"
        "Options:\n"
        "  -t <temperature>  Temperature for response generation (0.0-1.0)\n"
        "  -m <max_tokens>   Maximum tokens in the response"
    )

    async def execute(self, args: list[str]) -> None:
        if len(args) < 2:
            self.print_usage()
            return
        try:
            opts = parse_agent_args(args, conversation=False)
        except UsageError as e:
            self.print_error(e)
            return
        if not opts.agent:
            self.print_error("Agent UUID is required")
            return
        if not opts.message:
            self.print_error("Question is required")
            return

        agent = opts.agent
        await self.ask(
            f"Asking {self.agent_title(agent)}",
            lambda: self.ctx.client.answer_from_agent(
                agent,
                " ".join(opts.message),
                temperature=opts.temperature,
                max_tokens=opts.max_tokens,
            ),
        )

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if current.startswith("-"):
            return self.suggest_flags(
                text, {"-t": "Set temperature (0.0-1.0)", "-m": "Set max tokens"}
            )
        if words and words[-1] in ("-t", "-m"):
            return []
        if _expecting_agent(words[1:]):
            return self.suggest_agents(current)
        return []


@dataclass
class RagOptions:
    use_location: bool = False
    conversation_id: str | None = None
    filters: dict[str, Any] = field(default_factory=dict)
    message: list[str] = field(default_factory=list)


def parse_rag_args(args: list[str]) -> RagOptions:
    """Parse ``[-l] [-c ID] [-f field=value]... [message...]``."""
    opts = RagOptions()
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "-l":
            opts.use_location = True
            i += 1
        elif arg == "-c":
            if i + 1 >= len(args):
                raise UsageError("-c requires a conversation ID")
            opts.conversation_id = args[i + 1]
            i += 2
        elif arg == "-f":
            if i + 1 >= len(args):
                raise UsageError("-f requires a filter in format field=value")
            key, sep, value = args[i + 1].partition("=")
            if not sep or not key:
                raise UsageError("Filter must be in format field=value")
            opts.filters[key] = _rag_filter_value(value)
            i += 2
        else:
            opts.message = args[i:]
            break
    return opts


def _rag_filter_value(text: str) -> Any:
    try:
        return float(text)
    except ValueError:
        pass
    if text.lower() in ("true", "t", "1"):
        return True
    if text.lower() in ("false", "f", "0"):
        return False
    return text


class RagCommand(_AgentCommand):
    name = "rag"
    description = "Chat with the RAG agent"
    usage = (
        "Usage: rag [options] [message]\n"
        "Options:\n"
        "  -l                     Use current location as parent context\n"
        "  -c <conversation_id>   Conversation ID to continue a previous conversation\n"
        "  -f <field>=<value>     Add custom filter (can be used multiple times)\n\n"
        "Without a message, starts an interactive conversation."
    )

    async def execute(self, args: list[str]) -> None:
        try:
            opts = parse_rag_args(args)
        except UsageError as e:
            self.print_error(e)
            return

        if opts.message:
            await self.send(opts, " ".join(opts.message))
            return

        if not opts.conversation_id:
            opts.conversation_id = f"rag-{uuidlib.uuid4().hex[:8]}"
            self.console.print(
                f"Conversation ID: {opts.conversation_id}", highlight=False, markup=False
            )
        await self.sub_loop("rag> ", lambda line: self.send(opts, line))

    def build_options(self, opts: RagOptions, history: list[dict[str, Any]]) -> dict[str, Any]:
        options: dict[str, Any] = {}
        if opts.use_location or opts.filters:
            filters: dict[str, Any] = {}
            if opts.use_location:
                filters["parent"] = self.ctx.navigation.current_uuid
            filters.update(opts.filters)
            options["filters"] = filters
        if opts.conversation_id:
            options["conversationId"] = opts.conversation_id
        if history:
            options["history"] = history
        return options

    async def send(self, opts: RagOptions, text: str) -> str | None:
        sessions = self.ctx.sessions
        history: list[dict[str, Any]] = []
        if opts.conversation_id:
            sessions.add_message(opts.conversation_id, "user", text)
            # The message just added travels as ``text``, not as history
            history = sessions.get_or_create(opts.conversation_id).history_as_payload()[:-1]

        options = self.build_options(opts, history)
        reply = await self.ask("Searching", lambda: self.ctx.client.rag_chat(text, options))
        if reply is not None and opts.conversation_id:
            sessions.add_message(opts.conversation_id, "assistant", reply)
        return reply

    def suggest(self, text: str) -> list[Suggestion]:
        words, current = split_words(text)
        if words and words[-1] == "-c":
            return [
                Suggestion(sid, "conversation")
                for sid in sorted(self.ctx.sessions.list_ids())
                if sid.startswith(current)
            ]
        if current.startswith("-") or (not current and all(w.startswith("-") for w in words[1:])):
            return self.suggest_flags(
                text,
                {
                    "-l": "Use current location as context",
                    "-c": "Set conversation ID",
                    "-f": "Add custom filter (field=value)",
                },
            )
        return []


def _expecting_agent(words: list[str]) -> bool:
    """True when every finished word is a flag or a flag value."""
    i = 0
    while i < len(words):
        if words[i] in ("-t", "-m", "-c"):
            i += 2
        else:
            return False
    return True
