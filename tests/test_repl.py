"""Tests for command dispatch and completion.

Tests coverage for:
- src/antx/interactive/repl.py
- src/antx/interactive/registry.py
"""

from __future__ import annotations

from prompt_toolkit.application import create_app_session
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from antx.client import AntboxError
from antx.interactive import Dispatcher, InteractiveRepl, ShellCompleter, tokenize
from antx.interactive.registry import Command, CommandRegistry, split_words, suggest_paths
from tests.utils import document, folder, output


class Boom(Command):
    name = "boom"
    description = "Always fails"

    async def execute(self, args: list[str]) -> None:
        raise RuntimeError("kaboom")


class TestTokenize:
    def test_quotes_group_words(self) -> None:
        assert tokenize('mkdir "My Folder"') == ["mkdir", "My Folder"]

    def test_unbalanced_quote_falls_back_to_whitespace(self) -> None:
        assert tokenize('chat agent-1 "hello there') == ["chat", "agent-1", '"hello', "there"]

    def test_split_words(self) -> None:
        assert split_words("cd fo") == (["cd"], "fo")
        assert split_words("cd ") == (["cd"], "")
        assert split_words("") == ([], "")


class TestDispatch:
    """Tests for running input lines."""

    async def test_unknown_command(self, ctx, console) -> None:
        """Test that an unknown command prints a message and is not recorded."""
        ran = await Dispatcher(ctx).dispatch("frobnicate now")

        assert ran is False
        assert "Unknown command: frobnicate" in output(console)
        assert ctx.store.history == []

    async def test_known_command_is_recorded(self, ctx, client) -> None:
        client.list_nodes.return_value = []

        ran = await Dispatcher(ctx).dispatch("ls")

        assert ran is True
        assert ctx.store.history == ["ls"]

    async def test_excluded_command_not_recorded(self, ctx) -> None:
        await Dispatcher(ctx).dispatch("aliases")

        assert ctx.store.history == []

    async def test_history_is_saved(self, ctx, client) -> None:
        """Test that a recorded command ends up in the state file."""
        client.list_nodes.return_value = []

        await Dispatcher(ctx).dispatch("ls")
        await ctx.save_in_background()

        assert ctx.store.path.read_text(encoding="utf-8").splitlines()[2:] == ["ls"]

    async def test_blank_line_does_nothing(self, ctx, console) -> None:
        assert await Dispatcher(ctx).dispatch("   ") is False
        assert output(console) == ""

    async def test_command_exception_is_contained(self, ctx, console) -> None:
        """Test that an unexpected error is printed and the loop can continue."""
        ctx.registry.register(Boom(ctx))

        ran = await Dispatcher(ctx).dispatch("boom")

        assert ran is True
        assert "Error: kaboom" in output(console)

    async def test_api_error_is_printed(self, ctx, client, console) -> None:
        client.list_nodes.side_effect = AntboxError("server unavailable")

        await Dispatcher(ctx).dispatch("ls")

        assert "Error: server unavailable" in output(console)

    async def test_exit_sets_flag(self, ctx, console) -> None:
        await Dispatcher(ctx).dispatch("exit")

        assert ctx.exit_requested is True
        assert "Bye!" in output(console)


class TestSuggestions:
    """Tests for completion candidates."""

    def test_command_names_by_prefix(self, ctx) -> None:
        names = [s.text for s in Dispatcher(ctx).suggest("c")]

        assert names == ["cd", "cp", "clone", "call", "chat"]

    def test_empty_text_has_no_suggestions(self, ctx) -> None:
        assert Dispatcher(ctx).suggest("") == []

    def test_unknown_command_has_no_suggestions(self, ctx) -> None:
        assert Dispatcher(ctx).suggest("nope x") == []

    def test_failing_suggest_is_swallowed(self, ctx) -> None:
        class Broken(Command):
            name = "broken"

            def suggest(self, text):
                raise RuntimeError("no")

        ctx.registry.register(Broken(ctx))

        assert Dispatcher(ctx).suggest("broken ") == []

    def test_completer_replaces_current_word(self, ctx) -> None:
        ctx.navigation.cache_listing([folder("f-123", "Reports"), document("d-1", "Readme")])
        completer = ShellCompleter(Dispatcher(ctx))

        completions = list(completer.get_completions(Document("cd Rep"), CompleteEvent()))

        assert [c.text for c in completions] == ["f-123"]
        assert completions[0].start_position == -3

    def test_suggest_paths(self, tmp_path) -> None:
        (tmp_path / "report.pdf").write_text("x")
        (tmp_path / "reports").mkdir()
        (tmp_path / ".hidden").write_text("x")

        suggestions = suggest_paths(str(tmp_path) + "/rep")

        assert [s.text for s in suggestions] == [
            str(tmp_path) + "/report.pdf",
            str(tmp_path) + "/reports/",
        ]
        assert [s.description for s in suggestions] == ["file", "directory"]


class TestRegistry:
    def test_keeps_registration_order(self, ctx) -> None:
        names = ctx.registry.names()

        assert names[:3] == ["ls", "cd", "pwd"]
        assert names[-1] == "exit"

    def test_lookup_and_contains(self, ctx) -> None:
        registry = CommandRegistry()
        registry.register(Boom(ctx))

        assert "boom" in registry
        assert registry.lookup("boom").description == "Always fails"
        assert registry.lookup("missing") is None
        assert len(registry) == 1


class TestRestore:
    """Tests for resuming the previous session's folder."""

    async def test_restores_saved_folder(self, ctx, client) -> None:
        ctx.store.set_current_node("p1")
        client.get_node.return_value = folder("p1", "Projects")
        client.list_actions.return_value = []
        client.list_extensions.return_value = []
        client.list_agents.return_value = []
        client.list_aspects.return_value = []

        with create_pipe_input() as pipe, create_app_session(input=pipe, output=DummyOutput()):
            repl = InteractiveRepl(ctx)
            await repl.restore()

        assert ctx.navigation.current_uuid == "p1"
        assert ctx.resources.loaded

    async def test_missing_folder_falls_back_to_root(self, ctx, client, console) -> None:
        ctx.store.set_current_node("gone")
        client.get_node.side_effect = AntboxError("not found")
        client.list_actions.side_effect = AntboxError("forbidden")
        client.list_extensions.return_value = []
        client.list_agents.return_value = []
        client.list_aspects.return_value = []

        with create_pipe_input() as pipe, create_app_session(input=pipe, output=DummyOutput()):
            repl = InteractiveRepl(ctx)
            await repl.restore()

        assert ctx.navigation.current.is_root
        assert ctx.store.state.current_node_uuid == "--root--"
        assert "Could not load: actions" in output(console)
