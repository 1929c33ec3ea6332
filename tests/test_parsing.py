"""Tests for command argument parsing.

Tests coverage for:
- src/antx/commands/parsing.py
- src/antx/commands/agents.py (flag parsing)
"""

from __future__ import annotations

import pytest

from antx.commands.agents import UsageError, parse_agent_args, parse_rag_args
from antx.commands.parsing import convert_value, parse_criteria, parse_params, single_filter


class TestParams:
    """Tests for key=value parameters."""

    def test_typed_values(self) -> None:
        params, rejected = parse_params(["n=3", "ratio=0.5", "flag=true", "off=false", "name=doc"])

        assert params == {"n": 3, "ratio": 0.5, "flag": True, "off": False, "name": "doc"}
        assert rejected == []

    def test_value_may_contain_equals(self) -> None:
        params, _ = parse_params(["expr=a=b"])

        assert params == {"expr": "a=b"}

    def test_invalid_tokens_are_rejected(self) -> None:
        params, rejected = parse_params(["novalue", "=empty", "ok=1"])

        assert params == {"ok": 1}
        assert rejected == ["novalue", "=empty"]

    def test_bool_is_case_sensitive(self) -> None:
        params, _ = parse_params(["flag=True"])

        assert params == {"flag": "True"}


class TestFilterValues:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("42", 42), ("1.5", 1.5), ("true", True), ("T", True), ("f", False), ("report", "report")],
    )
    def test_convert_value(self, text, expected) -> None:
        assert convert_value(text) == expected
        assert type(convert_value(text)) is type(expected)


class TestCriteria:
    """Tests for find criteria."""

    def test_plain_text_is_content_search(self) -> None:
        assert parse_criteria("annual report") == [[":content", "~=", "annual report"]]

    def test_single_structured_filter(self) -> None:
        assert single_filter("title == Annual Report") == [["title", "==", "Annual Report"]]

    def test_match_keyword_is_an_operator(self) -> None:
        assert parse_criteria("title match invoice") == [["title", "match", "invoice"]]

    def test_comma_separated_filters(self) -> None:
        filters = parse_criteria("title == Document,owner ~= admin,size > 1000")

        assert filters == [
            ["title", "==", "Document"],
            ["owner", "~=", "admin"],
            ["size", ">", 1000],
        ]

    def test_incomplete_parts_are_skipped(self) -> None:
        assert parse_criteria("title ==, size > 10") == [["size", ">", 10]]


class TestAgentArgs:
    """Tests for chat and answer flags."""

    def test_flags_then_agent_and_message(self) -> None:
        opts = parse_agent_args(["-t", "0.3", "-m", "200", "-c", "conv-1", "agent-9", "hi", "there"])

        assert opts.temperature == 0.3
        assert opts.max_tokens == 200
        assert opts.conversation_id == "conv-1"
        assert opts.agent == "agent-9"
        assert opts.message == ["hi", "there"]

    def test_flags_after_agent_belong_to_message(self) -> None:
        opts = parse_agent_args(["agent-9", "-t", "0.3"])

        assert opts.temperature is None
        assert opts.message == ["-t", "0.3"]

    @pytest.mark.parametrize(
        ("args", "message"),
        [
            (["-t"], "-t requires a temperature value"),
            (["-t", "1.5", "a"], "Temperature must be a number between 0.0 and 1.0"),
            (["-t", "hot", "a"], "Temperature must be a number between 0.0 and 1.0"),
            (["-m"], "-m requires a max tokens value"),
            (["-m", "0", "a"], "Max tokens must be a positive integer"),
            (["-c"], "-c requires a conversation ID"),
        ],
    )
    def test_errors(self, args, message) -> None:
        with pytest.raises(UsageError, match=message):
            parse_agent_args(args)

    def test_answer_treats_c_as_agent(self) -> None:
        opts = parse_agent_args(["-c", "x"], conversation=False)

        assert opts.agent == "-c"
        assert opts.conversation_id is None


class TestRagArgs:
    def test_filters_are_typed(self) -> None:
        opts = parse_rag_args(["-l", "-f", "size=10", "-f", "draft=true", "-f", "owner=bob", "what?"])

        assert opts.use_location is True
        assert opts.filters == {"size": 10.0, "draft": True, "owner": "bob"}
        assert opts.message == ["what?"]

    @pytest.mark.parametrize(
        ("args", "message"),
        [
            (["-f"], "-f requires a filter in format field=value"),
            (["-f", "novalue"], "Filter must be in format field=value"),
            (["-c"], "-c requires a conversation ID"),
        ],
    )
    def test_errors(self, args, message) -> None:
        with pytest.raises(UsageError, match=message):
            parse_rag_args(args)
