"""Argument parsing shared by several commands."""

from __future__ import annotations

from typing import Any

from antx.client.types import FilterOperator, NodeFilter
from antx.logging import get_logger

log = get_logger("commands")

OPERATORS = frozenset(op.value for op in FilterOperator) | {"match"}


def convert_value(text: str) -> Any:
    """Best-effort typing of a filter value: int, then float, then bool."""
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        pass
    lowered = text.lower()
    if lowered in ("true", "t"):
        return True
    if lowered in ("false", "f"):
        return False
    return text


def convert_param(text: str) -> Any:
    """Type a ``k=v`` parameter value: bool, int, float or string."""
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


def parse_params(tokens: list[str]) -> tuple[dict[str, Any], list[str]]:
    """Parse ``key=value`` tokens. Returns the params and the rejected tokens."""
    params: dict[str, Any] = {}
    rejected: list[str] = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if not sep or not key:
            rejected.append(token)
            continue
        params[key] = convert_param(value)
    return params, rejected


def single_filter(text: str) -> list[NodeFilter]:
    """``field op value`` when the second word is an operator, else a content match."""
    tokens = text.split()
    if len(tokens) >= 2 and tokens[1] in OPERATORS:
        return [[tokens[0], tokens[1], " ".join(tokens[2:])]]
    return [[":content", FilterOperator.MATCH.value, text]]


def parse_criteria(text: str) -> list[NodeFilter]:
    """Parse find criteria.

    Without a comma the whole text is one filter (see ``single_filter``).
    With commas each part is ``field op value``; incomplete parts are skipped.
    """
    if "," not in text:
        return single_filter(text)

    filters: list[NodeFilter] = []
    for part in text.split(","):
        tokens = part.split()
        if len(tokens) < 3:
            if tokens:
                log.debug("Skipping incomplete filter %r", part.strip())
            continue
        filters.append([tokens[0], tokens[1], convert_value(" ".join(tokens[2:]))])
    return filters
