"""Root pytest configuration for all tests."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from antx.client import AntboxClient
from antx.commands import register_commands
from antx.interactive import AppContext, CommandRegistry
from antx.state import StateStore
from tests.utils import make_console

# Configure pytest-asyncio to use auto mode
# This is redundant with pyproject.toml but ensures it's set
pytest_plugins = ("pytest_asyncio",)


@pytest.fixture
def client():
    """An AntboxClient whose every call is an AsyncMock."""
    return AsyncMock(spec=AntboxClient)


@pytest.fixture
def console():
    return make_console()


@pytest.fixture
def store(tmp_path):
    return StateStore(tmp_path / ".antx")


@pytest.fixture
def ctx(client, store, console):
    """Application context with every command registered."""
    context = AppContext(client=client, registry=CommandRegistry(), store=store, console=console)
    register_commands(context)
    return context
