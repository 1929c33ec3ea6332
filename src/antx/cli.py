"""Command-line interface for antx."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from antx import __version__

if TYPE_CHECKING:
    from antx.config import Config


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="antx",
        description="A shell-like CLI for Antbox",
    )
    parser.add_argument(
        "server_url",
        nargs="?",
        help="Antbox server URL (default: server_url from the config file)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument("--api-key", help="API key for authentication")
    parser.add_argument("--root", dest="root_password", help="Root password for authentication")
    parser.add_argument("--jwt", help="JWT token for authentication")
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Log every HTTP request and response",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file path (default: ./antx.yaml)",
    )
    parser.add_argument(
        "--state-file",
        help="Where to keep the current folder and history (default: ~/.antx)",
    )
    return parser


async def run_shell(config: Config) -> int:
    """Connect, log in and run the REPL until exit."""
    from antx.client import AntboxClient, AntboxError
    from antx.commands import register_commands
    from antx.interactive import AppContext, CommandRegistry, InteractiveRepl
    from antx.state import StateStore

    client = AntboxClient(
        config.server_url,
        api_key=config.api_key,
        root_password=config.root_password,
        jwt=config.jwt,
        debug=config.debug,
        timeout=config.client.timeout,
        verify_tls=config.client.verify_tls,
    )
    async with client:
        if config.root_password:
            try:
                await client.login()
            except AntboxError as e:
                print(f"Login failed: {e}", file=sys.stderr)
                return 1

        store = StateStore(config.state_path, max_history=config.shell.history_size)
        store.load()

        ctx = AppContext(client=client, registry=CommandRegistry(), store=store, config=config)
        register_commands(ctx)
        await InteractiveRepl(ctx).run()
    return 0


def run_cli(args: Sequence[str]) -> int:
    """Run the CLI with the given arguments."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    from antx.config import load_config
    from antx.logging import setup_logging

    config = load_config(
        config_path=parsed.config,
        overrides={
            "server_url": parsed.server_url,
            "api_key": parsed.api_key,
            "root_password": parsed.root_password,
            "jwt": parsed.jwt,
            "debug": parsed.debug,
            "verbose": parsed.verbose,
            "state_file": parsed.state_file,
        },
    )
    if config.debug and not parsed.verbose:
        config.logging.verbose = 4
    setup_logging(config.logging)

    if not config.server_url:
        parser.error("a server URL is required (argument or server_url in the config file)")

    try:
        return asyncio.run(run_shell(config))
    except KeyboardInterrupt:
        return 130
