"""Shell state: navigation, sessions, persisted history and cached resources."""

from antx.state.navigation import Navigation
from antx.state.persistence import HISTORY_EXCLUDED, CLIState, StateStore
from antx.state.resources import ResourceCache
from antx.state.sessions import Session, SessionManager

__all__ = [
    "CLIState",
    "HISTORY_EXCLUDED",
    "Navigation",
    "ResourceCache",
    "Session",
    "SessionManager",
    "StateStore",
]
