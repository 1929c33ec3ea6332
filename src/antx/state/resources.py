"""Server resources loaded once and refreshed by ``reload``."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from antx.client import AntboxClient, AntboxError
from antx.client.types import Agent, Aspect, Feature
from antx.logging import get_logger

log = get_logger("resources")


@dataclass
class ResourceCache:
    """Actions, extensions, agents and aspects known to the shell."""

    actions: list[Feature] = field(default_factory=list)
    extensions: list[Feature] = field(default_factory=list)
    agents: list[Agent] = field(default_factory=list)
    aspects: list[Aspect] = field(default_factory=list)
    loaded: bool = False

    async def load(self, client: AntboxClient) -> list[str]:
        """Fetch every list concurrently.

        A failing list keeps its previous contents. Returns the names of the
        lists that failed.
        """
        names = ("actions", "extensions", "agents", "aspects")
        results = await asyncio.gather(
            client.list_actions(),
            client.list_extensions(),
            client.list_agents(),
            client.list_aspects(),
            return_exceptions=True,
        )

        failed = []
        for name, result in zip(names, results):
            if isinstance(result, AntboxError):
                log.warning("Failed to load %s: %s", name, result)
                failed.append(name)
            elif isinstance(result, BaseException):
                raise result
            else:
                setattr(self, name, result)

        self.loaded = True
        return failed

    def counts(self) -> dict[str, int]:
        return {
            "actions": len(self.actions),
            "extensions": len(self.extensions),
            "agents": len(self.agents),
            "aspects": len(self.aspects),
        }
