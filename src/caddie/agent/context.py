"""Capabilities handed to every tool invocation."""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional


class ConfigurationError(ValueError):
    """A tool needs a capability the agent was not set up with."""


@dataclass
class ToolContext:
    """
    Explicit capability bundle for tools.

    Tools read what they need from here instead of looking up the current agent.
    """

    scheduler: Any = None
    browser: Any = None
    cache: Any = None
    transcript: Optional[Callable[[], List[Dict[str, Any]]]] = None

    def require_scheduler(self):
        if self.scheduler is None:
            raise ConfigurationError("No scheduler found in agent context")
        return self.scheduler

    def require_browser(self):
        if self.browser is None:
            raise ConfigurationError("No browser instance found in agent context")
        return self.browser
