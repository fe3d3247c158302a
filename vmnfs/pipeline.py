"""Minimal middleware chain for provisioning actions.

Each action is constructed with the next stage of the chain (``app``) and
decides when to call it from :meth:`Action.process`. An action that does its
work after ``self.app(env)`` returns acts as a post-step.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable

from loguru import logger

log = logger

App = Callable[[Any], None]


def _terminal(env: Any) -> None:
    return None


class Action(ABC):
    def __init__(self, app: App):
        self.app = app

    @abstractmethod
    def process(self, env: Any) -> None:
        """Run this stage; must call ``self.app(env)`` exactly once."""

    def __call__(self, env: Any) -> None:
        log.debug('Running action {}', type(self).__name__)
        self.process(env)


class Builder:
    def __init__(self) -> None:
        self._stack: list[tuple[type[Action], tuple, dict]] = []

    def use(self, action: type[Action], *args, **kwargs) -> 'Builder':
        self._stack.append((action, args, kwargs))
        return self

    def __len__(self) -> int:
        return len(self._stack)

    def build(self, app: App = _terminal) -> App:
        for action, args, kwargs in reversed(self._stack):
            app = action(app, *args, **kwargs)
        return app

    def run(self, env: Any) -> Any:
        self.build()(env)
        return env
