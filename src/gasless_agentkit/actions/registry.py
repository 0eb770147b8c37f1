"""Ordered, read-only catalog of actions."""

from __future__ import annotations

from typing import Iterable

from gasless_agentkit.actions.base import Action


class ActionRegistry:
    """Built once from an explicit list.

    Duplicate names are tolerated; lookup returns the last one registered.
    """

    def __init__(self, actions: Iterable[Action]):
        self._actions: tuple[Action, ...] = tuple(actions)
        self._by_name: dict[str, Action] = {a.name: a for a in self._actions}

    def list_all(self) -> list[Action]:
        return list(self._actions)

    def find_by_name(self, name: str) -> Action | None:
        return self._by_name.get(name)

    def list_names(self) -> list[str]:
        return [a.name for a in self._actions]

    def __len__(self) -> int:
        return len(self._actions)

    def __iter__(self):
        return iter(self._actions)
