"""Dependency resolution: expand one requested recipe into an execution plan."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from .core import Dependency, Recipe, Registry


@dataclass(frozen=True)
class PlanEntry:
    recipe: Recipe
    arguments: tuple[str, ...] = ()

    @property
    def key(self) -> tuple[str, tuple[str, ...]]:
        return (self.recipe.name, self.arguments)


ExecutionPlan = tuple[PlanEntry, ...]


def _actions(entry: PlanEntry, registry: Registry) -> Iterator[tuple[str, PlanEntry]]:
    """Dependencies in listed order, the recipe itself, then its subsequents."""
    for dep in entry.recipe.dependencies:
        yield "visit", _entry(dep, registry)
    yield "emit", entry
    for dep in entry.recipe.subsequents:
        yield "visit", _entry(dep, registry)


def _entry(dep: Dependency, registry: Registry) -> PlanEntry:
    return PlanEntry(registry.lookup(dep.name), dep.arguments)


def plan(
    registry: Registry, root: Recipe, arguments: Sequence[str] = ()
) -> ExecutionPlan:
    """Post-order walk of the dependency graph rooted at ``root``.

    Each ``(recipe, arguments)`` pair is appended the first time its walk
    finishes, so dependencies always precede their dependents and nothing
    runs twice. Siblings keep the order they are listed in. The registry
    has already rejected cycles, so the walk needs no visiting marks.
    """
    ordered: list[PlanEntry] = []
    seen: set[tuple[str, tuple[str, ...]]] = set()
    start = PlanEntry(root, tuple(arguments))
    stack = [_actions(start, registry)]
    while stack:
        action = next(stack[-1], None)
        if action is None:
            stack.pop()
            continue
        kind, entry = action
        if entry.key in seen:
            continue
        if kind == "emit":
            seen.add(entry.key)
            ordered.append(entry)
        else:
            stack.append(_actions(entry, registry))
    return tuple(ordered)
