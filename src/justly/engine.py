from __future__ import annotations

from typing import Callable, Sequence

from .binder import BoundCommand, bind_plan
from .core import Catalog, Recipe
from .executor import Executor
from .logging import get_logger
from .planner import plan


class Engine:
    """One catalog, many invocations: Resolving → Planning → Binding → Executing.

    Nothing is kept between invocations; every call starts from the
    immutable catalog it was built with.
    """

    def __init__(
        self,
        catalog: Catalog,
        echo: Callable[[str], None] | None = None,
        dry_run: bool = False,
    ):
        self.catalog = catalog
        self.executor = Executor(catalog.settings, echo=echo, dry_run=dry_run)
        self.logger = get_logger("justly.engine")

    def prepare(self, name: str, arguments: Sequence[str] = ()) -> tuple[BoundCommand, ...]:
        recipe = self.catalog.resolve(name)
        return self._prepare(recipe, arguments)

    def _prepare(self, recipe: Recipe, arguments: Sequence[str]) -> tuple[BoundCommand, ...]:
        steps = plan(self.catalog.registry, recipe, arguments)
        self.logger.info(
            "Selected steps for %s: %s",
            recipe.name,
            " → ".join(entry.recipe.name for entry in steps),
        )
        return bind_plan(steps)

    def run(self, name: str, arguments: Sequence[str] = ()) -> int:
        return self.executor.run(self.prepare(name, arguments))

    def run_default(self) -> int:
        recipe = self.catalog.registry.default_recipe()
        self.logger.info("No recipe given, using default `%s`", recipe.name)
        return self.executor.run(self._prepare(recipe, ()))
