from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Sequence

from .errors import DefinitionError, ResolutionError, UnknownAlias, UnknownRecipe


# `{{ name }}` placeholders in command line templates
PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}")
IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

DEFAULT_SHELL = ("sh", "-cu")


@dataclass(frozen=True)
class Parameter:
    name: str
    default: str | None = None
    variadic: bool = False

    @property
    def required(self) -> bool:
        return self.default is None and not self.variadic

    def __str__(self) -> str:
        text = f"*{self.name}" if self.variadic else self.name
        if self.default is not None:
            text += f"={self.default!r}"
        return text


@dataclass(frozen=True)
class Dependency:
    name: str
    arguments: tuple[str, ...] = ()


@dataclass(frozen=True)
class Recipe:
    name: str
    parameters: tuple[Parameter, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    body: tuple[str, ...] = ()
    doc: str | None = None
    private: bool = False
    default: bool = False
    quiet: bool = False
    # run after this recipe, the `&&` form
    subsequents: tuple[Dependency, ...] = ()

    @property
    def edges(self) -> tuple[Dependency, ...]:
        return self.dependencies + self.subsequents

    @property
    def min_arguments(self) -> int:
        return sum(1 for p in self.parameters if p.required)

    @property
    def max_arguments(self) -> int | None:
        """Upper bound on positional arguments, None when a variadic absorbs the rest."""
        if any(p.variadic for p in self.parameters):
            return None
        return len(self.parameters)

    def signature(self) -> str:
        return " ".join([self.name, *(str(p) for p in self.parameters)])


@dataclass(frozen=True)
class Settings:
    shell: tuple[str, ...] = DEFAULT_SHELL
    working_directory: Path | None = None


def find_cycle(graph: Mapping[str, Sequence[str]]) -> list[str] | None:
    """Return the first dependency cycle as a path ending where it started.

    Visiting/visited depth-first search with an explicit stack so deep
    chains never hit the interpreter recursion limit.
    """
    visited: set[str] = set()
    for start in graph:
        if start in visited:
            continue
        path = [start]
        on_path = {start}
        stack: list[Iterator[str]] = [iter(graph[start])]
        while stack:
            child = next(stack[-1], None)
            if child is None:
                stack.pop()
                finished = path.pop()
                on_path.discard(finished)
                visited.add(finished)
                continue
            if child in on_path:
                return path[path.index(child):] + [child]
            if child in visited:
                continue
            path.append(child)
            on_path.add(child)
            stack.append(iter(graph[child]))
    return None


def _validate_parameters(recipe: Recipe) -> None:
    seen: set[str] = set()
    defaulted = False
    for i, param in enumerate(recipe.parameters):
        ctx = {"recipe": recipe.name, "parameter": param.name}
        if not IDENTIFIER.match(param.name):
            raise DefinitionError(f"Invalid parameter name `{param.name}`", context=ctx)
        if param.name in seen:
            raise DefinitionError(
                f"Recipe `{recipe.name}` declares parameter `{param.name}` twice",
                context=ctx,
            )
        seen.add(param.name)
        if param.variadic and i != len(recipe.parameters) - 1:
            raise DefinitionError(
                f"Variadic parameter `{param.name}` must be the last parameter",
                context=ctx,
            )
        if param.default is not None:
            defaulted = True
        elif defaulted and not param.variadic:
            raise DefinitionError(
                f"Parameter `{param.name}` without a default follows a parameter with one",
                context=ctx,
            )


def _validate_placeholders(recipe: Recipe) -> None:
    declared = {p.name for p in recipe.parameters}
    for line in recipe.body:
        for match in PLACEHOLDER.finditer(line):
            ref = match.group(1).strip()
            if ref not in declared:
                raise DefinitionError(
                    f"Recipe `{recipe.name}` references undeclared parameter `{ref}`",
                    context={"recipe": recipe.name, "line": line},
                )


class Registry:
    """Immutable catalog of recipes in definition order."""

    def __init__(self, recipes: Iterable[Recipe]):
        self._recipes: dict[str, Recipe] = {}
        for recipe in recipes:
            if recipe.name in self._recipes:
                raise DefinitionError(f"Recipe `{recipe.name}` is defined more than once")
            if not IDENTIFIER.match(recipe.name):
                raise DefinitionError(f"Invalid recipe name `{recipe.name}`")
            _validate_parameters(recipe)
            _validate_placeholders(recipe)
            self._recipes[recipe.name] = recipe
        self._check_references()
        self._check_cycles()
        defaults = [r.name for r in self._recipes.values() if r.default]
        if len(defaults) > 1:
            raise DefinitionError(
                "More than one recipe is marked default: " + ", ".join(defaults)
            )

    def _check_references(self) -> None:
        for recipe in self._recipes.values():
            for dep in recipe.edges:
                target = self._recipes.get(dep.name)
                ctx = {"recipe": recipe.name, "dependency": dep.name}
                if target is None:
                    raise DefinitionError(
                        f"Recipe `{recipe.name}` depends on unknown recipe `{dep.name}`",
                        context=ctx,
                    )
                count = len(dep.arguments)
                upper = target.max_arguments
                if count < target.min_arguments or (upper is not None and count > upper):
                    raise DefinitionError(
                        f"Dependency `{dep.name}` of `{recipe.name}` got {count} argument(s)",
                        hint=f"`{target.signature()}`",
                        context=ctx,
                    )

    def _check_cycles(self) -> None:
        graph = {
            name: [dep.name for dep in recipe.edges]
            for name, recipe in self._recipes.items()
        }
        cycle = find_cycle(graph)
        if cycle:
            raise DefinitionError(
                "Dependency cycle: " + " -> ".join(cycle),
                context={"recipe": cycle[0]},
            )

    def lookup(self, name: str) -> Recipe:
        try:
            return self._recipes[name]
        except KeyError:
            raise UnknownRecipe(name, self._recipes) from None

    def list(self, include_private: bool = False) -> tuple[Recipe, ...]:
        return tuple(
            r for r in self._recipes.values() if include_private or not r.private
        )

    def default_recipe(self) -> Recipe:
        """The recipe marked default, else the first one needing no arguments."""
        for recipe in self._recipes.values():
            if recipe.default:
                return recipe
        for recipe in self._recipes.values():
            if recipe.min_arguments == 0:
                return recipe
        raise ResolutionError("No recipe can run without arguments", hint="Pass a recipe name")

    def __contains__(self, name: object) -> bool:
        return name in self._recipes

    def __iter__(self) -> Iterator[Recipe]:
        return iter(self._recipes.values())

    def __len__(self) -> int:
        return len(self._recipes)


class AliasTable:
    """Alternate names for recipes, validated once against the registry."""

    def __init__(self, aliases: Mapping[str, str], registry: Registry):
        for alias, target in aliases.items():
            if alias in registry:
                raise DefinitionError(
                    f"Alias `{alias}` has the same name as a recipe",
                    context={"alias": alias},
                )
            if target not in registry:
                raise UnknownAlias(alias, target)
        self._aliases = dict(aliases)

    def resolve(self, name: str) -> str:
        return self._aliases.get(name, name)

    def names(self) -> list[str]:
        return list(self._aliases)

    def aliases_for(self, recipe_name: str) -> list[str]:
        return [a for a, t in self._aliases.items() if t == recipe_name]

    def __contains__(self, name: object) -> bool:
        return name in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)


@dataclass(frozen=True)
class Catalog:
    """Everything one process needs, built once and passed explicitly."""

    registry: Registry
    aliases: AliasTable
    settings: Settings = field(default_factory=Settings)

    @classmethod
    def build(
        cls,
        recipes: Iterable[Recipe],
        aliases: Mapping[str, str] | None = None,
        settings: Settings | None = None,
    ) -> "Catalog":
        registry = Registry(recipes)
        return cls(
            registry=registry,
            aliases=AliasTable(aliases or {}, registry),
            settings=settings or Settings(),
        )

    def resolve(self, name: str) -> Recipe:
        """Alias resolution followed by registry lookup."""
        canonical = self.aliases.resolve(name)
        try:
            return self.registry.lookup(canonical)
        except UnknownRecipe:
            known = [r.name for r in self.registry] + self.aliases.names()
            raise UnknownRecipe(name, known) from None
