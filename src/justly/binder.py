"""Bind invocation arguments to recipe parameters and render command lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, Union

from .core import PLACEHOLDER, Recipe
from .errors import MissingArgument, TooManyArguments
from .planner import ExecutionPlan


@dataclass(frozen=True)
class Fixed:
    value: str

    def render(self) -> str:
        return self.value


@dataclass(frozen=True)
class Default:
    value: str

    def render(self) -> str:
        return self.value


@dataclass(frozen=True)
class Variadic:
    values: tuple[str, ...] = ()

    def render(self) -> str:
        return " ".join(self.values)


Binding = Union[Fixed, Default, Variadic]


@dataclass(frozen=True)
class CommandLine:
    text: str
    quiet: bool = False
    ignore_errors: bool = False


@dataclass(frozen=True)
class BoundCommand:
    recipe: Recipe
    bindings: Mapping[str, Binding]
    lines: tuple[CommandLine, ...]

    @property
    def name(self) -> str:
        return self.recipe.name


def split_prefix(template: str) -> tuple[str, bool, bool]:
    """Strip leading `@` (quiet) and `-` (ignore errors) markers from a line."""
    quiet = ignore_errors = False
    text = template
    while text[:1] in ("@", "-"):
        if text[0] == "@":
            quiet = True
        else:
            ignore_errors = True
        text = text[1:]
    return text, quiet, ignore_errors


def render(template: str, bindings: Mapping[str, Binding]) -> str:
    return PLACEHOLDER.sub(lambda m: bindings[m.group(1).strip()].render(), template)


def bind(recipe: Recipe, args: Sequence[str]) -> BoundCommand:
    bindings: dict[str, Binding] = {}
    remaining = list(args)
    for param in recipe.parameters:
        if param.variadic:
            if remaining:
                bindings[param.name] = Variadic(tuple(remaining))
            elif param.default is not None:
                bindings[param.name] = Default(param.default)
            else:
                bindings[param.name] = Variadic()
            remaining = []
        elif remaining:
            bindings[param.name] = Fixed(remaining.pop(0))
        elif param.default is not None:
            bindings[param.name] = Default(param.default)
        else:
            raise MissingArgument(recipe.name, param.name)
    if remaining:
        raise TooManyArguments(recipe.name, len(args), len(recipe.parameters))

    lines = []
    for template in recipe.body:
        text, quiet, ignore_errors = split_prefix(template)
        lines.append(
            CommandLine(
                text=render(text, bindings),
                quiet=quiet or recipe.quiet,
                ignore_errors=ignore_errors,
            )
        )
    return BoundCommand(recipe=recipe, bindings=bindings, lines=tuple(lines))


def bind_plan(plan: ExecutionPlan) -> tuple[BoundCommand, ...]:
    """Bind every plan entry up front so no process starts on a bad invocation."""
    return tuple(bind(entry.recipe, entry.arguments) for entry in plan)
