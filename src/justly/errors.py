"""Typed error model with stable, machine-readable error codes."""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Mapping
from enum import StrEnum


class ErrorCode(StrEnum):
    """Stable error identifiers, one per failure stage."""

    DEFINITION = "E_DEFINITION"
    RESOLUTION = "E_RESOLUTION"
    BIND = "E_BIND"
    EXECUTION = "E_EXECUTION"


class JustlyError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)


class DefinitionError(JustlyError):
    """The catalog itself is malformed; nothing may run."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.DEFINITION, hint=hint, context=context)


class ResolutionError(JustlyError):
    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.RESOLUTION, hint=hint, context=context)


class UnknownRecipe(ResolutionError):
    def __init__(self, name: str, known: Iterable[str] = ()) -> None:
        self.name = name
        matches = difflib.get_close_matches(name, list(known), n=1)
        hint = f"Did you mean `{matches[0]}`?" if matches else None
        super().__init__(f"Justly does not know about recipe `{name}`", hint=hint)


class UnknownAlias(ResolutionError):
    def __init__(self, alias: str, target: str) -> None:
        self.alias = alias
        self.target = target
        super().__init__(
            f"Alias `{alias}` has an unknown target `{target}`",
            context={"alias": alias, "target": target},
        )


class BindError(JustlyError):
    def __init__(
        self,
        message: str,
        *,
        recipe: str,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        self.recipe = recipe
        ctx = {"recipe": recipe}
        ctx.update(context or {})
        super().__init__(message, code=ErrorCode.BIND, hint=hint, context=ctx)


class MissingArgument(BindError):
    def __init__(self, recipe: str, parameter: str) -> None:
        self.parameter = parameter
        super().__init__(
            f"Recipe `{recipe}` is missing a value for parameter `{parameter}`",
            recipe=recipe,
            context={"parameter": parameter},
        )


class TooManyArguments(BindError):
    def __init__(self, recipe: str, supplied: int, accepted: int) -> None:
        self.supplied = supplied
        self.accepted = accepted
        super().__init__(
            f"Recipe `{recipe}` got {supplied} argument(s) but takes at most {accepted}",
            recipe=recipe,
        )


class ExecutionError(JustlyError):
    """A command line exited non-zero or was terminated by a signal."""

    def __init__(
        self,
        *,
        recipe: str,
        step: int,
        line: str,
        exit_code: int,
        signal: int | None = None,
    ) -> None:
        self.recipe = recipe
        self.step = step
        self.line = line
        self.exit_code = exit_code
        self.signal = signal
        if signal is not None:
            message = f"Recipe `{recipe}` was terminated by signal {signal}"
        else:
            message = f"Recipe `{recipe}` failed with exit code {exit_code}"
        super().__init__(
            message,
            code=ErrorCode.EXECUTION,
            context={"step": str(step), "line": line},
        )
