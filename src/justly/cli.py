from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from .core import Catalog
from .engine import Engine
from .errors import ExecutionError, JustlyError
from .loader import DEFAULT_CATALOG, load_catalog
from .logging import configure_logging, get_logger


# exit status for definition, resolution and binding failures; build tools
# rarely use it, but a recipe exiting 125 itself is indistinguishable
EXIT_ENGINE_ERROR = 125

app = typer.Typer(add_completion=False, help="Run recipes from a YAML task catalog")
log = get_logger("justly.cli")


def format_listing(catalog: Catalog) -> list[str]:
    """Public recipes in definition order, with doc comments and aliases."""
    recipes = catalog.registry.list(include_private=False)
    width = max((len(r.signature()) for r in recipes), default=0)
    lines = ["Available recipes:"]
    for recipe in recipes:
        line = f"    {recipe.signature():<{width}}"
        comment = recipe.doc or ""
        aliases = catalog.aliases.aliases_for(recipe.name)
        if aliases:
            comment = f"{comment} [alias: {', '.join(aliases)}]".strip()
        if comment:
            line += f" # {comment}"
        lines.append(line.rstrip())
    return lines


def _echo_command(text: str) -> None:
    typer.secho(text, err=True, bold=True)


@app.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    epilog=(
        "Exit status: 0 on success, the failing command's own status when a "
        f"recipe fails, {EXIT_ENGINE_ERROR} when the catalog, recipe name or "
        "arguments are invalid. A recipe that itself exits "
        f"{EXIT_ENGINE_ERROR} cannot be told apart."
    ),
)
def main_command(
    arguments: Optional[List[str]] = typer.Argument(
        None, help="Recipe name followed by its arguments", metavar="[RECIPE] [ARGS]..."
    ),
    file: Path = typer.Option(
        Path(DEFAULT_CATALOG), "--file", "-f", envvar="JUSTLY_FILE", help="Recipe catalog"
    ),
    list_recipes: bool = typer.Option(False, "--list", "-l", help="List recipes and exit"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print commands without running them"
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Log plan and steps (-vv for debug)"
    ),
):
    """Run RECIPE with ARGS, or the default recipe when none is given."""
    configure_logging(verbose)

    try:
        catalog = load_catalog(file)
    except JustlyError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=EXIT_ENGINE_ERROR)

    if list_recipes:
        for line in format_listing(catalog):
            typer.echo(line)
        raise typer.Exit(code=0)

    engine = Engine(catalog, echo=_echo_command, dry_run=dry_run)
    try:
        if arguments:
            engine.run(arguments[0], arguments[1:])
        else:
            engine.run_default()
    except ExecutionError as e:
        typer.secho(f"error: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=e.exit_code)
    except JustlyError as e:
        log.debug("Invocation failed before execution: %s", e.code)
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=EXIT_ENGINE_ERROR)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
