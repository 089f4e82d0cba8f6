"""Build a :class:`Catalog` from a YAML recipe file.

The file is a plain data document, not a recipe language::

    settings:
      shell: [bash, -cu]
    aliases:
      b: build
    recipes:
      - name: build
        doc: compile local package
        dependencies: [dev]
      - name: run
        parameters: [package, "*opts"]
        body:
          - "@cargo run --release -p {{ package }} -- {{ opts }}"

Parameters are written as ``name``, ``name=default``, ``*name`` or
``*name=default`` (or as a mapping with the same fields). Dependencies are
a recipe name or ``{name: ..., arguments: [...]}``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .core import Catalog, Dependency, Parameter, Recipe, Settings, DEFAULT_SHELL
from .errors import DefinitionError
from .logging import get_logger


log = get_logger("justly.loader")

DEFAULT_CATALOG = "recipes.yaml"

RECIPE_KEYS = {
    "name",
    "doc",
    "parameters",
    "dependencies",
    "subsequents",
    "body",
    "private",
    "default",
    "quiet",
}


def load_config(path: str | Path) -> dict:
    p = Path(path)
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise DefinitionError(
            f"No recipe catalog found at {p}",
            hint="Pass --file or set JUSTLY_FILE",
        ) from None
    except (OSError, UnicodeDecodeError) as e:
        raise DefinitionError(f"Could not read {p}: {e}") from e
    except yaml.YAMLError as e:
        raise DefinitionError(f"Could not parse {p}: {e}") from e
    if not isinstance(data, dict):
        raise DefinitionError(f"{p} must contain a mapping at the top level")
    return data


def parse_parameter(spec: Any, recipe: str) -> Parameter:
    if isinstance(spec, dict):
        default = spec.get("default")
        return Parameter(
            name=str(spec.get("name", "")),
            default=None if default is None else str(default),
            variadic=_as_bool(spec.get("variadic", False), "variadic", recipe),
        )
    if not isinstance(spec, str):
        raise DefinitionError(
            f"Invalid parameter {spec!r}", context={"recipe": recipe}
        )
    text = spec.strip()
    variadic = text.startswith("*")
    if variadic:
        text = text[1:]
    name, sep, default = text.partition("=")
    return Parameter(
        name=name.strip(),
        default=default if sep else None,
        variadic=variadic,
    )


def parse_dependency(spec: Any, recipe: str) -> Dependency:
    if isinstance(spec, str):
        return Dependency(spec)
    if isinstance(spec, dict) and "name" in spec:
        arguments = spec.get("arguments") or []
        if not isinstance(arguments, list):
            raise DefinitionError(
                f"Arguments of dependency `{spec['name']}` must be a list",
                context={"recipe": recipe},
            )
        return Dependency(str(spec["name"]), tuple(str(a) for a in arguments))
    raise DefinitionError(f"Invalid dependency {spec!r}", context={"recipe": recipe})


def _as_list(value: Any, field: str, recipe: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DefinitionError(
            f"`{field}` must be a list", context={"recipe": recipe}
        )
    return value


def _as_bool(value: Any, field: str, recipe: str) -> bool:
    if not isinstance(value, bool):
        raise DefinitionError(
            f"`{field}` must be true or false, got {value!r}", context={"recipe": recipe}
        )
    return value


def parse_recipe(spec: Any) -> Recipe:
    if not isinstance(spec, dict) or not isinstance(spec.get("name"), str):
        raise DefinitionError(f"Every recipe needs a `name`, got {spec!r}")
    name = spec["name"]
    unknown = sorted(set(spec) - RECIPE_KEYS)
    if unknown:
        raise DefinitionError(
            f"Recipe `{name}` has unknown field(s): {', '.join(unknown)}",
            context={"recipe": name},
        )
    body = spec.get("body")
    if isinstance(body, str):
        body = [line for line in body.splitlines() if line.strip()]
    return Recipe(
        name=name,
        parameters=tuple(
            parse_parameter(p, name) for p in _as_list(spec.get("parameters"), "parameters", name)
        ),
        dependencies=tuple(
            parse_dependency(d, name)
            for d in _as_list(spec.get("dependencies"), "dependencies", name)
        ),
        subsequents=tuple(
            parse_dependency(d, name)
            for d in _as_list(spec.get("subsequents"), "subsequents", name)
        ),
        body=tuple(str(line) for line in _as_list(body, "body", name)),
        doc=spec.get("doc"),
        # `_`-prefixed recipes stay out of listings unless stated otherwise
        private=_as_bool(spec.get("private", name.startswith("_")), "private", name),
        default=_as_bool(spec.get("default", False), "default", name),
        quiet=_as_bool(spec.get("quiet", False), "quiet", name),
    )


def parse_settings(data: Any, base_dir: Path) -> Settings:
    if not isinstance(data, dict):
        raise DefinitionError("`settings` must be a mapping")
    shell = data.get("shell", list(DEFAULT_SHELL))
    if not isinstance(shell, list) or not shell:
        raise DefinitionError("`settings.shell` must be a non-empty list")
    workdir = Path(data.get("working_directory", "."))
    return Settings(
        shell=tuple(str(s) for s in shell),
        working_directory=(base_dir / workdir).resolve(),
    )


def load_catalog(path: str | Path) -> Catalog:
    """Read, validate and freeze the recipe catalog stored at ``path``."""
    p = Path(path)
    data = load_config(p)
    recipes = [parse_recipe(r) for r in _as_list(data.get("recipes"), "recipes", "<catalog>")]
    aliases = data.get("aliases") or {}
    if not isinstance(aliases, dict):
        raise DefinitionError("`aliases` must be a mapping of alias to recipe")
    catalog = Catalog.build(
        recipes,
        aliases={str(k): str(v) for k, v in aliases.items()},
        settings=parse_settings(data.get("settings") or {}, p.parent),
    )
    log.info(
        "Loaded %d recipe(s) and %d alias(es) from %s",
        len(catalog.registry),
        len(catalog.aliases),
        p,
    )
    return catalog
