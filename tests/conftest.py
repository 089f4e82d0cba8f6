"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from justly.core import Catalog, Dependency, Parameter, Recipe, Settings


def params(*specs: str) -> tuple[Parameter, ...]:
    out = []
    for spec in specs:
        variadic = spec.startswith("*")
        name, sep, default = spec.lstrip("*").partition("=")
        out.append(Parameter(name, default if sep else None, variadic))
    return tuple(out)


def deps(*names: str) -> tuple[Dependency, ...]:
    return tuple(Dependency(n) for n in names)


@pytest.fixture
def cargo_catalog() -> Catalog:
    """A catalog shaped like a small cargo workspace."""
    return Catalog.build(
        [
            Recipe("_", dependencies=deps("help"), private=True),
            Recipe("all", dependencies=deps("build", "doc", "release"), doc="build all artifacts"),
            Recipe("build", dependencies=deps("dev"), doc="compile local package"),
            Recipe("dev", body=("@cargo build --all-targets",), doc="build `dev` profile"),
            Recipe("doc", body=("@cargo doc",), doc="document source files"),
            Recipe("help", body=("@justly --list",), doc="list available recipes"),
            Recipe("release", body=("@cargo build --release",), doc="build `release` profile"),
            Recipe(
                "run",
                parameters=params("package", "*opts"),
                body=("@cargo run --release -p {{ package }} -- {{ opts }}",),
                doc="run binary",
            ),
        ],
        aliases={"b": "build", "r": "run"},
    )


@pytest.fixture
def shell_settings(tmp_path: Path) -> Settings:
    return Settings(working_directory=tmp_path)
