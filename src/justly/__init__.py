"""Recipe runner for declarative task catalogs.

Provides the recipe registry, alias table, dependency planner, parameter
binder and a sequential executor, plus a Typer CLI over a YAML catalog.
"""

from .core import Catalog, Dependency, Parameter, Recipe, Registry, AliasTable, Settings
from .engine import Engine
from .loader import load_catalog  # re-export for convenience

__all__ = [
    "Catalog",
    "Dependency",
    "Parameter",
    "Recipe",
    "Registry",
    "AliasTable",
    "Settings",
    "Engine",
    "load_catalog",
]
