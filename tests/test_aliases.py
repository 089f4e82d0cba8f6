import pytest

from justly.core import AliasTable, Catalog, Recipe, Registry
from justly.errors import DefinitionError, UnknownAlias, UnknownRecipe
from justly.planner import plan


def test_resolve_returns_target_or_name_unchanged() -> None:
    registry = Registry([Recipe("build"), Recipe("test")])
    table = AliasTable({"b": "build", "t": "test"}, registry)
    assert table.resolve("b") == "build"
    assert table.resolve("build") == "build"
    assert table.resolve("unknown") == "unknown"


def test_unknown_target_fails_at_construction() -> None:
    registry = Registry([Recipe("build")])
    with pytest.raises(UnknownAlias) as excinfo:
        AliasTable({"c": "check"}, registry)
    assert excinfo.value.alias == "c"
    assert excinfo.value.target == "check"


def test_alias_may_not_shadow_a_recipe() -> None:
    registry = Registry([Recipe("build"), Recipe("b")])
    with pytest.raises(DefinitionError, match="same name as a recipe"):
        AliasTable({"b": "build"}, registry)


def test_aliases_for_lists_in_definition_order() -> None:
    registry = Registry([Recipe("build")])
    table = AliasTable({"bb": "build", "b": "build"}, registry)
    assert table.aliases_for("build") == ["bb", "b"]
    assert table.aliases_for("missing") == []


def test_alias_produces_identical_plan(cargo_catalog: Catalog) -> None:
    via_alias = cargo_catalog.resolve("b")
    direct = cargo_catalog.resolve("build")
    registry = cargo_catalog.registry
    assert plan(registry, via_alias) == plan(registry, direct)


def test_unknown_name_reports_close_alias(cargo_catalog: Catalog) -> None:
    with pytest.raises(UnknownRecipe) as excinfo:
        cargo_catalog.resolve("biuld")
    assert excinfo.value.name == "biuld"
    assert "build" in (excinfo.value.hint or "")
