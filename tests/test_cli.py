from pathlib import Path

import pytest
from typer.testing import CliRunner

from justly.cli import EXIT_ENGINE_ERROR, app

runner = CliRunner()

CATALOG = """
aliases:
  b: build
recipes:
  - name: _
    dependencies: [build]
  - name: build
    doc: compile local package
    body:
      - "@echo build >> log"
  - name: run
    doc: run binary
    parameters: [package, "*opts"]
    dependencies: [build]
    body:
      - "@echo {{ package }} {{ opts }} >> log"
  - name: _secret
    body: ["@true"]
  - name: three
    body:
      - "@echo one >> log"
      - "@exit 5"
      - "@echo three >> log"
"""


@pytest.fixture
def catalog_file(tmp_path: Path) -> Path:
    path = tmp_path / "recipes.yaml"
    path.write_text(CATALOG, encoding="utf-8")
    return path


def invoke(catalog_file: Path, *args: str):
    return runner.invoke(app, ["--file", str(catalog_file), *args])


def log_lines(catalog_file: Path) -> list[str]:
    return (catalog_file.parent / "log").read_text().splitlines()


def test_list_omits_private_and_keeps_order(catalog_file: Path) -> None:
    result = invoke(catalog_file, "--list")
    assert result.exit_code == 0
    lines = result.stdout.splitlines()
    assert lines[0] == "Available recipes:"
    assert [line.split()[0] for line in lines[1:]] == ["build", "run", "three"]
    assert "# compile local package [alias: b]" in lines[1]
    assert "run package *opts" in lines[2]
    assert "_secret" not in result.stdout


def test_recipe_arguments_pass_through(catalog_file: Path) -> None:
    result = invoke(catalog_file, "run", "mypackage", "--release")
    assert result.exit_code == 0, result.output
    assert log_lines(catalog_file) == ["build", "mypackage --release"]


def test_no_arguments_runs_default(catalog_file: Path) -> None:
    result = invoke(catalog_file)
    assert result.exit_code == 0, result.output
    assert log_lines(catalog_file) == ["build"]


def test_alias_invocation(catalog_file: Path) -> None:
    result = invoke(catalog_file, "b")
    assert result.exit_code == 0
    assert log_lines(catalog_file) == ["build"]


def test_failure_exit_code_mirrors_child(catalog_file: Path) -> None:
    result = invoke(catalog_file, "three")
    assert result.exit_code == 5
    assert log_lines(catalog_file) == ["one"]


def test_unknown_recipe_uses_reserved_code(catalog_file: Path) -> None:
    result = invoke(catalog_file, "deploy")
    assert result.exit_code == EXIT_ENGINE_ERROR
    assert not (catalog_file.parent / "log").exists()


def test_missing_argument_uses_reserved_code(catalog_file: Path) -> None:
    result = invoke(catalog_file, "run")
    assert result.exit_code == EXIT_ENGINE_ERROR
    assert not (catalog_file.parent / "log").exists()


def test_dry_run_runs_nothing(catalog_file: Path) -> None:
    result = invoke(catalog_file, "--dry-run", "run", "pkg")
    assert result.exit_code == 0
    assert not (catalog_file.parent / "log").exists()


def test_broken_catalog_uses_reserved_code(tmp_path: Path) -> None:
    path = tmp_path / "recipes.yaml"
    path.write_text("recipes:\n  - name: a\n    dependencies: [a]\n", encoding="utf-8")
    result = invoke(path, "a")
    assert result.exit_code == EXIT_ENGINE_ERROR


def test_catalog_path_from_environment(catalog_file: Path) -> None:
    result = runner.invoke(app, ["--list"], env={"JUSTLY_FILE": str(catalog_file)})
    assert result.exit_code == 0
    assert "build" in result.stdout


def test_directory_as_catalog_uses_reserved_code(tmp_path: Path) -> None:
    result = invoke(tmp_path, "--list")
    assert result.exit_code == EXIT_ENGINE_ERROR
    assert "Could not read" in result.output


def test_undecodable_catalog_uses_reserved_code(tmp_path: Path) -> None:
    path = tmp_path / "recipes.yaml"
    path.write_bytes(b"\xff\xfe")
    result = invoke(path, "--list")
    assert result.exit_code == EXIT_ENGINE_ERROR


def test_child_usage_error_differs_from_reserved_code(tmp_path: Path) -> None:
    path = tmp_path / "recipes.yaml"
    path.write_text("recipes:\n  - name: g\n    body: ['@exit 2']\n", encoding="utf-8")
    assert invoke(path, "g").exit_code == 2
    assert invoke(path, "nope").exit_code == EXIT_ENGINE_ERROR != 2


def test_help_documents_exit_status() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert str(EXIT_ENGINE_ERROR) in result.output
