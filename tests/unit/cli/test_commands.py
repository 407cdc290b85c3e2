"""Unit tests for the amxxpack CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from amxxpack import output
from amxxpack.builder import WatchOrchestrator
from amxxpack.cli.main import cli
from amxxpack.errors import WatcherError

PROJECT_CONFIG = {
    "input": {
        "scripts": "./src/scripts",
        "include": "./src/include",
        "assets": "./assets",
    },
    "output": {
        "scripts": "./dist/scripting",
        "plugins": "./dist/plugins",
        "include": "./dist/scripting/include",
        "assets": "./dist",
    },
    "compiler": {"dir": "./.compiler"},
}


@pytest.fixture(autouse=True)
def isolate_cli_globals(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Keep --verbose and --no-color from leaking into other tests.

    The console is widened so long messages are not wrapped.
    """
    configure = MagicMock()
    monkeypatch.setattr("amxxpack.cli.main.configure_logging", configure)
    monkeypatch.setenv("COLUMNS", "400")
    monkeypatch.setattr(output, "console", output.create_console())
    return configure


@pytest.fixture
def cli_project(project_dir: Path) -> Path:
    """Project tree with a .amxxpack.json using relative paths."""
    (project_dir / ".amxxpack.json").write_text(json.dumps(PROJECT_CONFIG))
    return project_dir


def _use_compiler(monkeypatch: pytest.MonkeyPatch, compiler) -> None:
    monkeypatch.setattr("amxxpack.builder.actions.AmxxpcCompiler", lambda: compiler)


class TestCLIHelp:
    """Tests for CLI help and version output."""

    def test_help_shows_all_commands(self) -> None:
        """Test that --help lists every lazy command."""
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "build" in result.output
        assert "compile" in result.output
        assert "watch" in result.output
        assert "--no-color" in result.output

    def test_version_output(self) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "amxxpack" in result.output
        assert "0.1.0" in result.output

    def test_verbose_enables_debug_logging(
        self, cli_project: Path, isolate_cli_globals: MagicMock, monkeypatch, fake_compiler_cls
    ) -> None:
        _use_compiler(monkeypatch, fake_compiler_cls())
        runner = CliRunner()
        runner.invoke(cli, ["-v", "build"])

        isolate_cli_globals.assert_called_with(log_level="DEBUG")


class TestBuildCommand:
    """Tests for 'amxxpack build'."""

    def test_success(self, cli_project: Path, monkeypatch, fake_compiler_cls) -> None:
        compiler = fake_compiler_cls()
        _use_compiler(monkeypatch, compiler)

        runner = CliRunner()
        result = runner.invoke(cli, ["build"])

        assert result.exit_code == 0, result.output
        assert "Building..." in result.output
        assert "Build finished!" in result.output
        assert compiler.compiled_names == ["a.sma", "b.sma", "c.sma"]
        assert (cli_project / "dist" / "plugins" / "b.amxx").is_file()

    def test_failure_exits_with_user_error(
        self, cli_project: Path, monkeypatch, fake_compiler_cls
    ) -> None:
        compiler = fake_compiler_cls(fail_on=["b.sma"])
        _use_compiler(monkeypatch, compiler)

        runner = CliRunner()
        result = runner.invoke(cli, ["build"])

        assert result.exit_code == 1
        assert "Failed to compile src/scripts/b.sma" in result.output
        assert "Build finished with errors!" in result.output
        assert compiler.compiled_names == ["a.sma", "b.sma"]

    def test_ignore_errors_still_fails(
        self, cli_project: Path, monkeypatch, fake_compiler_cls
    ) -> None:
        compiler = fake_compiler_cls(fail_on=["b.sma"])
        _use_compiler(monkeypatch, compiler)

        runner = CliRunner()
        result = runner.invoke(cli, ["build", "--ignore-errors"])

        assert result.exit_code == 1
        assert compiler.compiled_names == ["a.sma", "b.sma", "c.sma"]

    def test_missing_compiler_is_system_error(self, cli_project: Path) -> None:
        """Without a compiler in .compiler/ the build stops with exit code 2."""
        runner = CliRunner()
        result = runner.invoke(cli, ["build", "--ignore-errors"])

        assert result.exit_code == 2
        assert "compiler not found" in result.output
        assert "compiler.dir" in result.output

    def test_explicit_config_path(
        self, cli_project: Path, monkeypatch, fake_compiler_cls
    ) -> None:
        config = dict(PROJECT_CONFIG, output={**PROJECT_CONFIG["output"], "plugins": "./out"})
        (cli_project / "custom.json").write_text(json.dumps(config))
        _use_compiler(monkeypatch, fake_compiler_cls())

        runner = CliRunner()
        result = runner.invoke(cli, ["build", "--config", "custom.json"])

        assert result.exit_code == 0, result.output
        assert (cli_project / "out" / "a.amxx").is_file()

    def test_invalid_config(self, cli_project: Path) -> None:
        (cli_project / ".amxxpack.json").write_text(
            json.dumps({"rules": {"flatCompilation": "sometimes"}})
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["build"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert "rules.flatCompilation" in result.output

    def test_no_color(self, cli_project: Path, monkeypatch, fake_compiler_cls) -> None:
        _use_compiler(monkeypatch, fake_compiler_cls())

        runner = CliRunner()
        result = runner.invoke(cli, ["--no-color", "build"])

        assert result.exit_code == 0
        assert "\x1b[" not in result.output
        assert output.get_console().no_color is True


class TestCompileCommand:
    """Tests for 'amxxpack compile'."""

    def test_compiles_matching_scripts_only(
        self, cli_project: Path, monkeypatch, fake_compiler_cls
    ) -> None:
        compiler = fake_compiler_cls()
        _use_compiler(monkeypatch, compiler)

        runner = CliRunner()
        result = runner.invoke(cli, ["compile", "b*"])

        assert result.exit_code == 0, result.output
        assert compiler.compiled_names == ["b.sma"]
        assert not (cli_project / "dist" / "textures").exists()

    def test_pattern_with_sub_directory(
        self, cli_project: Path, monkeypatch, fake_compiler_cls
    ) -> None:
        nested = cli_project / "src" / "scripts" / "maps" / "de_dust.sma"
        nested.parent.mkdir()
        nested.write_text("// de_dust\n")
        compiler = fake_compiler_cls()
        _use_compiler(monkeypatch, compiler)

        runner = CliRunner()
        result = runner.invoke(cli, ["compile", "maps/de_dust.sma"])

        assert result.exit_code == 0, result.output
        assert compiler.compiled_names == ["de_dust.sma"]

    def test_no_match_fails(self, cli_project: Path, monkeypatch, fake_compiler_cls) -> None:
        _use_compiler(monkeypatch, fake_compiler_cls())

        runner = CliRunner()
        result = runner.invoke(cli, ["compile", "zzz*"])

        assert result.exit_code == 1
        assert "No scripts match: zzz*" in result.output

    def test_requires_pattern(self, cli_project: Path) -> None:
        runner = CliRunner()
        result = runner.invoke(cli, ["compile"])

        assert result.exit_code == 2

    def test_failure_exit_code(self, cli_project: Path, monkeypatch, fake_compiler_cls) -> None:
        _use_compiler(monkeypatch, fake_compiler_cls(fail_on=["a.sma"]))

        runner = CliRunner()
        result = runner.invoke(cli, ["compile", "*", "--ignore-errors"])

        assert result.exit_code == 1


class TestWatchCommand:
    """Tests for 'amxxpack watch'."""

    def test_interrupt_exits_cleanly(self, cli_project: Path, monkeypatch) -> None:
        async def interrupted(self: WatchOrchestrator) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr(WatchOrchestrator, "watch", interrupted)

        runner = CliRunner()
        result = runner.invoke(cli, ["watch"])

        assert result.exit_code == 0
        assert "Watch stopped" in result.output

    def test_watcher_error(self, cli_project: Path, monkeypatch) -> None:
        async def broken(self: WatchOrchestrator) -> None:
            raise WatcherError("Failed to start file watcher")

        monkeypatch.setattr(WatchOrchestrator, "watch", broken)

        runner = CliRunner()
        result = runner.invoke(cli, ["watch"])

        assert result.exit_code == 1
        assert "Failed to start file watcher" in result.output
