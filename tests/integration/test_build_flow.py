"""Integration tests for the build pipeline.

These tests run the real AmxxpcCompiler subprocess path against a small
shell script standing in for amxxpc, and a real watchdog observer.
"""

from __future__ import annotations

import asyncio
import json
import stat
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from amxxpack.builder import BuildAbortedError, BuildOrchestrator, WatchdogEventSource
from amxxpack.builder.watcher import FileEventKind
from amxxpack.cli.main import cli
from amxxpack.config import BuildOptions, ProjectConfig

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(sys.platform == "win32", reason="amxxpc stand-in is a POSIX shell script"),
]

# Mimics amxxpc: banner, diagnostics, trailer; writes the -o file on success.
FAKE_AMXXPC = """\
#!/bin/sh
src="$1"
out="${2#-o}"
echo "AMX Mod X Compiler 1.9.0.5294"
echo "Copyright (c) 2004-2013 AMX Mod X Team"
echo ""
if grep -q "#error" "$src"; then
  echo "$src(2) : error 017: undefined symbol \\"broken\\""
  echo ""
  echo "1 Error."
  echo "Could not locate output file $out (compile failed)."
  exit 1
fi
if grep -q "#warn" "$src"; then
  echo "$src(3) : warning 217: loose indentation"
fi
printf 'AMXX' > "$out"
echo "Done."
"""


@pytest.fixture
def compiler_dir(project_dir: Path) -> Path:
    """Install the amxxpc stand-in under .compiler/."""
    directory = project_dir / ".compiler"
    (directory / "include").mkdir(parents=True)
    executable = directory / "amxxpc"
    executable.write_text(FAKE_AMXXPC)
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return directory


def _config(project_dir: Path, **rules: bool) -> ProjectConfig:
    return ProjectConfig.model_validate(
        {
            "input": {
                "scripts": "./src/scripts",
                "include": "./src/include",
                "assets": "./assets",
            },
            "output": {
                "scripts": "./dist/addons/amxmodx/scripting",
                "plugins": "./dist/addons/amxmodx/plugins",
                "include": "./dist/addons/amxmodx/scripting/include",
                "assets": "./dist",
            },
            "compiler": {"dir": "./.compiler"},
            "rules": {"flatCompilation": rules.get("flat", True)},
        }
    )


PLUGINS = Path("dist/addons/amxmodx/plugins")


class TestBuildWithCompiler:
    """End-to-end builds through the compiler subprocess."""

    def test_full_build(self, project_dir: Path, compiler_dir: Path, recording_logger) -> None:
        orchestrator = BuildOrchestrator(_config(project_dir), recording_logger)

        assert asyncio.run(orchestrator.build()) is True

        for name in ("a", "b", "c"):
            assert (project_dir / PLUGINS / f"{name}.amxx").read_bytes() == b"AMXX"
            assert (project_dir / "dist/addons/amxmodx/scripting" / f"{name}.sma").is_file()
        assert (project_dir / "dist/addons/amxmodx/scripting/include/util.inc").is_file()
        assert (project_dir / "dist/textures/foo.wad").read_bytes() == b"WAD3\x00\x01"
        assert recording_logger.records[-1] == ("success", "Build finished!")

    def test_warning_is_reported_and_build_succeeds(
        self, project_dir: Path, compiler_dir: Path, recording_logger
    ) -> None:
        (project_dir / "src/scripts/a.sma").write_text("// #warn\n")
        orchestrator = BuildOrchestrator(_config(project_dir), recording_logger)

        assert asyncio.run(orchestrator.build()) is True
        assert recording_logger.messages("warning") == [
            "src/scripts/a.sma(3) warning 217 : loose indentation"
        ]

    def test_error_aborts_remaining_scripts(
        self, project_dir: Path, compiler_dir: Path, recording_logger
    ) -> None:
        (project_dir / "src/scripts/b.sma").write_text("// #error\n")
        orchestrator = BuildOrchestrator(_config(project_dir), recording_logger)

        with pytest.raises(BuildAbortedError):
            asyncio.run(orchestrator.build())

        assert (project_dir / PLUGINS / "a.amxx").is_file()
        assert not (project_dir / PLUGINS / "b.amxx").exists()
        assert not (project_dir / PLUGINS / "c.amxx").exists()
        errors = recording_logger.messages("error")
        assert 'src/scripts/b.sma(2) error 017 : undefined symbol "broken"' in errors
        assert any(e.startswith("Failed to compile src/scripts/b.sma") for e in errors)
        assert errors[-1] == "Build finished with errors!"

    def test_ignore_errors_compiles_the_rest(
        self, project_dir: Path, compiler_dir: Path, recording_logger
    ) -> None:
        (project_dir / "src/scripts/a.sma").write_text("// #error\n")
        orchestrator = BuildOrchestrator(_config(project_dir), recording_logger)

        result = asyncio.run(
            orchestrator.compile(["*.sma"], BuildOptions(ignore_errors=True))
        )

        assert result.failed_count == 1
        assert result.succeeded_count == 2
        assert (project_dir / PLUGINS / "c.amxx").is_file()

    def test_mirrored_plugin_layout(
        self, project_dir: Path, compiler_dir: Path, recording_logger
    ) -> None:
        nested = project_dir / "src/scripts/admin/ban.sma"
        nested.parent.mkdir()
        nested.write_text("// ban\n")
        orchestrator = BuildOrchestrator(_config(project_dir, flat=False), recording_logger)

        assert asyncio.run(orchestrator.build()) is True
        assert (project_dir / PLUGINS / "admin" / "ban.amxx").is_file()
        assert (project_dir / PLUGINS / "a.amxx").is_file()
        # Raw scripts are always flattened
        assert (project_dir / "dist/addons/amxmodx/scripting/ban.sma").is_file()


class TestCLIBuild:
    """The build command against a project directory."""

    def test_build_command(
        self, project_dir: Path, compiler_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("amxxpack.cli.main.configure_logging", lambda **kwargs: None)
        (project_dir / ".amxxpack.json").write_text(
            json.dumps({"compiler": {"dir": "./.compiler"}})
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["build"])

        assert result.exit_code == 0, result.output
        assert (project_dir / PLUGINS / "a.amxx").is_file()
        assert (project_dir / "dist/sound/hit.wav").is_file()


class TestWatchdogEvents:
    """A real observer reports files written under a watched directory."""

    def test_new_script_is_reported(self, tmp_path: Path) -> None:
        scripts = tmp_path / "scripts"
        scripts.mkdir()
        source = WatchdogEventSource([scripts], "**/*.sma")

        async def run():
            events = source.__aiter__()
            pending = asyncio.ensure_future(events.__anext__())
            # Give the observer thread time to install its watches
            await asyncio.sleep(0.5)
            await asyncio.to_thread((scripts / "new.sma").write_text, "// new\n")
            try:
                return await asyncio.wait_for(pending, timeout=5)
            finally:
                await events.aclose()

        event = asyncio.run(run())

        assert event.path == scripts / "new.sma"
        assert event.kind in (FileEventKind.ADDED, FileEventKind.CHANGED)
