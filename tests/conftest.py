"""Shared pytest fixtures for amxxpack tests.

Provides a temporary project tree, a recording log sink, a fake
compiler and a scripted file event source.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import pytest
import structlog

from amxxpack.builder.watcher import FileEvent
from amxxpack.compiler.models import CompileResult, DiagnosticMessage, MessageType
from amxxpack.config import ProjectConfig


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture."""
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class RecordingLogger:
    """BuildLogger that keeps every call in order."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def info(self, message: str) -> None:
        self.records.append(("info", message))

    def success(self, message: str) -> None:
        self.records.append(("success", message))

    def warning(self, message: str) -> None:
        self.records.append(("warning", message))

    def error(self, message: str) -> None:
        self.records.append(("error", message))

    def debug(self, message: str) -> None:
        self.records.append(("debug", message))

    def messages(self, level: str) -> list[str]:
        return [message for lvl, message in self.records if lvl == level]


DEFAULT_ERROR = DiagnosticMessage(
    type=MessageType.ERROR,
    code="017",
    text='undefined symbol "foo"',
    start_line=3,
)


class FakeCompiler:
    """PluginCompiler double.

    Writes a plugin file for every script except those named in
    ``fail_on``. Every call is recorded.
    """

    def __init__(
        self,
        fail_on: Sequence[str] = (),
        messages: dict[str, Sequence[DiagnosticMessage]] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.fail_on = set(fail_on)
        self.messages = messages or {}
        self.delay = delay
        self.calls: list[tuple[Path, Path, Path, list[Path]]] = []
        self.active = 0
        self.max_active = 0

    @property
    def compiled_names(self) -> list[str]:
        return [source.name for source, _, _, _ in self.calls]

    async def compile(
        self,
        source: Path,
        dest_dir: Path,
        executable: Path,
        include_dirs: Sequence[Path],
    ) -> CompileResult:
        self.calls.append((source, dest_dir, executable, list(include_dirs)))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)

            messages = tuple(self.messages.get(source.name, ()))
            if source.name in self.fail_on:
                return CompileResult(
                    success=False,
                    error="1 Error.",
                    messages=messages or (DEFAULT_ERROR,),
                )

            plugin = f"{source.stem}.amxx"
            (dest_dir / plugin).write_bytes(b"AMXX")
            return CompileResult(success=True, plugin=plugin, messages=messages)
        finally:
            self.active -= 1


class ScriptedEventSource:
    """File event source that replays (delay, event) pairs, then ends."""

    def __init__(self, events: Sequence[tuple[float, FileEvent]]) -> None:
        self.events = list(events)
        self.base_paths: list[Path] = []
        self.pattern = ""

    def __aiter__(self) -> AsyncIterator[FileEvent]:
        return self._replay()

    async def _replay(self) -> AsyncIterator[FileEvent]:
        for delay, event in self.events:
            await asyncio.sleep(delay)
            yield event


@pytest.fixture
def recording_logger() -> RecordingLogger:
    """Return a fresh RecordingLogger."""
    return RecordingLogger()


@pytest.fixture
def fake_compiler_cls() -> type[FakeCompiler]:
    """Return the FakeCompiler class for tests that configure failures."""
    return FakeCompiler


@pytest.fixture
def scripted_source_cls() -> type[ScriptedEventSource]:
    """Return the ScriptedEventSource class."""
    return ScriptedEventSource


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a project tree and make it the working directory.

    Layout::

        src/scripts/{a,b,c}.sma
        src/include/util.inc
        assets/textures/foo.wad
        assets/sound/hit.wav
    """
    scripts = tmp_path / "src" / "scripts"
    scripts.mkdir(parents=True)
    for name in ("a", "b", "c"):
        (scripts / f"{name}.sma").write_text(f"// {name}\npublic plugin_init() {{}}\n")

    include = tmp_path / "src" / "include"
    include.mkdir(parents=True)
    (include / "util.inc").write_text("#define UTIL 1\n")

    (tmp_path / "assets" / "textures").mkdir(parents=True)
    (tmp_path / "assets" / "textures" / "foo.wad").write_bytes(b"WAD3\x00\x01")
    (tmp_path / "assets" / "sound").mkdir(parents=True)
    (tmp_path / "assets" / "sound" / "hit.wav").write_bytes(b"RIFF")

    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def project_config(project_dir: Path) -> ProjectConfig:
    """Return a config for ``project_dir`` using absolute paths."""
    return ProjectConfig.model_validate(
        {
            "input": {
                "scripts": str(project_dir / "src" / "scripts"),
                "include": str(project_dir / "src" / "include"),
                "assets": str(project_dir / "assets"),
            },
            "output": {
                "scripts": str(project_dir / "dist" / "scripting"),
                "plugins": str(project_dir / "dist" / "plugins"),
                "include": str(project_dir / "dist" / "scripting" / "include"),
                "assets": str(project_dir / "dist"),
            },
            "compiler": {"dir": str(project_dir / ".compiler")},
            "rules": {"flatCompilation": True},
        }
    )
