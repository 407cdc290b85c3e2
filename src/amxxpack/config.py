"""Project configuration models for amxxpack.

This module defines the ProjectConfig root model that represents a
``.amxxpack.json`` file, plus the BuildOptions passed to a build run.

Input locations accept a single path or a list of paths. Optional
locations (assets input, scripts output) are ``None`` when not
configured, and every consumer checks for ``None`` explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from amxxpack.errors import ConfigurationError

CONFIG_FILE_NAMES = (".amxxpack.json", ".amxxpack.yml", ".amxxpack.yaml")
"""Config file names searched in the working directory, in order."""

DEFAULT_COMPILER_VERSION = "1.9.0"
DEFAULT_COMPILER_EXECUTABLE = "amxxpc"

_MODEL_CONFIG = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _as_path_tuple(value: Any) -> Any:
    if value is None:
        return value
    if isinstance(value, (str, Path)):
        return (Path(value),)
    if isinstance(value, (list, tuple)):
        return tuple(Path(item) for item in value)
    return value


class InputConfig(BaseModel):
    """Input locations.

    Attributes:
        scripts: Directories containing ``.sma`` scripts.
        include: Directories containing ``.inc`` include files.
        assets: Directories containing asset files, or None.
    """

    model_config = _MODEL_CONFIG

    scripts: tuple[Path, ...] = Field(
        default=(Path("./src/scripts"),),
        min_length=1,
        description="Script directories",
    )
    include: tuple[Path, ...] = Field(
        default=(Path("./src/include"),),
        description="Include directories",
    )
    assets: tuple[Path, ...] | None = Field(
        default=(Path("./assets"),),
        description="Asset directories (optional)",
    )

    @field_validator("scripts", "include", "assets", mode="before")
    @classmethod
    def _cast_paths(cls, value: Any) -> Any:
        return _as_path_tuple(value)


class OutputConfig(BaseModel):
    """Output locations.

    Attributes:
        scripts: Where raw scripts are copied, or None to skip copying.
        plugins: Where compiled plugins are written.
        include: Where include files are copied.
        assets: Where assets are copied.
    """

    model_config = _MODEL_CONFIG

    scripts: Path | None = Field(
        default=Path("./dist/addons/amxmodx/scripting"),
        description="Scripts output directory (optional)",
    )
    plugins: Path = Field(
        default=Path("./dist/addons/amxmodx/plugins"),
        description="Plugins output directory",
    )
    include: Path = Field(
        default=Path("./dist/addons/amxmodx/scripting/include"),
        description="Include output directory",
    )
    assets: Path = Field(
        default=Path("./dist"),
        description="Assets output directory",
    )


class CompilerConfig(BaseModel):
    """Compiler descriptor.

    Attributes:
        dir: Compiler installation directory (holds the executable and ``include/``).
        executable: Executable file name inside ``dir``.
        version: Compiler version the project targets.
        dev: Whether a development build of the compiler is used.
        addons: Compiler addons installed alongside (informational).
    """

    model_config = _MODEL_CONFIG

    dir: Path = Field(default=Path("./.compiler"), description="Compiler directory")
    executable: str = Field(
        default=DEFAULT_COMPILER_EXECUTABLE,
        min_length=1,
        description="Compiler executable name",
    )
    version: str = Field(default=DEFAULT_COMPILER_VERSION, description="Compiler version")
    dev: bool = Field(default=False, description="Use development build")
    addons: tuple[str, ...] = Field(default=(), description="Compiler addons")

    @property
    def executable_path(self) -> Path:
        """Full path to the compiler executable."""
        return self.dir / self.executable

    @property
    def include_dir(self) -> Path:
        """Include directory bundled with the compiler."""
        return self.dir / "include"


class RulesConfig(BaseModel):
    """Build rules.

    Attributes:
        flat_compilation: Place all plugins directly in the plugins directory
            instead of mirroring the script sub-directories.
    """

    model_config = _MODEL_CONFIG

    flat_compilation: bool = Field(
        default=True,
        alias="flatCompilation",
        description="Flat plugins output layout",
    )


class ThirdpartyDependency(BaseModel):
    """Third-party package reference (name and download URL)."""

    model_config = _MODEL_CONFIG

    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1)


class ThirdpartyConfig(BaseModel):
    """Third-party packages section.

    Accepted so existing project files validate; amxxpack does not download
    or install these.
    """

    model_config = _MODEL_CONFIG

    dir: Path = Field(default=Path("./.thirdparty"), description="Third-party directory")
    dependencies: tuple[ThirdpartyDependency, ...] = Field(default=())


class ProjectConfig(BaseModel):
    """Root project configuration (``.amxxpack.json``).

    Loaded once per run and shared read-only by the orchestrators.

    Example:
        >>> config = ProjectConfig.from_file(".amxxpack.json")
        >>> config.output.plugins
        PosixPath('dist/addons/amxmodx/plugins')
    """

    model_config = _MODEL_CONFIG

    input: InputConfig = Field(default_factory=InputConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    compiler: CompilerConfig = Field(default_factory=CompilerConfig)
    include: tuple[Path, ...] = Field(
        default=(),
        description="Extra include directories passed to the compiler",
    )
    rules: RulesConfig = Field(default_factory=RulesConfig)
    thirdparty: ThirdpartyConfig = Field(default_factory=ThirdpartyConfig)

    @field_validator("include", mode="before")
    @classmethod
    def _cast_include(cls, value: Any) -> Any:
        return _as_path_tuple(value)

    @classmethod
    def from_file(cls, path: str | Path) -> ProjectConfig:
        """Load configuration from a JSON or YAML file.

        JSON is a subset of YAML, so one ``yaml.safe_load`` covers both.

        Args:
            path: Path to the config file.

        Returns:
            Validated ProjectConfig instance.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If the file cannot be parsed.
            pydantic.ValidationError: If schema validation fails.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r", encoding="utf-8") as f:
            data: dict[str, Any] | None = yaml.safe_load(f)

        return cls.model_validate(data or {})


class BuildOptions(BaseModel):
    """Options for a single build run.

    Attributes:
        ignore_errors: Keep compiling remaining scripts after a failure.
            The run is still reported as failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ignore_errors: bool = Field(default=False, description="Continue after compile failures")


def find_config_file(directory: Path | None = None) -> Path | None:
    """Find the first known config file name in ``directory`` (default: cwd)."""
    directory = directory or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def load_config(path: str | Path | None = None) -> ProjectConfig:
    """Load the project configuration.

    Args:
        path: Explicit config file. When omitted, the working directory is
            searched for CONFIG_FILE_NAMES and defaults are used if none exists.

    Returns:
        Validated ProjectConfig.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid.
    """
    if path is None:
        found = find_config_file()
        if found is None:
            return ProjectConfig()
        path = found

    path = Path(path)
    try:
        return ProjectConfig.from_file(path)
    except FileNotFoundError:
        raise ConfigurationError("Config file not found", file_path=str(path)) from None
    except yaml.YAMLError as e:
        raise ConfigurationError(
            "Config file is not valid JSON/YAML",
            file_path=str(path),
            internal_details=str(e),
        ) from e
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            file_path=str(path),
            field_path=".".join(str(part) for part in first["loc"]),
            internal_details=str(e),
        ) from e
