"""Path helpers for placing outputs under configured roots.

A project may declare several input directories for the same kind of file
(e.g. two script roots). To mirror a file's directory structure under an
output root we need its path relative to the input root that contains it.
"""

from __future__ import annotations

import fnmatch
import os
from collections.abc import Iterable
from pathlib import Path, PurePath

from amxxpack.errors import PathResolutionError


def absolute_path(path: Path | str) -> Path:
    # normpath instead of resolve(): symlinked inputs keep their configured location
    return Path(os.path.normpath(os.path.abspath(path)))


def find_relative_path(base_paths: Iterable[Path | str], target: Path | str) -> Path | None:
    """Find ``target`` relative to the first base directory that contains it.

    Args:
        base_paths: Candidate base directories, checked in the given order.
        target: File or directory path.

    Returns:
        Relative path (``Path(".")`` when target is the base itself), or None
        if no base directory is an ancestor of ``target``.
    """
    absolute_target = absolute_path(target)

    for base in base_paths:
        absolute_base = absolute_path(base)
        if absolute_target == absolute_base or absolute_base in absolute_target.parents:
            return absolute_target.relative_to(absolute_base)

    return None


def resolve_relative(
    base_paths: Iterable[Path | str],
    target: Path | str,
    *,
    kind: str = "file",
) -> Path:
    """Resolve ``target`` relative to its containing base directory.

    Args:
        base_paths: Candidate base directories, checked in the given order.
        target: File or directory path.
        kind: What is being resolved, used in the error message ("asset", "plugin").

    Returns:
        Path of ``target`` relative to the first containing base directory.

    Raises:
        PathResolutionError: If no base directory contains ``target``.

    Example:
        >>> resolve_relative([Path("assets")], Path("assets/sound/hit.wav"))
        PosixPath('sound/hit.wav')
    """
    bases = [Path(base) for base in base_paths]
    relative = find_relative_path(bases, target)
    if relative is None:
        raise PathResolutionError(kind, Path(target), bases)

    return relative


def display_path(path: Path | str) -> str:
    """Format a path for log output: cwd-relative when possible, forward slashes."""
    absolute = absolute_path(path)
    cwd = Path.cwd()

    if absolute == cwd or cwd in absolute.parents:
        return absolute.relative_to(cwd).as_posix()

    return Path(path).as_posix()


def matches_pattern(relative: PurePath | str, pattern: str) -> bool:
    """Check a base-relative path against a glob pattern such as ``**/*.sma``.

    Matching follows ``Path.glob``: ``*`` never crosses a path separator and
    a ``**`` segment stands for any number of directories, including none.

    Example:
        >>> matches_pattern("models.v2/README", "**/*.*")
        False
    """
    return _match_parts(PurePath(relative).parts, PurePath(pattern).parts)


def _match_parts(parts: tuple[str, ...], pattern_parts: tuple[str, ...]) -> bool:
    if not pattern_parts:
        return not parts

    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_parts(parts[i:], rest) for i in range(len(parts) + 1))

    return bool(parts) and fnmatch.fnmatchcase(parts[0], head) and _match_parts(parts[1:], rest)
