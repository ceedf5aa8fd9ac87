from __future__ import annotations

import logging
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from nvenv.runtime.platform import WINDOWS_EXECUTABLE_EXTENSIONS, is_executable_file
from nvenv.utils.fs import FilesystemError, make_executable, remove_dir, remove_file

logger = logging.getLogger(__name__)


class ExposureKind(str, Enum):
    SYMLINK = "symlink"
    WRAPPER = "wrapper"


@dataclass(frozen=True)
class LinkResult:
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class ExposedBinary:
    name: str
    source: Path
    target: Path
    kind: ExposureKind


def expose_binaries(
    source_dir: Path,
    bin_dir: Path,
    *,
    platform: str,
    silent: bool = False,
) -> List[ExposedBinary]:
    """Make every executable in ``source_dir`` reachable from ``bin_dir``.

    Fallback and skip notices are warnings unless ``silent`` is set, in which
    case they drop to debug.
    """

    if not source_dir.is_dir():
        _notice(silent, "Executable directory not found: %s", source_dir)
        return []

    exposed: List[ExposedBinary] = []

    for source in sorted(source_dir.iterdir()):
        try:
            mode = source.stat().st_mode
        except OSError as exc:
            _notice(silent, "Could not access %s: %s", source.name, exc)
            continue

        if not stat.S_ISREG(mode):
            continue

        if not is_executable_file(source.name, source_dir, platform):
            continue

        entry = expose_binary(
            source, bin_dir / source.name, platform=platform, silent=silent
        )
        exposed.append(entry)

    return exposed


def expose_binary(
    source: Path,
    link: Path,
    *,
    platform: str,
    silent: bool = False,
) -> ExposedBinary:
    result = try_symlink(source, link)

    if result.ok:
        logger.info("Created symlink: %s", link.name)
        return ExposedBinary(link.name, source, link, ExposureKind.SYMLINK)

    _notice(silent, "Could not create symlink %s: %s", link, result.error)
    wrapper = write_wrapper(source, link, platform=platform)
    logger.info("Created wrapper script: %s", wrapper.name)
    return ExposedBinary(link.name, source, wrapper, ExposureKind.WRAPPER)


def try_symlink(source: Path, link: Path) -> LinkResult:
    _clear_entry(link)
    try:
        link.symlink_to(source)
    except (OSError, NotImplementedError) as exc:
        return LinkResult(ok=False, error=str(exc))
    return LinkResult(ok=True)


def wrapper_path(link: Path, platform: str) -> Path:
    if platform != "win32":
        return link

    suffix = link.suffix.lower()
    # extension-less entries on Windows are POSIX companions and keep a sh shim
    if not suffix:
        return link
    # a binary name cannot hold script text, cmd.exe finds node.cmd for "node"
    if suffix == ".exe":
        return link.with_suffix(".cmd")
    if suffix in WINDOWS_EXECUTABLE_EXTENSIONS:
        return link
    return link.with_name(link.name + ".cmd")


def wrapper_content(source: Path, target: Path, platform: str) -> str:
    suffix = target.suffix.lower()

    if platform == "win32" and suffix in (".cmd", ".bat"):
        return f'@echo off\r\n"{source}" %*\r\n'
    if platform == "win32" and suffix == ".ps1":
        return f'& "{source}" @args\r\n'
    return f'#!/bin/sh\nexec "{source}" "$@"\n'


def write_wrapper(source: Path, link: Path, *, platform: str) -> Path:
    target = wrapper_path(link, platform)
    _clear_entry(target)

    try:
        target.write_text(wrapper_content(source, target, platform), newline="")
    except OSError as exc:
        raise FilesystemError(
            f"Failed to write wrapper script: {target}"
        ) from exc

    if platform != "win32":
        make_executable(target)

    return target


def _clear_entry(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        remove_dir(path)
    else:
        remove_file(path)


def _notice(silent: bool, message: str, *args: object) -> None:
    logger.log(logging.DEBUG if silent else logging.WARNING, message, *args)
