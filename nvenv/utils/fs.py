import logging
import os
import shutil
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from nvenv.errors import NvenvError

logger = logging.getLogger(__name__)


class FilesystemError(NvenvError):
    exit_code = 12

def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create directory: {path}"
        ) from exc


def remove_dir(path: Path) -> None:
    try:
        if path.is_symlink():
            path.unlink()
        elif path.exists():
            shutil.rmtree(path)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to remove directory: {path}"
        ) from exc


def remove_file(path: Path) -> None:
    try:
        if path.is_symlink() or path.exists():
            path.unlink()
    except OSError as exc:
        raise FilesystemError(
            f"Failed to remove file: {path}"
        ) from exc


def discard(path: Path) -> bool:
    """Remove a file or directory, logging instead of raising on failure."""
    try:
        if path.is_dir() and not path.is_symlink():
            remove_dir(path)
        else:
            remove_file(path)
    except FilesystemError as exc:
        logger.warning("%s (%s)", exc, exc.__cause__)
        return False
    return True

@contextmanager
def temp_dir(prefix: str = "nvenv-") -> Iterator[Path]:
    path = Path(tempfile.mkdtemp(prefix=prefix))
    try:
        yield path
    finally:
        discard(path)


def copy_tree(source: Path, destination: Path) -> None:
    try:
        shutil.copytree(
            source,
            destination,
            symlinks=True,
            dirs_exist_ok=True,
        )
    except (OSError, shutil.Error) as exc:
        raise FilesystemError(
            f"Failed to copy {source} to {destination}"
        ) from exc

def atomic_write(path: Path, data: bytes) -> None:
    tmp_path = path.with_suffix(path.suffix + ".tmp")

    try:
        with tmp_path.open("wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to write file atomically: {path}"
        ) from exc


def make_executable(path: Path) -> None:
    try:
        mode = path.stat().st_mode
        path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        raise FilesystemError(
            f"Failed to mark file executable: {path}"
        ) from exc
