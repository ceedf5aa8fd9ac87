import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from nvenv.errors import EnvironmentLockedError
from nvenv.utils.fs import FilesystemError, discard


@contextmanager
def env_lock(path: Path) -> Iterator[Path]:
    """Hold an exclusive lock file for the duration of a build."""

    try:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError as exc:
        raise EnvironmentLockedError(
            f"Another build holds {path}; remove it if no build is running"
        ) from exc
    except OSError as exc:
        raise FilesystemError(
            f"Failed to create lock file: {path}"
        ) from exc

    try:
        with os.fdopen(fd, "w") as handle:
            handle.write(f"{os.getpid()}\n")
        yield path
    finally:
        discard(path)
