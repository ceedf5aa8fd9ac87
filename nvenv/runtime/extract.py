import logging
import sys
from pathlib import Path
from typing import List, Optional

from nvenv.errors import (
    AmbiguousInstallDirectoryError,
    ArchiveNotFoundError,
    ExtractionFailedError,
    InstallDirectoryNotFoundError,
    UnsupportedArchiveFormatError,
)
from nvenv.runtime.platform import RUNTIME_NAME
from nvenv.utils.fs import ensure_dir
from nvenv.utils.subprocess import SubprocessError, run_tool

logger = logging.getLogger(__name__)

INSTALL_DIR_PREFIX = f"{RUNTIME_NAME}-v"


def extract_archive(
    archive_path: Path,
    destination: Path,
    *,
    platform: Optional[str] = None,
) -> Path:
    archive_path = Path(archive_path)
    destination = Path(destination)
    host_platform = platform if platform is not None else sys.platform

    if not archive_path.is_file():
        raise ArchiveNotFoundError(
            f"Archive file not found: {archive_path}"
        )

    command = _extraction_command(archive_path, destination, host_platform)

    ensure_dir(destination)

    logger.info("Extracting archive: %s", archive_path)
    logger.info("Destination: %s", destination)

    try:
        run_tool(command)
    except SubprocessError as exc:
        raise ExtractionFailedError(
            f"Failed to extract archive: {exc}"
        ) from exc

    logger.info("Extraction completed!")
    return destination


def _extraction_command(
    archive_path: Path,
    destination: Path,
    platform: str,
) -> List[str]:
    name = archive_path.name.lower()

    if name.endswith((".tar.gz", ".tgz")):
        return ["tar", "-xzf", str(archive_path), "-C", str(destination)]

    if name.endswith(".zip"):
        if platform == "win32":
            return [
                "powershell.exe",
                "-NoProfile",
                "-Command",
                "Expand-Archive -LiteralPath '{}' -DestinationPath '{}' -Force".format(
                    _ps_quote(archive_path), _ps_quote(destination)
                ),
            ]
        return ["unzip", "-q", str(archive_path), "-d", str(destination)]

    raise UnsupportedArchiveFormatError(
        f"Unsupported archive format: {archive_path.name}"
    )


def _ps_quote(path: Path) -> str:
    return str(path).replace("'", "''")


def find_install_directory(
    extract_dir: Path,
    prefix: str = INSTALL_DIR_PREFIX,
) -> Path:
    extract_dir = Path(extract_dir)

    try:
        entries = sorted(extract_dir.iterdir())
    except OSError as exc:
        raise InstallDirectoryNotFoundError(
            f"Could not read extraction directory {extract_dir}: {exc}"
        ) from exc

    matches = [
        entry
        for entry in entries
        if entry.name.startswith(prefix) and entry.is_dir()
    ]

    if not matches:
        raise InstallDirectoryNotFoundError(
            f"Could not find Node.js directory in {extract_dir}"
        )

    if len(matches) > 1:
        raise AmbiguousInstallDirectoryError(
            f"Found multiple Node.js directories in {extract_dir}: "
            + ", ".join(entry.name for entry in matches)
        )

    return matches[0]
