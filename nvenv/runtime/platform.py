import platform as _platform
import re
import sys
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from nvenv.errors import (
    InvalidVersionError,
    UnsupportedArchitectureError,
    UnsupportedPlatformError,
)

RUNTIME_NAME = "node"
DEFAULT_DIST_URL = "https://nodejs.org/dist"

SUPPORTED_PLATFORMS = ("darwin", "linux", "win32")

# Node.js publishes Windows builds as "win", every other platform keeps its id.
DIST_PLATFORM_NAMES = {"win32": "win"}

ARCH_ALIASES = {
    "x64": "x64",
    "x86_64": "x64",
    "amd64": "x64",
    "arm64": "arm64",
    "aarch64": "arm64",
}

WINDOWS_EXECUTABLE_EXTENSIONS = (".exe", ".cmd", ".bat", ".ps1")

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+(?:-[0-9A-Za-z.]+)?$")

Platform = Literal["darwin", "linux", "win32"]
Arch = Literal["x64", "arm64"]
Extension = Literal["tar.gz", "zip"]


class DownloadInfo(BaseModel):
    url: str = Field(
        ...,
        description="Full download URL of the release archive",
    )

    filename: str = Field(
        ...,
        description="Archive name without extension (e.g. node-v18.20.0-linux-x64)",
    )

    extension: Extension = Field(
        ...,
        description="Archive extension without leading dot",
    )

    platform: Platform = Field(
        ...,
        description="Host platform identifier",
    )

    arch: Arch = Field(
        ...,
        description="Host CPU architecture",
    )

    version: str = Field(
        ...,
        description="Normalized version without leading marker",
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: str) -> str:
        if not _VERSION_RE.match(value):
            raise InvalidVersionError(
                f"Invalid version string: {value}"
            )
        return value

    @property
    def archive_name(self) -> str:
        return f"{self.filename}.{self.extension}"

    @property
    def install_dir_name(self) -> str:
        return f"{RUNTIME_NAME}-v{self.version}"

    class Config:
        frozen = True


def detect_platform(system: Optional[str] = None) -> Platform:
    value = system if system is not None else sys.platform

    if value not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatformError(
            f"Unsupported platform: {value} "
            f"(supported: {', '.join(SUPPORTED_PLATFORMS)})"
        )
    return value  # type: ignore[return-value]


def detect_arch(machine: Optional[str] = None) -> Arch:
    value = machine if machine is not None else _platform.machine()

    arch = ARCH_ALIASES.get(value.lower())
    if arch is None:
        raise UnsupportedArchitectureError(
            f"Unsupported architecture: {value}"
        )
    return arch  # type: ignore[return-value]


def archive_extension(platform: str) -> Extension:
    return "zip" if platform == "win32" else "tar.gz"


def normalize_version(version: str) -> str:
    value = version.strip()

    if value and not value[0].isdigit():
        value = value[1:]

    if not _VERSION_RE.match(value):
        raise InvalidVersionError(
            f"Invalid Node.js version: {version!r} (expected e.g. 18.20.0 or v18.20.0)"
        )
    return value


def resolve_download_info(
    version: str,
    *,
    mirror: Optional[str] = None,
    platform: Optional[str] = None,
    arch: Optional[str] = None,
) -> DownloadInfo:
    host_platform = detect_platform(platform)
    host_arch = detect_arch(arch)
    normalized = normalize_version(version)
    extension = archive_extension(host_platform)

    dist_platform = DIST_PLATFORM_NAMES.get(host_platform, host_platform)
    base = (mirror or DEFAULT_DIST_URL).rstrip("/")

    filename = f"{RUNTIME_NAME}-v{normalized}-{dist_platform}-{host_arch}"
    url = f"{base}/v{normalized}/{filename}.{extension}"

    return DownloadInfo(
        url=url,
        filename=filename,
        extension=extension,
        platform=host_platform,
        arch=host_arch,
        version=normalized,
    )


def executable_dir(install_dir: Path, platform: str) -> Path:
    if platform == "win32":
        return install_dir
    return install_dir / "bin"


def is_executable_file(name: str, directory: Path, platform: str) -> bool:
    if platform != "win32":
        return True

    suffix = Path(name).suffix.lower()
    if suffix in WINDOWS_EXECUTABLE_EXTENSIONS:
        return True

    # POSIX companions (npm, npx) ship next to their .cmd launchers.
    if not suffix:
        return (directory / f"{name}.cmd").is_file()

    return False
