import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from nvenv.errors import ConfigError
from nvenv.runtime.platform import DownloadInfo
from nvenv.utils.fs import FilesystemError, atomic_write

logger = logging.getLogger(__name__)


class EnvMetadata(BaseModel):
    version: str = Field(..., description="Installed Node.js version")
    platform: str = Field(..., description="Platform the environment was built for")
    arch: str = Field(..., description="CPU architecture the environment was built for")
    created: str = Field(..., description="ISO-8601 creation timestamp (UTC)")

    @classmethod
    def from_download(cls, info: DownloadInfo) -> "EnvMetadata":
        created = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return cls(
            version=info.version,
            platform=info.platform,
            arch=info.arch,
            created=created.replace("+00:00", "Z"),
        )

    class Config:
        frozen = True


def save_metadata(path: Path, info: DownloadInfo) -> EnvMetadata:
    metadata = EnvMetadata.from_download(info)
    payload = json.dumps(metadata.model_dump(), indent=2, ensure_ascii=False)

    atomic_write(path, payload.encode("utf-8"))
    logger.info("Saved environment metadata")

    return metadata


def load_metadata(path: Path) -> EnvMetadata:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(
            f"Failed to read environment metadata: {path}"
        ) from exc

    try:
        return EnvMetadata.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ConfigError(
            f"Invalid environment metadata in {path}: {exc}"
        ) from exc
