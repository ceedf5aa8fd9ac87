import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

from nvenv.errors import ConfigError
from nvenv.runtime.platform import normalize_version

SILENT_ENV_VAR = "NVENV_SILENT"
MIRROR_ENV_VAR = "NVENV_MIRROR"

_TRUTHY = {"1", "true"}


class EnvConfig(BaseModel):
    version: str = Field(
        ...,
        description="Node.js version to install",
        examples=["18.20.0", "v20.11.0"],
    )

    env_path: Path = Field(
        ...,
        description="Directory where the environment is created",
    )

    silent: bool = Field(
        default=False,
        description="Suppress progress and status output",
    )

    mirror: Optional[str] = Field(
        default=None,
        description="Base URL used instead of https://nodejs.org/dist",
    )

    max_redirects: int = Field(
        default=5,
        description="Maximum number of HTTP redirects followed per download",
    )

    timeout: float = Field(
        default=30.0,
        description="HTTP connect/read timeout in seconds",
    )

    @field_validator("version")
    @classmethod
    def validate_version(cls, value: str) -> str:
        return normalize_version(value)

    @field_validator("env_path")
    @classmethod
    def validate_env_path(cls, value: Path) -> Path:
        path = value.expanduser().absolute()
        if path.exists() and not path.is_dir():
            raise ConfigError(
                f"Environment path exists and is not a directory: {path}"
            )
        return path

    @field_validator("mirror")
    @classmethod
    def validate_mirror(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        return value or None

    @field_validator("max_redirects")
    @classmethod
    def validate_max_redirects(cls, value: int) -> int:
        if value < 0:
            raise ConfigError("max_redirects must not be negative")
        return value

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ConfigError("timeout must be positive")
        return value

    @classmethod
    def from_env(
        cls,
        *,
        version: str,
        env_path: Path,
        silent: Optional[bool] = None,
        mirror: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "EnvConfig":
        """Build the config, filling unset options from environment variables.

        An explicit ``silent`` wins over ``NVENV_SILENT``, which wins over
        ``NODE_ENV=test``. An explicit ``mirror`` wins over ``NVENV_MIRROR``.
        """
        env = os.environ if environ is None else environ

        if silent is None:
            silent = _silent_from_env(env)

        if mirror is None:
            mirror = env.get(MIRROR_ENV_VAR)

        return cls(
            version=version,
            env_path=Path(env_path),
            silent=silent,
            mirror=mirror,
            **overrides,
        )

    class Config:
        frozen = True


def _silent_from_env(env: Mapping[str, str]) -> bool:
    if env.get(SILENT_ENV_VAR, "").strip().lower() in _TRUTHY:
        return True
    return env.get("NODE_ENV") == "test"
