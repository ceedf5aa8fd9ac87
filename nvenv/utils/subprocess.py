import logging
import shlex
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from nvenv.errors import NvenvError

logger = logging.getLogger(__name__)


class SubprocessError(NvenvError):
    exit_code = 13

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


def run_tool(
    command: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """Run an external tool, raising SubprocessError unless it exits 0."""

    printable = shlex.join(str(part) for part in command)
    logger.debug("Running: %s", printable)

    try:
        result = subprocess.run(
            [str(part) for part in command],
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            check=False,  # handled manually
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise SubprocessError(
            f"Command not found: {command[0]}"
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise SubprocessError(
            f"Command timed out after {timeout}s: {printable}"
        ) from exc
    except OSError as exc:
        raise SubprocessError(
            f"Failed to execute command: {printable}"
        ) from exc

    if result.returncode != 0:
        raise SubprocessError(
            _describe_failure(printable, result),
            returncode=result.returncode,
        )

    return result


def _describe_failure(
    printable: str,
    result: subprocess.CompletedProcess,
) -> str:
    lines = [f"{printable} exited with code {result.returncode}"]

    output = (result.stderr or result.stdout or "").strip()
    if output:
        lines.append(output)

    return "\n".join(lines)
