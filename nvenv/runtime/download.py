from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import httpx
import typer

from nvenv.errors import (
    DownloadFailedError,
    NetworkError,
    TooManyRedirectsError,
)
from nvenv.utils.fs import FilesystemError, discard, ensure_dir

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = {301, 302, 303, 307, 308}
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_TIMEOUT = 30.0
CHUNK_SIZE = 64 * 1024

_MB = 1024 * 1024


class DownloadProgress:
    """Single-line progress report, rewritten in place on stdout."""

    def __init__(self, total: Optional[int], *, silent: bool = False):
        self.total = total
        self.silent = silent
        self.received = 0
        self._last_line: Optional[str] = None

    @property
    def percent(self) -> Optional[float]:
        if not self.total:
            return None
        return self.received / self.total * 100

    def render(self) -> Optional[str]:
        percent = self.percent
        if percent is None:
            return None
        return (
            f"Progress: {percent:.1f}% "
            f"({self.received / _MB:.1f}MB / {self.total / _MB:.1f}MB)"
        )

    def update(self, received: int) -> None:
        self.received = received
        if self.silent:
            return

        line = self.render()
        if line is None or line == self._last_line:
            return

        self._last_line = line
        typer.echo(f"\r{line}", nl=False)

    def finish(self) -> None:
        if self.silent:
            return
        prefix = "\n" if self._last_line else ""
        typer.echo(f"{prefix}Download completed!")


@contextmanager
def _build_client(
    client: Optional[httpx.Client],
    timeout: float,
) -> Iterator[httpx.Client]:
    if client is not None:
        yield client
        return
    with httpx.Client(timeout=timeout, follow_redirects=False) as created:
        yield created


def download_file(
    url: str,
    destination: Path,
    *,
    client: Optional[httpx.Client] = None,
    silent: bool = False,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    timeout: float = DEFAULT_TIMEOUT,
) -> Path:
    """Stream ``url`` into ``destination``, following at most ``max_redirects`` hops.

    No partial file survives a failure: the destination is removed before
    any error propagates.
    """

    destination = Path(destination)
    ensure_dir(destination.parent)

    logger.info("Downloading from: %s", url)
    logger.info("Saving to: %s", destination)

    try:
        with _build_client(client, timeout) as http:
            current = url
            for _ in range(max_redirects + 1):
                location = _fetch_once(http, current, destination, silent=silent)
                if location is None:
                    return destination
                logger.info("Following redirect to: %s", location)
                current = location
    except httpx.HTTPError as exc:
        discard(destination)
        raise NetworkError(
            f"Network error while downloading {url}: {exc}"
        ) from exc
    except OSError as exc:
        discard(destination)
        raise FilesystemError(
            f"Failed to write download to {destination}: {exc}"
        ) from exc
    except Exception:
        discard(destination)
        raise

    discard(destination)
    raise TooManyRedirectsError(
        f"Too many redirects (more than {max_redirects}) while downloading {url}"
    )


def _fetch_once(
    http: httpx.Client,
    url: str,
    destination: Path,
    *,
    silent: bool,
) -> Optional[str]:
    with http.stream("GET", url, follow_redirects=False) as response:
        if response.status_code in REDIRECT_STATUSES:
            discard(destination)
            location = response.headers.get("location")
            if not location:
                raise DownloadFailedError(
                    f"Redirect without location header: HTTP {response.status_code}",
                    status_code=response.status_code,
                )
            return str(response.url.join(location))

        if not response.is_success:
            discard(destination)
            raise DownloadFailedError(
                f"Failed to download: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        total = _content_length(response)
        progress = DownloadProgress(total, silent=silent)
        received = 0

        with destination.open("wb") as handle:
            for chunk in _body_chunks(response):
                handle.write(chunk)
                received += len(chunk)
                progress.update(received)

        if total is not None and received != total:
            raise DownloadFailedError(
                f"Incomplete download: received {received} of {total} bytes",
                status_code=response.status_code,
            )

        progress.finish()
        return None


def _body_chunks(response: httpx.Response) -> Iterator[bytes]:
    # archives are written as sent, without undoing a Content-Encoding
    if response.is_stream_consumed:
        # the body was read into memory when the response was built
        return response.iter_bytes(CHUNK_SIZE)
    return response.iter_raw(CHUNK_SIZE)


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
