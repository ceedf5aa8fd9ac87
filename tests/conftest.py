"""Shared fixtures: a synthetic Node.js release archive and a mock HTTP client."""

from __future__ import annotations

import io
import sys
import tarfile
from pathlib import Path
from typing import Callable

import httpx
import pytest

from nvenv.errors import NvenvError
from nvenv.runtime.platform import resolve_download_info

NODE_VERSION = "18.20.0"

NODE_SCRIPT = b'#!/bin/sh\necho "v18.20.0"\n'
NPM_CLI = b'#!/bin/sh\necho "10.5.0"\n'


def _add_file(archive: tarfile.TarFile, name: str, data: bytes, mode: int = 0o644) -> None:
    info = tarfile.TarInfo(name)
    info.size = len(data)
    info.mode = mode
    archive.addfile(info, io.BytesIO(data))


def _add_dir(archive: tarfile.TarFile, name: str) -> None:
    info = tarfile.TarInfo(name)
    info.type = tarfile.DIRTYPE
    info.mode = 0o755
    archive.addfile(info)


def build_node_tarball(top: str) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        _add_dir(archive, top)
        _add_dir(archive, f"{top}/bin")
        _add_dir(archive, f"{top}/lib/node_modules/npm/bin")
        _add_file(archive, f"{top}/bin/node", NODE_SCRIPT, mode=0o755)
        _add_file(
            archive,
            f"{top}/lib/node_modules/npm/bin/npm-cli.js",
            NPM_CLI,
            mode=0o755,
        )

        link = tarfile.TarInfo(f"{top}/bin/npm")
        link.type = tarfile.SYMTYPE
        link.linkname = "../lib/node_modules/npm/bin/npm-cli.js"
        archive.addfile(link)

        _add_file(archive, f"{top}/README.md", b"# Node.js\n")
    return buffer.getvalue()


@pytest.fixture
def node_release():
    """The host's download info plus a matching tar.gz payload."""

    if sys.platform == "win32":
        pytest.skip("synthetic release archive is tar.gz only")
    try:
        info = resolve_download_info(NODE_VERSION)
    except NvenvError as exc:
        pytest.skip(f"host not supported: {exc}")
    return info, build_node_tarball(info.filename)


@pytest.fixture
def mock_client():
    clients: list[httpx.Client] = []

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
        client = httpx.Client(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
