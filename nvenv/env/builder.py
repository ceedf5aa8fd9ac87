from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import httpx

from nvenv.config import EnvConfig
from nvenv.env.activate import write_activate_scripts
from nvenv.env.binaries import ExposedBinary, expose_binaries
from nvenv.env.layout import EnvLayout
from nvenv.env.lock import env_lock
from nvenv.env.metadata import EnvMetadata, save_metadata
from nvenv.runtime.download import download_file
from nvenv.runtime.extract import extract_archive, find_install_directory
from nvenv.runtime.platform import DownloadInfo, resolve_download_info
from nvenv.utils.fs import copy_tree, ensure_dir, remove_dir, temp_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnvironmentResult:
    layout: EnvLayout
    download: DownloadInfo
    metadata: EnvMetadata
    exposed: List[ExposedBinary] = field(default_factory=list)


def create_environment(
    config: EnvConfig,
    *,
    client: Optional[httpx.Client] = None,
) -> EnvironmentResult:
    info = resolve_download_info(config.version, mirror=config.mirror)

    logger.info("Creating nvenv environment at: %s", config.env_path)
    logger.info("Node.js version: %s", info.version)
    logger.info("Platform: %s-%s", info.platform, info.arch)
    logger.info("Download URL: %s", info.url)

    layout = EnvLayout(config.env_path, info.version, info.platform)
    create_env_structure(layout)

    with env_lock(layout.lock_path), \
            temp_dir("nvenv-download-") as download_dir, \
            temp_dir("nvenv-extract-") as extract_dir:
        archive = download_file(
            info.url,
            download_dir / info.archive_name,
            client=client,
            silent=config.silent,
            max_redirects=config.max_redirects,
            timeout=config.timeout,
        )

        extract_archive(archive, extract_dir, platform=info.platform)
        extracted = find_install_directory(extract_dir)

        install_runtime(extracted, layout)

        exposed = expose_binaries(
            layout.runtime_bin_dir,
            layout.bin_dir,
            platform=info.platform,
            silent=config.silent,
        )
        write_activate_scripts(layout)
        metadata = save_metadata(layout.metadata_path, info)

    return EnvironmentResult(
        layout=layout,
        download=info,
        metadata=metadata,
        exposed=exposed,
    )


def create_env_structure(layout: EnvLayout) -> None:
    for directory in layout.all_dirs():
        ensure_dir(directory)


def install_runtime(extracted: Path, layout: EnvLayout) -> Path:
    """Copy an extracted runtime tree to ``lib/``, replacing any previous copy."""

    remove_dir(layout.install_dir)
    copy_tree(extracted, layout.install_dir)
    remove_dir(extracted)

    logger.info("Installed Node.js to: %s", layout.install_dir)
    return layout.install_dir
