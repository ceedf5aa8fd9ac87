from dataclasses import dataclass
from pathlib import Path

from nvenv.runtime.platform import RUNTIME_NAME, executable_dir

METADATA_FILENAME = ".nvenv"
LOCK_FILENAME = ".nvenv.lock"


@dataclass(frozen=True)
class EnvLayout:
    root: Path
    version: str
    platform: str = "linux"

    @property
    def bin_dir(self) -> Path:
        return self.root / "bin"

    @property
    def lib_dir(self) -> Path:
        return self.root / "lib"

    @property
    def install_dir(self) -> Path:
        return self.lib_dir / f"{RUNTIME_NAME}-v{self.version}"

    @property
    def runtime_bin_dir(self) -> Path:
        return executable_dir(self.install_dir, self.platform)

    @property
    def metadata_path(self) -> Path:
        return self.root / METADATA_FILENAME

    @property
    def lock_path(self) -> Path:
        return self.root / LOCK_FILENAME

    @property
    def activate_script(self) -> Path:
        return self.bin_dir / "activate"

    @property
    def activate_fish_script(self) -> Path:
        return self.bin_dir / "activate.fish"

    def all_dirs(self) -> list[Path]:
        return [self.root, self.bin_dir, self.lib_dir]