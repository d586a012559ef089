# Filename: staging_tree.py
import os
import shutil
from pathlib import Path

from ninja_errors import StagingCollisionError, StagingError

INFO_DIR_NAME = ".info"
COMMANDS_DIR = "commands"
FILES_DIR = "files"
CONFIG_DIR = "config"
COLLECTION_LOG_NAME = "debug_ninja_log.txt"


def staging_name(hostname: str) -> str:
    return f"{hostname}-debug-ninja"


class StagingTree:
    """
    The temporary directory that probe output accumulates in before archiving.

    Every directory handed out by ensure_dir() carries its own `.info/`
    directory holding the provenance records of the probes written there.
    """

    def __init__(self, parent_dir: str | os.PathLike, name: str):
        self.parent_dir = Path(parent_dir)
        self.name = name
        self.root = self.parent_dir / name

    def create(self) -> Path:
        try:
            self.root.mkdir()
        except FileExistsError:
            raise StagingCollisionError(
                f"Staging directory {self.root} already exists, refusing to overwrite it."
            ) from None
        except OSError as e:
            raise StagingError(f"Could not create directory {self.root}: {e.strerror or e}") from e
        return self.root

    def ensure_dir(self, relpath: str | os.PathLike) -> Path:
        """Create `root/relpath` and its `.info` companion; existing dirs are fine."""
        target = self.root / relpath
        for path in (target, target / INFO_DIR_NAME):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StagingError(f"Could not create directory {path}: {e.strerror or e}") from e
        return target

    def info_dir(self, relpath: str | os.PathLike) -> Path:
        return self.root / relpath / INFO_DIR_NAME

    @property
    def collection_log(self) -> Path:
        return self.root / COLLECTION_LOG_NAME

    def remove(self):
        shutil.rmtree(self.root, ignore_errors=True)
