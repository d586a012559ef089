# Filename: archiver.py
import os
import sys
import tarfile
from pathlib import Path

from ninja_errors import ArchiveError, OutputCollisionError


def check_destination(destination: str | os.PathLike | None):
    """Refuse an output path that already exists. None means stdout and always passes."""
    if destination is not None and os.path.lexists(destination):
        raise OutputCollisionError(f"Output file {destination} already exists, refusing to overwrite it.")


def archive(tree_root: str | os.PathLike, destination: str | os.PathLike | None = None):
    """
    Write `tree_root` as a gzip-compressed tar whose single top-level entry is
    the tree's own directory name. With no destination the archive is
    streamed to stdout.
    """
    tree_root = Path(tree_root)
    if destination is None:
        stream = sys.stdout.buffer
        try:
            with tarfile.open(fileobj=stream, mode="w|gz") as tar:
                tar.add(tree_root, arcname=tree_root.name)
            stream.flush()
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Could not write archive to stdout: {e}") from e
        return None

    destination = Path(destination)
    try:
        # "x" so a file that appeared since startup is never clobbered.
        with tarfile.open(destination, "x:gz") as tar:
            tar.add(tree_root, arcname=tree_root.name)
    except FileExistsError:
        raise OutputCollisionError(f"Output file {destination} already exists, refusing to overwrite it.") from None
    except (OSError, tarfile.TarError) as e:
        destination.unlink(missing_ok=True)
        raise ArchiveError(f"Could not write archive {destination}: {e}") from e
    return destination
