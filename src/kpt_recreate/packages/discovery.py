"""Kptfile discovery over a package tree."""
import logging
import os
from pathlib import Path
from typing import Iterator

from pydantic import BaseModel, ConfigDict

from kpt_recreate.core.errors import FilesystemError
from kpt_recreate.packages.kptfile import KPTFILE_NAME

logger = logging.getLogger(__name__)


class KptfileLocation(BaseModel):
    """Where a discovered Kptfile sits in the tree."""

    model_config = ConfigDict(frozen=True)

    file_path: Path
    containing_dir: Path
    relative_dir: Path
    parent_dir: Path


def _raise_walk_error(err: OSError) -> None:
    raise FilesystemError(f"failed to walk {err.filename}: {err}") from err


def iter_kptfiles(root: Path) -> Iterator[KptfileLocation]:
    """Yield every Kptfile below root.

    Directories are visited top-down with entries sorted, so the walk is
    deterministic and a package's own Kptfile always comes before the
    Kptfiles of packages nested inside it.

    Args:
        root: Tree root to search

    Raises:
        FilesystemError: If root is missing or any directory cannot be listed
    """
    root = Path(root).absolute()
    if not root.is_dir():
        raise FilesystemError(f"cannot walk {root}: not a directory")

    for current, dirs, files in os.walk(root, onerror=_raise_walk_error):
        dirs.sort()
        if KPTFILE_NAME not in files:
            continue

        containing_dir = Path(current)
        logger.debug(f"Found Kptfile in {containing_dir}")
        yield KptfileLocation(
            file_path=containing_dir / KPTFILE_NAME,
            containing_dir=containing_dir,
            relative_dir=containing_dir.relative_to(root),
            parent_dir=containing_dir.parent,
        )
