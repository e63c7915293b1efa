"""Staging copy of the package tree."""
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from kpt_recreate.core.errors import FilesystemError

logger = logging.getLogger(__name__)

CopyTree = Callable[[Path, Path], None]


def copy_dir_overwrite(src: Path, dst: Path) -> None:
    """Copy src into dst, overwriting files that already exist there.

    Symlinks are copied as the content they point to.
    """
    shutil.copytree(src, dst, symlinks=False, ignore_dangling_symlinks=True, dirs_exist_ok=True)


def stage_tree(
    source: Path,
    out_dir: Optional[Path] = None,
    copy_tree: CopyTree = copy_dir_overwrite,
) -> Path:
    """Copy source into a working directory and return its absolute path.

    If out_dir is not given a fresh temporary directory is created. If out_dir
    is source itself nothing is copied and the tree is recreated in place.
    A failed copy is not rolled back.

    Raises:
        FilesystemError: If source is not a directory, one of source and
            out_dir contains the other, or the copy fails
    """
    source = Path(source).absolute()
    if not source.is_dir():
        raise FilesystemError(f"source directory {source} does not exist")

    if out_dir is None:
        try:
            out_dir = Path(tempfile.mkdtemp(prefix="kpt-recreate-"))
        except OSError as e:
            raise FilesystemError(f"failed to create temp dir: {e}") from e
    out_dir = Path(out_dir).absolute()

    if out_dir.resolve() == source.resolve():
        logger.info(f"Recreating packages in place in {source}")
        return source
    if source.resolve() in out_dir.resolve().parents:
        raise FilesystemError(
            f"output directory {out_dir} must not be inside source directory {source}"
        )
    if out_dir.resolve() in source.resolve().parents:
        raise FilesystemError(
            f"source directory {source} must not be inside output directory {out_dir}"
        )

    logger.info(f"Copying {source} to {out_dir}")
    try:
        copy_tree(source, out_dir)
    except OSError as e:
        raise FilesystemError(f"failed to copy {source} to {out_dir}: {e}") from e
    return out_dir
