"""Recreate kpt subpackages from their pinned upstream references."""
import logging
import shutil
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from kpt_recreate.core.errors import (
    CommandError,
    FetchError,
    FilesystemError,
    RecreateError,
)
from kpt_recreate.packages.discovery import KptfileLocation, iter_kptfiles
from kpt_recreate.packages.kptfile import UpstreamReference, read_kptfile
from kpt_recreate.recreate.command import Command, CommandRunner, run_command
from kpt_recreate.recreate.staging import CopyTree, copy_dir_overwrite, stage_tree

logger = logging.getLogger(__name__)

GIT_SUFFIX = ".git"
URL_PATH_SEPARATOR = "/"
FETCH_ARGS = ["pkg", "get"]


class RecreateRequest(BaseModel):
    """One `kpt pkg get` invocation."""

    model_config = ConfigDict(frozen=True)

    expression: str = Field(..., description="<repo>.git/<directory>@<commit>")
    destination: Path = Field(..., description="Package directory relative to working_root")
    working_root: Path = Field(..., description="Tree root the fetch runs in")

    def to_command(self, kpt_binary: str = "kpt") -> Command:
        return Command(
            name=kpt_binary,
            args=[*FETCH_ARGS, self.expression, str(self.destination)],
            dir=self.working_root,
        )


class RecreateResult(BaseModel):
    root: Path
    requests: List[RecreateRequest] = Field(default_factory=list)
    dry_run: bool = False


def fetch_expression(upstream: UpstreamReference) -> str:
    """Build the `kpt pkg get` source argument for an upstream.

    Examples:
        https://example.com/repo, /pkg, v1 -> https://example.com/repo.git/pkg@v1
        https://example.com/repo.git, pkg, v1 -> https://example.com/repo.git/pkg@v1
    """
    repo = upstream.repo
    if not repo.endswith(GIT_SUFFIX):
        if repo.endswith(URL_PATH_SEPARATOR):
            repo = repo[: -len(URL_PATH_SEPARATOR)]
        repo = repo + GIT_SUFFIX

    directory = upstream.directory
    if not directory.startswith(URL_PATH_SEPARATOR):
        directory = URL_PATH_SEPARATOR + directory

    return f"{repo}{directory}@{upstream.commit}"


def plan_request(location: KptfileLocation, root: Path) -> RecreateRequest:
    """Read a discovered Kptfile and turn it into a fetch request.

    Raises:
        ManifestParseError: If the Kptfile is unreadable or malformed
        MissingFieldError: If a required upstream field is missing
    """
    upstream = read_kptfile(location.file_path)
    return RecreateRequest(
        expression=fetch_expression(upstream),
        destination=location.relative_dir,
        working_root=root,
    )


class Recreator:
    """Deletes and refetches every Kptfile package in a tree.

    Packages are processed one at a time in walk order: each package is
    deleted right before its own fetch, so a failure leaves earlier packages
    refetched, at most one package deleted, and later packages untouched.
    The first error aborts the run.
    """

    def __init__(
        self,
        copy_tree: CopyTree,
        run_command: CommandRunner,
        kpt_binary: str = "kpt",
    ) -> None:
        self.copy_tree = copy_tree
        self.run_command = run_command
        self.kpt_binary = kpt_binary

    def run(
        self,
        source: Path,
        out_dir: Optional[Path] = None,
        dry_run: bool = False,
    ) -> RecreateResult:
        """Recreate all packages found under source.

        Args:
            source: Input tree
            out_dir: Where to stage the working copy (temp dir if None,
                in place if equal to source)
            dry_run: Only read the Kptfiles of source and return the plan

        Returns:
            RecreateResult listing the requests in the order they ran

        Raises:
            FilesystemError: On copy, walk or delete failures
            ManifestParseError: On an unreadable or incomplete Kptfile
            FetchError: If kpt fails for a package
            RecreateError: If the tree root itself holds a Kptfile
        """
        source = Path(source).absolute()
        if dry_run:
            root = source
        else:
            root = stage_tree(source, out_dir, copy_tree=self.copy_tree)

        # Discover everything before the tree is mutated.
        locations = list(iter_kptfiles(root))
        self._check_root_package(locations, root)
        logger.info(f"Found {len(locations)} Kptfile(s) in {root}")

        result = RecreateResult(root=root, dry_run=dry_run)
        for location in locations:
            request = plan_request(location, root)
            if not dry_run:
                self._recreate(location, request)
            result.requests.append(request)
        return result

    def _check_root_package(self, locations: List[KptfileLocation], root: Path) -> None:
        for location in locations:
            if location.containing_dir == root:
                raise RecreateError(
                    f"cannot recreate {location.file_path}: the tree root itself is a kpt package"
                )

    def _recreate(self, location: KptfileLocation, request: RecreateRequest) -> None:
        kpt_dir = location.containing_dir
        try:
            shutil.rmtree(kpt_dir)
        except OSError as e:
            raise FilesystemError(f"failed to remove kpt directory {kpt_dir}: {e}") from e

        command = request.to_command(self.kpt_binary)
        logger.info(f"about to run {command} in dir {command.dir}")
        try:
            text = self.run_command(command)
        except CommandError as e:
            if e.output:
                logger.info(e.output)
            raise FetchError(
                f"failed to run kpt command for {location.file_path}: {e}",
                command=command,
                output=e.output,
            ) from e
        if text:
            logger.info(text)


def recreate_packages(
    source: Path,
    out_dir: Optional[Path] = None,
    kpt_binary: str = "kpt",
    dry_run: bool = False,
) -> RecreateResult:
    """Recreate the kpt packages under source using the default copy and
    command primitives."""
    recreator = Recreator(
        copy_tree=copy_dir_overwrite,
        run_command=run_command,
        kpt_binary=kpt_binary,
    )
    return recreator.run(source, out_dir=out_dir, dry_run=dry_run)
