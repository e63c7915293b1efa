"""Kptfile model and upstream reference reader."""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from kpt_recreate.core.errors import ManifestParseError, MissingFieldError

logger = logging.getLogger(__name__)

KPTFILE_NAME = "Kptfile"

# Checked in this order so the first missing one is reported.
REQUIRED_GIT_FIELDS = ("repo", "directory", "commit")


class GitUpstream(BaseModel):
    """The `upstream.git` section of a Kptfile."""

    # Non-string scalars are rejected, never converted.
    model_config = ConfigDict(extra="ignore", strict=True)

    repo: Optional[str] = Field(default=None, description="Git remote URL")
    directory: Optional[str] = Field(default=None, description="Package path inside the repo")
    commit: Optional[str] = Field(default=None, description="Pinned commit or tag")
    ref: Optional[str] = Field(default=None, description="Ref the commit was resolved from")


class Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: Optional[str] = None
    git: Optional[GitUpstream] = None


class KptfileMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class Kptfile(BaseModel):
    """Typed view of a Kptfile document.

    Only the fields needed to refetch the package are modelled; anything
    else in the document is ignored.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    api_version: Optional[str] = Field(default=None, alias="apiVersion")
    kind: Optional[str] = None
    metadata: KptfileMetadata = Field(default_factory=KptfileMetadata)
    upstream: Optional[Upstream] = None

    @property
    def git(self) -> GitUpstream:
        if self.upstream is None or self.upstream.git is None:
            return GitUpstream()
        return self.upstream.git


class UpstreamReference(BaseModel):
    """The exact upstream a subpackage was fetched from.

    All three fields are required and must be non-empty.
    """

    model_config = ConfigDict(frozen=True)

    repo: str = Field(..., description="Git remote URL")
    directory: str = Field(..., description="Repo-root-relative package directory")
    commit: str = Field(..., description="Pinned commit, tag or branch")

    @field_validator("repo", "directory", "commit")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("must not be empty")
        return v


def load_kptfile(path: Path) -> Kptfile:
    """Load and validate a Kptfile document.

    Raises:
        ManifestParseError: If the file cannot be read, is not YAML, or the
            document does not have the shape of a Kptfile.
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestParseError(f"failed to read file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestParseError(f"failed to parse YAML in {path}: {e}") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ManifestParseError(
            f"expected a YAML mapping in {path}, got {type(raw).__name__}"
        )

    try:
        return Kptfile.model_validate(raw)
    except ValidationError as e:
        raise ManifestParseError(f"invalid Kptfile {path}: {e}") from e


def read_kptfile(path: Path) -> UpstreamReference:
    """Read the upstream git reference declared by a Kptfile.

    Args:
        path: Path to the Kptfile

    Returns:
        UpstreamReference with repo, directory and commit

    Raises:
        ManifestParseError: If the file cannot be read or parsed
        MissingFieldError: If repo, directory or commit is absent or empty
    """
    kptfile = load_kptfile(path)
    git = kptfile.git

    for field in REQUIRED_GIT_FIELDS:
        if not getattr(git, field):
            raise MissingFieldError(field, path)

    logger.debug(f"Read upstream {git.repo} {git.directory}@{git.commit} from {path}")
    return UpstreamReference(repo=git.repo, directory=git.directory, commit=git.commit)
