"""Pytest fixtures for kpt-recreate tests."""
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest
import yaml

from kpt_recreate.core.errors import CommandError
from kpt_recreate.recreate.command import Command


def write_kptfile(
    package_dir: Path,
    repo: Optional[str] = "https://example.com/repo",
    directory: Optional[str] = "/pkg",
    commit: Optional[str] = "v1.2.3",
    name: Optional[str] = None,
) -> Path:
    """Write a Kptfile into package_dir, leaving out git fields set to None."""
    git = {"repo": repo, "directory": directory, "commit": commit}
    git = {k: v for k, v in git.items() if v is not None}
    doc = {
        "apiVersion": "kpt.dev/v1alpha1",
        "kind": "Kptfile",
        "metadata": {"name": name or package_dir.name},
        "upstream": {"type": "git", "git": git},
    }
    package_dir.mkdir(parents=True, exist_ok=True)
    path = package_dir / "Kptfile"
    path.write_text(yaml.safe_dump(doc, sort_keys=False))
    return path


@pytest.fixture
def kpt_tree(tmp_path: Path) -> Dict[str, any]:
    """Create a tree with three top-level packages and one nested package.

    Layout:
        README.md
        a/Kptfile          repo=https://example.com/repo directory=/pkg commit=v1.2.3
        a/deploy.yaml
        b/Kptfile          repo=https://github.com/org/b.git directory=b commit=abc1234
        b/nested/Kptfile   repo=https://github.com/org/nested/ directory=/nested commit=v2
        c/Kptfile          repo=https://github.com/org/c directory=/c commit=v3
        docs/notes.txt

    Returns dict with:
        - path: tree root
        - expressions: expected fetch expression per relative dir
        - order: expected relative dirs in walk order
    """
    root = tmp_path / "tree"
    root.mkdir()
    (root / "README.md").write_text("# packages\n")

    write_kptfile(root / "a", "https://example.com/repo", "/pkg", "v1.2.3")
    (root / "a" / "deploy.yaml").write_text("kind: Deployment\n")
    write_kptfile(root / "b", "https://github.com/org/b.git", "b", "abc1234")
    write_kptfile(root / "b" / "nested", "https://github.com/org/nested/", "/nested", "v2")
    write_kptfile(root / "c", "https://github.com/org/c", "/c", "v3")
    (root / "docs").mkdir()
    (root / "docs" / "notes.txt").write_text("not a package\n")

    return {
        "path": root,
        "expressions": {
            "a": "https://example.com/repo.git/pkg@v1.2.3",
            "b": "https://github.com/org/b.git/b@abc1234",
            "b/nested": "https://github.com/org/nested.git/nested@v2",
            "c": "https://github.com/org/c.git/c@v3",
        },
        "order": ["a", "b", "b/nested", "c"],
    }


class FakeKpt:
    """Recording stand-in for `kpt pkg get`.

    Fetching a destination restores every Kptfile the source tree had at or
    below that destination and drops a FETCHED marker holding the
    expression, which is what a deterministic upstream would produce.
    """

    def __init__(self, source: Path, fail_on: Optional[Set[str]] = None) -> None:
        self.kptfiles = {
            path.relative_to(source).parent.as_posix(): path.read_text()
            for path in source.rglob("Kptfile")
        }
        self.fail_on = fail_on or set()
        self.commands: List[Command] = []
        self.existed_before: List[bool] = []

    @property
    def destinations(self) -> List[str]:
        return [command.args[3] for command in self.commands]

    def __call__(self, command: Command) -> str:
        destination = command.args[3]
        target = command.dir / destination
        self.commands.append(command)
        self.existed_before.append(target.exists())

        if destination in self.fail_on:
            raise CommandError(f"kpt failed for {destination}", output="error: fetch failed")

        target.mkdir(parents=True)
        (target / "FETCHED").write_text(command.args[2])
        for rel, content in self.kptfiles.items():
            if rel == destination or rel.startswith(destination + "/"):
                kptfile = command.dir / rel / "Kptfile"
                kptfile.parent.mkdir(parents=True, exist_ok=True)
                kptfile.write_text(content)
        return f"fetched {command.args[2]}"


@pytest.fixture
def fake_kpt(kpt_tree) -> FakeKpt:
    return FakeKpt(kpt_tree["path"])


def snapshot(root: Path) -> Dict[str, str]:
    """Map every file below root to its content."""
    return {
        path.relative_to(root).as_posix(): path.read_text()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }
