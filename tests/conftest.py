from __future__ import annotations

import textwrap
from pathlib import Path

import pytest


def make_repo(root: Path, name: str, *, git: bool = True) -> Path:
    path = root / name
    path.mkdir(parents=True)
    if git:
        (path / ".git").mkdir()
    return path


def write_script(path: Path, body: str, *, executable: bool = True) -> Path:
    path.write_text("#!/bin/sh\n" + textwrap.dedent(body).lstrip(), encoding="utf-8")
    if executable:
        path.chmod(0o755)
    return path


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """A root holding two repositories and one plain directory."""

    root = tmp_path / "workspace"
    root.mkdir()
    make_repo(root, "repoA")
    make_repo(root, "repoB")
    make_repo(root, "notes", git=False)
    return root


@pytest.fixture
def bin_dir(tmp_path: Path) -> Path:
    path = tmp_path / "bin"
    path.mkdir()
    return path
