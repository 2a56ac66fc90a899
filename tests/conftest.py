"""Shared fixtures: a vendor-style upstream repository and a project root."""

from pathlib import Path

import pytest
from git import Repo

from gitrepo import make_repo


@pytest.fixture
def upstream(tmp_path) -> Repo:
    """An upstream with one skill and a LICENSE.txt, on branch ``main``."""
    return make_repo(
        tmp_path / "upstream",
        {
            "README.md": "# upstream\n",
            "LICENSE.txt": "MIT License\n",
            "skills/foo/SKILL.md": "# foo\n",
            "skills/foo/references/guide.md": "guide\n",
        },
    )


@pytest.fixture
def root(tmp_path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path
