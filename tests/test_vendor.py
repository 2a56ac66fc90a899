"""Tests for vendor repository management."""

from pathlib import Path

import pytest
from git import Repo

from skillsync.errors import ProvenanceUnavailable, ResourceNotFound
from skillsync.models.config import ProjectKind, RepositoryConfig
from skillsync.sync.vendor import VendorManager
from skillsync.utils.git_ops import GitAdapter

from gitrepo import commit_files


def _manager(root):
    return VendorManager(root, GitAdapter(root))


def test_ensure_repo_clones_when_absent(root, upstream):
    vendors = _manager(root)
    vendors.ensure_repo("up", RepositoryConfig(url=upstream.working_tree_dir))

    assert (root / "vendor" / "up" / "skills" / "foo" / "SKILL.md").exists()
    assert vendors.get_repo_sha("up") == upstream.head.commit.hexsha


def test_ensure_repo_updates_existing_clone(root, upstream):
    vendors = _manager(root)
    config = RepositoryConfig(url=upstream.working_tree_dir)
    vendors.ensure_repo("up", config)

    new_commit = commit_files(upstream, {"skills/foo/SKILL.md": "# foo v2\n"}, "v2")
    vendors.ensure_repo("up", config)

    assert vendors.get_repo_sha("up") == new_commit.hexsha
    assert (root / "vendor/up/skills/foo/SKILL.md").read_text() == "# foo v2\n"


def test_update_discards_local_changes(root, upstream):
    vendors = _manager(root)
    config = RepositoryConfig(url=upstream.working_tree_dir)
    vendors.ensure_repo("up", config)
    (root / "vendor/up/README.md").write_text("local edit\n")

    vendors.ensure_repo("up", config)

    assert (root / "vendor/up/README.md").read_text() == "# upstream\n"


def test_tag_lock_wins_over_branch(root, upstream):
    tagged = upstream.head.commit.hexsha
    upstream.create_tag("v1.0.0")
    commit_files(upstream, {"README.md": "newer\n"}, "newer")

    vendors = _manager(root)
    vendors.ensure_repo(
        "up", RepositoryConfig(url=upstream.working_tree_dir, tag="v1.0.0", branch="main")
    )

    assert vendors.get_repo_sha("up") == tagged


def test_commit_lock(root, upstream):
    first = upstream.head.commit.hexsha
    commit_files(upstream, {"README.md": "newer\n"}, "newer")

    vendors = _manager(root)
    vendors.ensure_repo("up", RepositoryConfig(url=upstream.working_tree_dir, commit=first))

    assert vendors.get_repo_sha("up") == first


def test_force_update_recreates_clone(root, upstream):
    vendors = _manager(root)
    repos = {"up": RepositoryConfig(url=upstream.working_tree_dir)}
    vendors.ensure_all(repos)
    stray = root / "vendor/up/untracked.txt"
    stray.write_text("left over")

    vendors.force_update_all(repos)

    assert not stray.exists()
    assert vendors.get_repo_sha("up") == upstream.head.commit.hexsha


def test_ensure_sources_clones_under_sources(root, upstream):
    vendors = _manager(root)
    vendors.ensure_sources({"docs": upstream.working_tree_dir})

    path = vendors.repo_path("docs", ProjectKind.SOURCE)
    assert path == root / "sources" / "docs"
    assert Repo(path).head.commit.hexsha == upstream.head.commit.hexsha


def test_get_repo_sha_missing_repo(root):
    with pytest.raises(ResourceNotFound, match="Vendor repository not found: ghost"):
        _manager(root).get_repo_sha("ghost")


def test_get_repo_sha_not_a_repo(root):
    (root / "vendor" / "plain").mkdir(parents=True)
    with pytest.raises(ProvenanceUnavailable, match="Cannot get SHA for plain"):
        _manager(root).get_repo_sha("plain")


def _dirty_host(tmp_path, upstream) -> Path:
    """A project that is itself a clone, with an uncommitted edit."""
    host = Path(Repo.clone_from(upstream.working_tree_dir, tmp_path / "host").working_tree_dir)
    (host / "README.md").write_text("work in progress\n")
    return host


def test_stray_vendor_directory_leaves_host_untouched(tmp_path, upstream):
    host = _dirty_host(tmp_path, upstream)
    (host / "vendor" / "up").mkdir(parents=True)
    (host / "vendor" / "up" / "notes.txt").write_text("not a clone\n")
    vendors = _manager(host)

    with pytest.raises(ResourceNotFound, match="Not a git clone: vendor/up"):
        vendors.ensure_repo("up", RepositoryConfig(url=upstream.working_tree_dir))
    with pytest.raises(ProvenanceUnavailable, match="Cannot get SHA for up"):
        vendors.get_repo_sha("up")

    assert (host / "README.md").read_text() == "work in progress\n"


def test_empty_vendor_directory_is_cloned_into(tmp_path, upstream):
    host = _dirty_host(tmp_path, upstream)
    (host / "vendor" / "up").mkdir(parents=True)
    vendors = _manager(host)

    vendors.ensure_repo("up", RepositoryConfig(url=upstream.working_tree_dir))

    assert (host / "vendor" / "up" / ".git").exists()
    assert vendors.get_repo_sha("up") == upstream.head.commit.hexsha
    assert (host / "README.md").read_text() == "work in progress\n"
