"""Tests for submodule-tracked mode."""

import pytest
from git import Repo

from skillsync.errors import GitOperationFailed, SubmoduleNotFound
from skillsync.models.config import OperatingMode, Project, ProjectKind, RepositoryConfig, SyncConfig
from skillsync.reporter import RecordingReporter
from skillsync.sync.drift import DriftDetector, cleanup
from skillsync.sync.skills import SkillSyncer
from skillsync.sync.submodules import SubmoduleManager
from skillsync.sync.vendor import VendorManager
from skillsync.utils.git_ops import GitAdapter

from gitrepo import commit_files, make_repo

FILE_PROTOCOL = {"protocol.file.allow": "always"}

GITMODULES = """\
[submodule "sources/vue"]
\tpath = sources/vue
\turl = https://github.com/vuejs/docs
[submodule "vendor/vueuse"]
    path   =   vendor/vueuse
\turl = https://github.com/vueuse/skills
"""


class FakeGit:
    """Records submodule calls; fails for URLs listed in ``failing``."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.added = []
        self.removed = []
        self.calls = []

    def add_submodule(self, url, path):
        if url in self.failing:
            raise GitOperationFailed(f"submodule add {url} {path}", exit_code=128, cwd="/root")
        self.added.append(path)

    def remove_submodule(self, path):
        self.removed.append(path)

    def update_submodules(self, remote=False, merge=False):
        self.calls.append(("update", remote, merge))

    def submodule_foreach(self, command):
        self.calls.append(("foreach", command))
        return ""


def _project(name, kind=ProjectKind.VENDOR):
    base = "sources" if kind == ProjectKind.SOURCE else "vendor"
    return Project(name=name, url=f"https://example.com/{name}", kind=kind, path=f"{base}/{name}")


def test_submodule_paths_from_gitmodules(root):
    (root / ".gitmodules").write_text(GITMODULES)
    manager = SubmoduleManager(root, FakeGit())

    assert manager.submodule_paths() == ["sources/vue", "vendor/vueuse"]
    assert manager.is_submodule("vendor/vueuse")
    assert not manager.is_submodule("vendor/other")


def test_submodule_paths_without_gitmodules(root):
    assert SubmoduleManager(root, FakeGit()).submodule_paths() == []


def test_init_adds_only_new_projects(root):
    (root / ".gitmodules").write_text(GITMODULES)
    git = FakeGit()
    manager = SubmoduleManager(root, git)

    result = manager.init_submodules(
        [_project("vue", ProjectKind.SOURCE), _project("vueuse"), _project("tsdown")]
    )

    assert git.added == ["vendor/tsdown"]
    assert result.added == ["tsdown"]
    assert result.existing == ["vue", "vueuse"]
    assert (root / "vendor").is_dir()


def test_init_continues_after_failure(root):
    git = FakeGit(failing={"https://example.com/bad"})
    reporter = RecordingReporter()

    result = SubmoduleManager(root, git).init_submodules(
        [_project("bad"), _project("good")], reporter
    )

    assert result.failed == ["bad"]
    assert result.added == ["good"]
    assert reporter.of("stop")[0].startswith("Failed to add bad: Git command failed")
    assert reporter.of("stop")[1] == "Added: good"


def test_behind_count_missing_submodule(root):
    with pytest.raises(SubmoduleNotFound, match="Submodule not found: vendor/ghost"):
        SubmoduleManager(root, FakeGit()).behind_count("vendor/ghost")


def test_remove_fully_clears_module_store_and_checkout(root):
    (root / ".git" / "modules" / "vendor" / "old").mkdir(parents=True)
    (root / "vendor" / "old").mkdir(parents=True)
    (root / "vendor" / "old" / "README.md").write_text("left behind")
    git = FakeGit()

    SubmoduleManager(root, git).remove_fully("vendor/old")

    assert git.removed == ["vendor/old"]
    assert not (root / ".git" / "modules" / "vendor" / "old").exists()
    assert not (root / "vendor" / "old").exists()


def test_update_and_fetch_all(root):
    git = FakeGit()
    manager = SubmoduleManager(root, git)

    manager.update_all()
    manager.fetch_all()

    assert git.calls == [("update", True, True), ("foreach", "git fetch")]


def test_submodule_mode_updates_through_submodules(root):
    git = FakeGit()
    config = SyncConfig(mode=OperatingMode.SUBMODULE)
    vendors = VendorManager(root, git)

    SkillSyncer(root, config, vendors, git).update_repositories({})

    assert git.calls == [("update", True, True)]


def _host_with_submodules(root, upstreams) -> GitAdapter:
    """Make ``root`` a repository with each upstream added under vendor/."""
    make_repo(root, {"README.md": "# host\n"})
    git = GitAdapter(root, config=FILE_PROTOCOL)
    manager = SubmoduleManager(root, git)
    for name, repo in upstreams.items():
        manager.add(
            Project(name=name, url=repo.working_tree_dir, kind=ProjectKind.VENDOR, path=f"vendor/{name}")
        )
    return git


def test_cleanup_removes_unconfigured_submodule(root, tmp_path):
    keep = make_repo(tmp_path / "a", {"README.md": "a\n"})
    drop = make_repo(tmp_path / "c", {"README.md": "c\n"})
    git = _host_with_submodules(root, {"a": keep, "c": drop})
    config = SyncConfig(
        mode=OperatingMode.SUBMODULE,
        repositories={"a": RepositoryConfig(url=keep.working_tree_dir)},
    )

    result = cleanup(DriftDetector(root, config, git), RecordingReporter(), skip_prompt=True)

    assert result.removed_repositories == ["vendor/c"]
    assert not result.failed
    gitmodules = (root / ".gitmodules").read_text()
    assert "vendor/c" not in gitmodules
    assert "vendor/a" in gitmodules
    indexed = {path for path, _stage in Repo(root).index.entries}
    assert "vendor/c" not in indexed
    assert "vendor/a" in indexed
    assert not (root / ".git" / "modules" / "vendor" / "c").exists()
    assert not (root / "vendor" / "c").exists()
    assert (root / "vendor" / "a" / "README.md").read_text() == "a\n"


def test_submodule_sync_honours_tag_lock(root, upstream):
    tagged = upstream.head.commit.hexsha
    upstream.create_tag("v1")
    commit_files(upstream, {"skills/foo/SKILL.md": "# foo v2\n"}, "v2")
    git = _host_with_submodules(root, {"up": upstream})
    config = SyncConfig(
        mode=OperatingMode.SUBMODULE,
        repositories={
            "up": RepositoryConfig(url=upstream.working_tree_dir, tag="v1", skills={"foo": "foo"})
        },
    )
    syncer = SkillSyncer(root, config, VendorManager(root, git), git)

    assert syncer.sync_vendor_skills(config.repositories) == ["foo"]

    assert f"`{tagged}`" in (root / "skills" / "foo" / "SYNC.md").read_text()
    assert (root / "skills" / "foo" / "SKILL.md").read_text() == "# foo\n"
