"""Vendor repositories — keep local clones in step with their upstreams.

Clones under ``vendor/`` (and ``sources/``) are disposable caches of upstream
content. Updating one fetches every ref and tag, then hard-resets the working
tree, so local edits inside a clone are always discarded.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from skillsync.errors import GitOperationFailed, ProvenanceUnavailable, ResourceNotFound
from skillsync.models.config import ProjectKind, RepositoryConfig, project_path
from skillsync.sync.refs import resolve_target_ref
from skillsync.utils.git_ops import GitAdapter

logger = logging.getLogger(__name__)


class VendorManager:
    """Clones, updates, and re-clones repositories one at a time."""

    def __init__(self, root: str | Path, git: GitAdapter):
        self.root = Path(root)
        self.git = git

    def repo_path(self, name: str, kind: ProjectKind = ProjectKind.VENDOR) -> Path:
        return self.root / project_path(name, kind)

    def ensure_all(self, repositories: dict[str, RepositoryConfig]) -> None:
        """Clone or update every repository, in declaration order."""
        for name, config in repositories.items():
            self.ensure_repo(name, config)

    def ensure_sources(self, sources: dict[str, str]) -> None:
        """Clone or update plain source repositories under ``sources/``."""
        for name, url in sources.items():
            self.ensure_repo(name, RepositoryConfig(url=url), kind=ProjectKind.SOURCE)

    def force_update_all(self, repositories: dict[str, RepositoryConfig]) -> None:
        """Delete each clone and clone it again.

        Recovers from upstream history rewrites that a fetch and reset
        cannot repair.
        """
        for name, config in repositories.items():
            path = self.repo_path(name)
            if path.exists():
                logger.info("Removing %s for a fresh clone", path)
                shutil.rmtree(path)
            self.ensure_repo(name, config)

    def ensure_repo(
        self,
        name: str,
        config: RepositoryConfig,
        kind: ProjectKind = ProjectKind.VENDOR,
    ) -> None:
        """Clone the repository if absent, otherwise fetch and reset it."""
        path = self.repo_path(name, kind)
        # An empty directory (an uninitialized submodule, say) is cloned into.
        if not path.exists() or not any(path.iterdir()):
            self._clone(config, path)
        else:
            self._update(config, path)

    def pin(self, name: str, config: RepositoryConfig) -> None:
        """Fetch and reset an existing clone to its locked ref."""
        self._update(config, self.repo_path(name))

    def get_repo_sha(self, name: str) -> str:
        """Return the HEAD SHA of a vendor clone."""
        path = self.repo_path(name)
        if not path.exists():
            raise ResourceNotFound(f"Vendor repository not found: {name}", str(path))
        repo_git = self.git.for_path(path)
        if not repo_git.is_repo_root():
            raise ProvenanceUnavailable(name)
        try:
            sha = repo_git.get_sha()
        except GitOperationFailed as e:
            raise ProvenanceUnavailable(name) from e
        if not sha:
            raise ProvenanceUnavailable(name)
        return sha

    def _clone(self, config: RepositoryConfig, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.git.clone(config.url, path.resolve())

        # A fresh clone sits on the default branch; honour any ref lock.
        if config.is_locked:
            self._update(config, path)

    def _update(self, config: RepositoryConfig, path: Path) -> None:
        repo_git = self.git.for_path(path)
        if not repo_git.is_repo_root():
            relative = path.relative_to(self.root).as_posix()
            raise ResourceNotFound(f"Not a git clone: {relative}", str(path))
        repo_git.fetch("--tags", "--force")
        ref = resolve_target_ref(config, repo_git)
        logger.info("Resetting %s to %s", path.name, ref)
        repo_git.reset_hard(ref)
