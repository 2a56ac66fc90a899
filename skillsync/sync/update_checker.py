"""Update checker — how far each local clone is behind its upstream.

The check is best effort: a repository whose fetch or count fails is logged
and skipped, never reported as behind.
"""

from __future__ import annotations

import logging
from pathlib import Path

from skillsync.errors import SkillSyncError
from skillsync.models.config import OperatingMode, ProjectKind, SyncConfig, build_projects
from skillsync.models.records import UpdateStatus
from skillsync.sync.submodules import SubmoduleManager
from skillsync.utils.git_ops import GitAdapter

logger = logging.getLogger(__name__)


def fetch_all(root: str | Path, config: SyncConfig, git: GitAdapter) -> None:
    """Fetch every present clone.

    In submodule mode a single ``submodule foreach`` runs and its failure
    propagates. In plain mode each clone is fetched on its own.
    """
    root = Path(root)
    if config.mode == OperatingMode.SUBMODULE:
        SubmoduleManager(root, git).fetch_all()
        return

    for project in build_projects(config):
        repo_git = _clone_git(root, project.path, git)
        if repo_git is None:
            continue
        try:
            repo_git.fetch()
        except SkillSyncError:
            logger.debug("Fetching %s failed", project.path, exc_info=True)


def check_updates(
    root: str | Path,
    config: SyncConfig,
    git: GitAdapter,
    fetch: bool = True,
) -> list[UpdateStatus]:
    """Return the sources and vendors that are behind, in declaration order."""
    root = Path(root)
    if fetch:
        fetch_all(root, config, git)

    updates: list[UpdateStatus] = []
    for project in build_projects(config):
        repo_git = _clone_git(root, project.path, git)
        if repo_git is None:
            continue

        try:
            behind = repo_git.get_behind_count()
        except (SkillSyncError, ValueError):
            logger.debug("Could not check %s for updates", project.path, exc_info=True)
            continue

        if behind <= 0:
            continue

        skills: tuple[str, ...] = ()
        if project.kind == ProjectKind.VENDOR:
            skills = tuple(config.repositories[project.name].skills.values())
        updates.append(
            UpdateStatus(name=project.name, kind=project.kind, behind=behind, skills=skills)
        )

    return updates


def _clone_git(root: Path, path: str, git: GitAdapter) -> GitAdapter | None:
    """Adapter for a present clone, or None when ``path`` is not its own repository."""
    if not (root / path).exists():
        return None
    repo_git = git.for_path(root / path)
    if not repo_git.is_repo_root():
        logger.debug("Skipping %s: not a git clone", path)
        return None
    return repo_git
