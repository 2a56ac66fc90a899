"""Drift detection — find clones and skills that configuration no longer declares.

Two independent checks:
1. Repository drift: clones on disk (or registered submodules) that match no
   configured source or vendor.
2. Skill drift: directories under ``skills/`` that are neither produced by a
   source or vendor nor listed as manually maintained.

``cleanup`` reports both and removes the extras after confirmation.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from skillsync.errors import SkillSyncError, format_error
from skillsync.models.config import OperatingMode, SyncConfig, build_projects
from skillsync.models.records import CleanupResult, DriftReport
from skillsync.sync.skills import SKILLS_DIR
from skillsync.sync.submodules import SubmoduleManager
from skillsync.utils.git_ops import GitAdapter

if TYPE_CHECKING:
    from skillsync.reporter import Reporter

logger = logging.getLogger(__name__)

CLONE_DIRS = ("sources", "vendor")


class DriftDetector:
    """Compares the configured repositories and skills with what is on disk."""

    def __init__(self, root: str | Path, config: SyncConfig, git: GitAdapter):
        self.root = Path(root)
        self.config = config
        self.git = git
        self.submodules = SubmoduleManager(self.root, git)

    # -- repositories ---------------------------------------------------------

    def expected_repository_paths(self) -> set[str]:
        return {project.path for project in build_projects(self.config)}

    def existing_repository_paths(self) -> list[str]:
        """Root-relative clone paths, from .gitmodules or a directory listing."""
        if self.config.mode == OperatingMode.SUBMODULE:
            return self.submodules.submodule_paths()

        paths = []
        for base in CLONE_DIRS:
            base_dir = self.root / base
            if not base_dir.is_dir():
                continue
            paths.extend(
                f"{base}/{entry.name}" for entry in sorted(base_dir.iterdir()) if entry.is_dir()
            )
        return paths

    def extra_repositories(self) -> list[str]:
        expected = self.expected_repository_paths()
        return [path for path in self.existing_repository_paths() if path not in expected]

    def remove_repository(self, path: str) -> None:
        if self.config.mode == OperatingMode.SUBMODULE:
            self.submodules.remove_fully(path)
        else:
            shutil.rmtree(self.root / path)

    # -- skills ---------------------------------------------------------------

    def expected_skill_names(self) -> set[str]:
        """Sources (one skill each), vendor output names, and manual skills."""
        expected = set(self.config.sources)
        for repo in self.config.repositories.values():
            expected.update(repo.skills.values())
        expected.update(self.config.manual)
        return expected

    def existing_skill_names(self) -> list[str]:
        skills_dir = self.root / SKILLS_DIR
        if not skills_dir.is_dir():
            return []
        return [entry.name for entry in sorted(skills_dir.iterdir()) if entry.is_dir()]

    def extra_skills(self) -> list[str]:
        expected = self.expected_skill_names()
        return [name for name in self.existing_skill_names() if name not in expected]

    def remove_skill(self, name: str) -> None:
        shutil.rmtree(self.root / SKILLS_DIR / name)

    def detect(self) -> DriftReport:
        return DriftReport(
            extra_repositories=self.extra_repositories(),
            extra_skills=self.extra_skills(),
        )


def cleanup(
    detector: DriftDetector,
    reporter: Reporter,
    skip_prompt: bool = False,
) -> CleanupResult:
    """Report drift and remove extras after confirmation.

    Each phase asks separately; cancelling one leaves the other untouched.
    A removal that fails is reported and the remaining items still run.
    """
    result = CleanupResult()
    cleanup_repositories(detector, reporter, skip_prompt, result)

    extra_skills = detector.extra_skills()
    if extra_skills:
        reporter.warn(f"Found {len(extra_skills)} skill(s) not in configuration:")
        for name in extra_skills:
            reporter.info(f"  - {SKILLS_DIR}/{name}")
        if _confirm(reporter, "Remove these extra skills?", skip_prompt, result):
            for name in extra_skills:
                if _remove(reporter, detector.remove_skill, name, f"{SKILLS_DIR}/{name}", result):
                    result.removed_skills.append(name)
        else:
            result.skipped.extend(f"{SKILLS_DIR}/{name}" for name in extra_skills)

    return result


def cleanup_repositories(
    detector: DriftDetector,
    reporter: Reporter,
    skip_prompt: bool = False,
    result: CleanupResult | None = None,
) -> CleanupResult:
    """Report and remove clones or submodules that configuration no longer declares."""
    if result is None:
        result = CleanupResult()

    extra_repos = detector.extra_repositories()
    if not extra_repos:
        return result

    reporter.warn(f"Found {len(extra_repos)} repository(ies) not in configuration:")
    for path in extra_repos:
        reporter.info(f"  - {path}")
    if _confirm(reporter, "Remove these extra repositories?", skip_prompt, result):
        for path in extra_repos:
            if _remove(reporter, detector.remove_repository, path, path, result):
                result.removed_repositories.append(path)
    else:
        result.skipped.extend(extra_repos)
    return result


def _confirm(reporter: Reporter, message: str, skip_prompt: bool, result: CleanupResult) -> bool:
    if skip_prompt:
        return True
    answer = reporter.confirm(message, default=True)
    if answer is None:
        reporter.warn("Cancelled")
        result.cancelled = True
        return False
    return answer


def _remove(reporter: Reporter, remove, key: str, label: str, result: CleanupResult) -> bool:
    reporter.start(f"Removing: {label}")
    try:
        remove(key)
    except (SkillSyncError, OSError) as e:
        logger.debug("Removing %s failed", label, exc_info=True)
        result.failed.append(label)
        reporter.stop(f"Failed to remove {label}: {format_error(e)}")
        return False
    reporter.stop(f"Removed: {label}")
    return True
