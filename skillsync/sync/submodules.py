"""Submodule-tracked mode — clones registered in the host's .gitmodules."""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from skillsync.errors import SkillSyncError, SubmoduleNotFound, format_error
from skillsync.models.config import Project
from skillsync.utils.git_ops import GitAdapter

if TYPE_CHECKING:
    from skillsync.reporter import Reporter

logger = logging.getLogger(__name__)

_PATH_RE = re.compile(r"^\s*path\s*=\s*(.+?)\s*$", re.MULTILINE)


@dataclass
class InitResult:
    """Outcome of registering configured projects as submodules."""

    added: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


class SubmoduleManager:
    """Reads and mutates the host repository's submodules."""

    def __init__(self, root: str | Path, git: GitAdapter):
        self.root = Path(root)
        self.git = git

    @property
    def gitmodules(self) -> Path:
        return self.root / ".gitmodules"

    def submodule_paths(self) -> list[str]:
        """Paths declared in .gitmodules, in file order. Empty if there is none."""
        if not self.gitmodules.is_file():
            return []
        return _PATH_RE.findall(self.gitmodules.read_text())

    def is_submodule(self, path: str) -> bool:
        return path in self.submodule_paths()

    def behind_count(self, path: str) -> int:
        if not (self.root / path).exists():
            raise SubmoduleNotFound(path, str(self.root))
        return self.git.for_path(self.root / path).get_behind_count()

    def add(self, project: Project) -> None:
        (self.root / project.path).parent.mkdir(parents=True, exist_ok=True)
        self.git.add_submodule(project.url, project.path)

    def remove_fully(self, path: str) -> None:
        """Deinit and unregister a submodule, then drop its .git/modules store."""
        self.git.remove_submodule(path)
        modules_path = self.root / ".git" / "modules" / path
        if modules_path.exists():
            shutil.rmtree(modules_path)
        leftover = self.root / path
        if leftover.exists():
            shutil.rmtree(leftover)

    def update_all(self) -> None:
        self.git.update_submodules(remote=True, merge=True)

    def fetch_all(self) -> None:
        self.git.submodule_foreach("git fetch")

    def init_submodules(
        self,
        projects: list[Project],
        reporter: Reporter | None = None,
    ) -> InitResult:
        """Register every project not yet in .gitmodules.

        A project that fails to add is reported and the rest continue.
        """
        result = InitResult()
        registered = set(self.submodule_paths())

        for project in projects:
            if project.path in registered:
                result.existing.append(project.name)
                continue

            if reporter:
                reporter.start(f"Adding submodule: {project.name}")
            try:
                self.add(project)
            except SkillSyncError as e:
                logger.debug("Adding %s failed", project.path, exc_info=True)
                result.failed.append(project.name)
                if reporter:
                    reporter.stop(f"Failed to add {project.name}: {format_error(e)}")
                continue
            result.added.append(project.name)
            if reporter:
                reporter.stop(f"Added: {project.name}")

        return result
