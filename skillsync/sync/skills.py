"""Skill sync — copy skill directories out of vendor clones into ``skills/``.

Each output directory is owned by the syncer: on every run it is deleted,
recreated from the vendor's current contents, and stamped with a license and
SYNC.md. Local edits to a synced skill are overwritten; a diff against the
host repository only produces a warning.

The sequence is not transactional. A crash mid-copy leaves a partial
directory behind, and re-running the sync repairs it.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import TYPE_CHECKING

from skillsync.errors import GitOperationFailed, ResourceNotFound
from skillsync.models.config import OperatingMode, RepositoryConfig, SyncConfig
from skillsync.models.records import SyncRecord
from skillsync.sync.provenance import copy_license, write_sync_record
from skillsync.sync.vendor import VendorManager
from skillsync.utils.git_ops import GitAdapter

if TYPE_CHECKING:
    from skillsync.reporter import Reporter

logger = logging.getLogger(__name__)

SKILLS_DIR = "skills"


class SkillSyncer:
    """Syncs configured skills from vendor clones into the local skills tree."""

    def __init__(
        self,
        root: str | Path,
        config: SyncConfig,
        vendors: VendorManager,
        git: GitAdapter,
        reporter: Reporter | None = None,
    ):
        self.root = Path(root)
        self.config = config
        self.vendors = vendors
        self.git = git
        self.reporter = reporter
        self._root_is_repo: bool | None = None

    @property
    def skills_dir(self) -> Path:
        return self.root / SKILLS_DIR

    def update_repositories(self, repositories: dict[str, RepositoryConfig]) -> None:
        """Bring every clone up to date before syncing."""
        if self.config.mode == OperatingMode.SUBMODULE:
            from skillsync.sync.submodules import SubmoduleManager

            SubmoduleManager(self.root, self.git).update_all()
            # Submodule update follows the remote branch; ref locks still apply.
            for name, config in repositories.items():
                if config.is_locked:
                    self.vendors.pin(name, config)
        else:
            self.vendors.ensure_all(repositories)

    def sync_vendor_skills(
        self,
        repositories: dict[str, RepositoryConfig],
        update: bool = True,
    ) -> list[str]:
        """Update clones (unless ``update`` is False), then sync every vendor with skills.

        Stops at the first failure. Returns the output skill names written.
        """
        if update:
            self.update_repositories(repositories)

        synced: list[str] = []
        for name, config in repositories.items():
            if not config.has_skills:
                logger.debug("Skipping %s: no skills configured", name)
                continue
            synced.extend(self.sync_vendor(name, config))
        return synced

    def sync_vendor(self, name: str, config: RepositoryConfig) -> list[str]:
        """Sync every skill of one vendor repository."""
        vendor_path = self.vendors.repo_path(name)
        vendor_skills_path = vendor_path / config.skills_path

        if not vendor_path.exists():
            raise ResourceNotFound(f"Vendor repository not found: {name}", str(vendor_path))
        if not vendor_skills_path.is_dir():
            raise ResourceNotFound(
                f"No {config.skills_path} directory in {name}", str(vendor_skills_path)
            )

        sha = self.vendors.get_repo_sha(name)

        synced = []
        for source_name, output_name in config.skills.items():
            self.sync_skill(
                name,
                vendor_skills_path,
                source_name,
                output_name,
                sha,
                skills_path=config.skills_path,
            )
            synced.append(output_name)
        return synced

    def sync_skill(
        self,
        vendor_name: str,
        vendor_skills_path: Path,
        source_name: str,
        output_name: str,
        sha: str,
        skills_path: str = SKILLS_DIR,
    ) -> Path:
        """Replace ``skills/<output_name>`` with a fresh copy of the vendor skill."""
        source_path = vendor_skills_path / source_name
        output_path = self.skills_dir / output_name

        # Checked before anything is deleted so a valid previous copy survives.
        if not source_path.is_dir():
            raise ResourceNotFound(
                f"Skill not found: {vendor_name}/{skills_path}/{source_name}", str(source_path)
            )

        if output_path.exists() and self.has_local_modifications(output_path):
            self._warn(f"Skill '{output_name}' has local modifications, will be overwritten")

        if output_path.exists():
            shutil.rmtree(output_path)
        output_path.mkdir(parents=True)

        copied = copy_directory(source_path, output_path)
        copy_license(self.vendors.repo_path(vendor_name), output_path)
        write_sync_record(
            output_path,
            SyncRecord(vendor=vendor_name, skill_path=f"{skills_path}/{source_name}", sha=sha),
        )
        logger.info("Synced %s/%s -> skills/%s (%d files)", vendor_name, source_name, output_name, copied)
        return output_path

    def has_local_modifications(self, skill_path: Path) -> bool:
        """True if the host repository shows a diff under ``skill_path``."""
        if self._root_is_repo is None:
            self._root_is_repo = self.git.check_is_repo()
        if not self._root_is_repo:
            return False

        relative = skill_path.relative_to(self.root).as_posix()
        try:
            return bool(self.git.diff([relative]).strip())
        except GitOperationFailed:
            logger.debug("Could not diff %s", relative, exc_info=True)
            return False

    def _warn(self, message: str) -> None:
        logger.debug(message)
        if self.reporter is not None:
            self.reporter.warn(message)


def copy_directory(source: Path, target: Path) -> int:
    """Copy every file under ``source`` into ``target``, keeping relative paths.

    Only file contents are copied. Returns the number of files written.
    """
    count = 0
    for path in sorted(source.rglob("*")):
        if not path.is_file():
            continue
        destination = target / path.relative_to(source)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(path, destination)
        count += 1
    return count
