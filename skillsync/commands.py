"""Command implementations — the phases behind each CLI subcommand.

Each function takes parsed arguments and a reporter, runs its phases in
order, and returns True on success. Failures are reported as one line and
end the command; they are not raised to the caller.
"""

from __future__ import annotations

from pathlib import Path

from skillsync.errors import SkillSyncError, format_error
from skillsync.models.config import OperatingMode, SyncConfig, build_projects
from skillsync.reporter import Reporter
from skillsync.sync.drift import DriftDetector, cleanup, cleanup_repositories
from skillsync.sync.skills import SkillSyncer
from skillsync.sync.submodules import SubmoduleManager
from skillsync.sync.update_checker import check_updates, fetch_all
from skillsync.sync.vendor import VendorManager
from skillsync.utils.git_ops import GitAdapter


def _git(root: Path, config: SyncConfig, proxy: str | None) -> GitAdapter:
    return GitAdapter(root, proxy=proxy or config.proxy)


def init_repositories(
    root: str | Path,
    config: SyncConfig,
    reporter: Reporter,
    skip_prompt: bool = False,
    proxy: str | None = None,
) -> bool:
    """Make every configured source and vendor present locally."""
    root = Path(root)
    git = _git(root, config, proxy)

    if config.mode == OperatingMode.SUBMODULE:
        return _init_submodules(root, config, git, reporter, skip_prompt)

    reporter.start("Cloning repositories...")
    try:
        vendors = VendorManager(root, git)
        vendors.ensure_sources(config.sources)
        vendors.ensure_all(config.repositories)
    except SkillSyncError as e:
        reporter.stop(f"Failed to initialize: {format_error(e)}")
        return False
    reporter.stop("Repositories ready")
    reporter.success("All repositories initialized")
    return True


def _init_submodules(
    root: Path,
    config: SyncConfig,
    git: GitAdapter,
    reporter: Reporter,
    skip_prompt: bool,
) -> bool:
    removal = cleanup_repositories(DriftDetector(root, config, git), reporter, skip_prompt)
    if removal.cancelled:
        return True

    submodules = SubmoduleManager(root, git)
    projects = build_projects(config)
    if all(submodules.is_submodule(p.path) for p in projects):
        reporter.info("All submodules already initialized")
        return True

    result = submodules.init_submodules(projects, reporter)
    reporter.success("Submodules initialized")
    if result.existing:
        reporter.info(f"Already initialized: {', '.join(result.existing)}")
    return not result.failed


def ensure_vendor_repositories(
    root: str | Path,
    config: SyncConfig,
    reporter: Reporter,
    force: bool = False,
    proxy: str | None = None,
) -> bool:
    """Clone or update vendor repositories; ``force`` re-clones them all."""
    root = Path(root)
    vendors = VendorManager(root, _git(root, config, proxy))

    reporter.start("Ensuring vendor repositories...")
    try:
        if force:
            vendors.force_update_all(config.repositories)
        else:
            vendors.ensure_all(config.repositories)
    except SkillSyncError as e:
        reporter.stop(f"Failed to ensure repositories: {format_error(e)}")
        return False
    reporter.stop("Vendor repositories ready")
    reporter.success("All vendor repositories synced")
    return True


def sync_skills(
    root: str | Path,
    config: SyncConfig,
    reporter: Reporter,
    proxy: str | None = None,
) -> bool:
    """Update every repository, then copy the configured skills out."""
    root = Path(root)
    git = _git(root, config, proxy)
    syncer = SkillSyncer(root, config, VendorManager(root, git), git, reporter)

    reporter.start("Updating vendor repositories...")
    try:
        syncer.update_repositories(config.repositories)
    except SkillSyncError as e:
        reporter.stop(f"Failed to update: {format_error(e)}")
        return False
    reporter.stop("Vendor repositories updated")
    reporter.success("All repositories updated")

    reporter.start("Syncing skills...")
    try:
        synced = syncer.sync_vendor_skills(config.repositories, update=False)
    except (SkillSyncError, OSError) as e:
        reporter.stop(f"Failed to sync: {format_error(e)}")
        return False
    reporter.stop(f"Skills synced ({len(synced)})")
    reporter.success("All skills synced")
    return True


def report_updates(
    root: str | Path,
    config: SyncConfig,
    reporter: Reporter,
    proxy: str | None = None,
) -> bool:
    """Fetch, then list every repository that is behind upstream."""
    root = Path(root)
    git = _git(root, config, proxy)

    reporter.start("Fetching remote changes...")
    try:
        fetch_all(root, config, git)
    except SkillSyncError as e:
        reporter.stop(f"Failed to fetch: {format_error(e)}")
        return False
    reporter.stop("Fetched remote changes")

    updates = check_updates(root, config, git, fetch=False)
    if not updates:
        reporter.success("All repositories are up to date")
        return True

    reporter.info("Updates available:")
    for update in updates:
        reporter.info(f"  {update.summary()}")
    return True


def remove_drift(
    root: str | Path,
    config: SyncConfig,
    reporter: Reporter,
    skip_prompt: bool = False,
) -> bool:
    """Remove clones and skills that configuration no longer declares."""
    root = Path(root)
    detector = DriftDetector(root, config, _git(root, config, None))
    result = cleanup(detector, reporter, skip_prompt=skip_prompt)

    if result.has_changes:
        reporter.success("Cleanup completed")
    elif not (result.failed or result.skipped):
        reporter.success("Everything is clean")
    return not result.failed
