"""Result and provenance records produced by sync, check, and cleanup."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from skillsync.models.config import ProjectKind


@dataclass
class SyncRecord:
    """Provenance stamp written as SYNC.md next to every synced skill."""

    vendor: str
    skill_path: str  # Repo-relative, e.g. "skills/vueuse-functions"
    sha: str
    synced: str = ""  # YYYY-MM-DD, UTC

    def __post_init__(self) -> None:
        if not self.synced:
            self.synced = datetime.now(timezone.utc).strftime("%Y-%m-%d")

    @property
    def source(self) -> str:
        return f"vendor/{self.vendor}/{self.skill_path}"

    def render(self) -> str:
        return (
            "# Sync Info\n"
            "\n"
            f"- **Source:** `{self.source}`\n"
            f"- **Git SHA:** `{self.sha}`\n"
            f"- **Synced:** {self.synced}\n"
        )


@dataclass
class UpdateStatus:
    """A repository that is behind its upstream."""

    name: str
    kind: ProjectKind
    behind: int
    skills: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        if self.skills:
            return f"{self.name} ({', '.join(self.skills)})"
        return self.name

    def summary(self) -> str:
        return f"{self.label} ({self.kind.value}): {self.behind} commits behind"


@dataclass
class DriftReport:
    """Configured vs. observed repositories and skills."""

    extra_repositories: list[str] = field(default_factory=list)  # Root-relative paths
    extra_skills: list[str] = field(default_factory=list)  # Names under skills/

    @property
    def has_drift(self) -> bool:
        return bool(self.extra_repositories or self.extra_skills)


@dataclass
class CleanupResult:
    """What a cleanup run removed, failed to remove, or skipped."""

    removed_repositories: list[str] = field(default_factory=list)
    removed_skills: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)  # Detected but kept
    cancelled: bool = False

    @property
    def has_changes(self) -> bool:
        return bool(self.removed_repositories or self.removed_skills)
