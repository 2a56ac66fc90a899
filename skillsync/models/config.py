"""Configuration models — repositories, sources, and the project set derived from them.

The configuration is loaded once from ``skillsync.yaml`` and passed explicitly
into every component. All models are frozen; nothing looks configuration up
from module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from skillsync.errors import ConfigError

CONFIG_FILE = "skillsync.yaml"
DEFAULT_SKILLS_PATH = "skills"


class OperatingMode(Enum):
    """How local clones are tracked by the host repository."""

    PLAIN = "plain"  # Unregistered clones under vendor/ and sources/
    SUBMODULE = "submodule"  # Registered in the host's .gitmodules


class ProjectKind(Enum):
    """Role of a cloned repository."""

    SOURCE = "source"  # Upstream docs/code a skill is generated from
    VENDOR = "vendor"  # Already-packaged skills copied out verbatim


@dataclass(frozen=True)
class RepositoryConfig:
    """One upstream vendor repository.

    Ref lock priority is commit > tag > branch > the remote's default branch.
    An empty ``skills`` mapping vendors the repository without extracting
    anything from it.
    """

    url: str
    commit: str | None = None
    tag: str | None = None
    branch: str | None = None
    skills_path: str = DEFAULT_SKILLS_PATH
    skills: dict[str, str] = field(default_factory=dict)  # source name -> output name
    official: bool = False

    @property
    def has_skills(self) -> bool:
        return bool(self.skills)

    @property
    def is_locked(self) -> bool:
        return bool(self.commit or self.tag or self.branch)


@dataclass(frozen=True)
class SyncConfig:
    """Everything the core needs to know about the managed repositories."""

    repositories: dict[str, RepositoryConfig] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)  # name -> url
    manual: tuple[str, ...] = ()
    mode: OperatingMode = OperatingMode.PLAIN
    proxy: str | None = None


@dataclass(frozen=True)
class Project:
    """A repository that should be present as a local clone."""

    name: str
    url: str
    kind: ProjectKind
    path: str  # Relative to the root, e.g. "vendor/vueuse"


def project_path(name: str, kind: ProjectKind) -> str:
    """Root-relative path of a clone: ``sources/<name>`` or ``vendor/<name>``."""
    base = "sources" if kind == ProjectKind.SOURCE else "vendor"
    return f"{base}/{name}"


def build_projects(config: SyncConfig) -> list[Project]:
    """Derive the project list: sources first, then vendors, in declaration order."""
    projects = [
        Project(name=name, url=url, kind=ProjectKind.SOURCE, path=project_path(name, ProjectKind.SOURCE))
        for name, url in config.sources.items()
    ]
    projects.extend(
        Project(
            name=name,
            url=repo.url,
            kind=ProjectKind.VENDOR,
            path=project_path(name, ProjectKind.VENDOR),
        )
        for name, repo in config.repositories.items()
    )
    return projects


def load_config(path: str | Path) -> SyncConfig:
    """Load and validate a sync configuration from a YAML file."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return parse_config(data or {})


def parse_config(data: dict) -> SyncConfig:
    """Build a ``SyncConfig`` from already-parsed data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    mode_value = data.get("mode", OperatingMode.PLAIN.value)
    try:
        mode = OperatingMode(mode_value)
    except ValueError:
        valid = ", ".join(m.value for m in OperatingMode)
        raise ConfigError(f"Invalid mode '{mode_value}'. Must be one of: {valid}") from None

    sources = _string_mapping(data.get("sources") or {}, "sources")

    repositories: dict[str, RepositoryConfig] = {}
    for name, repo_data in (data.get("repositories") or {}).items():
        repositories[str(name)] = _parse_repository(str(name), repo_data)

    manual = data.get("manual") or []
    if not isinstance(manual, list):
        raise ConfigError("'manual' must be a list of skill names")

    proxy = data.get("proxy")
    return SyncConfig(
        repositories=repositories,
        sources=sources,
        manual=tuple(str(m) for m in manual),
        mode=mode,
        proxy=str(proxy) if proxy else None,
    )


def _parse_repository(name: str, data) -> RepositoryConfig:
    if isinstance(data, str):
        return RepositoryConfig(url=data)
    if not isinstance(data, dict):
        raise ConfigError(f"Repository '{name}' must be a mapping or a URL")

    # "source" and "skillsPath" are accepted for older configuration files
    url = data.get("url") or data.get("source")
    if not url:
        raise ConfigError(f"Repository '{name}' is missing 'url'")

    skills_path = data.get("skills_path") or data.get("skillsPath") or DEFAULT_SKILLS_PATH

    return RepositoryConfig(
        url=str(url),
        commit=_optional_str(data.get("commit")),
        tag=_optional_str(data.get("tag")),
        branch=_optional_str(data.get("branch")),
        skills_path=str(skills_path),
        skills=_string_mapping(data.get("skills") or {}, f"repositories.{name}.skills"),
        official=bool(data.get("official", False)),
    )


def _string_mapping(value, where: str) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{where}' must be a mapping")
    return {str(k): str(v) for k, v in value.items()}


def _optional_str(value) -> str | None:
    return str(value) if value not in (None, "") else None
