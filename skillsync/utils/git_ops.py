"""Git operations — a thin adapter over GitPython bound to one working directory."""

from __future__ import annotations

import logging
from pathlib import Path

from git import Git
from git.exc import CommandError

from skillsync.errors import GitOperationFailed

logger = logging.getLogger(__name__)


class GitAdapter:
    """Runs git subcommands in ``cwd`` and translates failures.

    Every failure surfaces as ``GitOperationFailed`` carrying the subcommand,
    the working directory, git's exit status, and the original exception.

    When ``proxy`` is set it is passed as both ``http.proxy`` and
    ``https.proxy`` on every invocation, so clones and fetches are routed
    through it. ``config`` adds further ``-c key=value`` settings.
    """

    def __init__(
        self,
        cwd: str | Path,
        proxy: str | None = None,
        config: dict[str, str] | None = None,
    ):
        self.cwd = Path(cwd)
        self.proxy = proxy
        self.config = dict(config or {})
        self._git = Git(str(self.cwd))

    def for_path(self, path: str | Path) -> "GitAdapter":
        """Return an adapter for another directory with the same settings."""
        return GitAdapter(path, proxy=self.proxy, config=self.config)

    # -- repository state -----------------------------------------------------

    def get_sha(self) -> str:
        """Return the current HEAD commit SHA."""
        return self._run("rev-parse", "HEAD").strip()

    def rev_parse(self, ref: str) -> str:
        """Resolve ``ref`` to a commit SHA; fails if the ref does not exist."""
        return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}").strip()

    def get_behind_count(self) -> int:
        """Number of commits HEAD is behind its configured upstream."""
        count = self._run("rev-list", "--count", "HEAD..@{upstream}")
        return int(count.strip())

    def check_is_repo(self) -> bool:
        try:
            return self._run("rev-parse", "--is-inside-work-tree").strip() == "true"
        except GitOperationFailed:
            return False

    def is_repo_root(self) -> bool:
        """True if ``cwd`` is the top level of its own work tree.

        A plain directory nested in another checkout returns False, since git
        would otherwise act on the enclosing repository.
        """
        try:
            toplevel = self._run("rev-parse", "--show-toplevel").strip()
        except GitOperationFailed:
            return False
        return Path(toplevel).resolve() == self.cwd.resolve()

    def diff(self, paths: list[str] | None = None) -> str:
        """Working tree diff, limited to ``paths`` when given. Empty means clean."""
        args = ["diff"]
        if paths:
            args.append("--")
            args.extend(paths)
        return self._run(*args)

    # -- network --------------------------------------------------------------

    def fetch(self, *args: str) -> None:
        """Retrieve remote refs without merging."""
        self._run("fetch", *args)

    def clone(self, url: str, path: str | Path) -> None:
        """Clone ``url`` into ``path`` (relative paths resolve against ``cwd``)."""
        logger.info("Cloning %s into %s", url, path)
        self._run("clone", url, str(path))

    def reset_hard(self, ref: str) -> None:
        """Move HEAD and the working tree to ``ref``, discarding local changes."""
        self._run("reset", "--hard", ref)

    # -- submodules -----------------------------------------------------------

    def add_submodule(self, url: str, path: str) -> None:
        self._run("submodule", "add", url, path)

    def remove_submodule(self, path: str) -> None:
        """Deinitialize a submodule, then drop it from the index and work tree."""
        self._run("submodule", "deinit", "-f", "--", path)
        self._run("rm", "-f", "--", path)

    def submodule_foreach(self, command: str) -> str:
        return self._run("submodule", "foreach", command)

    def update_submodules(self, remote: bool = False, merge: bool = False) -> None:
        args = ["submodule", "update", "--init"]
        if remote:
            args.append("--remote")
        if merge:
            args.append("--merge")
        self._run(*args)

    # -- plumbing -------------------------------------------------------------

    def _config_options(self) -> list[str]:
        options = [f"{key}={value}" for key, value in self.config.items()]
        if self.proxy:
            options.append(f"http.proxy={self.proxy}")
            options.append(f"https.proxy={self.proxy}")
        return options

    def _run(self, subcommand: str, *args: str) -> str:
        command = " ".join([subcommand, *args])
        logger.debug("git %s (cwd=%s)", command, self.cwd)
        options = _flatten_options(self._config_options())
        try:
            return self._git.execute(["git", *options, subcommand, *args])
        except CommandError as e:
            raise GitOperationFailed(
                command,
                exit_code=e.status if isinstance(e.status, int) else None,
                cwd=str(self.cwd),
                cause=e,
            ) from e


def _flatten_options(options: list[str]) -> list[str]:
    flat: list[str] = []
    for option in options:
        flat.extend(["-c", option])
    return flat
