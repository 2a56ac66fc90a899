"""Error types raised by the sync core."""

from __future__ import annotations


class SkillSyncError(Exception):
    """Base exception for skillsync errors."""


class ConfigError(SkillSyncError):
    """Raised when the configuration file is missing or malformed."""


class GitError(SkillSyncError):
    """A git invocation failed.

    Carries the subcommand that was attempted, the working directory it ran
    in, and the underlying exception (also chained via ``__cause__``).
    """

    def __init__(
        self,
        message: str,
        command: str,
        cwd: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.command = command
        self.cwd = cwd
        self.cause = cause


class GitOperationFailed(GitError):
    """Git exited non-zero or could not be started."""

    def __init__(
        self,
        command: str,
        exit_code: int | None = None,
        cwd: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(f"Git command failed: {command}", command, cwd, cause)
        self.exit_code = exit_code


class SubmoduleNotFound(GitError):
    """An expected submodule path is not registered."""

    def __init__(self, path: str, cwd: str | None = None) -> None:
        super().__init__(f"Submodule not found: {path}", "submodule-status", cwd)
        self.path = path


class ResourceNotFound(SkillSyncError):
    """A configured repository, skills directory or skill is absent on disk."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class RefResolutionFailed(SkillSyncError):
    """No ref lock is configured and no default branch could be found."""


class ProvenanceUnavailable(SkillSyncError):
    """The HEAD SHA of a vendor repository could not be read."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Cannot get SHA for {name}")
        self.name = name


def format_error(error: BaseException) -> str:
    """Render an error as a single line, with its working directory if known."""
    if isinstance(error, GitError):
        cwd = f" ({error.cwd})" if error.cwd else ""
        return f"{error.message}{cwd}"
    message = str(error)
    return message or type(error).__name__
