"""Ref resolution — pick the ref a vendor clone is reset to after a fetch."""

from __future__ import annotations

import logging

from skillsync.errors import GitOperationFailed, RefResolutionFailed
from skillsync.models.config import RepositoryConfig
from skillsync.utils.git_ops import GitAdapter

logger = logging.getLogger(__name__)

# Probed in order; the remote's symbolic HEAD is not consulted.
DEFAULT_BRANCH_CANDIDATES = ("main", "master")


def resolve_target_ref(config: RepositoryConfig, git: GitAdapter) -> str:
    """Return the ref to reset to: commit > tag > branch > default branch."""
    if config.commit:
        return config.commit
    if config.tag:
        return f"refs/tags/{config.tag}"
    if config.branch:
        return f"origin/{config.branch}"
    return find_default_branch(git)


def find_default_branch(git: GitAdapter) -> str:
    """Return the first of ``origin/main``, ``origin/master`` that resolves."""
    for branch in DEFAULT_BRANCH_CANDIDATES:
        ref = f"origin/{branch}"
        try:
            git.rev_parse(ref)
        except GitOperationFailed:
            logger.debug("%s does not resolve in %s", ref, git.cwd)
            continue
        return ref
    raise RefResolutionFailed(f"Could not determine default branch in {git.cwd}")
