"""skillsync — vendor git repositories and sync their skills into a local tree."""

__version__ = "0.3.0"
