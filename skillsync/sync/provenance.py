"""Provenance — license and SYNC.md stamps written into every synced skill.

The stamp records where a skill came from and at which commit. It is
informational only; nothing in skillsync reads it back.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from skillsync.models.records import SyncRecord

SYNC_FILE = "SYNC.md"
LICENSE_FILE = "LICENSE.md"

# Tried in order; the first match wins.
LICENSE_NAMES = (
    "LICENSE",
    "LICENSE.md",
    "LICENSE.txt",
    "license",
    "license.md",
    "license.txt",
)


def find_license(repo_path: Path) -> Path | None:
    """Return the repository's license file, or None if it has none."""
    names = {entry.name for entry in repo_path.iterdir()} if repo_path.is_dir() else set()
    for name in LICENSE_NAMES:
        # Compare against real entry names so case-insensitive filesystems
        # do not report "license" for a "LICENSE" file.
        if name in names and (repo_path / name).is_file():
            return repo_path / name
    return None


def copy_license(repo_path: Path, output_dir: Path) -> Path | None:
    """Copy the repository license into ``output_dir`` as LICENSE.md."""
    license_path = find_license(repo_path)
    if license_path is None:
        return None
    target = output_dir / LICENSE_FILE
    shutil.copyfile(license_path, target)
    return target


def write_sync_record(output_dir: Path, record: SyncRecord) -> Path:
    """Write (or overwrite) the SYNC.md stamp."""
    target = output_dir / SYNC_FILE
    target.write_text(record.render())
    return target
