"""Sync core — keep vendor clones current and copy their skills out.

This package provides the primitives for:
- Ref resolution: which commit, tag, or branch a clone is reset to
- Vendor management: clone, fetch-and-reset, and forced re-clone
- Skill sync: clean copy of each skill plus license and provenance stamp
- Drift detection: clones and skills no longer declared in configuration
- Update checks: how many commits each clone is behind upstream
"""
