"""Utilities shared across the sync core."""
