"""Data models — configuration and the records sync operations produce."""
