# src/__init__.py — v1
"""pgbackup: scheduled PostgreSQL backup agent."""

from pgbackup.version import __version__

__all__ = ["__version__"]
