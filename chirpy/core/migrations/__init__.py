"""SQLite schema migrations."""

from chirpy.core.migrations.runner import apply_migrations

__all__ = ["apply_migrations"]
