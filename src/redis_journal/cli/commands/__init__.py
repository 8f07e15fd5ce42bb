"""CLI command modules for redis-journal."""
