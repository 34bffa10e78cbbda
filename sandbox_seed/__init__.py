"""Synthetic activity seeder for sandbox teacher dashboards."""

__version__ = "0.1.0"
