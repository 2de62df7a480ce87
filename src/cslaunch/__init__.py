"""cslaunch CLI entry point.

This package provides a Click-based CLI for creating GitHub codespaces and
connecting to them. See `cslaunch --help` for details.
"""
