"""Codespaces service gateway."""
