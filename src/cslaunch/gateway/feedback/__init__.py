"""User-facing diagnostic output with mode awareness."""
