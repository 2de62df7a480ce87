"""Relay gateway for live sessions with a running codespace."""
