"""Terminal detection gateway."""
