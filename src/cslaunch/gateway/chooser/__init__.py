"""Interactive chooser gateway."""
