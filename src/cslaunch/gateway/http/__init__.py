"""HTTP client gateway."""
