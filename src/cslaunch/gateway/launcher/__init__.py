"""Local process and browser launcher gateway."""
