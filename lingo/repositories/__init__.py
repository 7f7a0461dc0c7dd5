"""Remote store access."""
