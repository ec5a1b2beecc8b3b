"""Forum endpoint helpers. Internal; may change at any time."""
