"""Services implementing scheduling, review sessions and persistence."""
