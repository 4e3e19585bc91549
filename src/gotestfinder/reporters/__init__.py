"""Terminal output for gotestfinder."""
