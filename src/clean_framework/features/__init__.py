"""Features wired on top of the providers layer."""
