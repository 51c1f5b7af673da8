"""Cell addressing and snapshot adapters."""
