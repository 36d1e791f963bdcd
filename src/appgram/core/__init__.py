"""Core configuration, error, storage and identity modules."""
