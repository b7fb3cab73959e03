"""IO exceptions."""


class InstanceStoreError(Exception):
    """Raised when an instance record cannot be read from or written to its backend."""
