class DataSourceError(Exception):
    """A lookup against the backing store failed for a single key."""


class AlertComputationError(Exception):
    """The low-stock report could not be computed; no partial result exists."""
