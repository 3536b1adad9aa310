"""Exception hierarchy for the cache engine."""


class CacheError(Exception):
    """Base class for all cache errors."""


class CacheConfigError(CacheError, ValueError):
    """Invalid cache configuration; raised at construction time only."""


class CacheStateError(CacheError):
    """Cache registry used out of order (e.g. initialised twice)."""
