"""Process-wide cache registry, logging setup and command-output helpers.

Lifecycle: ``initialize_cache`` (or the lazy ``get_cache``) builds the one
shared Cache, ``destroy_cache`` tears it down; the next ``get_cache`` call
then builds a fresh instance with the same configuration rules.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from cmdcache.cache.engine import Cache
from cmdcache.config import load_settings
from cmdcache.errors import CacheStateError
from cmdcache.models.stats import CacheStats

logger = logging.getLogger(__name__)

COMMAND_KEY_PREFIX = "command:"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s | %(message)s"
LOG_FILE_NAME = "cmdcache.log"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

_cache: Cache | None = None


def _attach(root: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)


def setup_logging(log_level: str, log_dir: Path | None = None) -> None:
    """Send cmdcache logs to stderr and, with *log_dir*, to a rotating file.

    Unknown level names fall back to INFO. Repeated calls reuse the handlers
    already installed on the root logger.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    installed = {type(h) for h in root.handlers}

    if logging.StreamHandler not in installed:
        _attach(root, logging.StreamHandler(), level)

    if log_dir is not None and RotatingFileHandler not in installed:
        log_dir.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            RotatingFileHandler(
                log_dir / LOG_FILE_NAME,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
            ),
            level,
        )


def initialize_cache(**options: object) -> Cache:
    """Build the shared cache and configure logging from its settings.

    Raises:
        CacheStateError: If a shared cache already exists.
        CacheConfigError: If the configuration is invalid.
    """
    global _cache  # noqa: PLW0603
    if _cache is not None:
        raise CacheStateError("Cache already initialized; call destroy_cache() first.")

    settings = load_settings(**options)
    setup_logging(settings.log_level, settings.log_dir)
    _cache = Cache(settings)
    return _cache


def get_cache(**options: object) -> Cache:
    """Return the shared cache, building it on first use.

    *options* only apply when this call creates the instance.
    """
    global _cache  # noqa: PLW0603
    if _cache is None:
        _cache = Cache(**options)
    return _cache


def destroy_cache() -> None:
    """Destroy and forget the shared cache. No-op when none exists."""
    global _cache  # noqa: PLW0603
    if _cache is not None:
        _cache.destroy()
        _cache = None


def is_cache_enabled() -> bool:
    """Whether collaborators should route command output through the cache."""
    return load_settings().enabled


def cache_command_result(command: str, result: object, ttl_ms: int | None = None) -> None:
    """Cache the output of *command* in the shared cache."""
    get_cache().set(f"{COMMAND_KEY_PREFIX}{command}", result, ttl_ms)


def get_cached_command_result(command: str) -> object | None:
    """Return cached output for *command*, or None."""
    return get_cache().get(f"{COMMAND_KEY_PREFIX}{command}")


def get_cache_stats() -> CacheStats:
    return get_cache().get_stats()


def clear_cache() -> int:
    return get_cache().clear()
