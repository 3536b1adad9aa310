from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cmdcache.errors import CacheConfigError

_UNLIMITED = {"unlimited", "none", "null"}


class CacheSettings(BaseSettings):
    """Cache configuration.

    Resolution order is defaults, then ``CMDCACHE_*`` environment variables
    (and a ``.env`` file), then explicit keyword arguments, which always win.
    Instances are immutable once built.
    """

    model_config = SettingsConfigDict(
        env_prefix="CMDCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    # Janitor period
    cleanup_interval_ms: int = Field(default=30_000, gt=0)

    # LRU capacity; None means unlimited
    max_keys: int | None = None

    # Rolling hit-rate window length (operations)
    window_size: int = Field(default=100, gt=0)

    # Length of one statistics interval
    interval_duration_ms: int = Field(default=60_000, gt=0)

    # TTL applied by set() when the caller passes none
    default_ttl_ms: int = Field(default=15_000, gt=0)

    # Switch read by collaborators; the engine itself ignores it
    enabled: bool = False

    log_level: str = "INFO"
    log_dir: Path | None = None

    @field_validator("max_keys", mode="before")
    @classmethod
    def _parse_unlimited(cls, value: object) -> object:
        if isinstance(value, str) and value.strip().lower() in _UNLIMITED:
            return None
        return value

    @field_validator("max_keys")
    @classmethod
    def _check_max_keys(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("max_keys must be positive or unlimited")
        return value


def load_settings(**options: object) -> CacheSettings:
    """Build CacheSettings, converting validation failures to CacheConfigError.

    Raises:
        CacheConfigError: If any resolved option is invalid.
    """
    try:
        return CacheSettings(**options)  # type: ignore[arg-type]
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise CacheConfigError(f"Invalid cache configuration: {problems}") from exc
