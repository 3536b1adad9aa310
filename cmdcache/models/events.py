"""Event payloads published by the cache, one model per event kind."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from cmdcache.models.enums import EvictionReason


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: int  # epoch milliseconds

    # Each subclass pins `kind` to the matching EventKind value


class SetEvent(_Event):
    kind: Literal["set"] = "set"
    key: str
    value_size: int
    ttl: int


class GetEvent(_Event):
    kind: Literal["get"] = "get"
    key: str
    hit: bool


class EvictionEvent(_Event):
    kind: Literal["eviction"] = "eviction"
    key: str
    reason: EvictionReason


class ClearEvent(_Event):
    kind: Literal["clear"] = "clear"
    keys_cleared: int
    cleared_keys: list[str] = []


class CleanupEvent(_Event):
    kind: Literal["cleanup"] = "cleanup"
    evicted_count: int
    evicted_keys: list[str] = []


CacheEvent = Annotated[
    SetEvent | GetEvent | EvictionEvent | ClearEvent | CleanupEvent,
    Field(discriminator="kind"),
]
"""Tagged union of every event payload, discriminated by ``kind``."""
