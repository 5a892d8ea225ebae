"""Result type for data resolved from remote storage with local fallbacks."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ResolutionSource(Enum):
    """Where a resolved value came from."""

    REMOTE = "remote"
    CACHE = "cache"
    DEFAULT = "default"


@dataclass(frozen=True)
class Resolution(Generic[T]):
    """A resolved value plus the source it came from and any remote error."""

    value: T
    source: ResolutionSource
    error: str | None = None

    @property
    def is_fallback(self) -> bool:
        """Return True when the remote store could not supply the value."""
        return self.source is not ResolutionSource.REMOTE
