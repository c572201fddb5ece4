"""Short-lived in-memory cache for context bundles."""

import time
from typing import Callable

from twin.domain.models.context import ContextBundle


class ContextCache:
    """In-memory cache of context bundles with a freshness window.

    Bundles are immutable, so a cached bundle can be handed to concurrent
    turns for the same business.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        # Cache structure: {business_id: (bundle, stored_at)}
        self._entries: dict[int, tuple[ContextBundle, float]] = {}

    @property
    def enabled(self) -> bool:
        return self._ttl_seconds > 0

    def get(self, business_id: int) -> ContextBundle | None:
        """Get cached bundle if not expired."""
        if not self.enabled:
            return None
        entry = self._entries.get(business_id)
        if entry is None:
            return None
        bundle, stored_at = entry
        if self._clock() - stored_at < self._ttl_seconds:
            return bundle
        # Expired - remove from cache
        self._entries.pop(business_id, None)
        return None

    def set(self, bundle: ContextBundle) -> None:
        """Cache a bundle with the current timestamp."""
        if self.enabled:
            self._entries[bundle.business_id] = (bundle, self._clock())

    def invalidate(self, business_id: int | None = None) -> None:
        """Invalidate one business, or everything if business_id is None."""
        if business_id is None:
            self._entries.clear()
        else:
            self._entries.pop(business_id, None)
