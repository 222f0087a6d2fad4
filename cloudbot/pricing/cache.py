"""Time-bounded cache of optimal configurations."""

import time
from collections.abc import Callable, Iterable

from cloudbot.domain.pricing import OptimalConfig

Candidates = frozenset[tuple[str, str]]


class QuoteCache:
    """Holds one OptimalConfig per (provider, template_ref) for ``ttl_seconds``.

    Each entry remembers the (instance_type, region) pairs it was computed
    from; a lookup for a different candidate set is a miss. Stale entries
    are dropped on read.
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, Candidates | None, OptimalConfig]] = {}

    def get(
        self,
        provider: str,
        template_ref: str,
        candidates: Iterable[tuple[str, str]] | None = None,
    ) -> OptimalConfig | None:
        """Return the fresh entry for ``(provider, template_ref)``.

        Args:
            provider: Provider name
            template_ref: Template the entry was stored under
            candidates: Pairs the caller is about to quote; when given, an
                entry computed from a different set is ignored

        Returns:
            The cached OptimalConfig, or None on a miss
        """
        key = (provider, template_ref)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, stored, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        if candidates is not None and stored is not None and stored != frozenset(candidates):
            return None
        return value

    def put(
        self,
        provider: str,
        template_ref: str,
        value: OptimalConfig,
        candidates: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        if self._ttl <= 0:
            return
        stored = frozenset(candidates) if candidates is not None else None
        self._entries[(provider, template_ref)] = (self._clock() + self._ttl, stored, value)

    def invalidate(self, provider: str | None = None) -> None:
        if provider is None:
            self._entries.clear()
            return
        for key in [k for k in self._entries if k[0] == provider]:
            del self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)
