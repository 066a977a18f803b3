"""Per-request instrumentation for synthesized view queries."""

from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class Times:
    """Counts the view queries of one request and their text sizes."""

    view_query_sizes: list[int] = field(default_factory=list)
    started: float = field(default_factory=time.monotonic)

    def record_query_size(self, query: str) -> None:
        self.view_query_sizes.append(len(query))

    @property
    def view_query_count(self) -> int:
        return len(self.view_query_sizes)

    @property
    def view_query_size(self) -> int:
        """Total characters of view query text produced so far."""
        return sum(self.view_query_sizes)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)
