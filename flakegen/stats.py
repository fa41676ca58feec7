"""Runtime counters kept by an identifier generator."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class AppStats:
    """Counters describing the work done by a generator."""

    started_at: float = field(default_factory=time.time)
    version: str | None = None
    ids: int = 0
    waits: int = 0
    seq_max: int = 0
    region_id: int = 0
    worker_id: int = 0
    seq_cap: int = 0

    def reset(self, region_id: int, worker_id: int, seq_cap: int) -> None:
        """Clear the counters and record the generator's identity."""
        self.seq_cap = seq_cap
        self.waits = 0
        self.seq_max = 0
        self.ids = 0
        self.region_id = region_id
        self.worker_id = worker_id

    def as_dict(self) -> dict[str, Any]:
        """Return the counters as a plain dictionary."""
        return asdict(self)