from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class LoadSummary:
    """Schema for all summary data that will be recorded."""
    profile: str
    input_path: str
    workers: int
    total: int
    loaded: int
    rejected: int
    fatal: bool = False             # file or header failed, nothing was dispatched
    run_id: UUID | None = None      # set when outcomes were persisted

    def render_one_line(self) -> str:
        """How each line of summary is formatted for the terminal."""
        line = f"{self.profile}: total={self.total} loaded={self.loaded} rejected={self.rejected} workers={self.workers}"
        if self.run_id is not None:
            line += f" run_id={self.run_id}"
        return line
