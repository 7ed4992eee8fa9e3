"""Metadata models for watch sessions."""

from datetime import datetime, timezone
from typing import List, Optional
from dataclasses import dataclass, field

from common.models import WatchState


@dataclass
class SessionMetadata:
    """Snapshot of a watch session."""

    session_id: str
    patterns: List[str]
    state: WatchState
    watched_paths: List[str] = field(default_factory=list)
    file_timeout: Optional[int] = None
    gate_count: int = 0
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @property
    def is_active(self) -> bool:
        return self.state is WatchState.WATCHING
