"""
Sync result domain objects for gits.

Provides the per-host report produced by a sync run.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class SyncStatus(Enum):
    """Outcome of syncing one host."""
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class SyncReport:
    """
    What happened to one host during a sync.

    A failed report carries the error message; the counts of a failed
    report describe nothing written, since a failed host commits nothing
    to its inventory.
    """
    host: str
    status: SyncStatus
    discovered: int = 0   # projects returned by the remote
    merged: int = 0       # identities merged into the inventory
    skipped: int = 0      # listing items or clone URLs that could not be parsed
    watched: int = 0      # identities also merged into the watched inventory
    newest_created_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == SyncStatus.SUCCESS

    @classmethod
    def failed(cls, host: str, error: Exception) -> 'SyncReport':
        return cls(host=host, status=SyncStatus.FAILED, error=str(error))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {
            'host': self.host,
            'status': self.status.value,
            'discovered': self.discovered,
            'merged': self.merged,
            'skipped': self.skipped,
            'watched': self.watched,
        }
        if self.newest_created_at:
            result['newest_created_at'] = self.newest_created_at.isoformat()
        if self.error:
            result['error'] = self.error
        return result
