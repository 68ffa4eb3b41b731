"""Interfaces of the external collaborators the analysis depends on"""

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from momo_guard.domain.models import AuditEntry, BehaviorProfile


class HistoryProvider(Protocol):
    """Read-only access to a user's transaction history"""

    async def get_behavior_profile(self, user_id: str) -> Optional[BehaviorProfile]:
        """None when the user has no history yet"""
        ...

    async def get_recent_transaction_timestamps(self, user_id: str, since: datetime) -> List[datetime]:
        ...


class BlacklistProvider(Protocol):
    async def is_globally_blacklisted(self, identity: str) -> bool:
        ...


class AuditSink(Protocol):
    """Append-only store for per-layer audit entries"""

    async def record(self, entries: Sequence[AuditEntry]) -> None:
        ...
