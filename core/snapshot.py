from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from core.client import BackendClient
from core.errors import BackendError
from core.models import Account, Transfer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    accounts: Tuple[Account, ...] = field(default_factory=tuple)
    transfers: Tuple[Transfer, ...] = field(default_factory=tuple)
    fetched_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return self.fetched_at is not None


def fetch_snapshot(client: BackendClient, previous: Optional[Snapshot] = None) -> Snapshot:
    """Fetch both lists; on failure return the previous data tagged with the error."""
    previous = previous or Snapshot()
    try:
        transfers: List[Transfer] = client.list_transfers()
        accounts: List[Account] = client.list_accounts()
    except BackendError as exc:
        logger.warning("snapshot refresh failed, keeping previous data: %s", exc.message)
        return replace(previous, error=exc.message)
    return Snapshot(
        accounts=tuple(accounts),
        transfers=tuple(transfers),
        fetched_at=datetime.now(timezone.utc),
        error=None,
    )


class SnapshotStore:
    """Holds the latest snapshot; readers keep seeing it while a refresh runs."""

    def __init__(self, initial: Optional[Snapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = initial or Snapshot()

    def current(self) -> Snapshot:
        with self._lock:
            return self._snapshot

    def refresh(self, client: BackendClient) -> Snapshot:
        updated = fetch_snapshot(client, self.current())
        with self._lock:
            self._snapshot = updated
        return updated
