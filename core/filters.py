from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Sequence, TypeVar

from core.models import TRANSFER_STATUSES, Transfer

DIRECTIONS = ("all", "in", "out")
STATUS_FILTERS = ("all",) + tuple(s.lower() for s in TRANSFER_STATUSES)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

T = TypeVar("T")


@dataclass(frozen=True)
class LedgerFilters:
    search: str = ""
    status: str = "all"
    direction: str = "all"


def normalize_filters(raw: Optional[dict]) -> LedgerFilters:
    raw = raw or {}
    search = str(raw.get("search") or raw.get("q") or "").strip()

    status = str(raw.get("status") or "all").strip().lower()
    if status not in STATUS_FILTERS:
        status = "all"

    direction = str(raw.get("direction") or "all").strip().lower()
    if direction not in DIRECTIONS:
        direction = "all"
    return LedgerFilters(search=search, status=status, direction=direction)


def newest_first(items: Sequence[T], date_of) -> List[T]:
    """Sort by date descending; undated items go last. Stable for ties."""

    def key(item: T):
        dt = date_of(item)
        return (dt is not None, dt or _EPOCH)

    # reverse=True keeps equal keys in their original order
    return sorted(items, key=key, reverse=True)


def sort_newest_first(transfers: Iterable[Transfer]) -> List[Transfer]:
    return newest_first(list(transfers), lambda t: t.date)


def search_transfers(transfers: Iterable[Transfer], query: str) -> List[Transfer]:
    q = (query or "").strip().lower()
    transfers = list(transfers)
    if not q:
        return transfers
    return [
        t
        for t in transfers
        if q in t.transfer_id.lower()
        or q in t.from_account.lower()
        or q in t.to_account.lower()
        or q in t.reference.lower()
    ]


def filter_by_status(transfers: Iterable[Transfer], status: str) -> List[Transfer]:
    wanted = (status or "all").strip().lower()
    transfers = list(transfers)
    if wanted == "all":
        return transfers
    if wanted not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status!r}")
    return [t for t in transfers if (t.status or "").lower() == wanted]


def apply_filters(transfers: Iterable[Transfer], filters: LedgerFilters) -> List[Transfer]:
    rows = search_transfers(transfers, filters.search)
    rows = filter_by_status(rows, filters.status)
    return sort_newest_first(rows)
