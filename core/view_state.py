"""Page state for the fund transfer screen.

A page shows at most one dialog, so the dialog is a single tagged value
rather than one open/closed flag per dialog.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Union

from core.filters import DIRECTIONS, LedgerFilters, normalize_filters
from core.models import Account, Transfer


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Viewing:
    record: Any


@dataclass(frozen=True)
class Editing:
    draft: Any


@dataclass(frozen=True)
class ConfirmingDelete:
    record: Any


@dataclass(frozen=True)
class ViewingLedger:
    account: Account
    direction: str = "all"


Dialog = Union[Idle, Viewing, Editing, ConfirmingDelete, ViewingLedger]


@dataclass(frozen=True)
class FundTransferPageState:
    filters: LedgerFilters = field(default_factory=LedgerFilters)
    dialog: Dialog = field(default_factory=Idle)

    def open_transfer(self, transfer: Transfer) -> "FundTransferPageState":
        return replace(self, dialog=Viewing(transfer))

    def open_ledger(self, account: Account) -> "FundTransferPageState":
        return replace(self, dialog=ViewingLedger(account, "all"))

    def set_ledger_direction(self, direction: str) -> "FundTransferPageState":
        if not isinstance(self.dialog, ViewingLedger):
            raise ValueError("no account ledger is open")
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        return replace(self, dialog=replace(self.dialog, direction=direction))

    def start_editing(self, draft: Any) -> "FundTransferPageState":
        return replace(self, dialog=Editing(draft))

    def confirm_delete(self, record: Any) -> "FundTransferPageState":
        return replace(self, dialog=ConfirmingDelete(record))

    def close(self) -> "FundTransferPageState":
        return replace(self, dialog=Idle())

    def with_search(self, text: str) -> "FundTransferPageState":
        return replace(self, filters=replace(self.filters, search=(text or "").strip()))

    def with_status(self, status: str) -> "FundTransferPageState":
        normalized = normalize_filters({"status": status}).status
        return replace(self, filters=replace(self.filters, status=normalized))
