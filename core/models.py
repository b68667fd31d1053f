from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional, Union

import pandas as pd

from core.amounts import coerce_amount

TRANSFER_STATUSES = ("Pending", "Completed", "Rejected")

Direction = Literal["in", "out"]


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def parse_date(value: object) -> Optional[datetime]:
    """Parse a backend date into an aware UTC datetime (naive input is UTC)."""
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def parse_status(value: object) -> Optional[str]:
    text = _text(value).lower()
    for status in TRANSFER_STATUSES:
        if status.lower() == text:
            return status
    return None


@dataclass(frozen=True)
class Account:
    account_id: str = ""
    oid: str = ""
    name: str = ""
    bank: str = ""
    account_number: str = ""
    balance: float = 0.0

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed"

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Account":
        return cls(
            account_id=_text(raw.get("accountId")),
            oid=_text(raw.get("_id")),
            name=_text(raw.get("name")),
            bank=_text(raw.get("bank")),
            account_number=_text(raw.get("accountNumber")),
            balance=coerce_amount(raw.get("balance")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "account_id": self.account_id or None,
            "oid": self.oid or None,
            "name": self.display_name,
            "bank": self.bank,
            "account_number": self.account_number,
            "balance": self.balance,
        }


@dataclass(frozen=True)
class Transfer:
    transfer_id: str = ""
    oid: str = ""
    from_account_id: str = ""
    to_account_id: str = ""
    from_account: str = ""
    to_account: str = ""
    # Raw value as received; see core.amounts for parsing policy.
    amount: Any = None
    date: Optional[datetime] = None
    reference: str = ""
    approved_by: str = ""
    notes: str = ""
    status: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Transfer":
        date_value = raw.get("date")
        if date_value in (None, ""):
            date_value = raw.get("transferDate")
        return cls(
            transfer_id=_text(raw.get("transferId")),
            oid=_text(raw.get("_id")),
            from_account_id=_text(raw.get("fromAccountId")),
            to_account_id=_text(raw.get("toAccountId")),
            from_account=_text(raw.get("fromAccount")),
            to_account=_text(raw.get("toAccount")),
            amount=raw.get("amount"),
            date=parse_date(date_value),
            reference=_text(raw.get("reference")),
            approved_by=_text(raw.get("approvedBy")),
            notes=_text(raw.get("notes")),
            status=parse_status(raw.get("status")),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "transfer_id": self.transfer_id or self.oid or None,
            "from_account_id": self.from_account_id or None,
            "to_account_id": self.to_account_id or None,
            "from_account": self.from_account or None,
            "to_account": self.to_account or None,
            "amount": coerce_amount(self.amount),
            "date": self.date.isoformat() if self.date else None,
            "reference": self.reference,
            "approved_by": self.approved_by,
            "notes": self.notes,
            "status": self.status,
        }


@dataclass(frozen=True)
class ById:
    account_id: str


@dataclass(frozen=True)
class ByLegacyRef:
    oid: str


@dataclass(frozen=True)
class ByName:
    name: str


AccountRef = Union[ById, ByLegacyRef, ByName]


@dataclass(frozen=True)
class LedgerRow:
    transfer: Transfer
    direction: Direction
    counterparty: Optional[str]

    @property
    def amount(self) -> float:
        return coerce_amount(self.transfer.amount)

    @property
    def date(self) -> Optional[datetime]:
        return self.transfer.date

    def to_record(self) -> Dict[str, Any]:
        record = self.transfer.to_record()
        record["direction"] = self.direction
        record["counterparty"] = self.counterparty
        return record
