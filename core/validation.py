"""Client-side checks run before anything is sent to the backend."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Sequence

from core.accounts import ref_to_side
from core.amounts import parse_amount
from core.errors import AmountError, ValidationError
from core.models import Account, AccountRef

MISSING_ACCOUNTS = "Please select both From and To accounts."
SAME_ACCOUNT = "From and To accounts cannot be the same."
BAD_AMOUNT = "Amount must be a number greater than 0."
MISSING_ACCOUNT_FIELDS = "Please fill Name, Bank, and Account Number."
BAD_BALANCE = "Balance must be a valid non-negative number."


@dataclass(frozen=True)
class TransferDraft:
    from_account_id: str = ""
    to_account_id: str = ""
    from_account: str = ""
    to_account: str = ""
    amount: str = ""
    reference: str = ""
    transfer_date: str = ""
    approved_by: str = ""
    notes: str = ""

    def with_source(self, ref: AccountRef, accounts: Sequence[Account]) -> "TransferDraft":
        account_id, name = ref_to_side(ref, accounts)
        return replace(self, from_account_id=account_id, from_account=name)

    def with_destination(self, ref: AccountRef, accounts: Sequence[Account]) -> "TransferDraft":
        account_id, name = ref_to_side(ref, accounts)
        return replace(self, to_account_id=account_id, to_account=name)


@dataclass(frozen=True)
class AccountDraft:
    name: str = ""
    bank: str = ""
    account_number: str = ""
    balance: str = ""


def validate_transfer(draft: TransferDraft) -> Dict[str, Any]:
    """Check a transfer draft and build the create-transfer request body.

    Raises ``ValidationError`` with a user-facing message on the first
    failing rule. Name-addressed sides are not compared with each other;
    the backend owns that check.
    """
    has_from = bool(draft.from_account_id or draft.from_account)
    has_to = bool(draft.to_account_id or draft.to_account)
    if not has_from or not has_to:
        raise ValidationError(MISSING_ACCOUNTS)
    if draft.from_account_id and draft.to_account_id and draft.from_account_id == draft.to_account_id:
        raise ValidationError(SAME_ACCOUNT)
    try:
        amount = parse_amount(draft.amount)
    except AmountError:
        raise ValidationError(BAD_AMOUNT) from None
    if amount <= 0:
        raise ValidationError(BAD_AMOUNT)

    payload: Dict[str, Any] = {
        "amount": amount,
        "reference": draft.reference,
        "transferDate": draft.transfer_date,
        "approvedBy": draft.approved_by,
        "notes": draft.notes,
    }
    if draft.from_account_id:
        payload["fromAccountId"] = draft.from_account_id
    else:
        payload["fromAccount"] = draft.from_account
    if draft.to_account_id:
        payload["toAccountId"] = draft.to_account_id
    else:
        payload["toAccount"] = draft.to_account
    return payload


def validate_account(draft: AccountDraft) -> Dict[str, Any]:
    name = draft.name.strip()
    bank = draft.bank.strip()
    account_number = draft.account_number.strip()
    if not name or not bank or not account_number:
        raise ValidationError(MISSING_ACCOUNT_FIELDS)

    raw_balance = str(draft.balance or "").strip()
    if not raw_balance:
        balance = 0.0
    else:
        try:
            balance = parse_amount(raw_balance)
        except AmountError:
            raise ValidationError(BAD_BALANCE) from None
        if balance < 0:
            raise ValidationError(BAD_BALANCE)
    return {"name": name, "bank": bank, "accountNumber": account_number, "balance": balance}
