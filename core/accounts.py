from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from core.amounts import format_amount
from core.errors import SelectionError
from core.models import Account, AccountRef, ById, ByLegacyRef, ByName

ID_PREFIX = "aid:"
OID_PREFIX = "oid:"
NAME_PREFIX = "name:"


@dataclass(frozen=True)
class AccountOption:
    key: str
    value: str
    label: str


def option_value(account: Account) -> str:
    if account.account_id:
        return f"{ID_PREFIX}{account.account_id}"
    if account.oid:
        return f"{OID_PREFIX}{account.oid}"
    return f"{NAME_PREFIX}{account.display_name}"


def account_option(account: Account, idx: int) -> AccountOption:
    key = account.oid or account.account_id or f"idx-{idx}"
    ident = account.account_id or account.oid or "—"
    label = f"{account.display_name} • {ident} • {format_amount(account.balance)}"
    return AccountOption(key=key, value=option_value(account), label=label)


def list_account_options(accounts: Iterable[Account]) -> List[AccountOption]:
    return [account_option(a, idx) for idx, a in enumerate(accounts)]


def options_by_key(options: Iterable[AccountOption]) -> Dict[str, AccountOption]:
    """Index options by their unique key; labels may repeat across accounts."""
    return {o.key: o for o in options}


def resolve_selection(value: str) -> AccountRef:
    """Turn a selection key back into a typed account reference."""
    value = value or ""
    if value.startswith(ID_PREFIX) and value[len(ID_PREFIX):]:
        return ById(value[len(ID_PREFIX):])
    if value.startswith(OID_PREFIX) and value[len(OID_PREFIX):]:
        return ByLegacyRef(value[len(OID_PREFIX):])
    if value.startswith(NAME_PREFIX) and value[len(NAME_PREFIX):]:
        return ByName(value[len(NAME_PREFIX):])
    raise SelectionError(f"Unrecognised account selection: {value!r}")


def find_account(accounts: Sequence[Account], ref: AccountRef) -> Optional[Account]:
    for account in accounts:
        if isinstance(ref, ById) and account.account_id == ref.account_id:
            return account
        if isinstance(ref, ByLegacyRef) and account.oid == ref.oid:
            return account
        if isinstance(ref, ByName) and not account.account_id and not account.oid and account.display_name == ref.name:
            return account
    if isinstance(ref, ByName):
        # Legacy selections may name an account that has since been given an id.
        for account in accounts:
            if account.name and account.name.lower() == ref.name.lower():
                return account
    return None


def ref_to_side(ref: AccountRef, accounts: Sequence[Account]) -> Tuple[str, str]:
    """Return the (account id, account name) pair a transfer side is addressed by."""
    if isinstance(ref, ById):
        return ref.account_id, ""
    if isinstance(ref, ByLegacyRef):
        account = find_account(accounts, ref)
        if account is None:
            return "", ""
        return account.account_id, account.name
    return "", ref.name
