"""Account-scoped views over the flat transfer list.

Transfers address their two sides either by account identifier or, for
older records, by free-text account name. A transfer belongs to an account's
ledger when either side matches it: identifiers are compared first and the
case-insensitive name is only consulted for a side that carries no
identifier.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

import altair as alt
import pandas as pd

from core.amounts import round_half_up
from core.charts import to_vega_spec
from core.filters import DIRECTIONS, newest_first
from core.models import Account, LedgerRow, Transfer

logger = logging.getLogger(__name__)

ROW_COLUMNS = [
    "transfer_id",
    "direction",
    "counterparty",
    "amount",
    "date",
    "reference",
    "approved_by",
    "status",
    "notes",
]


@dataclass(frozen=True)
class LedgerTotals:
    incoming: float = 0.0
    outgoing: float = 0.0
    net: float = 0.0

    def rounded(self) -> Dict[str, float]:
        return {
            "incoming": round_half_up(self.incoming, 2),
            "outgoing": round_half_up(self.outgoing, 2),
            "net": round_half_up(self.net, 2),
        }


def _side_matches(account: Account, side_id: str, side_name: str) -> bool:
    if account.account_id and side_id == account.account_id:
        return True
    if side_id:
        return False
    return side_name.lower() == account.name.lower()


def _counterparty(name: str, account_id: str, by_id: Dict[str, Account]) -> Optional[str]:
    if name:
        return name
    if account_id:
        other = by_id.get(account_id)
        return other.display_name if other is not None else account_id
    return None


def derive_account_transactions(
    account: Account,
    transfers: Iterable[Transfer],
    direction: str = "all",
    *,
    accounts: Optional[Sequence[Account]] = None,
) -> List[LedgerRow]:
    if direction not in DIRECTIONS:
        raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")

    by_id = {a.account_id: a for a in (accounts or []) if a.account_id}
    rows: List[LedgerRow] = []
    for t in transfers:
        from_match = _side_matches(account, t.from_account_id, t.from_account)
        to_match = _side_matches(account, t.to_account_id, t.to_account)
        if not from_match and not to_match:
            continue
        if from_match and to_match:
            logger.debug("transfer %s matches account on both sides; tagging as out", t.transfer_id or t.oid)
        if from_match:
            row = LedgerRow(t, "out", _counterparty(t.to_account, t.to_account_id, by_id))
        else:
            row = LedgerRow(t, "in", _counterparty(t.from_account, t.from_account_id, by_id))
        rows.append(row)

    if direction != "all":
        rows = [r for r in rows if r.direction == direction]
    return newest_first(rows, lambda r: r.date)


def compute_totals(rows: Iterable[LedgerRow]) -> LedgerTotals:
    incoming = 0.0
    outgoing = 0.0
    for r in rows:
        if r.direction == "in":
            incoming += r.amount
        else:
            outgoing += r.amount
    return LedgerTotals(incoming=incoming, outgoing=outgoing, net=incoming - outgoing)


def rows_to_frame(rows: Sequence[LedgerRow]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=ROW_COLUMNS)
    records = [r.to_record() for r in rows]
    df = pd.DataFrame.from_records(records)
    df["date"] = pd.to_datetime(df["date"], utc=True, errors="coerce")
    return df[ROW_COLUMNS]


def build_flow_chart(rows: Sequence[LedgerRow]) -> Optional[Dict[str, Any]]:
    df = rows_to_frame(rows).dropna(subset=["date"])
    if df.empty:
        return None
    daily = (
        df.assign(day=lambda d: d["date"].dt.tz_convert(None).dt.normalize())
        .groupby(["day", "direction"])["amount"]
        .sum()
        .reset_index()
        .sort_values("day")
    )
    bar = (
        alt.Chart(daily)
        .mark_bar()
        .encode(
            x=alt.X("day:T", title="Date"),
            y=alt.Y("amount:Q", title="Amount", axis=alt.Axis(format=",.2f")),
            color=alt.Color(
                "direction:N",
                scale=alt.Scale(domain=["in", "out"], range=["#16a34a", "#dc2626"]),
                title="Direction",
            ),
            xOffset="direction:N",
            tooltip=["day:T", "direction:N", alt.Tooltip("amount:Q", format=",.2f")],
        )
    )
    return to_vega_spec(bar)


def compute_ledger_view(
    account: Account,
    transfers: Sequence[Transfer],
    direction: str = "all",
    *,
    accounts: Optional[Sequence[Account]] = None,
) -> Dict[str, Any]:
    rows = derive_account_transactions(account, transfers, direction, accounts=accounts)
    totals = compute_totals(rows)
    return {
        "account": account.to_record(),
        "direction": direction,
        "rows": [r.to_record() for r in rows],
        "totals": totals.rounded(),
        "chart": build_flow_chart(rows),
    }
