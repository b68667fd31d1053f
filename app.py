import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

import pandas as pd
import streamlit as st

from core.accounts import AccountOption, find_account, list_account_options, options_by_key, resolve_selection
from core.amounts import format_amount
from core.client import BackendClient
from core.errors import BackendError, ValidationError
from core.filters import STATUS_FILTERS, apply_filters
from core.ledger import compute_totals, derive_account_transactions, rows_to_frame
from core.models import Account, Transfer
from core.settings import configure_logging, get_settings
from core.snapshot import Snapshot, fetch_snapshot
from core.validation import AccountDraft, TransferDraft, validate_account, validate_transfer
from core.view_state import FundTransferPageState, Viewing, ViewingLedger

logger = logging.getLogger(__name__)

DIRECTION_LABELS = {"all": "All", "in": "Incoming", "out": "Outgoing"}
NO_CHOICE = "—"
STATUS_COLORS = {"Completed": "#166534", "Pending": "#854d0e", "Rejected": "#991b1b"}


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        .chip {border-radius: 14px;padding: 2px 10px;font-size: 0.8rem;font-weight: 600;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str):
    inject_base_styles()
    c1, c2 = st.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if st.button("Refresh"):
            refresh_snapshot()


def account_selectbox(container, label: str, by_key: Dict[str, AccountOption]):
    """Select box over account keys; labels are display-only and may repeat."""
    return container.selectbox(
        label,
        options=[NO_CHOICE] + list(by_key),
        format_func=lambda k: k if k == NO_CHOICE else by_key[k].label,
    )


def status_chip(status: Optional[str]) -> str:
    color = STATUS_COLORS.get(status or "", "#374151")
    return f"<span class='chip' style='color:{color}'>{status or '—'}</span>"


# ---------- State ----------
@st.cache_resource
def get_client() -> BackendClient:
    settings = get_settings()
    return BackendClient(settings.api_base_url, timeout=settings.timeout)


def page_state() -> FundTransferPageState:
    if "page_state" not in st.session_state:
        st.session_state["page_state"] = FundTransferPageState()
    return st.session_state["page_state"]


def set_page_state(state: FundTransferPageState) -> None:
    st.session_state["page_state"] = state


def selection_changed(key: str, value: object) -> bool:
    """True when a selectbox value differs from the previous run, so closing a panel does not reopen it."""
    if st.session_state.get(key) == value:
        return False
    st.session_state[key] = value
    return True


def snapshot() -> Snapshot:
    if "snapshot" not in st.session_state:
        st.session_state["snapshot"] = fetch_snapshot(get_client())
    return st.session_state["snapshot"]


def refresh_snapshot() -> Snapshot:
    # a failed refetch keeps the previous lists on screen
    updated = fetch_snapshot(get_client(), st.session_state.get("snapshot"))
    st.session_state["snapshot"] = updated
    return updated


def transfers_frame(transfers: List[Transfer]) -> pd.DataFrame:
    records = [t.to_record() for t in transfers]
    df = pd.DataFrame.from_records(
        records,
        columns=["transfer_id", "from_account", "to_account", "amount", "date", "reference", "approved_by", "status"],
    )
    if not df.empty:
        df["date"] = pd.to_datetime(df["date"], utc=True, errors="coerce").dt.strftime("%Y-%m-%d")
        df["amount"] = df["amount"].apply(format_amount)
    return df


def accounts_frame(accounts: List[Account]) -> pd.DataFrame:
    df = pd.DataFrame.from_records(
        [a.to_record() for a in accounts],
        columns=["account_id", "oid", "name", "bank", "account_number", "balance"],
    )
    if not df.empty:
        df["balance"] = df["balance"].apply(format_amount)
    return df


# ---------- Sections ----------
def render_transfer_history(snap: Snapshot):
    state = page_state()
    c1, c2 = st.columns([6, 2])
    search = c1.text_input("Search by ID, account, reference...", value=state.filters.search)
    status = c2.selectbox(
        "Filter by Status",
        options=list(STATUS_FILTERS),
        index=list(STATUS_FILTERS).index(state.filters.status),
        format_func=lambda s: "All Statuses" if s == "all" else s.title(),
    )
    state = state.with_search(search).with_status(status)
    set_page_state(state)

    rows = apply_filters(snap.transfers, state.filters)
    with card("Fund Transfer History"):
        st.caption("View all fund transfers between accounts")
        if not rows:
            st.info("No transfers match the current filters.")
            return
        st.dataframe(transfers_frame(rows), use_container_width=True, hide_index=True)
        choice = st.selectbox(
            "Transfer details",
            options=[NO_CHOICE] + list(range(len(rows))),
            format_func=lambda i: i if i == NO_CHOICE else f"{rows[i].transfer_id or rows[i].oid or i} • {rows[i].reference or 'no reference'}",
        )
        if selection_changed("_transfer_choice", choice) and choice != NO_CHOICE:
            set_page_state(state.open_transfer(rows[choice]))


def render_transfer_details():
    dialog = page_state().dialog
    if not isinstance(dialog, Viewing):
        return
    t: Transfer = dialog.record
    with card(f"Transfer {t.transfer_id or t.oid}"):
        st.markdown(f"**From:** {t.from_account or t.from_account_id}  \n**To:** {t.to_account or t.to_account_id}")
        st.markdown(f"**Amount:** {format_amount(t.amount)}  \n**Date:** {t.date.strftime('%Y-%m-%d %H:%M') if t.date else ''}")
        st.markdown(f"**Reference:** {t.reference}  \n**Approved By:** {t.approved_by}")
        st.markdown(f"**Status:** {status_chip(t.status)}", unsafe_allow_html=True)
        if t.notes:
            st.markdown(f"**Notes:** {t.notes}")
        if st.button("Close details"):
            set_page_state(page_state().close())
            st.rerun()


def render_accounts(snap: Snapshot):
    with card("Account Information"):
        if not snap.accounts:
            st.info("No accounts yet.")
        else:
            st.dataframe(accounts_frame(list(snap.accounts)), use_container_width=True, hide_index=True)
            options = list_account_options(snap.accounts)
            by_key = options_by_key(options)
            chosen = account_selectbox(st, "View transactions for", by_key)
            if selection_changed("_ledger_choice", chosen) and chosen != NO_CHOICE:
                account = find_account(snap.accounts, resolve_selection(by_key[chosen].value))
                if account is not None:
                    set_page_state(page_state().open_ledger(account))

    with card("Add Account"):
        with st.form("add_account", clear_on_submit=False):
            name = st.text_input("Account Name")
            bank = st.text_input("Bank")
            account_number = st.text_input("Account Number")
            balance = st.text_input("Opening Balance", value="")
            submitted = st.form_submit_button("Add Account")
        if submitted:
            try:
                payload = validate_account(AccountDraft(name=name, bank=bank, account_number=account_number, balance=balance))
            except ValidationError as exc:
                st.error(exc.message)
                return
            try:
                get_client().create_account(payload)
            except BackendError as exc:
                logger.warning("add account failed: %s", exc.message)
                st.warning(exc.message)
                return
            refresh_snapshot()
            st.success("Account added successfully!")


def render_account_transactions(snap: Snapshot):
    dialog = page_state().dialog
    if not isinstance(dialog, ViewingLedger):
        return
    account = dialog.account
    with card(f"Transactions — {account.display_name}"):
        st.caption(f"{account.bank} • {account.account_number} • Balance {format_amount(account.balance)}")
        direction = st.radio(
            "Direction",
            options=list(DIRECTION_LABELS),
            index=list(DIRECTION_LABELS).index(dialog.direction),
            format_func=DIRECTION_LABELS.get,
            horizontal=True,
        )
        if direction != dialog.direction:
            set_page_state(page_state().set_ledger_direction(direction))

        rows = derive_account_transactions(account, snap.transfers, direction, accounts=snap.accounts)
        totals = compute_totals(rows).rounded()
        c1, c2, c3 = st.columns(3)
        c1.metric("Incoming", format_amount(totals["incoming"]))
        c2.metric("Outgoing", format_amount(totals["outgoing"]))
        c3.metric("Net", format_amount(totals["net"]))

        if not rows:
            st.info("No transactions for this account.")
        else:
            df = rows_to_frame(rows)
            df["direction"] = df["direction"].map({"in": "Incoming", "out": "Outgoing"})
            df["amount"] = df["amount"].apply(format_amount)
            df["date"] = df["date"].dt.strftime("%Y-%m-%d %H:%M")
            st.dataframe(df, use_container_width=True, hide_index=True)
        if st.button("Close transactions"):
            set_page_state(page_state().close())
            st.rerun()


def render_new_transfer(snap: Snapshot):
    options = list_account_options(snap.accounts)
    if not options:
        st.info("Add an account before creating transfers.")
        return
    by_key = options_by_key(options)
    with card("New Transfer"):
        with st.form("new_transfer"):
            c1, c2 = st.columns(2)
            from_key = account_selectbox(c1, "From Account", by_key)
            to_key = account_selectbox(c2, "To Account", by_key)
            amount = c1.text_input("Amount")
            transfer_date = c2.date_input("Transfer Date", value=None)
            reference = c1.text_input("Reference")
            approved_by = c2.text_input("Approved By")
            notes = st.text_area("Notes")
            submitted = st.form_submit_button("Create Transfer")
        if not submitted:
            return

        draft = TransferDraft(
            amount=amount,
            reference=reference,
            transfer_date=transfer_date.isoformat() if transfer_date else "",
            approved_by=approved_by,
            notes=notes,
        )
        try:
            if from_key != NO_CHOICE:
                draft = draft.with_source(resolve_selection(by_key[from_key].value), snap.accounts)
            if to_key != NO_CHOICE:
                draft = draft.with_destination(resolve_selection(by_key[to_key].value), snap.accounts)
            payload = validate_transfer(draft)
        except ValidationError as exc:
            st.error(exc.message)
            return
        try:
            get_client().create_transfer(payload)
        except BackendError as exc:
            logger.warning("transfer create failed: %s", exc.message)
            st.warning(exc.message)
            return
        refresh_snapshot()
        st.success("Transfer created successfully!")


# ---------- UI setup ----------
configure_logging(get_settings().log_level)
st.set_page_config(page_title="Fund Transfer", layout="wide")
render_page_header("Fund Transfer", "Dashboard / Fee / Fund Transfer")

snap = snapshot()
if snap.error:
    if snap.loaded:
        st.warning(f"Showing data from {snap.fetched_at:%H:%M:%S}; latest refresh failed: {snap.error}")
    else:
        st.warning(f"Could not load transfers: {snap.error}")

tab_history, tab_accounts, tab_new = st.tabs(["Transfer History", "Accounts", "New Transfer"])
with tab_history:
    render_transfer_history(snap)
    render_transfer_details()
with tab_accounts:
    render_accounts(snap)
    render_account_transactions(snap)
with tab_new:
    render_new_transfer(snap)
