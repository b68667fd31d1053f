from __future__ import annotations

import pytest

from conftest import make_account, make_transfer
from core.view_state import (
    ConfirmingDelete,
    Editing,
    FundTransferPageState,
    Idle,
    Viewing,
    ViewingLedger,
)


def test_initial_state_is_idle():
    state = FundTransferPageState()
    assert state.dialog == Idle()
    assert state.filters.search == ""


def test_opening_a_dialog_replaces_the_previous_one():
    account = make_account(accountId="A1", name="Main")
    transfer = make_transfer(transferId="T1")
    state = FundTransferPageState().open_transfer(transfer)
    assert state.dialog == Viewing(transfer)
    state = state.open_ledger(account)
    assert state.dialog == ViewingLedger(account, "all")
    state = state.start_editing({"amount": "5"})
    assert isinstance(state.dialog, Editing)
    state = state.confirm_delete(transfer)
    assert state.dialog == ConfirmingDelete(transfer)
    assert state.close().dialog == Idle()


def test_ledger_direction_changes_and_resets():
    account = make_account(accountId="A1", name="Main")
    state = FundTransferPageState().open_ledger(account).set_ledger_direction("out")
    assert state.dialog.direction == "out"
    assert state.open_ledger(account).dialog.direction == "all"


def test_ledger_direction_requires_open_ledger():
    with pytest.raises(ValueError):
        FundTransferPageState().set_ledger_direction("in")
    state = FundTransferPageState().open_ledger(make_account(name="Main"))
    with pytest.raises(ValueError):
        state.set_ledger_direction("both")


def test_filters_survive_dialog_changes():
    state = FundTransferPageState().with_search("  fees ").with_status("Completed")
    state = state.open_transfer(make_transfer()).close()
    assert state.filters.search == "fees"
    assert state.filters.status == "completed"
    assert state.with_status("unknown").filters.status == "all"
