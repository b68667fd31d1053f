from __future__ import annotations

import math

import pytest

from conftest import make_account
from core.amounts import coerce_amount, format_amount, parse_amount, round_half_up
from core.errors import AmountError, ValidationError
from core.models import ById, ByLegacyRef, ByName
from core.validation import (
    BAD_AMOUNT,
    BAD_BALANCE,
    MISSING_ACCOUNT_FIELDS,
    MISSING_ACCOUNTS,
    SAME_ACCOUNT,
    AccountDraft,
    TransferDraft,
    validate_account,
    validate_transfer,
)


@pytest.mark.parametrize("raw, expected", [(5, 5.0), ("12.50", 12.5), ("-3", -3.0)])
def test_parse_amount(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "abc", "nan", "inf", "1,000", "1_000", True, float("nan")])
def test_parse_amount_rejects(raw):
    with pytest.raises(AmountError):
        parse_amount(raw)


def test_coerce_amount_defaults_to_zero():
    assert coerce_amount("abc") == 0.0
    assert coerce_amount("1,000") == 0.0
    assert coerce_amount(None) == 0.0
    assert coerce_amount("7") == 7.0


def test_round_and_format():
    assert round_half_up(2.675, 2) == 2.68
    assert round_half_up(None) is None
    assert format_amount(1234.5) == "1,234.50"
    assert format_amount("junk") == "0.00"
    assert not math.isnan(round_half_up(-60.456, 2))


def test_transfer_by_ids_builds_payload():
    draft = TransferDraft(from_account_id="A1", to_account_id="B2", amount="250", reference="REF-9", approved_by="Principal")
    payload = validate_transfer(draft)
    assert payload == {
        "amount": 250.0,
        "reference": "REF-9",
        "transferDate": "",
        "approvedBy": "Principal",
        "notes": "",
        "fromAccountId": "A1",
        "toAccountId": "B2",
    }


def test_transfer_by_legacy_names():
    payload = validate_transfer(TransferDraft(from_account="Fees", to_account="Ops", amount="10"))
    assert payload["fromAccount"] == "Fees"
    assert payload["toAccount"] == "Ops"
    assert "fromAccountId" not in payload


@pytest.mark.parametrize(
    "draft, message",
    [
        (TransferDraft(to_account_id="B2", amount="10"), MISSING_ACCOUNTS),
        (TransferDraft(from_account="Fees", amount="10"), MISSING_ACCOUNTS),
        (TransferDraft(from_account_id="A1", to_account_id="A1", amount="10"), SAME_ACCOUNT),
        (TransferDraft(from_account_id="A1", to_account_id="B2", amount="0"), BAD_AMOUNT),
        (TransferDraft(from_account_id="A1", to_account_id="B2", amount="-5"), BAD_AMOUNT),
        (TransferDraft(from_account_id="A1", to_account_id="B2", amount="ten"), BAD_AMOUNT),
        (TransferDraft(from_account_id="A1", to_account_id="B2", amount="1,000"), BAD_AMOUNT),
        (TransferDraft(from_account_id="A1", to_account_id="B2"), BAD_AMOUNT),
    ],
)
def test_transfer_validation_errors(draft, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_transfer(draft)
    assert excinfo.value.message == message


def test_same_names_are_left_to_the_backend():
    payload = validate_transfer(TransferDraft(from_account="Fees", to_account="Fees", amount="1"))
    assert payload["fromAccount"] == payload["toAccount"] == "Fees"


def test_draft_sides_from_references():
    accounts = [make_account(accountId="A1", _id="db1", name="Main"), make_account(_id="db2", name="Fees")]
    draft = TransferDraft(amount="5").with_source(ById("A1"), accounts).with_destination(ByLegacyRef("db2"), accounts)
    assert (draft.from_account_id, draft.from_account) == ("A1", "")
    assert (draft.to_account_id, draft.to_account) == ("", "Fees")
    payload = validate_transfer(draft)
    assert payload["fromAccountId"] == "A1"
    assert payload["toAccount"] == "Fees"

    renamed = draft.with_destination(ByName("Petty"), accounts)
    assert (renamed.to_account_id, renamed.to_account) == ("", "Petty")


def test_account_payload_defaults_blank_balance_to_zero():
    payload = validate_account(AccountDraft(name=" Main ", bank="SBI", account_number="0012", balance=""))
    assert payload == {"name": "Main", "bank": "SBI", "accountNumber": "0012", "balance": 0.0}


@pytest.mark.parametrize(
    "draft, message",
    [
        (AccountDraft(bank="SBI", account_number="1"), MISSING_ACCOUNT_FIELDS),
        (AccountDraft(name="Main", account_number="1"), MISSING_ACCOUNT_FIELDS),
        (AccountDraft(name="Main", bank="SBI", account_number="1", balance="-1"), BAD_BALANCE),
        (AccountDraft(name="Main", bank="SBI", account_number="1", balance="lots"), BAD_BALANCE),
    ],
)
def test_account_validation_errors(draft, message):
    with pytest.raises(ValidationError) as excinfo:
        validate_account(draft)
    assert excinfo.value.message == message
