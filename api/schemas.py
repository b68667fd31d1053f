from __future__ import annotations

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field


class LedgerRequest(BaseModel):
    account_key: str
    direction: Literal["all", "in", "out"] = "all"


class TransferCreateModel(BaseModel):
    from_account_key: Optional[str] = None
    to_account_key: Optional[str] = None
    from_account_id: str = ""
    to_account_id: str = ""
    from_account: str = ""
    to_account: str = ""
    amount: Union[float, str] = ""
    reference: str = ""
    transfer_date: str = ""
    approved_by: str = ""
    notes: str = ""


class AccountCreateModel(BaseModel):
    name: str = ""
    bank: str = ""
    account_number: str = ""
    balance: Union[float, str] = ""


class AccountOptionModel(BaseModel):
    key: str
    value: str
    label: str


class AccountOptionsResponse(BaseModel):
    options: List[AccountOptionModel] = Field(default_factory=list)
