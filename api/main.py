from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
import logging
import math
from typing import Optional

import numpy as np
import pandas as pd
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import AccountCreateModel, AccountOptionsResponse, LedgerRequest, TransferCreateModel
from core.accounts import find_account, list_account_options, resolve_selection
from core.client import BackendClient
from core.errors import BackendError, ValidationError
from core.filters import normalize_filters, apply_filters
from core.ledger import compute_ledger_view
from core.refresh import PeriodicRefresh
from core.settings import Settings, configure_logging, get_settings
from core.snapshot import Snapshot, SnapshotStore
from core.validation import AccountDraft, TransferDraft, validate_account, validate_transfer

logger = logging.getLogger(__name__)
router = APIRouter()


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _unexpected(name: str, exc: Exception) -> JSONResponse:
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _client(request: Request) -> BackendClient:
    return request.app.state.client


def _store(request: Request) -> SnapshotStore:
    return request.app.state.store


def _load_snapshot(request: Request) -> Snapshot:
    """Current snapshot, fetching synchronously if nothing has been loaded yet."""
    snapshot = _store(request).current()
    if not snapshot.loaded:
        snapshot = _store(request).refresh(_client(request))
    if not snapshot.loaded:
        raise BackendError(snapshot.error or "Backend unavailable")
    return snapshot


@router.get("/meta/accounts")
def meta_accounts(request: Request):
    try:
        snapshot = _load_snapshot(request)
        options = [asdict(o) for o in list_account_options(snapshot.accounts)]
        return _json(AccountOptionsResponse(options=options).model_dump())
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("meta_accounts", exc)


@router.get("/accounts")
def accounts(request: Request):
    try:
        snapshot = _load_snapshot(request)
        return _json({"accounts": [a.to_record() for a in snapshot.accounts]})
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("accounts", exc)


@router.get("/transfers")
def transfers(request: Request, q: str = Query(default=""), status: str = Query(default="all")):
    try:
        snapshot = _load_snapshot(request)
        f = normalize_filters({"search": q, "status": status})
        rows = apply_filters(snapshot.transfers, f)
        return _json({"filters": asdict(f), "transfers": [t.to_record() for t in rows], "count": len(rows)})
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("transfers", exc)


@router.post("/ledger")
def ledger(request: Request, body: LedgerRequest):
    try:
        ref = resolve_selection(body.account_key)
    except ValidationError as exc:
        return _error(400, exc.message)
    try:
        snapshot = _load_snapshot(request)
        account = find_account(snapshot.accounts, ref)
        if account is None:
            return _error(404, f"Unknown account: {body.account_key}")
        payload = compute_ledger_view(account, snapshot.transfers, body.direction, accounts=snapshot.accounts)
        return _json(payload)
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("ledger", exc)


@router.post("/transfers")
def create_transfer(request: Request, body: TransferCreateModel):
    try:
        snapshot = _store(request).current()
        if (body.from_account_key or body.to_account_key) and not snapshot.loaded:
            snapshot = _load_snapshot(request)
        draft = TransferDraft(
            from_account_id=body.from_account_id,
            to_account_id=body.to_account_id,
            from_account=body.from_account,
            to_account=body.to_account,
            amount=str(body.amount),
            reference=body.reference,
            transfer_date=body.transfer_date,
            approved_by=body.approved_by,
            notes=body.notes,
        )
        if body.from_account_key:
            draft = draft.with_source(resolve_selection(body.from_account_key), snapshot.accounts)
        if body.to_account_key:
            draft = draft.with_destination(resolve_selection(body.to_account_key), snapshot.accounts)
        payload = validate_transfer(draft)
    except ValidationError as exc:
        return _error(422, exc.message)
    except BackendError as exc:
        return _error(502, exc.message)

    try:
        created = _client(request).create_transfer(payload)
        # balances change with transfers, so both lists are refetched
        _store(request).refresh(_client(request))
        return _json({"transfer": created.to_record() if created else None}, status_code=201)
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("create_transfer", exc)


@router.post("/accounts")
def create_account(request: Request, body: AccountCreateModel):
    try:
        payload = validate_account(
            AccountDraft(
                name=body.name,
                bank=body.bank,
                account_number=body.account_number,
                balance=str(body.balance),
            )
        )
    except ValidationError as exc:
        return _error(422, exc.message)

    try:
        created = _client(request).create_account(payload)
        _store(request).refresh(_client(request))
        return _json({"account": created.to_record() if created else None}, status_code=201)
    except BackendError as exc:
        return _error(502, exc.message)
    except Exception as exc:
        return _unexpected("create_account", exc)


@router.get("/snapshot/status")
def snapshot_status(request: Request):
    snapshot = _store(request).current()
    return _json(
        {
            "loaded": snapshot.loaded,
            "fetched_at": snapshot.fetched_at.isoformat() if snapshot.fetched_at else None,
            "error": snapshot.error,
            "accounts": len(snapshot.accounts),
            "transfers": len(snapshot.transfers),
        }
    )


def create_app(settings: Optional[Settings] = None, client: Optional[BackendClient] = None) -> FastAPI:
    settings = settings or get_settings()
    client = client or BackendClient(settings.api_base_url, timeout=settings.timeout)
    store = SnapshotStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        poller = None
        if settings.poll_interval > 0:
            poller = PeriodicRefresh(settings.poll_interval, lambda: store.refresh(client), name="snapshot-refresh")
            poller.start()
        try:
            yield
        finally:
            if poller is not None:
                poller.stop(timeout=5.0)
            client.close()

    app = FastAPI(title="Fund Transfer Dashboard API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.client = client
    app.state.store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


configure_logging(get_settings().log_level)
app = create_app()
