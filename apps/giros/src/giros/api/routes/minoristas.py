"""Minorista account and ledger routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from giros.api.dependencies import (
    get_account_registry_service,
    get_minorista_ledger_service,
)
from giros.api.schemas.accounts import (
    CreateMinoristaRequest,
    UpdateProfitPercentageRequest,
)
from giros.api.schemas.ledger import (
    AdjustmentRequest,
    MinoristaBalanceResponse,
    MinoristaTransactionListResponse,
    MinoristaTransactionResponse,
    RechargeRequest,
)
from giros.domain.money import parse_money
from giros.services.account_registry_service import (
    AccountRegistryService,
    CreateMinoristaInput,
)
from giros.services.minorista_ledger_service import (
    AdjustmentInput,
    MinoristaLedgerService,
    RechargeInput,
)

router = APIRouter(prefix="/minoristas", tags=["Minoristas"])


@router.post(
    "",
    response_model=MinoristaBalanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid credit limit or percentage"}},
)
def create_minorista(
    payload: CreateMinoristaRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> MinoristaBalanceResponse:
    """Open a credit account with the whole line available."""

    minorista = service.create_minorista(
        CreateMinoristaInput(
            full_name=payload.full_name,
            credit_limit=parse_money(payload.credit_limit),
            profit_percentage=Decimal(payload.profit_percentage),
        )
    )
    return MinoristaBalanceResponse.from_model(minorista)


@router.patch(
    "/{minorista_id}/profit-percentage",
    response_model=MinoristaBalanceResponse,
    responses={
        400: {"description": "Percentage out of range"},
        404: {"description": "Minorista not found"},
    },
)
def update_profit_percentage(
    minorista_id: UUID,
    payload: UpdateProfitPercentageRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> MinoristaBalanceResponse:
    """Change the share applied to discounts posted from now on."""

    minorista = service.update_profit_percentage(
        minorista_id, Decimal(payload.profit_percentage)
    )
    return MinoristaBalanceResponse.from_model(minorista)


@router.post(
    "/{minorista_id}/recharges",
    response_model=MinoristaTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Minorista not found"}},
)
def recharge(
    minorista_id: UUID,
    payload: RechargeRequest,
    service: Annotated[MinoristaLedgerService, Depends(get_minorista_ledger_service)],
) -> MinoristaTransactionResponse:
    """Fund the minorista account."""

    entry = service.recharge(
        RechargeInput(
            minorista_id=minorista_id,
            amount=parse_money(payload.amount),
            created_by=payload.created_by,
            description=payload.description,
            to_balance_in_favor=payload.to_balance_in_favor,
        )
    )
    return MinoristaTransactionResponse.from_model(entry)


@router.post(
    "/{minorista_id}/adjustments",
    response_model=MinoristaTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid adjustment"},
        404: {"description": "Minorista not found"},
    },
)
def adjust(
    minorista_id: UUID,
    payload: AdjustmentRequest,
    service: Annotated[MinoristaLedgerService, Depends(get_minorista_ledger_service)],
) -> MinoristaTransactionResponse:
    """Post a signed manual correction."""

    entry = service.adjust(
        AdjustmentInput(
            minorista_id=minorista_id,
            amount=parse_money(payload.amount),
            description=payload.description,
            created_by=payload.created_by,
        )
    )
    return MinoristaTransactionResponse.from_model(entry)


@router.get(
    "/{minorista_id}/transactions",
    response_model=MinoristaTransactionListResponse,
    responses={404: {"description": "Minorista not found"}},
)
def list_transactions(
    minorista_id: UUID,
    service: Annotated[MinoristaLedgerService, Depends(get_minorista_ledger_service)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> MinoristaTransactionListResponse:
    """List completed ledger entries, newest first."""

    items, total = service.list_history(minorista_id, limit=limit, offset=offset)
    return MinoristaTransactionListResponse.from_models(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/{minorista_id}/balance",
    response_model=MinoristaBalanceResponse,
    responses={404: {"description": "Minorista not found"}},
)
def get_balance(
    minorista_id: UUID,
    service: Annotated[MinoristaLedgerService, Depends(get_minorista_ledger_service)],
) -> MinoristaBalanceResponse:
    return MinoristaBalanceResponse.from_model(service.get_account(minorista_id))
