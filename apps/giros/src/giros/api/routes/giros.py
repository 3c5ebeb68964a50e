"""Giro lifecycle routes."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from giros.api.dependencies import get_giro_service
from giros.api.schemas.giros import (
    CancelGiroRequest,
    CompleteGiroRequest,
    CreateGiroRequest,
    GiroResponse,
    ReturnGiroRequest,
)
from giros.db.models.bank import Currency
from giros.db.models.giro import ExecutionType
from giros.domain.money import parse_money
from giros.services.giro_service import (
    CompleteGiroInput,
    CreateGiroInput,
    GiroService,
)
from giros.services.rate_book_service import RateValues

router = APIRouter(prefix="/giros", tags=["Giros"])

TRANSITION_RESPONSES: dict[int | str, dict[str, str]] = {
    404: {"description": "Giro not found"},
    409: {"description": "Giro already closed or concurrent update"},
    422: {"description": "Precondition failed"},
}


@router.post(
    "",
    response_model=GiroResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid payload"},
        404: {"description": "Bank or minorista not found"},
        422: {"description": "No current rate"},
    },
)
def create_giro(
    payload: CreateGiroRequest,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    """Create a giro priced against the current or a custom rate."""

    custom_rate = (
        RateValues(
            buy_rate=Decimal(payload.custom_rate.buy_rate),
            sell_rate=Decimal(payload.custom_rate.sell_rate),
            usd=Decimal(payload.custom_rate.usd),
            bcv=Decimal(payload.custom_rate.bcv),
        )
        if payload.custom_rate is not None
        else None
    )
    giro = service.create_giro(
        CreateGiroInput(
            beneficiary_name=payload.beneficiary_name,
            beneficiary_id=payload.beneficiary_id,
            bank_id=payload.bank_id,
            account_number=payload.account_number,
            phone=payload.phone,
            amount_input=parse_money(payload.amount_input),
            currency_input=Currency(payload.currency_input),
            execution_type=ExecutionType(payload.execution_type),
            commission=(
                parse_money(payload.commission)
                if payload.commission is not None
                else None
            ),
            minorista_id=payload.minorista_id,
            custom_rate=custom_rate,
            created_by=payload.created_by,
        )
    )
    return GiroResponse.from_model(giro)


@router.get(
    "/{giro_id}",
    response_model=GiroResponse,
    responses={404: {"description": "Giro not found"}},
)
def get_giro(
    giro_id: UUID,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    return GiroResponse.from_model(service.get_giro(giro_id))


@router.post(
    "/{giro_id}/assign",
    response_model=GiroResponse,
    responses=TRANSITION_RESPONSES,
)
def assign_giro(
    giro_id: UUID,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    """Assign the giro to the next transferencista of its bank."""

    return GiroResponse.from_model(service.assign_giro(giro_id))


@router.post(
    "/{giro_id}/start",
    response_model=GiroResponse,
    responses=TRANSITION_RESPONSES,
)
def start_giro(
    giro_id: UUID,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    return GiroResponse.from_model(service.start_processing(giro_id))


@router.post(
    "/{giro_id}/complete",
    response_model=GiroResponse,
    responses=TRANSITION_RESPONSES,
)
def complete_giro(
    giro_id: UUID,
    payload: CompleteGiroRequest,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    """Settle the giro and post its ledger entries."""

    giro = service.complete_giro(
        CompleteGiroInput(
            giro_id=giro_id,
            bank_account_id=payload.bank_account_id,
            actor_id=payload.actor_id,
            fee=parse_money(payload.fee),
            execution_type=(
                ExecutionType(payload.execution_type)
                if payload.execution_type
                else None
            ),
            commission=(
                parse_money(payload.commission)
                if payload.commission is not None
                else None
            ),
            payment_proof_key=payload.payment_proof_key,
        )
    )
    return GiroResponse.from_model(giro)


@router.post(
    "/{giro_id}/cancel",
    response_model=GiroResponse,
    responses=TRANSITION_RESPONSES,
)
def cancel_giro(
    giro_id: UUID,
    payload: CancelGiroRequest,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    return GiroResponse.from_model(
        service.cancel_giro(giro_id, actor_id=payload.actor_id)
    )


@router.post(
    "/{giro_id}/return",
    response_model=GiroResponse,
    responses=TRANSITION_RESPONSES,
)
def return_giro(
    giro_id: UUID,
    payload: ReturnGiroRequest,
    service: Annotated[GiroService, Depends(get_giro_service)],
) -> GiroResponse:
    """Mark the giro as returned with a mandatory reason."""

    return GiroResponse.from_model(
        service.return_giro(giro_id, reason=payload.reason, actor_id=payload.actor_id)
    )
