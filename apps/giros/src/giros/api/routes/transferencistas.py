"""Transferencista provisioning routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from giros.api.dependencies import get_account_registry_service
from giros.api.schemas.accounts import (
    CreateTransferencistaRequest,
    TransferencistaResponse,
    UpdateAvailabilityRequest,
)
from giros.services.account_registry_service import (
    AccountRegistryService,
    CreateTransferencistaInput,
)

router = APIRouter(prefix="/transferencistas", tags=["Transferencistas"])


@router.post(
    "",
    response_model=TransferencistaResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid payload"}},
)
def create_transferencista(
    payload: CreateTransferencistaRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> TransferencistaResponse:
    transferencista = service.create_transferencista(
        CreateTransferencistaInput(
            full_name=payload.full_name,
            available=payload.available,
        )
    )
    return TransferencistaResponse.from_model(transferencista)


@router.patch(
    "/{transferencista_id}/availability",
    response_model=TransferencistaResponse,
    responses={404: {"description": "Transferencista not found"}},
)
def update_availability(
    transferencista_id: UUID,
    payload: UpdateAvailabilityRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> TransferencistaResponse:
    """Take the agent out of, or back into, dispatch for every bank."""

    transferencista = service.set_transferencista_available(
        transferencista_id,
        available=payload.available,
    )
    return TransferencistaResponse.from_model(transferencista)
