"""Bank pool, bank account and cash-flow note routes."""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from giros.api.dependencies import (
    get_account_registry_service,
    get_assignment_dispatcher,
    get_bank_ledger_service,
)
from giros.api.schemas.accounts import (
    BankResponse,
    CreateBankAccountRequest,
    CreateBankRequest,
)
from giros.api.schemas.ledger import (
    AccountMovementRequest,
    AddAssignmentRequest,
    AssignmentResponse,
    BankAccountResponse,
    BankAccountTransactionResponse,
    BankNoteListResponse,
    BankNoteRequest,
    BankNoteResponse,
    UpdateAssignmentRequest,
    UpdatePriorityRequest,
)
from giros.db.models.bank import Currency
from giros.db.models.bank_account import AccountOwnerType, AccountType
from giros.db.models.bank_account_transaction import BankAccountTransactionType
from giros.db.models.bank_transaction import BankTransactionType
from giros.domain.money import parse_money
from giros.services.account_registry_service import (
    AccountRegistryService,
    CreateBankAccountInput,
    CreateBankInput,
)
from giros.services.assignment_dispatcher import (
    AddAssignmentInput,
    AssignmentDispatcher,
)
from giros.services.bank_ledger_service import (
    AccountMovementInput,
    BankLedgerService,
    BankNoteInput,
)

router = APIRouter(prefix="/banks", tags=["Banks"])
accounts_router = APIRouter(prefix="/bank-accounts", tags=["Bank accounts"])


@router.post(
    "",
    response_model=BankResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Bank code already registered"}},
)
def create_bank(
    payload: CreateBankRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> BankResponse:
    """Register a bank giros can be sent to."""

    bank = service.create_bank(
        CreateBankInput(
            name=payload.name,
            code=payload.code,
            currency=Currency(payload.currency),
        )
    )
    return BankResponse.from_model(bank)


@router.post(
    "/{bank_id}/assignments",
    response_model=AssignmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Bank or transferencista not found"},
        422: {"description": "Already assigned"},
    },
)
def add_assignment(
    bank_id: UUID,
    payload: AddAssignmentRequest,
    dispatcher: Annotated[AssignmentDispatcher, Depends(get_assignment_dispatcher)],
) -> AssignmentResponse:
    """Add a transferencista to the bank's dispatch pool."""

    assignment = dispatcher.add_assignment(
        AddAssignmentInput(
            bank_id=bank_id,
            transferencista_id=payload.transferencista_id,
            priority=payload.priority,
            is_active=payload.is_active,
        )
    )
    return AssignmentResponse.from_model(assignment)


@router.patch(
    "/{bank_id}/assignments/{transferencista_id}",
    response_model=AssignmentResponse,
    responses={404: {"description": "Assignment not found"}},
)
def update_assignment(
    bank_id: UUID,
    transferencista_id: UUID,
    payload: UpdateAssignmentRequest,
    dispatcher: Annotated[AssignmentDispatcher, Depends(get_assignment_dispatcher)],
) -> AssignmentResponse:
    assignment = dispatcher.set_assignment_active(
        bank_id=bank_id,
        transferencista_id=transferencista_id,
        is_active=payload.is_active,
    )
    return AssignmentResponse.from_model(assignment)


@router.patch(
    "/{bank_id}/assignments/{transferencista_id}/priority",
    response_model=AssignmentResponse,
    responses={404: {"description": "Assignment not found"}},
)
def update_assignment_priority(
    bank_id: UUID,
    transferencista_id: UUID,
    payload: UpdatePriorityRequest,
    dispatcher: Annotated[AssignmentDispatcher, Depends(get_assignment_dispatcher)],
) -> AssignmentResponse:
    """Move a pool member in rotation order."""

    assignment = dispatcher.update_assignment_priority(
        bank_id=bank_id,
        transferencista_id=transferencista_id,
        priority=payload.priority,
    )
    return AssignmentResponse.from_model(assignment)


@router.post(
    "/{bank_id}/transactions",
    response_model=BankNoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Bank not found"}},
)
def record_note(
    bank_id: UUID,
    payload: BankNoteRequest,
    service: Annotated[BankLedgerService, Depends(get_bank_ledger_service)],
) -> BankNoteResponse:
    """Record a platform cash-flow note."""

    note = service.record_note(
        BankNoteInput(
            bank_id=bank_id,
            note_type=BankTransactionType(payload.type),
            amount=parse_money(payload.amount),
            description=payload.description,
            reference=payload.reference,
            created_by=payload.created_by,
        )
    )
    return BankNoteResponse.from_model(note)


@router.get(
    "/{bank_id}/transactions",
    response_model=BankNoteListResponse,
    responses={404: {"description": "Bank not found"}},
)
def list_notes(
    bank_id: UUID,
    service: Annotated[BankLedgerService, Depends(get_bank_ledger_service)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> BankNoteListResponse:
    items, total = service.list_notes(bank_id, limit=limit, offset=offset)
    return BankNoteListResponse(
        items=[BankNoteResponse.from_model(item) for item in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@accounts_router.post(
    "",
    response_model=BankAccountResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Owner and transferencista do not match"},
        404: {"description": "Bank or transferencista not found"},
        422: {"description": "Account number already registered"},
    },
)
def open_account(
    payload: CreateBankAccountRequest,
    service: Annotated[AccountRegistryService, Depends(get_account_registry_service)],
) -> BankAccountResponse:
    """Open a platform or agent account with a zero balance."""

    account = service.create_bank_account(
        CreateBankAccountInput(
            bank_id=payload.bank_id,
            owner_type=AccountOwnerType(payload.owner_type),
            transferencista_id=payload.transferencista_id,
            account_number=payload.account_number,
            account_holder=payload.account_holder,
            account_type=AccountType(payload.account_type),
        )
    )
    return BankAccountResponse.from_model(account)


@accounts_router.get(
    "/{bank_account_id}",
    response_model=BankAccountResponse,
    responses={404: {"description": "Bank account not found"}},
)
def get_account(
    bank_account_id: UUID,
    service: Annotated[BankLedgerService, Depends(get_bank_ledger_service)],
) -> BankAccountResponse:
    return BankAccountResponse.from_model(service.get_account(bank_account_id))


@accounts_router.post(
    "/{bank_account_id}/movements",
    response_model=BankAccountTransactionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"description": "Bank account not found"},
        422: {"description": "Insufficient balance"},
    },
)
def post_movement(
    bank_account_id: UUID,
    payload: AccountMovementRequest,
    service: Annotated[BankLedgerService, Depends(get_bank_ledger_service)],
) -> BankAccountTransactionResponse:
    """Deposit, withdraw or adjust a bank account balance."""

    entry = service.post_movement(
        AccountMovementInput(
            bank_account_id=bank_account_id,
            movement_type=BankAccountTransactionType(payload.type),
            amount=parse_money(payload.amount),
            fee=parse_money(payload.fee),
            reference=payload.reference,
            created_by=payload.created_by,
        )
    )
    return BankAccountTransactionResponse.from_model(entry)


@accounts_router.get(
    "/{bank_account_id}/transactions",
    response_model=list[BankAccountTransactionResponse],
    responses={404: {"description": "Bank account not found"}},
)
def list_account_entries(
    bank_account_id: UUID,
    service: Annotated[BankLedgerService, Depends(get_bank_ledger_service)],
) -> list[BankAccountTransactionResponse]:
    return [
        BankAccountTransactionResponse.from_model(entry)
        for entry in service.list_account_entries(bank_account_id)
    ]
