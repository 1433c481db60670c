from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from buddy.core.auth import get_actor_id
from buddy.core.database import get_db
from buddy.modules.fees.schemas import (
    AmountResponse,
    ApproveResult,
    DepositRequest,
    LogIdsRequest,
    MemberListResponse,
    PaymentLogResponse,
    RejectResult,
    SubmitRequest,
    TermCreate,
    TermDetailResponse,
    TermResponse,
)
from buddy.modules.fees.service import FeeQueryService, FeeTermService, PaymentLogService
from buddy.modules.members.schemas import MemberResponse
from buddy.shared.schemas import SuccessResponse

router = APIRouter(prefix="/fees", tags=["Club Fees"])

YearPath = Annotated[int, Path(ge=1900, le=2100)]
SemesterPath = Annotated[int, Path(ge=1, le=2)]


# --- Term Endpoints ---

@router.get("", response_model=SuccessResponse[list[TermResponse]])
async def list_terms(
    year: int | None = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List fee terms."""
    terms = await FeeTermService(db).list_terms(year=year)
    return SuccessResponse(
        data=[TermResponse.model_validate(t) for t in terms],
        message="Terms retrieved",
    )


@router.post("", response_model=SuccessResponse[TermResponse], status_code=201)
async def create_term(
    data: TermCreate,
    db: AsyncSession = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    """Create the fee for a (year, semester). Privileged."""
    term = await FeeTermService(db).create(
        data.year, data.semester, data.amount, actor_id=actor_id
    )
    return SuccessResponse(
        data=TermResponse.model_validate(term),
        message="Term created",
    )


@router.get("/{year}/{semester}", response_model=SuccessResponse[TermDetailResponse])
async def get_term(
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
):
    """Get a term with the ids of its payment logs."""
    term = await FeeTermService(db).get(year, semester)
    return SuccessResponse(
        data=_term_to_detail_response(term),
        message="Term retrieved",
    )


@router.get("/{year}/{semester}/paid", response_model=SuccessResponse[MemberListResponse])
async def list_paid_members(
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
):
    """Members who paid the full fee. Privileged."""
    members = await FeeTermService(db).compute_paid(year, semester)
    return SuccessResponse(
        data=_member_list(year, semester, members),
        message="Paid members retrieved",
    )


@router.get("/{year}/{semester}/unpaid", response_model=SuccessResponse[MemberListResponse])
async def list_unpaid_members(
    year: YearPath,
    semester: SemesterPath,
    include_members_without_payments: bool = Query(False),
    db: AsyncSession = Depends(get_db),
):
    """
    Members who have paid less than the fee. Privileged.

    Members without any approved payment are only listed when
    include_members_without_payments is set.
    """
    members = await FeeTermService(db).compute_unpaid(
        year, semester, include_members_without_payments=include_members_without_payments
    )
    return SuccessResponse(
        data=_member_list(year, semester, members),
        message="Unpaid members retrieved",
    )


# --- Payment Log Endpoints ---

@router.post(
    "/{year}/{semester}/submit",
    response_model=SuccessResponse[PaymentLogResponse],
    status_code=201,
)
async def submit_payment(
    data: SubmitRequest,
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    """Submit a payment claim for approval. Member-limited."""
    log = await PaymentLogService(db).submit(
        data.member_id, year, semester, data.amount, actor_id=actor_id
    )
    return SuccessResponse(
        data=PaymentLogResponse.model_validate(log),
        message="Payment submitted",
    )


@router.post(
    "/{year}/{semester}/deposit",
    response_model=SuccessResponse[PaymentLogResponse],
    status_code=201,
)
async def deposit_payment(
    data: DepositRequest,
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    """Record a direct deposit. Privileged."""
    log = await PaymentLogService(db).deposit(year, semester, data.amount, actor_id=actor_id)
    return SuccessResponse(
        data=PaymentLogResponse.model_validate(log),
        message="Deposit recorded",
    )


@router.post("/logs/approve", response_model=SuccessResponse[ApproveResult])
async def approve_payments(
    data: LogIdsRequest,
    db: AsyncSession = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    """Approve submitted payments. Privileged."""
    logs = await PaymentLogService(db).approve(data.ids, actor_id=actor_id)
    return SuccessResponse(
        data=ApproveResult(approved=len(logs)),
        message="Payments approved",
    )


@router.post("/{year}/{semester}/reject", response_model=SuccessResponse[RejectResult])
async def reject_payments(
    data: LogIdsRequest,
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
    actor_id: str | None = Depends(get_actor_id),
):
    """Reject and delete payment logs of a term. Privileged."""
    rejected = await PaymentLogService(db).reject(year, semester, data.ids, actor_id=actor_id)
    return SuccessResponse(
        data=RejectResult(rejected=rejected),
        message="Payments rejected",
    )


@router.get("/{year}/{semester}/pending", response_model=SuccessResponse[list[PaymentLogResponse]])
async def list_pending_payments(
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
):
    """Submissions waiting for approval."""
    logs = await PaymentLogService(db).pending(year, semester)
    return SuccessResponse(
        data=[PaymentLogResponse.model_validate(log) for log in logs],
        message="Pending payments retrieved",
    )


# --- Query Endpoints ---

@router.get("/{year}/{semester}/logs", response_model=SuccessResponse[list[PaymentLogResponse]])
async def list_payment_history(
    year: YearPath,
    semester: SemesterPath,
    db: AsyncSession = Depends(get_db),
):
    """Approved payments and direct deposits, oldest first. Member-limited."""
    logs = await FeeQueryService(db).all(year, semester)
    return SuccessResponse(
        data=[PaymentLogResponse.model_validate(log) for log in logs],
        message="Payment history retrieved",
    )


@router.get("/{year}/{semester}/amount", response_model=SuccessResponse[AmountResponse])
async def get_member_amount(
    year: YearPath,
    semester: SemesterPath,
    member_id: str = Query(min_length=1),
    db: AsyncSession = Depends(get_db),
):
    """Total approved payments of a member. Member-limited."""
    total = await FeeQueryService(db).amount(year, semester, member_id)
    return SuccessResponse(
        data=AmountResponse(year=year, semester=semester, member_id=member_id, amount=total),
        message="Amount retrieved",
    )


# --- Helper Functions ---

def _term_to_detail_response(term) -> TermDetailResponse:
    """Convert Term model to TermDetailResponse."""
    return TermDetailResponse(
        id=term.id,
        year=term.year,
        semester=term.semester,
        amount=term.amount,
        created_at=term.created_at,
        updated_at=term.updated_at,
        logs=term.log_ids,
    )


def _member_list(year: int, semester: int, members) -> MemberListResponse:
    return MemberListResponse(
        year=year,
        semester=semester,
        members=[MemberResponse.model_validate(m) for m in members],
    )
