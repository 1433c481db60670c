from datetime import datetime

from pydantic import Field, field_validator

from buddy.modules.members.schemas import MemberResponse
from buddy.shared.schemas import BaseSchema


def _validate_year(v: int) -> int:
    if v < 1900 or v > 2100:
        raise ValueError("Year must be between 1900 and 2100")
    return v


def _validate_semester(v: int) -> int:
    if v not in (1, 2):
        raise ValueError("Semester must be 1 or 2")
    return v


# --- Term Schemas ---

class TermCreate(BaseSchema):
    """Schema for creating a fee term."""

    year: int
    semester: int
    amount: int = Field(gt=0, description="Fee a member must pay for the term")

    @field_validator("year")
    @classmethod
    def validate_year(cls, v: int) -> int:
        return _validate_year(v)

    @field_validator("semester")
    @classmethod
    def validate_semester(cls, v: int) -> int:
        return _validate_semester(v)


class TermResponse(BaseSchema):
    """Schema for term response."""

    id: int
    year: int
    semester: int
    amount: int
    created_at: datetime
    updated_at: datetime


class TermDetailResponse(TermResponse):
    """Term with the ids of its payment logs in insertion order."""

    logs: list[int]


# --- Payment Log Schemas ---

class SubmitRequest(BaseSchema):
    """A member's payment claim."""

    member_id: str = Field(min_length=1, max_length=50)
    amount: int = Field(gt=0)


class DepositRequest(BaseSchema):
    """A payment recorded by an administrator."""

    amount: int = Field(gt=0)


class LogIdsRequest(BaseSchema):
    """Ids of payment logs to approve or reject."""

    ids: list[int] = Field(min_length=1)


class PaymentLogResponse(BaseSchema):
    """Schema for payment log response."""

    id: int
    term_id: int
    member_id: str | None
    type: str
    amount: int
    updated_at: int


class ApproveResult(BaseSchema):
    approved: int


class RejectResult(BaseSchema):
    rejected: list[int]


class AmountResponse(BaseSchema):
    year: int
    semester: int
    member_id: str
    amount: int


class MemberListResponse(BaseSchema):
    year: int
    semester: int
    members: list[MemberResponse]
