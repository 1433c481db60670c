"""Member model (read side of the club member directory)."""

from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from buddy.core.database.base import Base


class MemberStatus(StrEnum):
    """Member status enumeration."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    GRADUATED = "graduated"


class Member(Base):
    """
    Club member.

    Records are owned by member management; the fee ledger only reads them
    to turn member ids into full member records.
    """

    __tablename__ = "members"

    # Student number, also used as member_id on payment logs
    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=MemberStatus.ACTIVE.value, index=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE.value
