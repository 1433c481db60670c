import time
from datetime import datetime
from enum import StrEnum

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from buddy.core.database.base import Base, BigIntPK, TimestampedModel


def unix_now() -> int:
    """Current time in Unix seconds."""
    return int(time.time())


class LogType(StrEnum):
    """Payment log state."""

    UNAPPROVED = "unapproved"
    APPROVED = "approved"
    DIRECT = "direct"


class Term(TimestampedModel):
    """
    Fee obligation for one (year, semester).

    Members are considered paid once their approved logs for the term add up
    to `amount`. Terms are never deleted.
    """

    __tablename__ = "fee_terms"

    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    semester: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    logs: Mapped[list["PaymentLog"]] = relationship(
        "PaymentLog", back_populates="term", order_by="PaymentLog.id"
    )

    __table_args__ = (
        UniqueConstraint("year", "semester", name="uq_fee_term_year_semester"),
    )

    @property
    def display_name(self) -> str:
        return f"{self.year}-{self.semester}"

    @property
    def log_ids(self) -> list[int]:
        """Ids of the term's logs in insertion order."""
        return [log.id for log in self.logs]


class PaymentLog(Base):
    """
    One payment event against a term.

    Member submissions start as unapproved and become approved by an
    administrator; direct deposits carry no member and skip approval.
    Rejected logs are deleted.
    """

    __tablename__ = "payment_logs"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)

    term_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("fee_terms.id"), nullable=False, index=True
    )
    member_id: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)

    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LogType.UNAPPROVED.value, index=True
    )

    # Unix seconds of the last state change
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=unix_now)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    term: Mapped["Term"] = relationship("Term", back_populates="logs")
