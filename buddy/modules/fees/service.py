"""Service for the club fee ledger."""

import logging
from collections.abc import Iterable

from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from buddy.core.audit import AuditAction, create_audit_log
from buddy.core.config import settings
from buddy.core.database import bounded, deadline
from buddy.core.exceptions import (
    ConnectionFailureError,
    DuplicateTermError,
    PartialFailureError,
    TermNotFoundError,
)
from buddy.modules.fees.models import LogType, PaymentLog, Term, unix_now
from buddy.modules.members.models import Member
from buddy.modules.members.service import MemberDirectory

logger = logging.getLogger(__name__)


# --- Shared data access ---

async def get_term(
    session: AsyncSession, year: int, semester: int, with_logs: bool = False
) -> Term:
    """Load a term by its natural key or raise TermNotFoundError."""
    stmt = select(Term).where(Term.year == year, Term.semester == semester)
    if with_logs:
        stmt = stmt.options(selectinload(Term.logs)).execution_options(populate_existing=True)
    result = await session.execute(stmt)
    term = result.scalar_one_or_none()
    if not term:
        raise TermNotFoundError(year, semester)
    return term


async def approved_totals(session: AsyncSession, term_id: int) -> dict[str, int]:
    """Sum of approved log amounts per member for one term."""
    stmt = (
        select(PaymentLog.member_id, func.sum(PaymentLog.amount))
        .where(
            PaymentLog.term_id == term_id,
            PaymentLog.type == LogType.APPROVED.value,
            PaymentLog.member_id.is_not(None),
        )
        .group_by(PaymentLog.member_id)
    )
    result = await session.execute(stmt)
    return {member_id: int(total) for member_id, total in result.all()}


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _log_values(log: PaymentLog) -> dict:
    return {"member_id": log.member_id, "amount": log.amount, "type": log.type}


# --- Term Engine ---

class FeeTermService:
    """Fee terms and the paid / unpaid partitions of their members."""

    def __init__(self, session: AsyncSession, members: MemberDirectory | None = None):
        self.session = session
        self.members = members or MemberDirectory(session)

    @bounded
    async def create(
        self, year: int, semester: int, amount: int, actor_id: str | None = None
    ) -> Term:
        """Create a term with no logs. Privileged."""
        stmt = select(Term.id).where(Term.year == year, Term.semester == semester)
        if (await self.session.execute(stmt)).scalar_one_or_none() is not None:
            raise DuplicateTermError(year, semester)

        term = Term(year=year, semester=semester, amount=amount, logs=[])
        self.session.add(term)
        try:
            await self.session.flush()
        except IntegrityError as e:
            # Lost a race against a concurrent create of the same term
            await self.session.rollback()
            raise DuplicateTermError(year, semester) from e

        await create_audit_log(
            session=self.session,
            action=AuditAction.CREATE,
            entity_type="Term",
            entity_id=term.id,
            actor_id=actor_id,
            entity_identifier=term.display_name,
            new_values={"year": year, "semester": semester, "amount": amount},
        )
        await self.session.commit()
        await self.session.refresh(term, attribute_names=["created_at", "updated_at"])

        logger.info("Created fee term %s (amount=%d)", term.display_name, amount)
        return term

    @bounded
    async def get(self, year: int, semester: int) -> Term:
        """Term with its logs loaded."""
        return await get_term(self.session, year, semester, with_logs=True)

    @bounded
    async def list_terms(self, year: int | None = None) -> list[Term]:
        """List terms, newest first, optionally filtered by year."""
        stmt = select(Term).order_by(Term.year.desc(), Term.semester.desc())
        if year:
            stmt = stmt.where(Term.year == year)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    @bounded
    async def compute_paid(self, year: int, semester: int) -> list[Member]:
        """Members whose approved payments for the term reach the fee. Privileged."""
        term = await get_term(self.session, year, semester)
        totals = await approved_totals(self.session, term.id)
        paid = [member_id for member_id, total in totals.items() if total >= term.amount]
        return await self.members.get_members_by_ids(paid)

    @bounded
    async def compute_unpaid(
        self,
        year: int,
        semester: int,
        include_members_without_payments: bool = False,
    ) -> list[Member]:
        """
        Members whose approved payments for the term fall short of the fee.

        Only members with at least one approved log are considered unless
        include_members_without_payments is set, in which case every active
        member without an approved log is added with a total of 0.
        Privileged.
        """
        term = await get_term(self.session, year, semester)
        totals = await approved_totals(self.session, term.id)
        unpaid = {member_id for member_id, total in totals.items() if total < term.amount}

        if include_members_without_payments:
            active = await self.members.list_active_member_ids()
            unpaid |= active - totals.keys()

        return await self.members.get_members_by_ids(unpaid)


# --- Log Engine ---

class PaymentLogService:
    """Submission, approval, rejection and deposit of payment logs."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _add_log(
        self,
        term: Term,
        member_id: str | None,
        amount: int,
        log_type: LogType,
        action: AuditAction,
        actor_id: str | None,
    ) -> PaymentLog:
        log = PaymentLog(
            term_id=term.id,
            member_id=member_id,
            amount=amount,
            type=log_type.value,
            updated_at=unix_now(),
        )
        self.session.add(log)
        await self.session.flush()

        await create_audit_log(
            session=self.session,
            action=action,
            entity_type="PaymentLog",
            entity_id=log.id,
            actor_id=actor_id,
            entity_identifier=term.display_name,
            new_values=_log_values(log),
        )
        await self.session.commit()
        return log

    @bounded
    async def submit(
        self,
        member_id: str,
        year: int,
        semester: int,
        amount: int,
        actor_id: str | None = None,
    ) -> PaymentLog:
        """Record a member's payment claim awaiting approval. Member-limited."""
        term = await get_term(self.session, year, semester)
        log = await self._add_log(
            term,
            member_id,
            amount,
            LogType.UNAPPROVED,
            AuditAction.SUBMIT_FEE,
            actor_id or member_id,
        )
        logger.info(
            "Member %s submitted %d for %s (log %d)", member_id, amount, term.display_name, log.id
        )
        return log

    @bounded
    async def deposit(
        self, year: int, semester: int, amount: int, actor_id: str | None = None
    ) -> PaymentLog:
        """Record a payment made directly to the club, without a member. Privileged."""
        term = await get_term(self.session, year, semester)
        log = await self._add_log(
            term, None, amount, LogType.DIRECT, AuditAction.DEPOSIT_FEE, actor_id
        )
        logger.info("Direct deposit of %d for %s (log %d)", amount, term.display_name, log.id)
        return log

    @bounded
    async def approve(self, ids: Iterable[int], actor_id: str | None = None) -> list[PaymentLog]:
        """
        Mark submitted logs as approved in one batch and refresh their timestamps.

        Unknown ids and direct deposits are ignored. Approving an approved
        log only moves its timestamp forward. Returns the logs the batch
        updated. Privileged.
        """
        ids = _unique(ids)
        if not ids:
            return []

        now = unix_now()
        result = await self.session.execute(
            update(PaymentLog)
            .where(
                PaymentLog.id.in_(ids),
                PaymentLog.type.in_([LogType.UNAPPROVED.value, LogType.APPROVED.value]),
            )
            .values(
                type=LogType.APPROVED.value,
                # Strictly later than the previous state change, even within one second
                updated_at=case(
                    (PaymentLog.updated_at >= now, PaymentLog.updated_at + 1),
                    else_=now,
                ),
            )
            .returning(PaymentLog.id)
            .execution_options(synchronize_session=False)
        )
        approved = sorted(result.scalars().all())

        for log_id in approved:
            await create_audit_log(
                session=self.session,
                action=AuditAction.APPROVE,
                entity_type="PaymentLog",
                entity_id=log_id,
                actor_id=actor_id,
                new_values={"type": LogType.APPROVED.value},
            )
        await self.session.commit()

        if not approved:
            return []
        logger.info("Approved %d payment log(s): %s", len(approved), approved)

        result = await self.session.execute(
            select(PaymentLog)
            .where(PaymentLog.id.in_(approved))
            .order_by(PaymentLog.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def _reject_one(
        self, term_id: int, label: str, log_id: int, actor_id: str | None
    ) -> bool:
        log = await self.session.get(PaymentLog, log_id)
        if log is None or log.term_id != term_id:
            return False

        old_values = _log_values(log)
        await self.session.delete(log)
        await create_audit_log(
            session=self.session,
            action=AuditAction.REJECT,
            entity_type="PaymentLog",
            entity_id=log_id,
            actor_id=actor_id,
            entity_identifier=label,
            old_values=old_values,
        )
        await self.session.commit()
        return True

    async def reject(
        self,
        year: int,
        semester: int,
        ids: Iterable[int],
        actor_id: str | None = None,
    ) -> list[int]:
        """
        Remove logs from the term and delete them, one committed step per id.

        Each step runs under its own deadline. Ids that are not logs of this
        term are skipped. When a step fails or times out after earlier ids
        were rejected, PartialFailureError reports which ids were rejected
        and which remain. Returns the rejected ids. Privileged.
        """
        async with deadline("PaymentLogService.reject"):
            term = await get_term(self.session, year, semester)
        # Rollback expires the term, keep what the loop needs
        term_id, label = term.id, term.display_name
        ids = _unique(ids)
        rejected: list[int] = []

        for index, log_id in enumerate(ids):
            try:
                async with deadline("PaymentLogService.reject"):
                    removed = await self._reject_one(term_id, label, log_id, actor_id)
            except (SQLAlchemyError, ConnectionFailureError) as e:
                await self.session.rollback()
                if not rejected:
                    raise
                logger.exception(
                    "Reject for %s failed at log %d after rejecting %s",
                    label,
                    log_id,
                    rejected,
                )
                raise PartialFailureError("Reject", rejected, ids[index:]) from e

            if removed:
                rejected.append(log_id)
            else:
                logger.info("Reject skipped log %d: not a log of %s", log_id, label)

        logger.info("Rejected %d payment log(s) for %s: %s", len(rejected), label, rejected)
        return rejected

    @bounded
    async def pending(self, year: int, semester: int) -> list[PaymentLog]:
        """Unapproved logs of the term in submission order."""
        term = await get_term(self.session, year, semester)
        stmt = (
            select(PaymentLog)
            .where(
                PaymentLog.term_id == term.id,
                PaymentLog.type == LogType.UNAPPROVED.value,
            )
            .order_by(PaymentLog.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# --- Query Engine ---

class FeeQueryService:
    """Read-only totals and history."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @bounded
    async def amount(self, year: int, semester: int, member_id: str) -> int:
        """
        Total of a member's approved payments for the term.

        With FEE_AMOUNT_ACROSS_TERMS enabled the total covers every term,
        the term itself still has to exist. Member-limited.
        """
        term = await get_term(self.session, year, semester)
        stmt = select(func.coalesce(func.sum(PaymentLog.amount), 0)).where(
            PaymentLog.member_id == member_id,
            PaymentLog.type == LogType.APPROVED.value,
        )
        if not settings.fee_amount_across_terms:
            stmt = stmt.where(PaymentLog.term_id == term.id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    @bounded
    async def all(self, year: int, semester: int) -> list[PaymentLog]:
        """Approved and direct logs of the term, oldest first. Member-limited."""
        term = await get_term(self.session, year, semester)
        stmt = (
            select(PaymentLog)
            .where(
                PaymentLog.term_id == term.id,
                PaymentLog.type.in_([LogType.APPROVED.value, LogType.DIRECT.value]),
            )
            .order_by(PaymentLog.updated_at, PaymentLog.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
