from enum import StrEnum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from buddy.core.audit.models import AuditLog


class AuditAction(StrEnum):
    """Standard audit actions."""

    CREATE = "CREATE"
    APPROVE = "APPROVE"
    REJECT = "REJECT"

    # Domain-specific actions
    SUBMIT_FEE = "SUBMIT_FEE"
    DEPOSIT_FEE = "DEPOSIT_FEE"


async def create_audit_log(
    session: AsyncSession,
    action: str | AuditAction,
    entity_type: str,
    entity_id: int,
    actor_id: str | None = None,
    entity_identifier: str | None = None,
    old_values: dict[str, Any] | None = None,
    new_values: dict[str, Any] | None = None,
) -> AuditLog:
    """
    Create an audit log entry in the caller's transaction.

    Args:
        session: Database session
        action: Action performed (e.g., CREATE, APPROVE, REJECT)
        entity_type: Type of entity (e.g., Term, PaymentLog)
        entity_id: ID of the entity
        actor_id: Member id of whoever performed the action
        entity_identifier: Human-readable identifier (e.g., "2024-1")
        old_values: State before change
        new_values: State after change

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        action=str(action),
        entity_type=entity_type,
        entity_id=entity_id,
        entity_identifier=entity_identifier,
        old_values=old_values,
        new_values=new_values,
    )

    session.add(audit_log)
    await session.flush()

    return audit_log
