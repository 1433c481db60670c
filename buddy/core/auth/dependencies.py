from typing import Annotated

from fastapi import Header


async def get_actor_id(
    x_member_id: Annotated[str | None, Header()] = None,
) -> str | None:
    """
    Member id of the caller as forwarded by the gateway.

    Authentication happens upstream; the id is only recorded in the audit trail.
    """
    if x_member_id is None:
        return None
    return x_member_id.strip() or None
