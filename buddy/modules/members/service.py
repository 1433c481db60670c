from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buddy.modules.members.models import Member, MemberStatus


class MemberDirectory:
    """Lookup of member records by member id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_members_by_ids(self, member_ids: Iterable[str]) -> list[Member]:
        """Resolve member ids to member records, ordered by id. Unknown ids are skipped."""
        ids = {member_id for member_id in member_ids if member_id}
        if not ids:
            return []
        stmt = select(Member).where(Member.id.in_(ids)).order_by(Member.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_active_member_ids(self) -> set[str]:
        """Ids of every active member."""
        stmt = select(Member.id).where(Member.status == MemberStatus.ACTIVE.value)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
