from buddy.modules.members.models import Member, MemberStatus
from buddy.modules.members.service import MemberDirectory

__all__ = ["Member", "MemberStatus", "MemberDirectory"]
