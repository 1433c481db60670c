from buddy.shared.schemas import BaseSchema


class MemberResponse(BaseSchema):
    """Schema for member response."""

    id: str
    name: str
    department: str | None
    email: str | None
    phone: str | None
    status: str
