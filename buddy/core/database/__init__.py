from buddy.core.database.session import async_session, dispose_engine, engine, get_db
from buddy.core.database.base import Base, TimestampedModel, BigIntPK
from buddy.core.database.deadline import bounded, deadline

__all__ = ["async_session", "dispose_engine", "engine", "get_db", "Base", "TimestampedModel", "BigIntPK", "bounded", "deadline"]
