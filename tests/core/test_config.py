import pytest

from buddy.core.config import Settings


def test_database_url_uses_asyncpg_driver():
    assert (
        Settings(database_url="postgres://u:p@db:5432/club").database_url
        == "postgresql+asyncpg://u:p@db:5432/club"
    )
    assert (
        Settings(database_url="postgresql://u:p@db:5432/club").database_url
        == "postgresql+asyncpg://u:p@db:5432/club"
    )
    assert Settings(database_url="sqlite+aiosqlite:///club.db").database_url == "sqlite+aiosqlite:///club.db"


def test_cors_origins_from_comma_separated_string():
    s = Settings(cors_allowed_origins="http://a.test, http://b.test,")
    assert s.cors_allowed_origins == ["http://a.test", "http://b.test"]


def test_defaults():
    s = Settings()
    assert s.operation_timeout_seconds > 0
    assert s.fee_amount_across_terms is False


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        Settings(operation_timeout_seconds=0)
