"""Tests for the club fee endpoints."""

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buddy.core.audit import AuditAction, AuditLog
from buddy.modules.members.models import Member

BASE = "/api/v1/fees"


async def _create_term(client: AsyncClient, year: int = 2024, semester: int = 1, amount: int = 50000):
    response = await client.post(BASE, json={"year": year, "semester": semester, "amount": amount})
    assert response.status_code == 201
    return response.json()["data"]


async def _submit(client: AsyncClient, member_id: str, amount: int, year: int = 2024, semester: int = 1):
    response = await client.post(
        f"{BASE}/{year}/{semester}/submit",
        json={"member_id": member_id, "amount": amount},
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestTermEndpoints:
    """Tests for term endpoints."""

    async def test_create_term(self, client: AsyncClient):
        response = await client.post(BASE, json={"year": 2024, "semester": 1, "amount": 50000})

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["year"] == 2024
        assert body["data"]["semester"] == 1
        assert body["data"]["amount"] == 50000

    async def test_create_duplicate_term(self, client: AsyncClient):
        await _create_term(client)

        response = await client.post(BASE, json={"year": 2024, "semester": 1, "amount": 1000})

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert "already exists" in body["message"]

        response = await client.get(f"{BASE}/2024/1")
        assert response.json()["data"]["amount"] == 50000

    async def test_create_term_invalid_semester(self, client: AsyncClient):
        response = await client.post(BASE, json={"year": 2024, "semester": 3, "amount": 50000})

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] == "semester"

    async def test_create_term_non_positive_amount(self, client: AsyncClient):
        response = await client.post(BASE, json={"year": 2024, "semester": 1, "amount": 0})

        assert response.status_code == 422

    async def test_get_missing_term(self, client: AsyncClient):
        response = await client.get(f"{BASE}/2030/1")

        assert response.status_code == 404
        assert response.json()["message"] == "Fee term 2030-1 not found"

    async def test_semester_path_is_validated(self, client: AsyncClient):
        response = await client.get(f"{BASE}/2024/3")

        assert response.status_code == 422

    async def test_list_terms(self, client: AsyncClient):
        await _create_term(client, 2023, 2)
        await _create_term(client, 2024, 1)

        response = await client.get(BASE)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [(t["year"], t["semester"]) for t in data] == [(2024, 1), (2023, 2)]

        response = await client.get(BASE, params={"year": 2023})
        assert len(response.json()["data"]) == 1


class TestPaymentEndpoints:
    """Tests for payment log endpoints."""

    async def test_submit_approve_and_amount(self, client: AsyncClient, members: dict[str, Member]):
        await _create_term(client)
        first = await _submit(client, "20240001", 30000)
        second = await _submit(client, "20240001", 30000)
        assert first["type"] == "unapproved"

        response = await client.get(f"{BASE}/2024/1")
        assert response.json()["data"]["logs"] == [first["id"], second["id"]]

        response = await client.post(f"{BASE}/logs/approve", json={"ids": [first["id"], second["id"]]})
        assert response.status_code == 200
        assert response.json()["data"]["approved"] == 2

        response = await client.get(f"{BASE}/2024/1/amount", params={"member_id": "20240001"})
        assert response.status_code == 200
        assert response.json()["data"]["amount"] == 60000

        response = await client.get(f"{BASE}/2024/1/paid")
        assert [m["id"] for m in response.json()["data"]["members"]] == ["20240001"]

        response = await client.get(f"{BASE}/2024/1/unpaid")
        assert response.json()["data"]["members"] == []

    async def test_submit_to_missing_term(self, client: AsyncClient):
        response = await client.post(
            f"{BASE}/2024/1/submit", json={"member_id": "20240001", "amount": 30000}
        )

        assert response.status_code == 404

    async def test_approve_requires_ids(self, client: AsyncClient):
        response = await client.post(f"{BASE}/logs/approve", json={"ids": []})

        assert response.status_code == 422

    async def test_reject(self, client: AsyncClient):
        await _create_term(client)
        keep = await _submit(client, "20240001", 30000)
        drop = await _submit(client, "20240002", 30000)

        response = await client.post(f"{BASE}/2024/1/reject", json={"ids": [drop["id"], 9999]})

        assert response.status_code == 200
        assert response.json()["data"]["rejected"] == [drop["id"]]

        response = await client.get(f"{BASE}/2024/1/pending")
        assert [log["id"] for log in response.json()["data"]] == [keep["id"]]

    async def test_deposit_appears_in_history(self, client: AsyncClient):
        await _create_term(client)

        response = await client.post(f"{BASE}/2024/1/deposit", json={"amount": 50000})
        assert response.status_code == 201
        assert response.json()["data"]["member_id"] is None

        response = await client.get(f"{BASE}/2024/1/logs")
        data = response.json()["data"]
        assert len(data) == 1
        assert data[0]["type"] == "direct"
        assert data[0]["amount"] == 50000

    async def test_approve_does_not_touch_deposits(self, client: AsyncClient):
        await _create_term(client)
        response = await client.post(f"{BASE}/2024/1/deposit", json={"amount": 50000})
        deposit_id = response.json()["data"]["id"]

        response = await client.post(f"{BASE}/logs/approve", json={"ids": [deposit_id]})

        assert response.status_code == 200
        assert response.json()["data"]["approved"] == 0
        response = await client.get(f"{BASE}/2024/1/logs")
        assert [log["type"] for log in response.json()["data"]] == ["direct"]

    async def test_unpaid_with_members_without_payments(
        self, client: AsyncClient, members: dict[str, Member]
    ):
        await _create_term(client)
        log = await _submit(client, "20240001", 10000)
        await client.post(f"{BASE}/logs/approve", json={"ids": [log["id"]]})

        response = await client.get(f"{BASE}/2024/1/unpaid")
        assert [m["id"] for m in response.json()["data"]["members"]] == ["20240001"]

        response = await client.get(
            f"{BASE}/2024/1/unpaid", params={"include_members_without_payments": True}
        )
        assert [m["id"] for m in response.json()["data"]["members"]] == [
            "20240001",
            "20240002",
            "20240003",
        ]

    async def test_actor_header_is_audited(self, client: AsyncClient, db_session: AsyncSession):
        await _create_term(client)

        response = await client.post(
            f"{BASE}/2024/1/deposit",
            json={"amount": 20000},
            headers={"X-Member-Id": "admin01"},
        )
        assert response.status_code == 201

        audit = (
            await db_session.execute(
                select(AuditLog).where(AuditLog.action == AuditAction.DEPOSIT_FEE.value)
            )
        ).scalar_one()
        assert audit.actor_id == "admin01"
        assert audit.entity_id == response.json()["data"]["id"]
