"""
Subscription service and endpoint tests.

Tests cover:
- Idempotent subscribe (plain and encoded mail resolve to one row)
- Listing all rows / by segment, empty store
- Delete by id (found / not found)
- HTTP status mapping (201, 200, 204, 404, 422)
"""

from __future__ import annotations

import uuid

import pytest

from mailsub.services import subscriptions as subscription_service
from mailsub_shared.mail import normalize_mail

MAIL = "test@test.com"
MAIL_B64 = "dGVzdEB0ZXN0LmNvbQ=="


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class TestSubscribe:
    async def test_creates_row_with_encoded_mail(self, session):
        row = await subscription_service.subscribe(MAIL, "promo", "black-friday", session)
        assert row.id is not None
        assert row.mail_base64 == MAIL_B64
        assert row.category == "promo"
        assert row.subcategory == "black-friday"
        assert row.subscribed_at is not None

    async def test_second_call_returns_same_row(self, session):
        first = await subscription_service.subscribe(MAIL, "promo", "black-friday", session)
        second = await subscription_service.subscribe(MAIL, "promo", "black-friday", session)
        assert second.id == first.id
        assert second.subscribed_at == first.subscribed_at
        assert len(await subscription_service.list_all(session)) == 1

    async def test_plain_and_encoded_mail_are_the_same_subscriber(self, session):
        first = await subscription_service.subscribe(MAIL, "promo", "x", session)
        second = await subscription_service.subscribe(MAIL_B64, "promo", "x", session)
        assert second.id == first.id

    async def test_different_segment_creates_new_row(self, session):
        a = await subscription_service.subscribe(MAIL, "promo", "a", session)
        b = await subscription_service.subscribe(MAIL, "promo", "b", session)
        c = await subscription_service.subscribe(MAIL, "news", "a", session)
        assert len({a.id, b.id, c.id}) == 3

    async def test_existing_duplicates_return_one_of_them(self, session):
        from mailsub.models.subscription import Subscription

        for _ in range(2):
            session.add(Subscription(mail_base64=MAIL_B64, category="c", subcategory="s"))
        await session.flush()

        row = await subscription_service.subscribe(MAIL, "c", "s", session)
        assert row.mail_base64 == MAIL_B64
        assert len(await subscription_service.list_all(session)) == 2


class TestListing:
    async def test_empty_store(self, session):
        assert await subscription_service.list_all(session) == []
        assert await subscription_service.list_by_category("c", "s", session) == []

    async def test_list_by_category_filters_pair(self, session):
        await subscription_service.subscribe("a@x.io", "news", "daily", session)
        await subscription_service.subscribe("b@x.io", "news", "daily", session)
        await subscription_service.subscribe("c@x.io", "news", "weekly", session)

        rows = await subscription_service.list_by_category("news", "daily", session)
        assert sorted(r.mail_base64 for r in rows) == sorted(
            [normalize_mail("a@x.io"), normalize_mail("b@x.io")]
        )


class TestDelete:
    async def test_delete_existing(self, session):
        row = await subscription_service.subscribe(MAIL, "c", "s", session)
        assert await subscription_service.delete_by_id(row.id, session) is True
        assert await subscription_service.list_all(session) == []

    async def test_delete_missing(self, session):
        assert await subscription_service.delete_by_id(uuid.uuid4(), session) is False


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

def _body(mail=MAIL, category="promo", subcategory="black-friday"):
    return {"mail": mail, "category": category, "subcategory": subcategory}


class TestSubscriptionEndpoints:
    async def test_subscribe_returns_201(self, client):
        resp = await client.post("/api/v1/subscriptions", json=_body())
        assert resp.status_code == 201
        data = resp.json()
        assert data["mail_base64"] == MAIL_B64
        assert data["category"] == "promo"
        assert data["subcategory"] == "black-friday"
        assert "subscribed_at" in data
        uuid.UUID(data["id"])

    async def test_repeat_subscribe_returns_201_with_same_id(self, client):
        first = (await client.post("/api/v1/subscriptions", json=_body())).json()
        resp = await client.post("/api/v1/subscriptions", json=_body(mail=MAIL_B64))
        assert resp.status_code == 201
        assert resp.json()["id"] == first["id"]

        listing = await client.get("/api/v1/subscriptions")
        assert len(listing.json()["data"]) == 1

    @pytest.mark.parametrize(
        "body",
        [
            {"category": "promo", "subcategory": "x"},
            {"mail": MAIL, "subcategory": "x"},
            {"mail": MAIL, "category": "promo"},
            {"mail": "   ", "category": "promo", "subcategory": "x"},
            {"mail": MAIL, "category": "", "subcategory": "x"},
            {"mail": MAIL, "category": "c" * 101, "subcategory": "x"},
        ],
    )
    async def test_subscribe_validation(self, client, body):
        resp = await client.post("/api/v1/subscriptions", json=body)
        assert resp.status_code == 422

    async def test_list_all_empty_is_204(self, client):
        resp = await client.get("/api/v1/subscriptions")
        assert resp.status_code == 204
        assert resp.content == b""

    async def test_list_all(self, client):
        await client.post("/api/v1/subscriptions", json=_body())
        await client.post("/api/v1/subscriptions", json=_body(subcategory="cyber-monday"))
        resp = await client.get("/api/v1/subscriptions")
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 2

    async def test_segment_rows_and_mails(self, client):
        await client.post("/api/v1/subscriptions", json=_body())
        await client.post("/api/v1/subscriptions", json=_body(mail="other@test.com"))
        await client.post("/api/v1/subscriptions", json=_body(subcategory="other"))

        params = {"category": "promo", "subcategory": "black-friday"}
        rows = await client.get("/api/v1/subscriptions/segment", params=params)
        assert rows.status_code == 200
        assert len(rows.json()["data"]) == 2

        mails = await client.get("/api/v1/subscriptions/mails", params=params)
        assert mails.status_code == 200
        assert sorted(mails.json()["data"]) == sorted(
            [MAIL_B64, normalize_mail("other@test.com")]
        )

    async def test_segment_empty_is_204(self, client):
        params = {"category": "none", "subcategory": "none"}
        assert (await client.get("/api/v1/subscriptions/segment", params=params)).status_code == 204
        assert (await client.get("/api/v1/subscriptions/mails", params=params)).status_code == 204

    async def test_segment_requires_both_params(self, client):
        resp = await client.get("/api/v1/subscriptions/mails", params={"category": "promo"})
        assert resp.status_code == 422

    @pytest.mark.parametrize("path", ["/api/v1/subscriptions/segment", "/api/v1/subscriptions/mails"])
    @pytest.mark.parametrize(
        "params",
        [
            {"category": "   ", "subcategory": "x"},
            {"category": "promo", "subcategory": "\t"},
        ],
    )
    async def test_segment_rejects_blank_params(self, client, path, params):
        resp = await client.get(path, params=params)
        assert resp.status_code == 422

    async def test_delete(self, client):
        created = (await client.post("/api/v1/subscriptions", json=_body())).json()
        resp = await client.delete(f"/api/v1/subscriptions/{created['id']}")
        assert resp.status_code == 204
        again = await client.delete(f"/api/v1/subscriptions/{created['id']}")
        assert again.status_code == 404

    async def test_delete_bad_id_is_422(self, client):
        resp = await client.delete("/api/v1/subscriptions/not-a-uuid")
        assert resp.status_code == 422
