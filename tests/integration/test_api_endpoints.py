"""HTTP tests for the wallet, investment, referral and commission routers.

Uses the client fixture from tests/conftest.py: every request gets its own
session on the per-test SQLite store.
"""

from collections.abc import Callable

from httpx import AsyncClient

WALLET = "/api/v1/wallet"
INVESTMENTS = "/api/v1/investments"
REFERRALS = "/api/v1/referrals"
COMMISSION = "/api/v1/commission"

AuthHeaders = Callable[..., dict[str, str]]


async def _deposit(client: AsyncClient, headers: dict[str, str], amount: int) -> dict:
    resp = await client.post(
        f"{WALLET}/deposit", json={"amount": amount, "method": "M-Pesa"}, headers=headers
    )
    assert resp.status_code == 200
    return resp.json()["data"]


class TestAuth:
    async def test_unauthenticated_returns_401(self, client: AsyncClient) -> None:
        resp = await client.get(f"{WALLET}/balance")
        assert resp.status_code == 401

    async def test_bad_token_returns_401(self, client: AsyncClient) -> None:
        resp = await client.get(f"{WALLET}/balance", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestWalletApi:
    async def test_new_user_has_zero_balance(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        resp = await client.get(f"{WALLET}/balance", headers=auth_headers("api-user"))
        assert resp.status_code == 200
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["balance"] == 0
        assert body["data"]["balance_display"] == "TZS 0"

    async def test_deposit_then_withdraw(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        headers = auth_headers("api-user")
        data = await _deposit(client, headers, 100_000)
        assert data["balance"] == 100_000
        assert data["entry"]["kind"] == "DEPOSIT"
        assert data["ledger_entry_id"] == data["entry"]["id"]

        resp = await client.post(
            f"{WALLET}/withdraw",
            json={"amount": 40_000, "method": "M-Pesa", "destination": "+255700000001"},
            headers=headers,
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["balance"] == 60_000

        ledger = await client.get(f"{WALLET}/ledger", headers=headers)
        items = ledger.json()["data"]["items"]
        assert [i["kind"] for i in items] == ["WITHDRAWAL", "DEPOSIT"]

        report = await client.get(f"{WALLET}/reconcile", headers=headers)
        assert report.json()["data"]["consistent"] is True

    async def test_overdraft_is_422(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        headers = auth_headers("api-user")
        await _deposit(client, headers, 1_000)

        resp = await client.post(
            f"{WALLET}/withdraw",
            json={"amount": 1_001, "method": "M-Pesa", "destination": "+255700000001"},
            headers=headers,
        )

        assert resp.status_code == 422
        body = resp.json()
        assert body["code"] == 2002
        assert body["data"] is None

    async def test_missing_destination(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        resp = await client.post(
            f"{WALLET}/withdraw",
            json={"amount": 500, "method": "M-Pesa"},
            headers=auth_headers("api-user"),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2003

    async def test_blank_method_rejected(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        headers = auth_headers("api-user")
        await _deposit(client, headers, 1_000)

        resp = await client.post(
            f"{WALLET}/withdraw",
            json={"amount": 500, "method": "", "destination": "+255700000001"},
            headers=headers,
        )

        assert resp.status_code == 422
        balance = await client.get(f"{WALLET}/balance", headers=headers)
        assert balance.json()["data"]["balance"] == 1_000

    async def test_zero_deposit(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        resp = await client.post(
            f"{WALLET}/deposit", json={"amount": 0}, headers=auth_headers("api-user")
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_request_id_is_echoed(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        headers = {**auth_headers("api-user"), "X-Request-ID": "req_from_client"}
        resp = await client.get(f"{WALLET}/balance", headers=headers)
        assert resp.headers["X-Request-ID"] == "req_from_client"
        assert resp.json()["request_id"] == "req_from_client"

    async def test_vendor_commission_requires_admin(
        self, client: AsyncClient, auth_headers: AuthHeaders
    ) -> None:
        body = {"vendor_id": "vendor-1", "transaction_amount": 1_000, "order_reference": "ORD-1"}
        resp = await client.post(f"{WALLET}/vendor-commission", json=body, headers=auth_headers("u"))
        assert resp.status_code == 403
        assert resp.json()["code"] == 9005

    async def test_vendor_commission_debits_vendor(
        self, client: AsyncClient, auth_headers: AuthHeaders
    ) -> None:
        await _deposit(client, auth_headers("vendor-1"), 5_000)
        body = {"vendor_id": "vendor-1", "transaction_amount": 1_000, "order_reference": "ORD-1"}

        resp = await client.post(
            f"{WALLET}/vendor-commission", json=body, headers=auth_headers("ops", role="admin")
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["fee"] == 10
        assert data["balance"] == 4_990


class TestInvestmentApi:
    async def _create_plan(self, client: AsyncClient, auth_headers: AuthHeaders) -> int:
        resp = await client.post(
            f"{INVESTMENTS}/plans",
            json={
                "name": "Growth",
                "min_amount": 100_000,
                "max_amount": 10_000_000,
                "annual_return_rate_percent": "12.00",
                "duration_days": 90,
            },
            headers=auth_headers("ops", role="admin"),
        )
        assert resp.status_code == 201
        return resp.json()["data"]["id"]

    async def test_plan_creation_requires_admin(
        self, client: AsyncClient, auth_headers: AuthHeaders
    ) -> None:
        resp = await client.post(
            f"{INVESTMENTS}/plans",
            json={
                "name": "Sneaky",
                "min_amount": 1,
                "annual_return_rate_percent": "99.00",
                "duration_days": 1,
            },
            headers=auth_headers("u"),
        )
        assert resp.status_code == 403

    async def test_zero_duration_plan_rejected(
        self, client: AsyncClient, auth_headers: AuthHeaders
    ) -> None:
        resp = await client.post(
            f"{INVESTMENTS}/plans",
            json={
                "name": "Broken",
                "min_amount": 1_000,
                "annual_return_rate_percent": "10.00",
                "duration_days": 0,
            },
            headers=auth_headers("ops", role="admin"),
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3005

    async def test_open_view_and_early_close(
        self, client: AsyncClient, auth_headers: AuthHeaders
    ) -> None:
        plan_id = await self._create_plan(client, auth_headers)
        headers = auth_headers("investor")
        await _deposit(client, headers, 300_000)

        plans = await client.get(f"{INVESTMENTS}/plans")
        assert [p["id"] for p in plans.json()["data"]["plans"]] == [plan_id]

        opened = await client.post(
            INVESTMENTS, json={"plan_id": plan_id, "amount": 100_000}, headers=headers
        )
        assert opened.status_code == 201
        data = opened.json()["data"]
        assert data["balance"] == 200_000
        investment_id = data["investment"]["id"]
        assert data["investment"]["expected_return"] == 102_958

        one = await client.get(f"{INVESTMENTS}/{investment_id}", headers=headers)
        assert one.json()["data"]["current_value"] == 100_000

        listed = await client.get(INVESTMENTS, headers=headers, params={"status": "ACTIVE"})
        assert len(listed.json()["data"]["items"]) == 1

        stats = await client.get(f"{INVESTMENTS}/stats", headers=headers)
        assert stats.json()["data"]["total_invested"] == 100_000

        early = await client.post(f"{INVESTMENTS}/{investment_id}/close", headers=headers)
        assert early.status_code == 422
        assert early.json()["code"] == 3007

        other = await client.get(f"{INVESTMENTS}/{investment_id}", headers=auth_headers("intruder"))
        assert other.status_code == 404
        assert other.json()["code"] == 3006

    async def test_below_minimum(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        plan_id = await self._create_plan(client, auth_headers)
        resp = await client.post(
            INVESTMENTS, json={"plan_id": plan_id, "amount": 50_000}, headers=auth_headers("investor")
        )
        assert resp.status_code == 422
        assert resp.json()["code"] == 3003


class TestReferralApi:
    async def test_code_link_and_accrue(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        referrer = auth_headers("referrer", name="Asha")
        code_resp = await client.get(f"{REFERRALS}/code", headers=referrer)
        assert code_resp.status_code == 200
        code = code_resp.json()["data"]["code"]
        assert code.startswith("ASH")

        validated = await client.post(f"{REFERRALS}/validate", json={"code": code})
        assert validated.json()["data"]["referrer_id"] == "referrer"

        linked = await client.post(REFERRALS, json={"code": code}, headers=auth_headers("newbie"))
        assert linked.status_code == 201
        referral_id = linked.json()["data"]["id"]

        accrued = await client.post(
            f"{REFERRALS}/{referral_id}/accrue",
            json={"base_amount": 200_000, "source_reference": "ORD-77"},
            headers=auth_headers("ops", role="admin"),
        )
        assert accrued.status_code == 200
        assert accrued.json()["data"]["commission"] == 10_000

        summary = await client.get(f"{REFERRALS}/code", headers=referrer)
        assert summary.json()["data"]["total_commission"] == 10_000
        balance = await client.get(f"{WALLET}/balance", headers=referrer)
        assert balance.json()["data"]["balance"] == 10_000

    async def test_self_referral(self, client: AsyncClient, auth_headers: AuthHeaders) -> None:
        headers = auth_headers("solo", name="Solo")
        code = (await client.get(f"{REFERRALS}/code", headers=headers)).json()["data"]["code"]

        resp = await client.post(REFERRALS, json={"code": code}, headers=headers)

        assert resp.status_code == 422
        assert resp.json()["code"] == 4003

    async def test_malformed_code(self, client: AsyncClient) -> None:
        resp = await client.post(f"{REFERRALS}/validate", json={"code": "hello"})
        assert resp.status_code == 404
        assert resp.json()["code"] == 4004


class TestCommissionApi:
    async def test_quote(self, client: AsyncClient) -> None:
        resp = await client.get(f"{COMMISSION}/quote", params={"amount": 1_000})
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["fee"] == 10
        assert data["net_amount"] == 990

    async def test_quote_below_floor(self, client: AsyncClient) -> None:
        resp = await client.get(f"{COMMISSION}/quote", params={"amount": 999})
        assert resp.status_code == 422
        assert resp.json()["code"] == 2001

    async def test_tiers(self, client: AsyncClient) -> None:
        resp = await client.get(f"{COMMISSION}/tiers")
        assert len(resp.json()["data"]["tiers"]) == 9
