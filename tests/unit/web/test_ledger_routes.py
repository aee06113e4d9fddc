"""원장/정산표 API 테스트"""

import pytest
from httpx import AsyncClient

COMPANY = {"company_id": "company-a"}


async def _post(client: AsyncClient, entry_date: str, debit: tuple, credit: tuple) -> dict:
    response = await client.post(
        "/api/journal",
        json={
            "company_id": "company-a",
            "entry_date": entry_date,
            "lines": [
                {"account_code": debit[0], "account_name": debit[1], "debit_amount": debit[2]},
                {"account_code": credit[0], "account_name": credit[1], "credit_amount": credit[2]},
            ],
        },
    )
    assert response.status_code == 201
    return response.json()


class TestGeneralLedger:
    """GET /api/ledger/general-ledger 테스트"""

    @pytest.mark.asyncio
    async def test_running_balance(self, seeded_client: AsyncClient) -> None:
        await _post(seeded_client, "2024-03-01", ("1.1.1.001", "Caja", "100"), ("3.1.1.001", "Capital Pagado", "100"))
        await _post(seeded_client, "2024-03-05", ("5.1.1.002", "Arriendos", "30"), ("1.1.1.001", "Caja", "30"))
        await _post(seeded_client, "2024-03-06", ("1.1.1.001", "Caja", "5"), ("4.1.1.001", "Ventas del Giro", "5"))

        response = await seeded_client.get(
            "/api/ledger/general-ledger", params={**COMPANY, "account_code": "1.1.1.001"}
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["accounts"]) == 1
        cash = data["accounts"][0]
        assert [m["running_balance"] for m in cash["movements"]] == ["100", "70", "75"]
        assert cash["balance"] == "75"
        assert data["filters"]["account_code"] == "1.1.1.001"

    @pytest.mark.asyncio
    async def test_reversed_entries_excluded(self, seeded_client: AsyncClient) -> None:
        kept = await _post(seeded_client, "2024-03-01", ("1.1.1.001", "Caja", "100"), ("3.1.1.001", "Capital Pagado", "100"))
        dropped = await _post(seeded_client, "2024-03-02", ("1.1.1.001", "Caja", "40"), ("3.1.1.001", "Capital Pagado", "40"))
        await seeded_client.post(f"/api/journal/{dropped['entry_id']}/approve", params=COMPANY)
        await seeded_client.post(f"/api/journal/{dropped['entry_id']}/reverse", params=COMPANY)

        data = (await seeded_client.get("/api/ledger/general-ledger", params=COMPANY)).json()

        entry_ids = {m["entry_id"] for a in data["accounts"] for m in a["movements"]}
        assert entry_ids == {kept["entry_id"]}
        assert data["summary"]["balance_check"] is True
        assert data["summary"]["total_debit"] == "100"

    @pytest.mark.asyncio
    async def test_date_range(self, seeded_client: AsyncClient) -> None:
        await _post(seeded_client, "2024-02-28", ("1.1.1.001", "Caja", "10"), ("4.1.1.001", "Ventas del Giro", "10"))
        await _post(seeded_client, "2024-03-31", ("1.1.1.001", "Caja", "20"), ("4.1.1.001", "Ventas del Giro", "20"))

        data = (
            await seeded_client.get(
                "/api/ledger/general-ledger",
                params={**COMPANY, "date_from": "2024-03-01", "date_to": "2024-03-31"},
            )
        ).json()

        cash = next(a for a in data["accounts"] if a["account_code"] == "1.1.1.001")
        assert cash["total_debit"] == "20"

    @pytest.mark.asyncio
    async def test_invalid_date(self, seeded_client: AsyncClient) -> None:
        response = await seeded_client.get(
            "/api/ledger/general-ledger", params={**COMPANY, "date_from": "marzo"}
        )

        assert response.status_code == 400


class TestWorksheet:
    """GET /api/ledger/worksheet 테스트"""

    @pytest.mark.asyncio
    async def test_balanced_worksheet(self, seeded_client: AsyncClient) -> None:
        await _post(seeded_client, "2024-03-01", ("1.1.1.001", "Caja", "100000"), ("4.1.1.001", "Ventas del Giro", "100000"))

        response = await seeded_client.get("/api/ledger/worksheet", params=COMPANY)

        assert response.status_code == 200
        data = response.json()
        assert data["net_income"] == "100000"
        assert data["is_balanced"] is True
        rows = {row["account_code"]: row for row in data["rows"]}
        assert rows["1.1.1.001"]["balance_sheet_debit"] == "100000"
        assert rows["4.1.1.001"]["income_statement_credit"] == "100000"

    @pytest.mark.asyncio
    async def test_input_tax_credit_balance_override(self, seeded_client: AsyncClient) -> None:
        """설정의 예외 규칙 적용"""
        await _post(seeded_client, "2024-03-01", ("1.1.1.001", "Caja", "500"), ("1.3.1.001", "Remanente Crédito Fiscal", "500"))

        data = (await seeded_client.get("/api/ledger/worksheet", params=COMPANY)).json()

        rows = {row["account_code"]: row for row in data["rows"]}
        assert rows["1.3.1.001"]["balance_sheet_credit"] == "500"
        assert rows["1.3.1.001"]["override_applied"] is True
        assert data["is_balanced"] is True

    @pytest.mark.asyncio
    async def test_include_accounts(self, seeded_client: AsyncClient) -> None:
        await _post(seeded_client, "2024-03-01", ("1.1.1.001", "Caja", "10"), ("4.1.1.001", "Ventas del Giro", "10"))

        data = (
            await seeded_client.get(
                "/api/ledger/worksheet", params={**COMPANY, "include_accounts": "true"}
            )
        ).json()

        codes = [row["account_code"] for row in data["rows"]]
        assert "5.1.1.002" in codes

    @pytest.mark.asyncio
    async def test_integrity_violation_422(self, seeded_client: AsyncClient) -> None:
        """분류 불가 계정 잔액으로 재무상태표 불균형"""
        await _post(seeded_client, "2024-03-01", ("9.1.1", "Cuenta Transitoria", "50"), ("3.1.1.001", "Capital Pagado", "50"))

        response = await seeded_client.get("/api/ledger/worksheet", params=COMPANY)

        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["kind"] == "WorksheetIntegrityViolation"
        assert [v["column"] for v in detail["violations"]] == ["balance_sheet"]

    @pytest.mark.asyncio
    async def test_empty_company(self, client: AsyncClient) -> None:
        response = await client.get("/api/ledger/worksheet", params={"company_id": "empty"})

        assert response.status_code == 200
        assert response.json()["rows"] == []
