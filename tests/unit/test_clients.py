"""Unit tests for the spreadsheet and weekly model HTTP clients"""

import asyncio
import math
import pytest
from datetime import date

import httpx

from cashflow_gateway.domain.exceptions import SpreadsheetAPIError
from cashflow_gateway.infrastructure.clients.sheets import SheetsClient, parse_purchase_rows, parse_sales_rows
from cashflow_gateway.infrastructure.clients.weekly_model import WeeklyModelClient

SALES_VALUES = {
    "values": [
        ["ID", "Cliente", "Tipo", "Descripcion", "x", "Monto", "x", "Fecha", "Pais"],
        ["V-1", "ACME", "VENTA", "Catering", "", "1500.50", "", "2026-03-10", "Peru"],
        ["V-2", "", "", "", "", "pending", "", "10/03/2026", "Colombia"],
    ]
}

PURCHASE_VALUES = {
    "values": [
        ["Correlativo", "Tipo_OC", "Pais", "Proveedor", "Id", "Concepto", "Moneda", "Monto", "CC", "Linea", "fecha"],
        ["OC-7", "PAGO PLANIFICADO", "Mexico", "Proveedor SA", "1", "Insumos", "MXN", "925", "", "", "2026-03-11"],
    ]
}


def sheets_transport(status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if status != 200:
            return httpx.Response(status, json={"error": "boom"})
        payload = PURCHASE_VALUES if "OC_MASTER" in str(request.url) else SALES_VALUES
        return httpx.Response(200, json=payload)

    return httpx.MockTransport(handler)


def test_sheets_client_parses_sales_and_purchases():
    client = SheetsClient(base_url="https://sheets.test/v4", api_key="k", transport=sheets_transport())

    sales, purchases = asyncio.run(client.get_records())

    assert len(sales) == 2
    assert sales[0].record_id == "V-1"
    assert sales[0].amount == 1500.50
    assert sales[0].date == date(2026, 3, 10)
    assert sales[0].country == "Peru"
    assert sales[1].counterparty == "Unnamed"
    assert sales[1].date == date(2026, 3, 10)
    assert math.isnan(sales[1].amount)  # counted and zeroed during aggregation

    [purchase] = purchases
    assert purchase.amount == 925
    assert purchase.currency == "MXN"
    assert purchase.currency_tag == "MXN"
    assert purchase.counterparty == "Proveedor SA"
    assert purchase.date == date(2026, 3, 11)


def test_sheets_client_http_error_raises():
    client = SheetsClient(base_url="https://sheets.test/v4", transport=sheets_transport(status=500))

    with pytest.raises(SpreadsheetAPIError, match="500"):
        asyncio.run(client.get_records())


def test_sheets_client_one_sheet_failing_waits_for_both():
    """A failed purchases fetch raises only after the sales fetch has completed"""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        if "OC_MASTER" in str(request.url):
            return httpx.Response(404, json={"error": "missing"})
        return httpx.Response(200, json=SALES_VALUES)

    client = SheetsClient(base_url="https://sheets.test/v4", transport=httpx.MockTransport(handler))

    with pytest.raises(SpreadsheetAPIError, match="404"):
        asyncio.run(client.get_records())

    assert len(seen) == 2


def test_sheets_client_both_sheets_failing_reports_sales_first():
    def handler(request: httpx.Request) -> httpx.Response:
        status = 404 if "OC_MASTER" in str(request.url) else 502
        return httpx.Response(status)

    client = SheetsClient(base_url="https://sheets.test/v4", transport=httpx.MockTransport(handler))

    with pytest.raises(SpreadsheetAPIError, match="502"):
        asyncio.run(client.get_records())


def test_sheets_client_malformed_payload_raises():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"values": "nope"}))
    client = SheetsClient(base_url="https://sheets.test/v4", transport=transport)

    with pytest.raises(SpreadsheetAPIError, match="Invalid record data"):
        asyncio.run(client.get_records())


def test_parse_rows_header_only_and_short_rows():
    assert parse_sales_rows({"values": [["header"]]}) == []
    assert parse_sales_rows({}) == []

    [short] = parse_purchase_rows({"values": [["h"], ["OC-1", "", "Peru"]]})
    assert short.country == "Peru"
    assert short.date is None
    assert short.currency is None
    assert math.isnan(short.amount)


def test_weekly_model_client_parses_payload():
    payload = {
        "weeks": ["2025-03-10", "2025-03-17"],
        "citiesData": {"Lima": {"Sales": [100, None], "Gross margin": [0.3, 0.4]}},
    }
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    client = WeeklyModelClient(url="https://weekly.test/exec", transport=transport)

    data = asyncio.run(client.get_weekly_data())

    assert data.weeks == ["2025-03-10", "2025-03-17"]
    assert data.cities_data["Lima"]["Sales"] == [100.0, 0.0]


def test_weekly_model_client_failure_returns_none():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = WeeklyModelClient(url="https://weekly.test/exec", transport=transport)

    assert asyncio.run(client.get_weekly_data()) is None


def test_weekly_model_client_without_url_returns_none():
    assert asyncio.run(WeeklyModelClient(url="").get_weekly_data()) is None
