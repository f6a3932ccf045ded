"""Spreadsheet values API client for sales and purchase-order records"""

import asyncio
import math
from typing import Any, List, Optional, Sequence, Tuple

import httpx

from cashflow_gateway.config import settings
from cashflow_gateway.domain.exceptions import InvalidRecordDataError, SpreadsheetAPIError
from cashflow_gateway.domain.models import TransactionRecord
from cashflow_gateway.domain.records import coerce_amount
from cashflow_gateway.utils.date_utils import parse_date


def _cell(row: Sequence[Any], idx: int, default: str = "") -> str:
    if idx < len(row) and row[idx] not in (None, ""):
        return str(row[idx])
    return default


def _amount(row: Sequence[Any], idx: int) -> float:
    # Unparseable cells stay NaN so aggregation can count them before zeroing
    raw = row[idx] if idx < len(row) else None
    amount, coerced = coerce_amount(raw)
    return math.nan if coerced else amount


def _values(payload: Any) -> List[Sequence[Any]]:
    if not isinstance(payload, dict):
        raise InvalidRecordDataError("Spreadsheet response is not an object")
    rows = payload.get("values", [])
    if not isinstance(rows, list) or not all(isinstance(r, list) for r in rows):
        raise InvalidRecordDataError("Spreadsheet 'values' must be a list of rows")
    return rows


def parse_sales_rows(payload: Any) -> List[TransactionRecord]:
    """
    Parse the sales sheet. First row is the header.

    Columns: A id, B client, C type, D description, F amount, H date, I country
    """
    rows = _values(payload)
    return [
        TransactionRecord(
            record_id=_cell(row, 0, f"sale-{i}"),
            counterparty=_cell(row, 1, "Unnamed"),
            category=_cell(row, 2, "VENTA"),
            description=_cell(row, 3),
            amount=_amount(row, 5),
            date=parse_date(_cell(row, 7)),
            country=_cell(row, 8),
        )
        for i, row in enumerate(rows[1:], start=1)
    ]


def parse_purchase_rows(payload: Any) -> List[TransactionRecord]:
    """
    Parse the purchase-order master sheet. First row is the header.

    Columns: A number, B order type, C country, D supplier, F concept,
    G currency, H amount, K registration date
    """
    rows = _values(payload)
    return [
        TransactionRecord(
            record_id=_cell(row, 0, f"oc-{i}"),
            category=_cell(row, 1, "PAGO PLANIFICADO"),
            country=_cell(row, 2),
            counterparty=_cell(row, 3, "Unknown supplier"),
            description=_cell(row, 5),
            currency=_cell(row, 6) or None,
            amount=_amount(row, 7),
            date=parse_date(_cell(row, 10)),
        )
        for i, row in enumerate(rows[1:], start=1)
    ]


class SheetsClient:
    """Client for the spreadsheet values API holding sales and purchase orders"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url or settings.sheets_api_base
        self.api_key = api_key if api_key is not None else settings.sheets_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _get_values(self, client: httpx.AsyncClient, spreadsheet_id: str, cell_range: str) -> Any:
        try:
            response = await client.get(
                f"{self.base_url}/spreadsheets/{spreadsheet_id}/values/{cell_range}",
                params={"key": self.api_key},
            )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise SpreadsheetAPIError(f"Spreadsheet API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise SpreadsheetAPIError(f"Spreadsheet API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise SpreadsheetAPIError(f"Spreadsheet API unreachable: {e}") from e
        except ValueError as e:
            raise SpreadsheetAPIError(f"Invalid JSON from spreadsheet API: {e}") from e

    async def get_records(self) -> Tuple[List[TransactionRecord], List[TransactionRecord]]:
        """
        Fetch sales and purchase orders concurrently.

        Returns:
            (sales, purchases)

        Raises:
            SpreadsheetAPIError: On timeout, HTTP errors, or invalid response
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            # Both fetches finish before the client closes, even when one fails
            results = await asyncio.gather(
                self._get_values(client, settings.sales_spreadsheet_id, settings.sales_range),
                self._get_values(client, settings.purchases_spreadsheet_id, settings.purchases_range),
                return_exceptions=True,
            )

        for result in results:
            if isinstance(result, BaseException):
                raise result
        sales_payload, purchases_payload = results

        try:
            return parse_sales_rows(sales_payload), parse_purchase_rows(purchases_payload)
        except InvalidRecordDataError as e:
            raise SpreadsheetAPIError(f"Invalid record data from spreadsheet: {e}") from e
