"""Weekly financial model client (optional prior-year seasonal data)"""

import logging
from typing import Any, Optional

import httpx

from cashflow_gateway.config import settings
from cashflow_gateway.domain.models import WeeklyFinancialData
from cashflow_gateway.infrastructure.observability.metrics import weekly_model_unavailable_counter


def parse_weekly_payload(payload: Any) -> WeeklyFinancialData:
    """
    Convert the JSON payload to WeeklyFinancialData.

    Raises:
        KeyError, TypeError, ValueError: When weeks/citiesData are missing or malformed
    """
    weeks = [str(w) for w in payload["weeks"]]
    cities_data = {
        city: {metric: [float(v or 0) for v in values] for metric, values in metrics.items()}
        for city, metrics in payload["citiesData"].items()
    }
    return WeeklyFinancialData(weeks=weeks, cities_data=cities_data)


class WeeklyModelClient:
    """Client for the weekly financial model endpoint"""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url if url is not None else settings.weekly_model_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_weekly_data(self) -> Optional[WeeklyFinancialData]:
        """
        Fetch the weekly model.

        The source is optional: any failure is logged and returns None so
        projections fall back to the trend baseline.
        """
        if not self.url:
            return None

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(self.url, headers={"Accept": "application/json"})
                response.raise_for_status()
                return parse_weekly_payload(response.json())

            except (httpx.HTTPError, KeyError, TypeError, ValueError, AttributeError) as e:
                weekly_model_unavailable_counter.inc()
                logging.warning(f"Weekly financial model unavailable: {e}")
                return None
