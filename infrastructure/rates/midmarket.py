import contextlib
from datetime import UTC, datetime
from decimal import Decimal

import httpx

from domain.exceptions.quote import SourceTimeoutError, SourceUnavailableError
from domain.models.quote import MidMarketQuote


class MidMarketRateClient:
    BASE_URL = "https://open.er-api.com/v6"

    def __init__(self, api_key: str = "", base_url: str | None = None,
                 client: httpx.AsyncClient | None = None, timeout: int = 10):
        self.api_key = api_key
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def name(self) -> str:
        return "mid-market"

    async def _request(self, endpoint: str) -> dict:
        url = f"{self.base_url}/{endpoint}"
        try:
            response = await self._client.get(url)
            response.raise_for_status()
            data = response.json()

            if data.get("result") != "success":
                message = data.get("error-type", "Unknown error")
                raise SourceUnavailableError(self.name, f"rate service error: {message}")

            return data

        except SourceUnavailableError:
            raise
        except httpx.TimeoutException as e:
            raise SourceTimeoutError(self.name, f"request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            msg = None
            with contextlib.suppress(Exception):
                msg = e.response.json().get("error-type")
            raise SourceUnavailableError(
                self.name, f"HTTP error {e.response.status_code}: {msg or e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise SourceUnavailableError(self.name, f"request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise SourceUnavailableError(self.name, f"response parsing error: {str(e)}") from e

    async def fetch_mid_market_rate(self, from_currency: str, to_currency: str) -> MidMarketQuote:
        endpoint = f"{self.api_key}/latest/{from_currency}" if self.api_key else f"latest/{from_currency}"
        data = await self._request(endpoint)

        try:
            rate = Decimal(str(data["rates"][to_currency]))
        except KeyError as e:
            raise SourceUnavailableError(self.name, f"Missing rate for {to_currency}") from e

        if not rate.is_finite() or rate <= 0:
            raise SourceUnavailableError(self.name, f"Invalid rate {rate} for {to_currency}")

        updated = data.get("time_last_update_unix")
        timestamp = datetime.fromtimestamp(updated, tz=UTC) if updated else datetime.now(tz=UTC)

        return MidMarketQuote(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=rate,
            timestamp=timestamp,
            source=self.name,
        )

    async def close(self) -> None:
        await self._client.aclose()
