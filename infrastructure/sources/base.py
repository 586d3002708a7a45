import contextlib
import logging
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Any, Protocol, runtime_checkable

import httpx

from domain.exceptions.quote import SourceTimeoutError, SourceUnavailableError
from domain.models.quote import Quote, SourceChannel

logger = logging.getLogger(__name__)


@runtime_checkable
class QuoteSource(Protocol):
    @property
    def name(self) -> str:
        ...

    @property
    def channel(self) -> SourceChannel:
        ...

    async def fetch_quotes(self, from_currency: str, to_currency: str, amount: Decimal) -> list[Quote]:
        ...

    async def close(self) -> None:
        ...


def to_decimal(value: Any, field_name: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError(f"Missing numeric field '{field_name}'")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Field '{field_name}' is not numeric: {value!r}") from e
    if not result.is_finite():
        raise ValueError(f"Field '{field_name}' is not finite: {value!r}")
    return result


class BaseQuoteSource(ABC):
    """A base class for HTTP quote sources, handling common request and error logic."""

    def __init__(self, base_url: str, client: httpx.AsyncClient | None = None, timeout: int = 10,
                 headers: dict[str, str] | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            headers={"accept": "application/json", **(headers or {})},
        )

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def channel(self) -> SourceChannel:
        ...

    @abstractmethod
    async def fetch_quotes(self, from_currency: str, to_currency: str, amount: Decimal) -> list[Quote]:
        ...

    async def _request(self, endpoint: str, params: dict | None = None) -> dict:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise SourceTimeoutError(self.name, f"request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            msg = None
            with contextlib.suppress(Exception):
                msg = e.response.json().get("message")
            raise SourceUnavailableError(
                self.name, f"HTTP error {e.response.status_code}: {msg or e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise SourceUnavailableError(self.name, f"request failed: {e.__class__.__name__}") from e
        except Exception as e:
            raise SourceUnavailableError(self.name, f"response parsing error: {str(e)}") from e

        if not isinstance(data, dict):
            raise SourceUnavailableError(self.name, f"malformed payload of type {type(data).__name__}")
        return data

    async def close(self) -> None:
        await self._client.aclose()
