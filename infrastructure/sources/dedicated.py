import logging
from decimal import Decimal

import httpx

from domain.exceptions.quote import SourceUnavailableError
from domain.models.quote import Quote, SourceChannel, TransferTime, normalize_key
from infrastructure.sources.base import BaseQuoteSource, to_decimal

logger = logging.getLogger(__name__)


class DedicatedProviderSource(BaseQuoteSource):
    """Single-provider live pricing endpoint, e.g. GET {base_url}/revolut/compare."""

    def __init__(self, provider: str, base_url: str, client: httpx.AsyncClient | None = None,
                 timeout: int = 10):
        super().__init__(base_url, client=client, timeout=timeout)
        self.provider = provider
        self.provider_key = normalize_key(provider)

    @property
    def name(self) -> str:
        return f"dedicated:{self.provider_key}"

    @property
    def channel(self) -> SourceChannel:
        return SourceChannel.DEDICATED_LIVE

    async def fetch_quotes(self, from_currency: str, to_currency: str, amount: Decimal) -> list[Quote]:
        data = await self._request(
            f"{self.provider}/compare",
            {"fromCurrency": from_currency, "toCurrency": to_currency, "amount": str(amount)},
        )

        if not data.get("success", False):
            message = data.get("message") or data.get("error") or "Unknown error"
            raise SourceUnavailableError(self.name, f"provider reported failure: {message}")

        entries = data.get("data")
        if not isinstance(entries, list):
            raise SourceUnavailableError(self.name, "malformed payload: 'data' list missing")

        try:
            return [self._parse_entry(entry, from_currency, to_currency, amount) for entry in entries]
        except (ValueError, TypeError, AttributeError) as e:
            raise SourceUnavailableError(self.name, f"malformed quote entry: {e}") from e

    def _parse_entry(self, entry: dict, from_currency: str, to_currency: str, amount: Decimal) -> Quote:
        rate = entry.get("effectiveRate", entry.get("rate"))

        hours = entry.get("transferTimeHours") or {}
        min_hours = hours.get("min")
        max_hours = hours.get("max")
        descriptor = entry.get("transferTime") or "Unknown"
        if min_hours is not None and max_hours is not None:
            transfer_time = TransferTime(
                descriptor=descriptor,
                min_hours=to_decimal(min_hours, "transferTimeHours.min"),
                max_hours=to_decimal(max_hours, "transferTimeHours.max"),
            )
        else:
            transfer_time = TransferTime(descriptor=descriptor)

        code = entry.get("providerCode") or self.provider
        return Quote(
            provider_name=entry.get("providerName") or self.provider.title(),
            source_channel=self.channel,
            from_currency=from_currency,
            to_currency=to_currency,
            send_amount=amount,
            rate=to_decimal(rate, "effectiveRate"),
            transfer_fee=to_decimal(entry.get("transferFee", 0), "transferFee"),
            transfer_time=transfer_time,
            provider_key=normalize_key(code),
            provider_code=code,
            provider_id=entry.get("providerId"),
            logo_ref=entry.get("providerLogo"),
        )
