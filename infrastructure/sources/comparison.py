import logging
import re
from decimal import Decimal

import httpx

from domain.exceptions.quote import SourceUnavailableError
from domain.models.quote import Quote, SourceChannel, TransferTime, normalize_key
from infrastructure.sources.base import BaseQuoteSource, to_decimal

logger = logging.getLogger(__name__)

HOURS_PER_DAY = Decimal("24")
MINUTES_PER_HOUR = Decimal("60")
_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)([DHMS])")

DEFAULT_MIN_HOURS = Decimal("24")
DEFAULT_MAX_HOURS = Decimal("72")


def parse_duration_hours(duration: str | None, default: Decimal) -> Decimal:
    """Hours in an ISO-8601 duration such as 'P1DT4H' or 'PT30M'; seconds are ignored."""
    if not duration:
        return default

    total = Decimal("0")
    date_part, _, time_part = duration.upper().partition("T")
    for value, unit in _DURATION_RE.findall(date_part):
        if unit == "D":
            total += Decimal(value) * HOURS_PER_DAY
    for value, unit in _DURATION_RE.findall(time_part):
        if unit == "H":
            total += Decimal(value)
        elif unit == "M":
            total += Decimal(value) / MINUTES_PER_HOUR

    return total if total > 0 else default


class ComparisonAggregatorSource(BaseQuoteSource):
    """Generic multi-provider comparison endpoint (Wise v3 comparisons payload)."""

    def __init__(self, base_url: str, api_key: str = "", client: httpx.AsyncClient | None = None,
                 timeout: int = 10):
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        super().__init__(base_url, client=client, timeout=timeout, headers=headers)

    @property
    def name(self) -> str:
        return "comparison-aggregator"

    @property
    def channel(self) -> SourceChannel:
        return SourceChannel.GENERIC_AGGREGATOR

    async def fetch_quotes(self, from_currency: str, to_currency: str, amount: Decimal) -> list[Quote]:
        data = await self._request(
            "comparisons/",
            {"sourceCurrency": from_currency, "targetCurrency": to_currency, "sendAmount": str(amount)},
        )

        providers = data.get("providers")
        if not isinstance(providers, list):
            raise SourceUnavailableError(self.name, "malformed payload: 'providers' list missing")

        quotes = []
        for entry in providers:
            try:
                quote = self._parse_provider(entry, from_currency, to_currency, amount)
            except (ValueError, TypeError, AttributeError) as e:
                logger.debug(f"Skipping malformed comparison entry {entry!r}: {e}")
                continue
            if quote is not None:
                quotes.append(quote)

        logger.info(f"{self.name} returned {len(quotes)} quotes for {from_currency}->{to_currency}")
        return quotes

    def _parse_provider(self, entry: dict, from_currency: str, to_currency: str, amount: Decimal) -> Quote | None:
        offers = entry.get("quotes") or []
        if not offers:
            return None
        offer = offers[0]

        duration = (offer.get("deliveryEstimation") or {}).get("duration") or {}
        transfer_time = TransferTime.from_hours(
            parse_duration_hours(duration.get("min"), DEFAULT_MIN_HOURS),
            parse_duration_hours(duration.get("max"), DEFAULT_MAX_HOURS),
        )

        provider_id = entry.get("id")
        alias = entry.get("alias") or ""
        logos = entry.get("logos") or {}

        return Quote(
            provider_name=entry.get("name") or "Unknown",
            source_channel=self.channel,
            from_currency=from_currency,
            to_currency=to_currency,
            send_amount=amount,
            rate=to_decimal(offer.get("rate"), "rate"),
            transfer_fee=to_decimal(offer.get("fee", 0), "fee"),
            transfer_time=transfer_time,
            provider_key=normalize_key(alias),
            provider_code=alias or None,
            provider_id=f"wise-{provider_id}" if provider_id is not None else None,
            logo_ref=(logos.get("normal") or {}).get("pngUrl"),
        )
