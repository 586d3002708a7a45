import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from decimal import Decimal

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from domain.exceptions.quote import (
    BaselineUnresolvableError,
    CacheError,
    SourceTimeoutError,
    SourceUnavailableError,
)
from domain.models.quote import BaselineRate, BaselineSource, MidMarketQuote, Quote, SourceChannel, normalize_key
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.rates.midmarket import MidMarketRateClient

logger = logging.getLogger(__name__)

NEUTRAL_BASELINE = Decimal("1.0")

BaselineRecorder = Callable[[BaselineRate], Awaitable[None]]


class BaselineRateResolver:
    """
    Resolves the one mid-market reference rate for an aggregation run:
    1. the reference provider's own live quote, when collected
    2. the external mid-market rate service (Redis cached)
    3. the static approximation table, direct or reciprocal
    4. a neutral 1.0, flagged degraded
    """

    def __init__(
        self,
        rate_client: MidMarketRateClient | None,
        reference_provider_key: str,
        static_rates: dict[str, dict[str, Decimal]],
        cache: RedisCacheService | None = None,
        recorder: BaselineRecorder | None = None,
    ):
        self.rate_client = rate_client
        self.reference_provider_key = normalize_key(reference_provider_key)
        self.static_rates = static_rates
        self.cache = cache
        self.recorder = recorder

    async def fetch_external(self, from_currency: str, to_currency: str) -> MidMarketQuote | None:
        """Never raises: a failed external lookup just removes that strategy from the cascade."""
        cached = await self._check_cache(from_currency, to_currency)
        if cached:
            return cached

        if self.rate_client is None:
            return None

        try:
            quote = await self._fetch_with_retry(from_currency, to_currency)
        except SourceUnavailableError as e:
            logger.warning(f"Mid-market rate unavailable for {from_currency}->{to_currency}: {e}")
            return None
        except Exception as e:
            logger.error(f"Mid-market lookup failed unexpectedly for {from_currency}->{to_currency}: {e}")
            return None

        await self._update_cache(quote)
        return quote

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=2),
        retry=retry_if_exception_type(SourceTimeoutError),
        reraise=True,
    )
    async def _fetch_with_retry(self, from_currency: str, to_currency: str) -> MidMarketQuote:
        return await self.rate_client.fetch_mid_market_rate(from_currency, to_currency)

    async def resolve(
        self,
        from_currency: str,
        to_currency: str,
        quotes: list[Quote],
        external: MidMarketQuote | None,
    ) -> BaselineRate:
        now = datetime.now(tz=UTC)

        reference = self.find_reference_quote(quotes)
        if reference is not None:
            baseline = BaselineRate(from_currency, to_currency, reference.rate, now, BaselineSource.REFERENCE_PROVIDER)
        elif external is not None:
            baseline = BaselineRate(from_currency, to_currency, external.rate, now, BaselineSource.EXTERNAL_SERVICE)
        else:
            try:
                rate = self._static_approximation(from_currency, to_currency)
                baseline = BaselineRate(from_currency, to_currency, rate, now, BaselineSource.STATIC_APPROXIMATION)
            except BaselineUnresolvableError as e:
                logger.warning(f"{e}; falling back to neutral baseline {NEUTRAL_BASELINE}")
                baseline = BaselineRate(
                    from_currency, to_currency, NEUTRAL_BASELINE, now,
                    BaselineSource.STATIC_APPROXIMATION, is_degraded=True,
                )

        logger.info(
            f"Baseline {from_currency}->{to_currency}: {baseline.rate} from {baseline.source.value}"
            f"{' (degraded)' if baseline.is_degraded else ''}"
        )
        await self._record(baseline)
        return baseline

    def find_reference_quote(self, quotes: list[Quote]) -> Quote | None:
        """The reference provider's quote, preferring its dedicated live copy."""
        candidates = [
            q for q in quotes
            if normalize_key(q.provider_key or q.provider_code or q.provider_name) == self.reference_provider_key
            and q.source_channel is not SourceChannel.SYNTHETIC
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda q: q.source_channel.priority)

    def _static_approximation(self, from_currency: str, to_currency: str) -> Decimal:
        if from_currency == to_currency:
            return Decimal("1")

        direct = self.static_rates.get(from_currency, {}).get(to_currency)
        if direct:
            return direct

        reciprocal = self.static_rates.get(to_currency, {}).get(from_currency)
        if reciprocal:
            return Decimal("1") / reciprocal

        raise BaselineUnresolvableError(f"No baseline available for {from_currency}->{to_currency}")

    async def _check_cache(self, from_currency: str, to_currency: str) -> MidMarketQuote | None:
        if self.cache is None:
            return None
        try:
            return await self.cache.get_rate(from_currency, to_currency)
        except CacheError as e:
            logger.warning(f"Ignoring corrupt mid-market cache entry: {e}")
        except Exception as e:
            logger.error(f"Mid-market cache read failed: {e}")
        return None

    async def _update_cache(self, quote: MidMarketQuote) -> None:
        if self.cache is None:
            return
        try:
            await self.cache.set_rate(quote)
        except Exception as e:
            logger.error(f"Mid-market cache write failed: {e}")

    async def _record(self, baseline: BaselineRate) -> None:
        if self.recorder is None:
            return
        try:
            await self.recorder(baseline)
        except Exception as e:
            logger.error(f"Failed to record baseline history: {e}")
