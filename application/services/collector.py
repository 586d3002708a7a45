import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal

from application.services.deduplication import provider_key_for
from domain.exceptions.quote import SourceUnavailableError
from domain.models.quote import Quote, SourceChannel
from infrastructure.sources.base import QuoteSource

logger = logging.getLogger(__name__)


@dataclass
class SourceOutcome:
    source: QuoteSource
    quotes: list[Quote] = field(default_factory=list)
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class CollectionResult:
    quotes: list[Quote]
    succeeded: list[str]
    failed: list[str]

    @property
    def is_empty(self) -> bool:
        return not self.quotes


class QuoteCollector:
    """Fans a request out to every live quote source; one source failing never stops the others."""

    def __init__(self, sources: list[QuoteSource]):
        self.sources = sources

    async def collect(self, from_currency: str, to_currency: str, amount: Decimal) -> CollectionResult:
        tasks = [self._fetch_from_source(source, from_currency, to_currency, amount) for source in self.sources]
        # gather keeps configuration order regardless of which source settles first
        outcomes = await asyncio.gather(*tasks)

        live_keys = self._dedicated_keys_with_quotes(outcomes)

        quotes: list[Quote] = []
        for outcome in outcomes:
            if outcome.source.channel is SourceChannel.GENERIC_AGGREGATOR:
                quotes.extend(self._prefilter(outcome.quotes, live_keys))
            else:
                quotes.extend(outcome.quotes)

        succeeded = [o.source.name for o in outcomes if o.succeeded]
        failed = [o.source.name for o in outcomes if not o.succeeded]

        logger.info(
            f"Collected {len(quotes)} quotes for {from_currency}->{to_currency} "
            f"({len(succeeded)} sources ok, {len(failed)} failed)"
        )
        return CollectionResult(quotes=quotes, succeeded=succeeded, failed=failed)

    async def _fetch_from_source(
        self, source: QuoteSource, from_currency: str, to_currency: str, amount: Decimal
    ) -> SourceOutcome:
        try:
            quotes = await source.fetch_quotes(from_currency, to_currency, amount)
            return SourceOutcome(source=source, quotes=list(quotes))
        except SourceUnavailableError as e:
            logger.warning(f"Source {source.name} unavailable: {e}")
            return SourceOutcome(source=source, error=str(e))
        except Exception as e:
            logger.error(f"Source {source.name} failed unexpectedly: {e}", exc_info=True)
            return SourceOutcome(source=source, error=str(e))

    @staticmethod
    def _dedicated_keys_with_quotes(outcomes: list[SourceOutcome]) -> set[str]:
        keys = set()
        for outcome in outcomes:
            if outcome.source.channel is not SourceChannel.DEDICATED_LIVE:
                continue
            for position, quote in enumerate(outcome.quotes):
                keys.add(provider_key_for(quote, position))
        return keys

    @staticmethod
    def _prefilter(quotes: list[Quote], live_keys: set[str]) -> list[Quote]:
        """Drop aggregator entries already delivered by a dedicated source in this run."""
        kept = []
        for position, quote in enumerate(quotes):
            if provider_key_for(quote, position) in live_keys:
                logger.debug(f"Aggregator entry {quote.provider_name} superseded by dedicated source")
                continue
            kept.append(quote)
        return kept
