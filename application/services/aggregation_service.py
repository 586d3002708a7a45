import asyncio
import logging
import re
from decimal import Decimal

from application.services.baseline import BaselineRateResolver
from application.services.collector import QuoteCollector
from application.services.deduplication import Deduplicator, provider_key_for
from application.services.margins import MarginNormalizer
from application.services.ranking import RankingEngine
from application.services.ratings import RatingResolver
from application.services.synthetic_quotes import SyntheticQuoteGenerator
from domain.exceptions.quote import AggregationFailureError, InvalidQuoteRequestError
from domain.models.quote import (
    AggregationResult,
    Quote,
    RatingRecord,
    SortCriterion,
    SortDirection,
)

logger = logging.getLogger(__name__)

_CURRENCY_CODE = re.compile(r'^[A-Z]{3}$')


class QuoteAggregationService:
    """Public surface of the engine: aggregate, sort, and the rating confirmation callback."""

    def __init__(
        self,
        collector: QuoteCollector,
        baseline_resolver: BaselineRateResolver,
        synthetic_generator: SyntheticQuoteGenerator,
        deduplicator: Deduplicator,
        margin_normalizer: MarginNormalizer,
        rating_resolver: RatingResolver,
        ranking_engine: RankingEngine,
    ):
        self.collector = collector
        self.baseline_resolver = baseline_resolver
        self.synthetic_generator = synthetic_generator
        self.deduplicator = deduplicator
        self.margin_normalizer = margin_normalizer
        self.rating_resolver = rating_resolver
        self.ranking_engine = ranking_engine

    async def aggregate(
        self,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
        sort_by: SortCriterion = SortCriterion.AMOUNT,
        direction: SortDirection | None = None,
    ) -> AggregationResult:
        """
        1. Validate the request
        2. Collect live quotes and fetch the external mid-market rate concurrently
        3. Resolve the baseline, then add synthetic quotes for missing providers
        4. Deduplicate, normalize margins, resolve ratings
        5. Rank and pick the best deal
        """
        from_currency, to_currency = self._validate(from_currency, to_currency, amount)

        collection, external = await asyncio.gather(
            self.collector.collect(from_currency, to_currency, amount),
            self.baseline_resolver.fetch_external(from_currency, to_currency),
        )

        if collection.is_empty:
            logger.error(f"All quote sources failed for {from_currency}->{to_currency}: {collection.failed}")
            raise AggregationFailureError(from_currency, to_currency, collection.failed)

        baseline = await self.baseline_resolver.resolve(from_currency, to_currency, collection.quotes, external)

        live_keys = {provider_key_for(q, i) for i, q in enumerate(collection.quotes)}
        synthetic = self.synthetic_generator.generate(
            from_currency, to_currency, amount, baseline.rate, exclude_keys=live_keys
        )

        quotes = self.deduplicator.deduplicate(collection.quotes + synthetic)
        self.margin_normalizer.normalize(quotes, baseline)
        await self.rating_resolver.resolve(quotes)

        ranked = self.ranking_engine.sort(quotes, sort_by, direction)
        best_deal = self.ranking_engine.best_deal(ranked)

        logger.info(
            f"Aggregated {len(ranked)} quotes for {amount} {from_currency}->{to_currency}; "
            f"best deal {best_deal.provider_key} ({best_deal.amount_received:.2f} {to_currency})"
        )

        return AggregationResult(
            from_currency=from_currency,
            to_currency=to_currency,
            amount=amount,
            quotes=ranked,
            best_deal=best_deal,
            baseline=baseline,
            sources_succeeded=collection.succeeded,
            sources_failed=collection.failed,
        )

    async def sort(
        self,
        quotes: list[Quote],
        criterion: SortCriterion,
        direction: SortDirection | None = None,
    ) -> list[Quote]:
        """Re-sort using the latest confirmed ratings; may differ from an earlier pass."""
        confirmed: dict[str, RatingRecord] = {}
        if criterion is SortCriterion.RATING:
            confirmed = await self.rating_resolver.confirmed_ratings([q.provider_key for q in quotes])
        return self.ranking_engine.sort(quotes, criterion, direction, confirmed)

    async def on_rating_confirmed(self, provider_key: str, rating_value: Decimal) -> RatingRecord:
        return await self.rating_resolver.confirm(provider_key, rating_value)

    @staticmethod
    def _validate(from_currency: str, to_currency: str, amount: Decimal) -> tuple[str, str]:
        from_currency = (from_currency or "").strip().upper()
        to_currency = (to_currency or "").strip().upper()

        for code in (from_currency, to_currency):
            if not _CURRENCY_CODE.match(code):
                raise InvalidQuoteRequestError(f"Invalid currency code: {code!r}")
        if from_currency == to_currency:
            raise InvalidQuoteRequestError("from_currency and to_currency must be different")
        if amount is None or amount <= 0:
            raise InvalidQuoteRequestError(f"Amount must be positive, got {amount}")

        return from_currency, to_currency
