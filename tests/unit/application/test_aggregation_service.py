# nosec B101


import pytest
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from application.services import (
    BaselineRateResolver,
    Deduplicator,
    MarginNormalizer,
    QuoteAggregationService,
    QuoteCollector,
    RankingEngine,
    RatingResolver,
    RatingTables,
    SyntheticProviderPolicy,
    SyntheticQuoteGenerator,
)
from config import policies
from domain.exceptions.quote import AggregationFailureError, InvalidQuoteRequestError, SourceUnavailableError
from domain.models.quote import (
    BaselineSource,
    MidMarketQuote,
    RatingProvenance,
    SortCriterion,
    SortDirection,
    SourceChannel,
)
from infrastructure.cache.rating_store import InMemoryRatingStore


def build_service(sources, synthetic_configs=None, rate_client=None):
    configs = policies.SYNTHETIC_PROVIDERS if synthetic_configs is None else synthetic_configs
    return QuoteAggregationService(
        collector=QuoteCollector(sources),
        baseline_resolver=BaselineRateResolver(rate_client, 'wise', policies.STATIC_MID_MARKET_RATES),
        synthetic_generator=SyntheticQuoteGenerator(
            [SyntheticProviderPolicy.from_config(c, policies.MAJOR_CURRENCIES) for c in configs]
        ),
        deduplicator=Deduplicator(),
        margin_normalizer=MarginNormalizer('wise'),
        rating_resolver=RatingResolver(
            InMemoryRatingStore(),
            RatingTables(
                static_map=policies.STATIC_RATING_MAP,
                overrides=policies.HARDCODED_RATING_OVERRIDES,
                provider_defaults=policies.PROVIDER_DEFAULT_RATINGS,
            ),
        ),
        ranking_engine=RankingEngine(),
    )


@pytest.mark.asyncio
async def test_aggregate_returns_ranked_quotes_with_baseline(quote_factory, source_factory):
    wise = quote_factory('Wise', rate='1.17', provider_code='wise')
    revolut = quote_factory('Revolut', rate='1.165', provider_code='revolut')
    service = build_service([
        source_factory('dedicated:wise', SourceChannel.DEDICATED_LIVE, [wise]),
        source_factory('dedicated:revolut', SourceChannel.DEDICATED_LIVE, [revolut]),
    ])

    result = await service.aggregate('gbp', 'eur', Decimal('1000'))

    assert result.from_currency == 'GBP'
    assert result.to_currency == 'EUR'
    assert result.baseline.rate == Decimal('1.17')
    assert result.baseline.source is BaselineSource.REFERENCE_PROVIDER
    assert result.best_deal is wise
    assert result.quotes[0] is wise

    keys = [q.provider_key for q in result.quotes]
    assert len(keys) == len(set(keys))
    assert {'wise', 'revolut', 'torfx', 'xe', 'regencyfx', 'currencyonlinegroup', 'profee'} == set(keys)

    amounts = [q.amount_received for q in result.quotes]
    assert amounts == sorted(amounts, reverse=True)

    for quote in result.quotes:
        assert quote.base_rate == Decimal('1.17')
        assert quote.rating_provenance is not None
        assert Decimal('0') <= quote.rating_value <= Decimal('5')

    assert wise.margin_percentage == Decimal('0')


@pytest.mark.asyncio
async def test_synthetic_quote_can_outrank_live_quote(quote_factory, source_factory):
    live = quote_factory('Provider A', rate='1.165', provider_code='providera')
    torfx_only = [c for c in policies.SYNTHETIC_PROVIDERS if c['provider_key'] == 'torfx']
    rate_client = AsyncMock()
    rate_client.fetch_mid_market_rate.return_value = MidMarketQuote(
        'GBP', 'EUR', Decimal('1.17'), datetime.now(tz=UTC), 'mid-market'
    )
    service = build_service(
        [source_factory('comparison-aggregator', SourceChannel.GENERIC_AGGREGATOR, [live])],
        synthetic_configs=torfx_only,
        rate_client=rate_client,
    )

    result = await service.aggregate('GBP', 'EUR', Decimal('1000'))

    assert result.baseline.source is BaselineSource.EXTERNAL_SERVICE
    assert result.baseline.rate == Decimal('1.17')

    torfx = result.quotes[0]
    assert [q.provider_key for q in result.quotes] == ['torfx', 'providera']
    assert torfx.rate.quantize(Decimal('0.0001')) == Decimal('1.1653')
    assert torfx.is_real_time is False
    assert result.best_deal is torfx


@pytest.mark.asyncio
async def test_static_baseline_used_without_reference_or_external_rate(quote_factory, source_factory):
    live = quote_factory('Provider A', rate='1.165', provider_code='providera')
    torfx_only = [c for c in policies.SYNTHETIC_PROVIDERS if c['provider_key'] == 'torfx']
    service = build_service(
        [source_factory('comparison-aggregator', SourceChannel.GENERIC_AGGREGATOR, [live])],
        synthetic_configs=torfx_only,
    )

    result = await service.aggregate('GBP', 'EUR', Decimal('1000'))

    # static GBP->EUR is 1.16, so torfx lands below the live quote
    assert result.baseline.source is BaselineSource.STATIC_APPROXIMATION
    assert [q.provider_key for q in result.quotes] == ['providera', 'torfx']
    assert result.best_deal.provider_key == 'providera'


@pytest.mark.asyncio
async def test_live_duplicate_suppresses_synthetic_quote(quote_factory, source_factory):
    live_torfx = quote_factory('TorFX', rate='1.15', provider_code='torfx', channel=SourceChannel.GENERIC_AGGREGATOR)
    service = build_service([
        source_factory('comparison-aggregator', SourceChannel.GENERIC_AGGREGATOR, [live_torfx]),
    ])

    result = await service.aggregate('GBP', 'EUR', Decimal('1000'))
    torfx = [q for q in result.quotes if q.provider_key == 'torfx']

    assert torfx == [live_torfx]
    assert torfx[0].is_real_time


@pytest.mark.asyncio
async def test_dedicated_wins_over_aggregator_duplicate(quote_factory, source_factory):
    dedicated = quote_factory('Wise', rate='1.20', provider_code='wise')
    aggregated = quote_factory('Wise', rate='1.198', provider_code='wise', channel=SourceChannel.GENERIC_AGGREGATOR)
    service = build_service([
        source_factory('dedicated:wise', SourceChannel.DEDICATED_LIVE, [dedicated]),
        source_factory('comparison-aggregator', SourceChannel.GENERIC_AGGREGATOR, [aggregated]),
    ])

    result = await service.aggregate('GBP', 'EUR', Decimal('1000'))
    wise = [q for q in result.quotes if q.provider_key == 'wise']

    assert len(wise) == 1
    assert wise[0].rate == Decimal('1.20')
    assert wise[0].source_channel is SourceChannel.DEDICATED_LIVE


@pytest.mark.asyncio
async def test_all_sources_failing_raises_aggregation_failure(source_factory):
    service = build_service([
        source_factory('dedicated:wise', SourceChannel.DEDICATED_LIVE,
                       error=SourceUnavailableError('dedicated:wise', 'down')),
        source_factory('comparison-aggregator', SourceChannel.GENERIC_AGGREGATOR, error=RuntimeError('boom')),
    ])

    with pytest.raises(AggregationFailureError) as exc_info:
        await service.aggregate('GBP', 'EUR', Decimal('1000'))

    assert exc_info.value.retryable is True
    assert exc_info.value.failed_sources == ['dedicated:wise', 'comparison-aggregator']


@pytest.mark.asyncio
@pytest.mark.parametrize('from_currency,to_currency,amount', [
    ('GBP', 'GBP', Decimal('100')),
    ('GB', 'EUR', Decimal('100')),
    ('GBP', 'EUR', Decimal('0')),
    ('GBP', 'EUR', Decimal('-5')),
])
async def test_invalid_requests_rejected(from_currency, to_currency, amount, source_factory):
    source = source_factory('dedicated:wise', SourceChannel.DEDICATED_LIVE)
    service = build_service([source])

    with pytest.raises(InvalidQuoteRequestError):
        await service.aggregate(from_currency, to_currency, amount)

    source.fetch_quotes.assert_not_called()


@pytest.mark.asyncio
async def test_sort_by_rating_reflects_latest_confirmation(quote_factory, source_factory):
    service = build_service([
        source_factory('dedicated:wise', SourceChannel.DEDICATED_LIVE,
                       [quote_factory('Wise', rate='1.17', provider_code='wise')]),
        source_factory('dedicated:remitly', SourceChannel.DEDICATED_LIVE,
                       [quote_factory('Remitly', rate='1.16', provider_code='remitly')]),
    ], synthetic_configs=[])

    result = await service.aggregate('GBP', 'EUR', Decimal('1000'), sort_by=SortCriterion.RATING)
    assert [q.provider_key for q in result.quotes] == ['wise', 'remitly']

    record = await service.on_rating_confirmed('Remitly', Decimal('4.9'))
    resorted = await service.sort(result.quotes, SortCriterion.RATING)

    assert record.provenance is RatingProvenance.CONFIRMED_BY_VIEW
    assert [q.provider_key for q in resorted] == ['remitly', 'wise']

    ascending = await service.sort(result.quotes, SortCriterion.RATING, SortDirection.ASC)
    assert [q.provider_key for q in ascending] == ['wise', 'remitly']
