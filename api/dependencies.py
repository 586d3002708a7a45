import logging
from collections.abc import AsyncIterator
from decimal import Decimal

from redis.asyncio import Redis

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
from application.services.baseline import BaselineRecorder
from config import policies
from config.settings import Settings, get_settings
from domain.models.quote import BaselineRate, normalize_key
from infrastructure.cache.rating_store import InMemoryRatingStore, RatingStore, RedisRatingStore
from infrastructure.cache.redis_cache import RedisCacheService
from infrastructure.persistence.database import Database
from infrastructure.persistence.repositories.baselines import BaselineHistoryRepository
from infrastructure.persistence.repositories.ratings import ProviderRatingRepository
from infrastructure.rates.midmarket import MidMarketRateClient
from infrastructure.sources import ComparisonAggregatorSource, DedicatedProviderSource, QuoteSource

logger = logging.getLogger(__name__)


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	db: Database | None = None
	redis_client: Redis | None = None
	redis_cache: RedisCacheService | None = None
	rating_store: RatingStore | None = None
	sources: list[QuoteSource] | None = None
	rate_client: MidMarketRateClient | None = None
	aggregation_service: QuoteAggregationService | None = None


deps = AppDependencies()


def build_sources(settings: Settings) -> list[QuoteSource]:
	"""Dedicated sources first, then the generic aggregator; order is the merge order."""
	sources: list[QuoteSource] = [
		DedicatedProviderSource(provider, settings.DEDICATED_API_URL, timeout=settings.SOURCE_TIMEOUT)
		for provider in settings.DEDICATED_PROVIDERS
	]
	sources.append(
		ComparisonAggregatorSource(
			settings.COMPARISON_API_URL, settings.COMPARISON_API_KEY, timeout=settings.SOURCE_TIMEOUT
		)
	)
	return sources


def build_aggregation_service(
	settings: Settings,
	sources: list[QuoteSource],
	rating_store: RatingStore,
	static_rating_map: dict[str, Decimal],
	rate_client: MidMarketRateClient | None = None,
	redis_cache: RedisCacheService | None = None,
	recorder: BaselineRecorder | None = None,
) -> QuoteAggregationService:
	reference_key = normalize_key(settings.REFERENCE_PROVIDER)
	synthetic_policies = [
		SyntheticProviderPolicy.from_config(config, policies.MAJOR_CURRENCIES)
		for config in policies.SYNTHETIC_PROVIDERS
	]
	return QuoteAggregationService(
		collector=QuoteCollector(sources),
		baseline_resolver=BaselineRateResolver(
			rate_client=rate_client,
			reference_provider_key=reference_key,
			static_rates=policies.STATIC_MID_MARKET_RATES,
			cache=redis_cache,
			recorder=recorder,
		),
		synthetic_generator=SyntheticQuoteGenerator(synthetic_policies),
		deduplicator=Deduplicator(),
		margin_normalizer=MarginNormalizer(reference_key),
		rating_resolver=RatingResolver(
			store=rating_store,
			tables=RatingTables(
				static_map=static_rating_map,
				overrides=policies.HARDCODED_RATING_OVERRIDES,
				provider_defaults=policies.PROVIDER_DEFAULT_RATINGS,
			),
			default_rating=settings.DEFAULT_RATING,
		),
		ranking_engine=RankingEngine(),
	)


def init_dependencies() -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()

	deps.db = Database(settings.DATABASE_URL)
	deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
	deps.redis_cache = RedisCacheService(deps.redis_client)

	if settings.RATING_STORE_BACKEND == 'redis':
		deps.rating_store = RedisRatingStore(deps.redis_client)
	else:
		deps.rating_store = InMemoryRatingStore()

	deps.sources = build_sources(settings)
	deps.rate_client = MidMarketRateClient(
		api_key=settings.MID_MARKET_API_KEY,
		base_url=settings.MID_MARKET_API_URL,
		timeout=settings.SOURCE_TIMEOUT,
	)
	logger.info(f'Dependencies initialized ({len(deps.sources)} quote sources)')


async def record_baseline(baseline: BaselineRate) -> None:
	if deps.db is None:
		return
	async with deps.db.session() as session:
		await BaselineHistoryRepository(session).save(baseline)


async def bootstrap() -> None:
	"""Seed and load the static rating map, then build the engine. Called after init_dependencies()."""
	logger.info('Bootstrapping application...')

	if deps.db is None or deps.rating_store is None or deps.sources is None:
		raise RuntimeError('Dependencies not initialized. Call init_dependencies() first.')

	await deps.db.create_tables()

	async with deps.db.session() as session:
		repo = ProviderRatingRepository(session)
		seeded = await repo.seed(policies.STATIC_RATING_MAP)
		logger.info(f'Seeded {seeded} provider ratings')

	async with deps.db.session() as session:
		static_rating_map = await ProviderRatingRepository(session).load_map()
	logger.info(f'Loaded {len(static_rating_map)} static provider ratings')

	deps.aggregation_service = build_aggregation_service(
		settings=get_settings(),
		sources=deps.sources,
		rating_store=deps.rating_store,
		static_rating_map=static_rating_map,
		rate_client=deps.rate_client,
		redis_cache=deps.redis_cache,
		recorder=record_baseline,
	)
	logger.info('Bootstrap complete')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.redis_client:
		await deps.redis_client.close()
	if deps.db:
		await deps.db.close()
	if deps.sources:
		for source in deps.sources:
			await source.close()
	if deps.rate_client:
		await deps.rate_client.close()

	logger.info('Cleanup complete')


async def get_baseline_repository() -> AsyncIterator[BaselineHistoryRepository]:
	if deps.db is None:
		raise RuntimeError('Database not initialized')
	async with deps.db.session() as session:
		yield BaselineHistoryRepository(session)


def get_aggregation_service() -> QuoteAggregationService:
	if deps.aggregation_service is None:
		raise RuntimeError('Aggregation service not initialized')
	return deps.aggregation_service


def get_app_dependencies() -> AppDependencies:
	return deps
