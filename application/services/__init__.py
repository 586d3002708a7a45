from .aggregation_service import QuoteAggregationService
from .baseline import BaselineRateResolver
from .collector import QuoteCollector
from .deduplication import Deduplicator
from .margins import MarginNormalizer
from .ranking import RankingEngine
from .ratings import RatingResolver, RatingTables
from .synthetic_quotes import SyntheticProviderPolicy, SyntheticQuoteGenerator

__all__ = [
    'QuoteAggregationService',
    'BaselineRateResolver',
    'QuoteCollector',
    'Deduplicator',
    'MarginNormalizer',
    'RankingEngine',
    'RatingResolver',
    'RatingTables',
    'SyntheticProviderPolicy',
    'SyntheticQuoteGenerator',
]
