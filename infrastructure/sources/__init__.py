from .base import BaseQuoteSource, QuoteSource
from .comparison import ComparisonAggregatorSource
from .dedicated import DedicatedProviderSource

__all__ = ['BaseQuoteSource', 'QuoteSource', 'ComparisonAggregatorSource', 'DedicatedProviderSource']
