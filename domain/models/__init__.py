from .quote import (
    AggregationResult,
    BaselineRate,
    BaselineSource,
    MidMarketQuote,
    Quote,
    RatingProvenance,
    RatingRecord,
    SortCriterion,
    SortDirection,
    SourceChannel,
    TransferTime,
    normalize_key,
)

__all__ = [
    'AggregationResult',
    'BaselineRate',
    'BaselineSource',
    'MidMarketQuote',
    'Quote',
    'RatingProvenance',
    'RatingRecord',
    'SortCriterion',
    'SortDirection',
    'SourceChannel',
    'TransferTime',
    'normalize_key',
]
