from .requests import RatingConfirmationRequest
from .responses import (
	AggregationResponse,
	BaselineHistoryResponse,
	BaselineResponse,
	HealthResponse,
	QuoteResponse,
	RatingConfirmationResponse,
)

__all__ = [
	'RatingConfirmationRequest',
	'AggregationResponse',
	'BaselineHistoryResponse',
	'BaselineResponse',
	'HealthResponse',
	'QuoteResponse',
	'RatingConfirmationResponse',
]
