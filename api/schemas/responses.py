from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from domain.models.quote import AggregationResult, BaselineRate, Quote, RatingRecord


class TransferTimeResponse(BaseModel):
	descriptor: str = Field(..., description='Human readable delivery estimate')
	min_hours: Decimal | None = None
	max_hours: Decimal | None = None


class QuoteResponse(BaseModel):
	provider_key: str = Field(..., description='Normalized provider identity')
	provider_name: str
	logo_ref: str | None = None
	source_channel: str = Field(..., description='dedicated-live, generic-aggregator or synthetic')
	is_real_time: bool
	rate: Decimal = Field(..., description='Destination units per source unit')
	base_rate: Decimal | None = None
	margin_percentage: Decimal = Field(..., description='Positive beats the baseline')
	transfer_fee: Decimal
	amount_received: Decimal
	margin_cost: Decimal
	total_cost: Decimal
	transfer_time: TransferTimeResponse
	rating_value: Decimal | None = None
	rating_provenance: str | None = None

	@classmethod
	def from_quote(cls, quote: Quote) -> 'QuoteResponse':
		return cls(
			provider_key=quote.provider_key,
			provider_name=quote.provider_name,
			logo_ref=quote.logo_ref,
			source_channel=quote.source_channel.value,
			is_real_time=quote.is_real_time,
			rate=quote.rate,
			base_rate=quote.base_rate,
			margin_percentage=quote.margin_percentage,
			transfer_fee=quote.transfer_fee,
			amount_received=quote.amount_received,
			margin_cost=quote.margin_cost,
			total_cost=quote.total_cost,
			transfer_time=TransferTimeResponse(
				descriptor=quote.transfer_time.descriptor,
				min_hours=quote.transfer_time.min_hours,
				max_hours=quote.transfer_time.max_hours,
			),
			rating_value=quote.rating_value,
			rating_provenance=quote.rating_provenance.value if quote.rating_provenance else None,
		)


class BaselineResponse(BaseModel):
	rate: Decimal
	source: str = Field(..., description='reference-provider, external-service or static-approximation')
	resolved_at: datetime
	is_degraded: bool

	@classmethod
	def from_baseline(cls, baseline: BaselineRate) -> 'BaselineResponse':
		return cls(
			rate=baseline.rate,
			source=baseline.source.value,
			resolved_at=baseline.resolved_at,
			is_degraded=baseline.is_degraded,
		)


class AggregationResponse(BaseModel):
	from_currency: str
	to_currency: str
	amount: Decimal
	sort_by: str
	direction: str
	count: int
	quotes: list[QuoteResponse]
	best_deal: QuoteResponse
	baseline: BaselineResponse
	sources_succeeded: list[str]
	sources_failed: list[str]

	@classmethod
	def from_result(cls, result: AggregationResult, sort_by: str, direction: str) -> 'AggregationResponse':
		return cls(
			from_currency=result.from_currency,
			to_currency=result.to_currency,
			amount=result.amount,
			sort_by=sort_by,
			direction=direction,
			count=len(result.quotes),
			quotes=[QuoteResponse.from_quote(q) for q in result.quotes],
			best_deal=QuoteResponse.from_quote(result.best_deal),
			baseline=BaselineResponse.from_baseline(result.baseline),
			sources_succeeded=result.sources_succeeded,
			sources_failed=result.sources_failed,
		)


class RatingConfirmationResponse(BaseModel):
	provider_key: str
	rating_value: Decimal
	provenance: str
	timestamp: datetime

	@classmethod
	def from_record(cls, record: RatingRecord) -> 'RatingConfirmationResponse':
		return cls(
			provider_key=record.provider_key,
			rating_value=record.value,
			provenance=record.provenance.value,
			timestamp=record.timestamp,
		)


class HealthResponse(BaseModel):
	status: str = Field(..., description='healthy or degraded')
	services: dict[str, str]


class BaselineHistoryResponse(BaseModel):
	from_currency: str
	to_currency: str
	count: int
	baselines: list[BaselineResponse] = Field(..., description='Most recent first')
