from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import get_aggregation_service, get_baseline_repository
from api.schemas import (
	AggregationResponse,
	BaselineHistoryResponse,
	BaselineResponse,
	RatingConfirmationRequest,
	RatingConfirmationResponse,
)
from application.services import QuoteAggregationService
from domain.models.quote import SortCriterion, SortDirection
from infrastructure.persistence.repositories.baselines import BaselineHistoryRepository

router = APIRouter(prefix='/api', tags=['quotes'])


@router.get(
	'/quotes/{from_currency}/{to_currency}/{amount}',
	response_model=AggregationResponse,
	status_code=status.HTTP_200_OK,
	summary='Compare remittance quotes',
)
async def get_quotes(
	from_currency: Annotated[
		str,
		Path(
			min_length=3,
			max_length=3,
		),
	],
	to_currency: Annotated[
		str,
		Path(
			min_length=3,
			max_length=3,
		),
	],
	amount: Annotated[
		Decimal,
		Path(
			gt=0,
		),
	],
	service: Annotated[QuoteAggregationService, Depends(get_aggregation_service)],
	sort_by: Annotated[SortCriterion, Query()] = SortCriterion.AMOUNT,
	direction: Annotated[SortDirection | None, Query()] = None,
) -> AggregationResponse:
	result = await service.aggregate(
		from_currency.upper(),
		to_currency.upper(),
		amount,
		sort_by=sort_by,
		direction=direction,
	)
	effective_direction = direction or service.ranking_engine.default_direction(sort_by)
	return AggregationResponse.from_result(result, sort_by.value, effective_direction.value)


@router.post(
	'/ratings/{provider_key}',
	response_model=RatingConfirmationResponse,
	status_code=status.HTTP_200_OK,
	summary='Confirm the rating a view displayed for a provider',
)
async def confirm_rating(
	provider_key: Annotated[
		str,
		Path(
			min_length=1,
			max_length=64,
		),
	],
	request: RatingConfirmationRequest,
	service: Annotated[QuoteAggregationService, Depends(get_aggregation_service)],
) -> RatingConfirmationResponse:
	record = await service.on_rating_confirmed(provider_key, request.rating_value)
	return RatingConfirmationResponse.from_record(record)


@router.get(
	'/baselines/{from_currency}/{to_currency}',
	response_model=BaselineHistoryResponse,
	status_code=status.HTTP_200_OK,
	summary='Recently resolved mid-market baselines',
)
async def get_baseline_history(
	from_currency: Annotated[
		str,
		Path(
			min_length=3,
			max_length=3,
		),
	],
	to_currency: Annotated[
		str,
		Path(
			min_length=3,
			max_length=3,
		),
	],
	repository: Annotated[BaselineHistoryRepository, Depends(get_baseline_repository)],
	limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> BaselineHistoryResponse:
	from_currency = from_currency.upper()
	to_currency = to_currency.upper()

	baselines = await repository.recent(from_currency, to_currency, limit=limit)
	return BaselineHistoryResponse(
		from_currency=from_currency,
		to_currency=to_currency,
		count=len(baselines),
		baselines=[BaselineResponse.from_baseline(b) for b in baselines],
	)
