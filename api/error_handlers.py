import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from domain.exceptions.quote import AggregationFailureError, InvalidQuoteRequestError, InvalidRatingError

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 30


def register_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(InvalidQuoteRequestError)
	async def invalid_request_handler(request: Request, exc: InvalidQuoteRequestError):
		return JSONResponse(status_code=400, content={'detail': str(exc)})

	@app.exception_handler(InvalidRatingError)
	async def invalid_rating_handler(request: Request, exc: InvalidRatingError):
		return JSONResponse(status_code=422, content={'detail': str(exc)})

	@app.exception_handler(AggregationFailureError)
	async def aggregation_failure_handler(request: Request, exc: AggregationFailureError):
		logger.error(f'Aggregation failure: {exc}')
		return JSONResponse(
			status_code=503,
			content={
				'detail': 'No quotes available right now, please try again',
				'retryable': exc.retryable,
				'failed_sources': exc.failed_sources,
			},
			headers={'Retry-After': str(RETRY_AFTER_SECONDS)},
		)
