import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from api.dependencies import AppDependencies, get_app_dependencies
from api.schemas import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=['health'])


@router.get(
	'/health',
	response_model=HealthResponse,
	status_code=status.HTTP_200_OK,
	summary='Service health',
)
async def health(
	deps: Annotated[AppDependencies, Depends(get_app_dependencies)],
) -> HealthResponse:
	services: dict[str, str] = {}

	if deps.db is not None:
		services['database'] = 'healthy' if await deps.db.ping() else 'unhealthy'
	else:
		services['database'] = 'not_configured'

	if deps.redis_client is not None:
		try:
			await deps.redis_client.ping()
			services['redis'] = 'healthy'
		except Exception as e:
			logger.warning(f'Redis ping failed: {e}')
			services['redis'] = 'unhealthy'
	else:
		services['redis'] = 'not_configured'

	services['engine'] = 'healthy' if deps.aggregation_service is not None else 'not_ready'

	status_value = 'healthy' if all(v == 'healthy' for v in services.values()) else 'degraded'
	return HealthResponse(status=status_value, services=services)
