from decimal import Decimal

from pydantic import BaseModel, Field


class RatingConfirmationRequest(BaseModel):
	rating_value: Decimal = Field(..., ge=0, le=5, description='Rating shown for the provider')

	class ConfigDict:
		json_schema_extra = {'example': {'rating_value': 4.6}}
