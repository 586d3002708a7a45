from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	DATABASE_URL: str = 'sqlite+aiosqlite:///./remit_compare.db'

	REDIS_URL: str = 'redis://localhost:6379'
	RATING_STORE_BACKEND: Literal['memory', 'redis'] = 'memory'

	# Quote sources
	COMPARISON_API_URL: str = 'https://api.transferwise.com/v3'
	COMPARISON_API_KEY: str = ''
	DEDICATED_API_URL: str = 'http://localhost:5000/api'
	DEDICATED_PROVIDERS: list[str] = ['wise', 'revolut', 'instarem', 'remitly', 'ofx']
	SOURCE_TIMEOUT: int = 10

	# Baseline
	MID_MARKET_API_URL: str = 'https://open.er-api.com/v6'
	MID_MARKET_API_KEY: str = ''
	REFERENCE_PROVIDER: str = 'wise'

	# Ratings
	DEFAULT_RATING: Decimal = Decimal('4.0')

	# Application
	APP_NAME: str = 'Remittance Quote Comparison API'
	DEBUG: bool = True
	HOST: str = '0.0.0.0'
	PORT: int = 8000

	# Logging
	LOG_LEVEL: str = 'INFO'
	LOG_DIRECTORY: str = 'logs'
	LOG_JSON: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')


@lru_cache
def get_settings() -> Settings:
	return Settings()
