import json
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation

from redis import asyncio as redis

from domain.exceptions.quote import CacheError
from domain.models.quote import MidMarketQuote


class RedisCacheService:
    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.rate_ttl = timedelta(minutes=5)

    def _make_rate_key(self, from_currency: str, to_currency: str) -> str:
        return f"midmarket:{from_currency}:{to_currency}"

    async def get_rate(self, from_currency: str, to_currency: str) -> MidMarketQuote | None:
        key = self._make_rate_key(from_currency, to_currency)
        data = await self.redis.get(key)

        if not data:
            return None

        try:
            rate_dict = json.loads(data)
            return MidMarketQuote(
                from_currency=rate_dict["from_currency"],
                to_currency=rate_dict["to_currency"],
                rate=Decimal(rate_dict["rate"]),
                timestamp=datetime.fromisoformat(rate_dict["timestamp"]),
                source=rate_dict["source"],
            )
        except json.JSONDecodeError as e:
            raise CacheError(f"Invalid json data for {key}") from e
        except (KeyError, InvalidOperation, ValueError) as e:
            raise CacheError(f"Incomplete cache entry for {key}: {e}") from e

    async def set_rate(self, rate: MidMarketQuote) -> None:
        key = self._make_rate_key(rate.from_currency, rate.to_currency)

        rate_dict = {
            "from_currency": rate.from_currency,
            "to_currency": rate.to_currency,
            "rate": str(rate.rate),
            "timestamp": rate.timestamp.isoformat(),
            "source": rate.source,
        }

        await self.redis.setex(key, self.rate_ttl, json.dumps(rate_dict))
