import json
from datetime import datetime
from decimal import Decimal
from typing import Protocol

from redis import asyncio as redis

from domain.exceptions.quote import CacheError
from domain.models.quote import RatingProvenance, RatingRecord


class RatingStore(Protocol):
    """Session-wide rating records keyed by provider key. Last write wins, no eviction."""

    async def get(self, provider_key: str) -> RatingRecord | None:
        ...

    async def get_many(self, provider_keys: list[str]) -> dict[str, RatingRecord]:
        ...

    async def set(self, record: RatingRecord) -> None:
        ...

    async def set_if_absent(self, record: RatingRecord) -> bool:
        ...


class InMemoryRatingStore:
    def __init__(self):
        self._records: dict[str, RatingRecord] = {}

    async def get(self, provider_key: str) -> RatingRecord | None:
        return self._records.get(provider_key)

    async def get_many(self, provider_keys: list[str]) -> dict[str, RatingRecord]:
        return {key: self._records[key] for key in provider_keys if key in self._records}

    async def set(self, record: RatingRecord) -> None:
        self._records[record.provider_key] = record

    async def set_if_absent(self, record: RatingRecord) -> bool:
        if record.provider_key in self._records:
            return False
        self._records[record.provider_key] = record
        return True


class RedisRatingStore:
    HASH_KEY = "ratings:records"

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    @staticmethod
    def _serialize(record: RatingRecord) -> str:
        return json.dumps({
            "provider_key": record.provider_key,
            "value": str(record.value),
            "provenance": record.provenance.value,
            "timestamp": record.timestamp.isoformat(),
        })

    @staticmethod
    def _deserialize(data: str | bytes) -> RatingRecord:
        try:
            raw = json.loads(data)
            return RatingRecord(
                provider_key=raw["provider_key"],
                value=Decimal(raw["value"]),
                provenance=RatingProvenance(raw["provenance"]),
                timestamp=datetime.fromisoformat(raw["timestamp"]),
            )
        except json.JSONDecodeError as e:
            raise CacheError("Invalid json data for rating record") from e
        except (KeyError, ValueError, ArithmeticError) as e:
            raise CacheError(f"Incomplete rating record: {e}") from e

    async def get(self, provider_key: str) -> RatingRecord | None:
        data = await self.redis.hget(self.HASH_KEY, provider_key)
        if not data:
            return None
        return self._deserialize(data)

    async def get_many(self, provider_keys: list[str]) -> dict[str, RatingRecord]:
        if not provider_keys:
            return {}
        values = await self.redis.hmget(self.HASH_KEY, provider_keys)
        return {
            key: self._deserialize(value)
            for key, value in zip(provider_keys, values, strict=False)
            if value
        }

    async def set(self, record: RatingRecord) -> None:
        await self.redis.hset(self.HASH_KEY, record.provider_key, self._serialize(record))

    async def set_if_absent(self, record: RatingRecord) -> bool:
        return bool(await self.redis.hsetnx(self.HASH_KEY, record.provider_key, self._serialize(record)))
