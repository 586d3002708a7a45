# nosec B101


import pytest
import json
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock


from infrastructure.cache.redis_cache import RedisCacheService
from domain.models.quote import MidMarketQuote
from domain.exceptions.quote import CacheError


@pytest.mark.asyncio
async def test_get_rate_cache_hit_returns_mid_market_quote():
    mock_redis = AsyncMock()
    cached_data = json.dumps({
        'from_currency': 'GBP',
        'to_currency': 'EUR',
        'rate': '1.17',
        'timestamp': '2026-10-19T10:30:00+00:00',
        'source': 'mid-market'
    })

    mock_redis.get.return_value = cached_data
    cache_service = RedisCacheService(redis_client=mock_redis)
    result = await cache_service.get_rate('GBP', 'EUR')

    assert result is not None
    assert isinstance(result, MidMarketQuote)
    assert result.rate == Decimal('1.17')
    assert isinstance(result.rate, Decimal)
    assert result.timestamp == datetime(2026, 10, 19, 10, 30, 0, tzinfo=UTC)
    assert result.source == 'mid-market'

    mock_redis.get.assert_called_once_with('midmarket:GBP:EUR')


@pytest.mark.asyncio
async def test_get_rate_cache_miss_returns_none():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = None

    cache_service = RedisCacheService(redis_client=mock_redis)

    result = await cache_service.get_rate('GBP', 'EUR')
    assert result is None
    mock_redis.get.assert_called_once_with('midmarket:GBP:EUR')


@pytest.mark.asyncio
async def test_get_rate_invalid_json_raises_cache_error():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = '{not json'

    cache_service = RedisCacheService(redis_client=mock_redis)

    with pytest.raises(CacheError) as exc_info:
        await cache_service.get_rate('GBP', 'EUR')
    assert 'Invalid json data for midmarket:GBP:EUR' in str(exc_info.value)


@pytest.mark.asyncio
async def test_get_rate_incomplete_entry_raises_cache_error():
    mock_redis = AsyncMock()
    mock_redis.get.return_value = json.dumps({'from_currency': 'GBP', 'rate': '1.17'})

    cache_service = RedisCacheService(redis_client=mock_redis)

    with pytest.raises(CacheError):
        await cache_service.get_rate('GBP', 'EUR')


@pytest.mark.asyncio
async def test_set_rate_stores_with_ttl():
    mock_redis = AsyncMock()
    cache_service = RedisCacheService(redis_client=mock_redis)
    quote = MidMarketQuote('GBP', 'EUR', Decimal('1.17'), datetime(2026, 10, 19, 10, 30, tzinfo=UTC), 'mid-market')

    await cache_service.set_rate(quote)

    mock_redis.setex.assert_called_once()
    key, ttl, payload = mock_redis.setex.call_args[0]
    assert key == 'midmarket:GBP:EUR'
    assert ttl == timedelta(minutes=5)
    assert json.loads(payload) == {
        'from_currency': 'GBP',
        'to_currency': 'EUR',
        'rate': '1.17',
        'timestamp': '2026-10-19T10:30:00+00:00',
        'source': 'mid-market',
    }
