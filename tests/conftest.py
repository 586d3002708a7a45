from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest

from domain.models.quote import Quote, SourceChannel


@pytest.fixture
def quote_factory():
    def _make(provider_name='Wise', rate='1.165', fee='0', channel=SourceChannel.DEDICATED_LIVE,
              amount='1000', from_currency='GBP', to_currency='EUR', **overrides):
        return Quote(
            provider_name=provider_name,
            source_channel=channel,
            from_currency=from_currency,
            to_currency=to_currency,
            send_amount=Decimal(amount),
            rate=Decimal(rate),
            transfer_fee=Decimal(fee),
            **overrides,
        )
    return _make


@pytest.fixture
def source_factory():
    """Mock quote source returning the given quotes, or raising the given error."""
    def _make(name, channel, quotes=None, error=None):
        source = Mock()
        source.name = name
        source.channel = channel
        if error is not None:
            source.fetch_quotes = AsyncMock(side_effect=error)
        else:
            source.fetch_quotes = AsyncMock(return_value=quotes or [])
        source.close = AsyncMock()
        return source
    return _make
