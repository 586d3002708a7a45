# nosec B101


import pytest
from decimal import Decimal
from unittest.mock import Mock, AsyncMock
import httpx

from infrastructure.sources.dedicated import DedicatedProviderSource
from domain.exceptions.quote import SourceUnavailableError
from domain.models.quote import SourceChannel


def mock_client_returning(payload):
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_response = Mock()
    mock_response.json.return_value = payload
    mock_response.raise_for_status = Mock()
    mock_client.get.return_value = mock_response
    return mock_client


@pytest.mark.asyncio
async def test_fetch_quotes_success():
    mock_client = mock_client_returning({
        'success': True,
        'data': [{
            'providerCode': 'revolut',
            'providerName': 'Revolut',
            'providerId': 'provider-revolut',
            'effectiveRate': 1.165,
            'transferFee': 0,
            'transferTime': 'Same day',
            'transferTimeHours': {'min': 1, 'max': 24},
        }],
    })
    source = DedicatedProviderSource('revolut', 'http://localhost:5000/api', client=mock_client)

    quotes = await source.fetch_quotes('GBP', 'EUR', Decimal('1000'))

    assert source.name == 'dedicated:revolut'
    assert len(quotes) == 1
    quote = quotes[0]
    assert quote.provider_key == 'revolut'
    assert quote.rate == Decimal('1.165')
    assert quote.source_channel is SourceChannel.DEDICATED_LIVE
    assert quote.transfer_time.descriptor == 'Same day'
    assert quote.transfer_time.max_hours == Decimal('24')
    assert quote.amount_received == Decimal('1165.000')

    call_args = mock_client.get.call_args
    assert call_args[0][0] == 'http://localhost:5000/api/revolut/compare'
    assert call_args[1]['params']['fromCurrency'] == 'GBP'
    assert call_args[1]['params']['amount'] == '1000'


@pytest.mark.asyncio
async def test_missing_provider_code_defaults_to_source_provider():
    mock_client = mock_client_returning({'success': True, 'data': [{'rate': 1.2}]})
    source = DedicatedProviderSource('wise', 'http://localhost:5000/api', client=mock_client)

    quotes = await source.fetch_quotes('GBP', 'EUR', Decimal('100'))

    assert quotes[0].provider_key == 'wise'
    assert quotes[0].provider_name == 'Wise'
    assert quotes[0].transfer_time.descriptor == 'Unknown'


@pytest.mark.asyncio
async def test_provider_reported_failure():
    mock_client = mock_client_returning({'success': False, 'message': 'Unsupported corridor'})
    source = DedicatedProviderSource('ofx', 'http://localhost:5000/api', client=mock_client)

    with pytest.raises(SourceUnavailableError) as exc_info:
        await source.fetch_quotes('GBP', 'XOF', Decimal('100'))

    assert 'Unsupported corridor' in str(exc_info.value)
    assert exc_info.value.source_name == 'dedicated:ofx'


@pytest.mark.asyncio
async def test_malformed_entry_fails_the_source():
    mock_client = mock_client_returning({'success': True, 'data': [{'providerCode': 'ofx'}]})
    source = DedicatedProviderSource('ofx', 'http://localhost:5000/api', client=mock_client)

    with pytest.raises(SourceUnavailableError) as exc_info:
        await source.fetch_quotes('GBP', 'EUR', Decimal('100'))

    assert 'malformed quote entry' in str(exc_info.value)


@pytest.mark.asyncio
async def test_non_dict_payload_is_malformed():
    mock_client = mock_client_returning(['not', 'a', 'dict'])
    source = DedicatedProviderSource('ofx', 'http://localhost:5000/api', client=mock_client)

    with pytest.raises(SourceUnavailableError):
        await source.fetch_quotes('GBP', 'EUR', Decimal('100'))


@pytest.mark.asyncio
async def test_network_error_maps_to_source_unavailable():
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.get.side_effect = httpx.ConnectError('refused')
    source = DedicatedProviderSource('ofx', 'http://localhost:5000/api', client=mock_client)

    with pytest.raises(SourceUnavailableError) as exc_info:
        await source.fetch_quotes('GBP', 'EUR', Decimal('100'))

    assert 'ConnectError' in str(exc_info.value)
