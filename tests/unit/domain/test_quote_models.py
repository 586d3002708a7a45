# nosec B101


import pytest
from decimal import Decimal

from domain.models.quote import (
    Quote,
    SourceChannel,
    TransferTime,
    describe_hours,
    normalize_key,
)


def make_quote(**overrides):
    fields = {
        'provider_name': 'Wise',
        'source_channel': SourceChannel.DEDICATED_LIVE,
        'from_currency': 'GBP',
        'to_currency': 'EUR',
        'send_amount': Decimal('1000'),
        'rate': Decimal('1.165'),
    }
    fields.update(overrides)
    return Quote(**fields)


def test_normalize_key_strips_non_alphanumerics():
    assert normalize_key('Western Union') == 'westernunion'
    assert normalize_key('Currency-Online_Group') == 'currencyonlinegroup'
    assert normalize_key(None) == ''
    assert normalize_key('---') == ''


def test_channel_priority_prefers_dedicated_over_aggregator_over_synthetic():
    assert SourceChannel.DEDICATED_LIVE.priority < SourceChannel.GENERIC_AGGREGATOR.priority
    assert SourceChannel.GENERIC_AGGREGATOR.priority < SourceChannel.SYNTHETIC.priority


def test_amount_received_subtracts_fee_before_conversion():
    quote = make_quote(rate=Decimal('1.2'), transfer_fee=Decimal('10'))

    assert quote.amount_received == Decimal('1188.0')


def test_amount_received_clamped_at_zero_when_fee_exceeds_amount():
    quote = make_quote(send_amount=Decimal('5'), transfer_fee=Decimal('10'))

    assert quote.amount_received == Decimal('0')


def test_non_positive_rate_rejected():
    with pytest.raises(ValueError):
        make_quote(rate=Decimal('0'))


def test_negative_fee_rejected():
    with pytest.raises(ValueError):
        make_quote(transfer_fee=Decimal('-1'))


def test_margin_cost_only_for_negative_margin():
    worse = make_quote(margin_percentage=Decimal('-0.5'), transfer_fee=Decimal('2'))
    better = make_quote(margin_percentage=Decimal('0.3'), transfer_fee=Decimal('2'))

    assert worse.margin_cost == Decimal('5')
    assert worse.total_cost == Decimal('7')
    assert better.margin_cost == Decimal('0')
    assert better.total_cost == Decimal('2')


def test_synthetic_quotes_are_not_real_time():
    assert make_quote().is_real_time is True
    assert make_quote(source_channel=SourceChannel.SYNTHETIC).is_real_time is False


@pytest.mark.parametrize('min_hours,max_hours,expected', [
    ('2', '2', '2 hours'),
    ('1', '1', '1 hour'),
    ('1', '2', '1-2 hours'),
    ('24', '48', '1-2 days'),
    ('4', '48', '4 hours - 2 days'),
    ('48', '48', '2 days'),
    ('25', '25', '2 days'),
    ('28', '50', '2-3 days'),
    ('4', '30', '4 hours - 2 days'),
])
def test_describe_hours(min_hours, max_hours, expected):
    assert describe_hours(Decimal(min_hours), Decimal(max_hours)) == expected


def test_transfer_time_from_hours_keeps_bounds():
    transfer_time = TransferTime.from_hours(Decimal('24'), Decimal('48'))

    assert transfer_time.descriptor == '1-2 days'
    assert transfer_time.min_hours == Decimal('24')
    assert transfer_time.max_hours == Decimal('48')
