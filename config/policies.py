"""
Static policy tables for the quote engine.

Synthetic provider policies, rating tables and the mid-market approximation
table. Modify these based on commercial agreements; nothing here is computed.
"""
from decimal import Decimal

MAJOR_CURRENCIES = frozenset({'USD', 'EUR', 'GBP', 'AUD', 'CAD', 'NZD', 'CHF', 'JPY'})

SYNTHETIC_PROVIDERS: list[dict] = [
    {
        'provider_key': 'torfx',
        'provider_name': 'TorFX',
        'logo_ref': '/logos/torfx.png',
        'markup': {'major': '0.004', 'other': '0.008'},
        'fee': {'free_above': '0', 'default': '0'},
        'delivery': {
            'major': {'descriptor': '1-2 days', 'min_hours': 24, 'max_hours': 48},
            'other': {'descriptor': '2-4 days', 'min_hours': 48, 'max_hours': 96},
        },
        'starting_rating': '4.4',
    },
    {
        'provider_key': 'xe',
        'provider_name': 'XE Money Transfer',
        'logo_ref': '/logos/xe.svg',
        'markup': {'major': '0.005', 'other': '0.01'},
        'fee': {'free_above': '500', 'default': '3', 'by_currency': {'GBP': '2', 'EUR': '2.5'}},
        'delivery': {
            'major': {'descriptor': 'Same day', 'min_hours': 2, 'max_hours': 24},
            'other': {'descriptor': '1-3 days', 'min_hours': 24, 'max_hours': 72},
        },
        'starting_rating': '4.2',
    },
    {
        'provider_key': 'regencyfx',
        'provider_name': 'Regency FX',
        'logo_ref': '/logos/regencyfx.png',
        'markup': {'major': '0.0045', 'other': '0.009'},
        'fee': {'free_above': '0', 'default': '0'},
        'delivery': {
            'major': {'descriptor': '1 day', 'min_hours': 24, 'max_hours': 24},
            'other': {'descriptor': '1-3 days', 'min_hours': 24, 'max_hours': 72},
        },
        'starting_rating': '4.9',
    },
    {
        'provider_key': 'currencyonlinegroup',
        'provider_name': 'Currency Online Group',
        'logo_ref': '/logos/coglogo.webp',
        'markup': {'major': '0.008', 'other': '0.012'},
        'fee': {'free_above': '250', 'default': '5', 'by_currency': {'AUD': '7'}},
        'delivery': {
            'major': {'descriptor': '1-2 days', 'min_hours': 24, 'max_hours': 48},
            'other': {'descriptor': '3-5 days', 'min_hours': 72, 'max_hours': 120},
        },
        'starting_rating': '4.4',
    },
    {
        'provider_key': 'profee',
        'provider_name': 'Profee',
        'logo_ref': '/logos/profee.png',
        'markup': {'major': '0.006', 'other': '0.015'},
        'fee': {'free_above': '1000', 'default': '1.99'},
        'delivery': {
            'major': {'descriptor': 'Within minutes', 'min_hours': 0, 'max_hours': 1},
            'other': {'descriptor': '1-2 days', 'min_hours': 24, 'max_hours': 48},
        },
        'starting_rating': '4.4',
    },
]

# Seed for the provider_ratings table (Trustpilot scores)
STATIC_RATING_MAP: dict[str, Decimal] = {
    'wise': Decimal('4.3'),
    'revolut': Decimal('4.2'),
    'instarem': Decimal('4.0'),
    'remitly': Decimal('4.1'),
    'ofx': Decimal('4.2'),
    'westernunion': Decimal('3.9'),
    'moneygram': Decimal('3.8'),
    'worldremit': Decimal('4.0'),
    'paysend': Decimal('4.5'),
    'azimo': Decimal('4.2'),
    'transfergo': Decimal('4.5'),
    'skrill': Decimal('3.9'),
}

# Ratings that must not be refetched or recomputed
HARDCODED_RATING_OVERRIDES: dict[str, Decimal] = {
    'regencyfx': Decimal('4.9'),
    'torfx': Decimal('4.4'),
    'pandaremit': Decimal('4.1'),
    'xe': Decimal('4.2'),
    'profee': Decimal('4.4'),
}

PROVIDER_DEFAULT_RATINGS: dict[str, Decimal] = {
    'wise': Decimal('4.5'),
    'currencyonlinegroup': Decimal('4.4'),
    'bankofamerica': Decimal('3.5'),
    'barclays': Decimal('3.6'),
    'hsbc': Decimal('3.5'),
    'paypal': Decimal('3.7'),
}

STATIC_MID_MARKET_RATES: dict[str, dict[str, Decimal]] = {
    'USD': {'EUR': Decimal('0.91'), 'GBP': Decimal('0.78'), 'JPY': Decimal('110.23'), 'CAD': Decimal('1.35')},
    'EUR': {'USD': Decimal('1.10'), 'GBP': Decimal('0.86'), 'JPY': Decimal('121.34'), 'CAD': Decimal('1.48')},
    'GBP': {'USD': Decimal('1.28'), 'EUR': Decimal('1.16'), 'JPY': Decimal('140.87'), 'CAD': Decimal('1.72')},
    'JPY': {'USD': Decimal('0.0091'), 'EUR': Decimal('0.0082'), 'GBP': Decimal('0.0071'), 'CAD': Decimal('0.012')},
    'CAD': {'USD': Decimal('0.74'), 'EUR': Decimal('0.67'), 'GBP': Decimal('0.58'), 'JPY': Decimal('81.65')},
}
