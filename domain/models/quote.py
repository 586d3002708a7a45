import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import ROUND_CEILING, Decimal
from enum import Enum

_NON_ALNUM = re.compile(r'[^a-z0-9]')


def normalize_key(value: str | None) -> str:
    """Lowercase, alphanumeric-only form of a provider identifier."""
    if not value:
        return ""
    return _NON_ALNUM.sub("", str(value).lower())


class SourceChannel(str, Enum):
    DEDICATED_LIVE = "dedicated-live"
    GENERIC_AGGREGATOR = "generic-aggregator"
    SYNTHETIC = "synthetic"

    @property
    def priority(self) -> int:
        # Lower wins during deduplication
        return _CHANNEL_PRIORITY[self]


_CHANNEL_PRIORITY = {
    SourceChannel.DEDICATED_LIVE: 0,
    SourceChannel.GENERIC_AGGREGATOR: 1,
    SourceChannel.SYNTHETIC: 2,
}


class RatingProvenance(str, Enum):
    CONFIRMED_BY_VIEW = "confirmed-by-view"
    STATIC_MAP = "static-map"
    HARDCODED_OVERRIDE = "hardcoded-override"
    PROVIDER_DEFAULT = "provider-default"
    GENERIC_FALLBACK = "generic-fallback"


class BaselineSource(str, Enum):
    REFERENCE_PROVIDER = "reference-provider"
    EXTERNAL_SERVICE = "external-service"
    STATIC_APPROXIMATION = "static-approximation"


class SortCriterion(str, Enum):
    AMOUNT = "amount"
    RATE = "rate"
    FEES = "fees"
    RATING = "rating"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class TransferTime:
    descriptor: str
    min_hours: Decimal | None = None
    max_hours: Decimal | None = None

    @classmethod
    def from_hours(cls, min_hours: Decimal, max_hours: Decimal) -> "TransferTime":
        return cls(
            descriptor=describe_hours(min_hours, max_hours),
            min_hours=min_hours,
            max_hours=max_hours,
        )


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def _days(hours: Decimal) -> int:
    return int((hours / 24).to_integral_value(rounding=ROUND_CEILING))


def describe_hours(min_hours: Decimal, max_hours: Decimal) -> str:
    """Human readable delivery window, e.g. '2 hours', '1-2 days', '4 hours - 2 days'."""
    if min_hours == max_hours:
        if min_hours < 24:
            whole = int(min_hours)
            minutes = int(((min_hours - whole) * 60).to_integral_value())
            if minutes:
                return f"{_plural(whole, 'hour')} {_plural(minutes, 'minute')}"
            return _plural(whole, "hour")
        return _plural(_days(min_hours), "day")

    if max_hours < 24:
        return f"{int(min_hours)}-{_plural(int(max_hours), 'hour')}"
    if min_hours < 24:
        return f"{_plural(int(min_hours), 'hour')} - {_plural(_days(max_hours), 'day')}"
    return f"{_days(min_hours)}-{_plural(_days(max_hours), 'day')}"


@dataclass
class Quote:
    """One provider's offer for a (from_currency, to_currency, send_amount) request."""
    provider_name: str
    source_channel: SourceChannel
    from_currency: str
    to_currency: str
    send_amount: Decimal
    rate: Decimal
    transfer_fee: Decimal = Decimal("0")
    transfer_time: TransferTime = field(default_factory=lambda: TransferTime("Unknown"))
    provider_key: str = ""
    provider_code: str | None = None
    provider_id: str | None = None
    logo_ref: str | None = None
    base_rate: Decimal | None = None
    margin_percentage: Decimal = Decimal("0")
    rating_value: Decimal | None = None
    rating_provenance: RatingProvenance | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def __post_init__(self):
        if self.rate <= 0:
            raise ValueError(f"Quote rate must be positive, got {self.rate} for {self.provider_name}")
        if self.transfer_fee < 0:
            raise ValueError(f"Transfer fee cannot be negative, got {self.transfer_fee} for {self.provider_name}")

    @property
    def amount_received(self) -> Decimal:
        received = (self.send_amount - self.transfer_fee) * self.rate
        return max(received, Decimal("0"))

    @property
    def margin_cost(self) -> Decimal:
        # Only a worse-than-baseline rate costs the sender anything
        if self.margin_percentage >= 0:
            return Decimal("0")
        return self.send_amount * -self.margin_percentage / Decimal("100")

    @property
    def total_cost(self) -> Decimal:
        return self.transfer_fee + self.margin_cost

    @property
    def is_real_time(self) -> bool:
        return self.source_channel is not SourceChannel.SYNTHETIC


@dataclass(frozen=True)
class BaselineRate:
    from_currency: str
    to_currency: str
    rate: Decimal
    resolved_at: datetime
    source: BaselineSource
    is_degraded: bool = False


@dataclass(frozen=True)
class RatingRecord:
    provider_key: str
    value: Decimal
    provenance: RatingProvenance
    timestamp: datetime


@dataclass(frozen=True)
class MidMarketQuote:
    """Rate returned by the external mid-market service."""
    from_currency: str
    to_currency: str
    rate: Decimal
    timestamp: datetime
    source: str


@dataclass
class AggregationResult:
    from_currency: str
    to_currency: str
    amount: Decimal
    quotes: list[Quote]
    best_deal: Quote
    baseline: BaselineRate
    sources_succeeded: list[str] = field(default_factory=list)
    sources_failed: list[str] = field(default_factory=list)
