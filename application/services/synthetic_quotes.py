import logging
from dataclasses import dataclass, field
from decimal import Decimal

from domain.models.quote import Quote, SourceChannel, TransferTime, normalize_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkupTiers:
    major: Decimal
    other: Decimal


@dataclass(frozen=True)
class FeeSchedule:
    """Zero fee at or above free_above, otherwise a per-currency or default fixed fee."""
    default: Decimal
    free_above: Decimal | None = None
    by_currency: dict[str, Decimal] = field(default_factory=dict)

    def fee_for(self, amount: Decimal, currency: str) -> Decimal:
        if self.free_above is not None and amount >= self.free_above:
            return Decimal("0")
        return self.by_currency.get(currency, self.default)


@dataclass(frozen=True)
class DeliveryTiers:
    major: TransferTime
    other: TransferTime


@dataclass(frozen=True)
class SyntheticProviderPolicy:
    provider_key: str
    provider_name: str
    markup_tiers: MarkupTiers
    fee_schedule: FeeSchedule
    delivery_tiers: DeliveryTiers
    starting_rating: Decimal
    major_currencies: frozenset[str]
    logo_ref: str | None = None

    def is_major_pair(self, from_currency: str, to_currency: str) -> bool:
        return from_currency in self.major_currencies and to_currency in self.major_currencies

    def markup(self, from_currency: str, to_currency: str) -> Decimal:
        if self.is_major_pair(from_currency, to_currency):
            return self.markup_tiers.major
        return self.markup_tiers.other

    def fee(self, amount: Decimal, currency: str) -> Decimal:
        return self.fee_schedule.fee_for(amount, currency)

    def delivery_time(self, from_currency: str, to_currency: str) -> TransferTime:
        if self.is_major_pair(from_currency, to_currency):
            return self.delivery_tiers.major
        return self.delivery_tiers.other

    @classmethod
    def from_config(cls, config: dict, major_currencies: frozenset[str]) -> "SyntheticProviderPolicy":
        def transfer_time(band: dict) -> TransferTime:
            return TransferTime(
                descriptor=band["descriptor"],
                min_hours=Decimal(str(band["min_hours"])) if "min_hours" in band else None,
                max_hours=Decimal(str(band["max_hours"])) if "max_hours" in band else None,
            )

        fee = config.get("fee", {})
        free_above = fee.get("free_above")
        return cls(
            provider_key=normalize_key(config["provider_key"]),
            provider_name=config["provider_name"],
            markup_tiers=MarkupTiers(
                major=Decimal(config["markup"]["major"]),
                other=Decimal(config["markup"]["other"]),
            ),
            fee_schedule=FeeSchedule(
                default=Decimal(fee.get("default", "0")),
                free_above=Decimal(free_above) if free_above is not None else None,
                by_currency={cur: Decimal(v) for cur, v in fee.get("by_currency", {}).items()},
            ),
            delivery_tiers=DeliveryTiers(
                major=transfer_time(config["delivery"]["major"]),
                other=transfer_time(config["delivery"]["other"]),
            ),
            starting_rating=Decimal(config["starting_rating"]),
            major_currencies=frozenset(config.get("major_currencies", major_currencies)),
            logo_ref=config.get("logo_ref"),
        )


class SyntheticQuoteGenerator:
    """Quotes for providers without live pricing, computed from their policy tables."""

    def __init__(self, policies: list[SyntheticProviderPolicy]):
        self.policies = policies

    @property
    def name(self) -> str:
        return "synthetic"

    def generate(
        self,
        from_currency: str,
        to_currency: str,
        amount: Decimal,
        baseline_rate: Decimal,
        exclude_keys: set[str] | None = None,
    ) -> list[Quote]:
        exclude_keys = exclude_keys or set()
        quotes = []
        for policy in self.policies:
            if policy.provider_key in exclude_keys:
                logger.debug(f"Skipping synthetic quote for {policy.provider_key}: live quote present")
                continue

            rate = baseline_rate * (Decimal("1") - policy.markup(from_currency, to_currency))
            if rate <= 0:
                logger.warning(f"Synthetic policy {policy.provider_key} produced non-positive rate {rate}")
                continue

            quotes.append(Quote(
                provider_name=policy.provider_name,
                source_channel=SourceChannel.SYNTHETIC,
                from_currency=from_currency,
                to_currency=to_currency,
                send_amount=amount,
                rate=rate,
                transfer_fee=policy.fee(amount, from_currency),
                transfer_time=policy.delivery_time(from_currency, to_currency),
                provider_key=policy.provider_key,
                provider_code=policy.provider_key,
                provider_id=f"synthetic-{policy.provider_key}",
                logo_ref=policy.logo_ref,
                rating_value=policy.starting_rating,
            ))

        return quotes
