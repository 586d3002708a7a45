import logging
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from domain.exceptions.quote import CacheError, InvalidRatingError
from domain.models.quote import Quote, RatingProvenance, RatingRecord, normalize_key
from infrastructure.cache.rating_store import RatingStore

logger = logging.getLogger(__name__)

MIN_RATING = Decimal("0")
MAX_RATING = Decimal("5")


def clamp_rating(value: Decimal) -> Decimal:
    return min(max(value, MIN_RATING), MAX_RATING)


def code_variants(code: str) -> list[str]:
    """Spellings a provider code may have in a hand-maintained table."""
    lowered = code.strip().lower()
    variants = [
        lowered,
        re.sub(r"[\s_\-.]+", "", lowered),
        re.sub(r"[\s_.]+", "-", lowered),
        re.sub(r"[\s\-.]+", "_", lowered),
        re.sub(r"[\s\-_.]+", " ", lowered),
    ]
    seen = []
    for variant in variants:
        if variant and variant not in seen:
            seen.append(variant)
    return seen


@dataclass(frozen=True)
class ConfirmedRatingLookup:
    confirmed: dict[str, RatingRecord]
    provenance: RatingProvenance = RatingProvenance.CONFIRMED_BY_VIEW

    def lookup(self, quote: Quote) -> Decimal | None:
        record = self.confirmed.get(quote.provider_key)
        if record is not None and record.provenance is RatingProvenance.CONFIRMED_BY_VIEW:
            return record.value
        return None


@dataclass(frozen=True)
class StaticMapLookup:
    ratings: dict[str, Decimal]
    provenance: RatingProvenance = RatingProvenance.STATIC_MAP

    def lookup(self, quote: Quote) -> Decimal | None:
        candidates = [quote.provider_key]
        if quote.provider_id:
            candidates.append(quote.provider_id.lower())
        if quote.provider_code:
            candidates.extend(code_variants(quote.provider_code))

        for candidate in candidates:
            if candidate in self.ratings:
                return self.ratings[candidate]
        return None


@dataclass(frozen=True)
class OverrideLookup:
    overrides: dict[str, Decimal]
    provenance: RatingProvenance = RatingProvenance.HARDCODED_OVERRIDE

    def lookup(self, quote: Quote) -> Decimal | None:
        return self.overrides.get(quote.provider_key)


@dataclass(frozen=True)
class ProviderDefaultLookup:
    """Per-provider default table, then the starting rating the quote's source supplied."""
    defaults: dict[str, Decimal]
    provenance: RatingProvenance = RatingProvenance.PROVIDER_DEFAULT

    def lookup(self, quote: Quote) -> Decimal | None:
        value = self.defaults.get(quote.provider_key)
        if value is not None:
            return value
        # Only a source-supplied rating counts, not one left by an earlier pass
        if quote.rating_provenance is None:
            return quote.rating_value
        return None


@dataclass(frozen=True)
class GenericFallbackLookup:
    default: Decimal
    provenance: RatingProvenance = RatingProvenance.GENERIC_FALLBACK

    def lookup(self, quote: Quote) -> Decimal | None:
        return self.default


RatingLookup = ConfirmedRatingLookup | StaticMapLookup | OverrideLookup | ProviderDefaultLookup | GenericFallbackLookup


@dataclass
class RatingTables:
    static_map: dict[str, Decimal] = field(default_factory=dict)
    overrides: dict[str, Decimal] = field(default_factory=dict)
    provider_defaults: dict[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        self.static_map = {k.lower(): v for k, v in self.static_map.items()}
        self.overrides = {normalize_key(k): v for k, v in self.overrides.items()}
        self.provider_defaults = {normalize_key(k): v for k, v in self.provider_defaults.items()}


class RatingResolver:
    """
    Assigns every quote a rating through an ordered cascade; first match wins:
    confirmed-by-view, static map, hardcoded override, provider default, generic fallback.
    """

    def __init__(self, store: RatingStore, tables: RatingTables, default_rating: Decimal = Decimal("4.0")):
        self.store = store
        self.tables = tables
        self.default_rating = clamp_rating(default_rating)

    def strategies(self, confirmed: dict[str, RatingRecord]) -> list[RatingLookup]:
        return [
            ConfirmedRatingLookup(confirmed),
            StaticMapLookup(self.tables.static_map),
            OverrideLookup(self.tables.overrides),
            ProviderDefaultLookup(self.tables.provider_defaults),
            GenericFallbackLookup(self.default_rating),
        ]

    async def confirmed_ratings(self, provider_keys: list[str]) -> dict[str, RatingRecord]:
        try:
            records = await self.store.get_many(provider_keys)
        except CacheError as e:
            logger.warning(f"Rating store returned a corrupt record, ignoring confirmations: {e}")
            return {}
        except Exception as e:
            logger.error(f"Rating store unavailable, resolving without confirmations: {e}")
            return {}
        return {
            key: record for key, record in records.items()
            if record.provenance is RatingProvenance.CONFIRMED_BY_VIEW
        }

    async def resolve(self, quotes: list[Quote]) -> list[Quote]:
        confirmed = await self.confirmed_ratings([q.provider_key for q in quotes])
        strategies = self.strategies(confirmed)

        for quote in quotes:
            for strategy in strategies:
                value = strategy.lookup(quote)
                if value is None:
                    continue
                quote.rating_value = clamp_rating(Decimal(value))
                quote.rating_provenance = strategy.provenance
                break

            if quote.rating_provenance is not RatingProvenance.CONFIRMED_BY_VIEW:
                await self._remember(quote)

        return quotes

    async def confirm(self, provider_key: str, value: Decimal) -> RatingRecord:
        key = normalize_key(provider_key)
        if not key:
            raise InvalidRatingError(f"Invalid provider key: {provider_key!r}")
        if not (MIN_RATING <= value <= MAX_RATING):
            raise InvalidRatingError(f"Rating {value} for {key} is outside [{MIN_RATING}, {MAX_RATING}]")

        record = RatingRecord(
            provider_key=key,
            value=value,
            provenance=RatingProvenance.CONFIRMED_BY_VIEW,
            timestamp=datetime.now(tz=UTC),
        )
        await self.store.set(record)
        logger.info(f"Rating for {key} confirmed by view: {value}")
        return record

    async def _remember(self, quote: Quote) -> None:
        # Lazy population only fills gaps; a confirmation is never overwritten here
        record = RatingRecord(
            provider_key=quote.provider_key,
            value=quote.rating_value,
            provenance=quote.rating_provenance,
            timestamp=datetime.now(tz=UTC),
        )
        try:
            await self.store.set_if_absent(record)
        except Exception as e:
            logger.error(f"Failed to cache rating for {quote.provider_key}: {e}")
