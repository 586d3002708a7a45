from collections.abc import Callable, Mapping
from decimal import Decimal

from domain.models.quote import Quote, RatingRecord, SortCriterion, SortDirection

DEFAULT_DIRECTIONS = {
    SortCriterion.AMOUNT: SortDirection.DESC,
    SortCriterion.RATE: SortDirection.DESC,
    SortCriterion.FEES: SortDirection.ASC,
    SortCriterion.RATING: SortDirection.DESC,
}


class RankingEngine:
    def default_direction(self, criterion: SortCriterion) -> SortDirection:
        return DEFAULT_DIRECTIONS[criterion]

    def sort(
        self,
        quotes: list[Quote],
        criterion: SortCriterion,
        direction: SortDirection | None = None,
        confirmed: Mapping[str, RatingRecord] | None = None,
    ) -> list[Quote]:
        """Stable sort; equal keys keep their input order in both directions."""
        direction = direction or self.default_direction(criterion)
        key = self._key_for(criterion, confirmed or {})
        # sorted(reverse=True) is still stable for equal keys
        return sorted(quotes, key=key, reverse=direction is SortDirection.DESC)

    def best_deal(self, quotes: list[Quote]) -> Quote | None:
        if not quotes:
            return None
        # max() returns the first of equal maxima
        return max(quotes, key=lambda q: q.amount_received)

    @staticmethod
    def _key_for(criterion: SortCriterion, confirmed: Mapping[str, RatingRecord]) -> Callable[[Quote], Decimal]:
        if criterion is SortCriterion.AMOUNT:
            return lambda q: q.amount_received
        if criterion is SortCriterion.RATE:
            return lambda q: q.rate
        if criterion is SortCriterion.FEES:
            return lambda q: q.transfer_fee

        def rating_key(q: Quote) -> Decimal:
            record = confirmed.get(q.provider_key)
            if record is not None:
                return record.value
            return q.rating_value if q.rating_value is not None else Decimal("0")

        return rating_key
