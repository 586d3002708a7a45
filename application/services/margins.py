import logging
from decimal import Decimal

from domain.models.quote import BaselineRate, Quote

logger = logging.getLogger(__name__)

MARGIN_PRECISION = Decimal("0.0001")


class MarginNormalizer:
    def __init__(self, reference_provider_key: str):
        self.reference_provider_key = reference_provider_key

    def normalize(self, quotes: list[Quote], baseline: BaselineRate) -> list[Quote]:
        """Recompute every margin against one baseline; the reference provider is always zero."""
        base = baseline.rate
        if base <= 0:
            logger.warning(f"Non-positive baseline {base}, margins set to zero")

        for quote in quotes:
            quote.base_rate = base
            if quote.provider_key == self.reference_provider_key or base <= 0:
                quote.margin_percentage = Decimal("0")
                continue
            margin = (quote.rate - base) / base * Decimal("100")
            quote.margin_percentage = margin.quantize(MARGIN_PRECISION)

        return quotes
