import logging

from domain.models.quote import Quote, normalize_key

logger = logging.getLogger(__name__)

KNOWN_ID_PREFIXES = ("wise-", "provider-", "synthetic-")


def strip_known_prefix(provider_id: str) -> str:
    lowered = provider_id.lower()
    for prefix in KNOWN_ID_PREFIXES:
        if lowered.startswith(prefix):
            return provider_id[len(prefix):]
    return provider_id


def provider_key_for(quote: Quote, position: int) -> str:
    """
    Most specific identity available, in priority order:
    explicit code, id without its source prefix, name, then position.
    """
    candidates = (
        quote.provider_code,
        strip_known_prefix(quote.provider_id) if quote.provider_id else None,
        quote.provider_name,
    )
    for candidate in candidates:
        key = normalize_key(candidate)
        if key:
            return key
    return f"provider{position}"


class Deduplicator:
    """Collapses quotes from overlapping sources to one per provider key."""

    def deduplicate(self, quotes: list[Quote]) -> list[Quote]:
        survivors: dict[str, Quote] = {}

        for position, quote in enumerate(quotes):
            key = provider_key_for(quote, position)
            quote.provider_key = key

            current = survivors.get(key)
            if current is None:
                survivors[key] = quote
                continue

            # Strictly better channel replaces; equal channel keeps the first seen
            if quote.source_channel.priority < current.source_channel.priority:
                logger.debug(
                    f"Duplicate {key}: {quote.source_channel.value} replaces {current.source_channel.value}"
                )
                survivors[key] = quote
            else:
                logger.debug(
                    f"Duplicate {key}: keeping {current.source_channel.value} over {quote.source_channel.value}"
                )

        if len(survivors) < len(quotes):
            logger.info(f"Deduplicated {len(quotes)} quotes down to {len(survivors)}")

        # dict preserves first-insertion order of each key
        return list(survivors.values())
