class QuoteEngineException(Exception):
    pass


class InvalidQuoteRequestError(QuoteEngineException):
    pass


class InvalidRatingError(QuoteEngineException):
    pass


class SourceUnavailableError(QuoteEngineException):
    def __init__(self, source_name: str, message: str):
        self.source_name = source_name
        super().__init__(f"{source_name}: {message}")


class SourceTimeoutError(SourceUnavailableError):
    pass


class BaselineUnresolvableError(QuoteEngineException):
    pass


class AggregationFailureError(QuoteEngineException):
    """Every quote source failed, nothing to show. Safe to retry."""

    retryable = True

    def __init__(self, from_currency: str, to_currency: str, failed_sources: list[str]):
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.failed_sources = failed_sources
        super().__init__(
            f"No quotes available for {from_currency} -> {to_currency} "
            f"(failed sources: {', '.join(failed_sources) or 'none configured'})"
        )


class CacheError(QuoteEngineException):
    pass
