from __future__ import annotations


class SatsForexError(Exception):
    """Base class for errors raised by the aggregation core."""


class PayloadError(SatsForexError):
    """A response body could not be decoded into the expected shape."""


class DomainUnavailableError(SatsForexError):
    """Every live strategy failed and no snapshot exists for the domain."""

    def __init__(self, domain: str, error: str | None = None) -> None:
        self.domain = domain
        self.error = error
        message = f"{domain} feed unavailable"
        if error:
            message = f"{message}: {error}"
        super().__init__(message)


class AggregationError(SatsForexError):
    """The ranking cannot be computed, e.g. the reference price is missing."""
