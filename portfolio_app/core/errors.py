"""Exception types raised by the sync engine and its collaborators."""

from __future__ import annotations


class PortfolioError(RuntimeError):
    """Base class for errors surfaced to the dashboard."""


class TransportError(PortfolioError):
    """Endpoint unreachable, non-success status, or a non-JSON body."""


class SessionExpiredError(TransportError):
    """The proxy answered with its sign-in page instead of data."""


class EndpointsExhaustedError(TransportError):
    """Every candidate endpoint failed for one request."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__(" | ".join(self.errors) or "No candidate endpoints configured")


class EmptyRefreshError(PortfolioError):
    """Primary and fallback queries both returned zero records."""


class MappingError(PortfolioError):
    """A raw record could not be mapped (missing its unique key)."""
