"""
Error taxonomy for the cost oracle.

Only UnsupportedVenueError and InvalidTradeCompatibilityError reach the caller.
DataUnavailableError and its subclasses are recovered inside the cost estimator
unless the caller explicitly asks for live data only.
"""


class CostOracleError(Exception):
    """Base class for all oracle errors."""


class UnsupportedVenueError(CostOracleError):
    """No fee calculator is registered for the requested venue."""

    def __init__(self, venue):
        self.venue = venue
        super().__init__(f"No calculator registered for venue: {getattr(venue, 'value', venue)}")


class InvalidTradeCompatibilityError(CostOracleError):
    """Arbitrage legs span venues that cannot trade the same underlying."""

    def __init__(self, venue_a, category_a, venue_b, category_b):
        self.venue_a = venue_a
        self.venue_b = venue_b
        self.category_a = category_a
        self.category_b = category_b
        super().__init__(
            f"Cross-venue arbitrage not supported between {venue_a} ({category_a}) "
            f"and {venue_b} ({category_b}). "
            f"Cross-venue arb only applies to venues of the same category."
        )


class DataUnavailableError(CostOracleError):
    """Live market data could not be obtained."""


class OrderbookFetchError(DataUnavailableError):
    """The orderbook request failed at the transport or HTTP level."""


class OrderbookUnavailableError(DataUnavailableError):
    """The orderbook payload is missing, malformed, or unsupported for the venue."""
