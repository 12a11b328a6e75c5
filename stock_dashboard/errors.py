class EmptyQuoteError(Exception):
    """Provider answered, but without a usable quote for the symbol."""


class ProviderExhaustedError(Exception):
    """Neither provider produced a single quote."""


class QuoteTransportError(Exception):
    """Request to a provider failed before a payload could be read."""

    def __init__(self, message: str, *, provider: str | None = None, symbol: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.symbol = symbol


class RefreshInProgressError(Exception):
    """A refresh was requested while a fetch is still loading."""
