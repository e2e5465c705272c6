class ValuationError(Exception):
    """Base for every failure that aborts a valuation cycle."""


class ConfigLoadError(ValuationError):
    """The setup file could not be read or is invalid."""


class PriceFetchError(ValuationError):
    """The batched price request failed or returned an incomplete snapshot."""


class ExternalLookupError(ValuationError):
    """A ledger account could not be read or holds no native balance."""
