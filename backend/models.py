from dataclasses import dataclass, field
from typing import Generic, TypeVar

from config import REFERENCE_CURRENCY, REFERENCE_LOCALE
from formatting import CurrencyFormatter

T = TypeVar("T")

# Unit prices are always displayed against the reference currency
REFERENCE_FORMATTER = CurrencyFormatter(REFERENCE_LOCALE, REFERENCE_CURRENCY)


@dataclass(frozen=True)
class LocalCurrency:
    id: str
    locale: str
    formatter: CurrencyFormatter = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "formatter", CurrencyFormatter(self.locale, self.id))


@dataclass(frozen=True)
class OwnedHolding:
    symbol: str
    amount: float
    ledger_account: str | None = None


@dataclass(frozen=True)
class Setup:
    local_currency: LocalCurrency
    holdings: tuple[OwnedHolding, ...]

    @property
    def symbols(self) -> list[str]:
        return [h.symbol for h in self.holdings]


@dataclass(frozen=True)
class PriceQuote:
    reference_price: float
    local_price: float


@dataclass(frozen=True)
class HoldingValuation:
    symbol: str
    quantity: float
    reference_price: float
    local_price: float
    net_worth: float

    def describe(self, local_formatter: CurrencyFormatter) -> str:
        price = REFERENCE_FORMATTER.format(self.reference_price)
        net_worth = local_formatter.format(self.net_worth)
        return (
            f"{self.symbol}/{REFERENCE_FORMATTER.currency}: {price} | "
            f"{self.symbol} Net Worth: {net_worth}"
        )


@dataclass(frozen=True)
class ValuationResult:
    holdings: tuple[HoldingValuation, ...]
    local_currency: LocalCurrency

    @property
    def total_net_worth(self) -> float:
        # Derived on every read so it always matches the published holdings
        return sum(h.net_worth for h in self.holdings)


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Either a value or the error that prevented producing it."""

    value: T | None = None
    error: BaseException | None = None

    @classmethod
    def success(cls, value: T) -> "Outcome[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BaseException) -> "Outcome[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            # A stored error is re-raised every cycle; keep its traceback from growing
            raise self.error.with_traceback(None)
        return self.value
