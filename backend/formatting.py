import re
from decimal import Decimal

from babel import Locale
from babel.numbers import format_currency

# (exclusive upper bound on |amount|, fraction digits); anything larger gets 0
PRECISION_STEPS = (
    (0.0001, 6),
    (0.001,  5),
    (0.01,   4),
    (0.1,    3),
    (10,     2),
    (100,    1),
)

_NUMBER_CORE = re.compile(r"0(?:\.0+)?")


def fraction_digits(amount: float) -> int:
    magnitude = abs(amount)
    for bound, digits in PRECISION_STEPS:
        if magnitude < bound:
            return digits
    return 0


class CurrencyFormatter:
    """
    Locale-aware currency formatting with magnitude-adaptive precision.

    Starts from the locale's CLDR "standard" currency pattern (grouping and
    symbol placement) and swaps its fraction part for the precision picked by
    fraction_digits(). Instances hold only immutable configuration, so one
    instance can be shared across threads.
    """

    def __init__(self, locale_tag: str, currency: str):
        self.locale = Locale.parse(locale_tag, sep="-")
        self.currency = currency.upper()
        self._base_pattern = self.locale.currency_formats["standard"].pattern

    def pattern_for(self, digits: int) -> str:
        fraction = "." + "0" * digits if digits else ""
        return _NUMBER_CORE.sub("0" + fraction, self._base_pattern)

    def format(self, amount: float) -> str:
        pattern = self.pattern_for(fraction_digits(amount))
        return format_currency(
            Decimal(str(amount)),
            self.currency,
            format=pattern,
            locale=self.locale,
            currency_digits=False,
        )

    def __repr__(self) -> str:
        return f"CurrencyFormatter({self.locale}, {self.currency})"
