import logging
import math

import httpx

from config import PRICE_API_URL, REFERENCE_CURRENCY
from errors import PriceFetchError
from models import PriceQuote

logger = logging.getLogger(__name__)


def _target_currencies(local_currency: str, reference_currency: str) -> list[str]:
    targets = [reference_currency.upper()]
    if local_currency.upper() not in targets:
        targets.append(local_currency.upper())
    return targets


def _price(quotes: dict, symbol: str, currency: str) -> float:
    value = quotes.get(currency)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise PriceFetchError(f"No {currency} price for {symbol} in response")
    return float(value)


def fetch_prices(
    client: httpx.Client,
    symbols: list[str],
    local_currency: str,
    reference_currency: str = REFERENCE_CURRENCY,
    url: str = PRICE_API_URL,
) -> dict[str, PriceQuote]:
    """
    Fetch the price of every symbol against the reference and local currency
    in ONE request: GET url?fsyms=BTC,ETH&tsyms=USD,EUR.

    Expected body: {"BTC": {"USD": 50000, "EUR": 46000}, ...}.
    Raises PriceFetchError on transport failure, non-2xx status, a body that
    is not a JSON object, the API's {"Response": "Error"} envelope, or when any
    requested symbol/currency pair is missing. Never returns a partial snapshot.
    """
    symbols = [s.upper() for s in symbols]
    targets = _target_currencies(local_currency, reference_currency)
    params = {"fsyms": ",".join(symbols), "tsyms": ",".join(targets)}

    try:
        response = client.get(url, params=params)
        response.raise_for_status()
        body = response.json()
    except httpx.HTTPError as exc:
        raise PriceFetchError(f"Price request failed: {exc}") from exc
    except ValueError as exc:
        raise PriceFetchError("Price response is not valid JSON") from exc

    if not isinstance(body, dict):
        raise PriceFetchError(f"Unexpected price response: {str(body)[:120]}")
    if body.get("Response") == "Error":
        raise PriceFetchError(f"Price API error: {body.get('Message', 'unknown')}")

    missing = [s for s in symbols if not isinstance(body.get(s), dict)]
    if missing:
        raise PriceFetchError(f"Price response missing symbols: {', '.join(missing)}")

    snapshot: dict[str, PriceQuote] = {}
    for symbol in symbols:
        quotes = body[symbol]
        snapshot[symbol] = PriceQuote(
            reference_price=_price(quotes, symbol, reference_currency.upper()),
            local_price=_price(quotes, symbol, local_currency.upper()),
        )

    logger.debug("Fetched prices for %d symbols in %s", len(snapshot), ",".join(targets))
    return snapshot
