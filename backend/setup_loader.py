import json
import logging
from pathlib import Path

from babel import UnknownLocaleError

from config import LEDGER_ASSET_SYMBOL, SETUP_FILE
from errors import ConfigLoadError
from models import LocalCurrency, OwnedHolding, Outcome, Setup

logger = logging.getLogger(__name__)


def _parse_holding(raw, index: int) -> OwnedHolding:
    if not isinstance(raw, dict):
        raise ConfigLoadError(f"holdings[{index}] must be an object")

    symbol = str(raw.get("symbol") or "").strip().upper()
    if not symbol:
        raise ConfigLoadError(f"holdings[{index}] has no symbol")

    account = raw.get("ledger_account") or None
    if account is not None and symbol != LEDGER_ASSET_SYMBOL:
        raise ConfigLoadError(
            f"holdings[{index}] ({symbol}): ledger_account is only supported for {LEDGER_ASSET_SYMBOL}"
        )

    if account is None and "amount" not in raw:
        raise ConfigLoadError(f"holdings[{index}] ({symbol}): amount is required")
    # Ledger holdings take their quantity from the ledger
    amount = raw.get("amount", 0.0)
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ConfigLoadError(f"holdings[{index}] ({symbol}): amount must be a number")

    return OwnedHolding(symbol=symbol, amount=float(amount), ledger_account=account)


def parse_setup(data) -> Setup:
    """
    Build a Setup from the decoded setup.json document:

        {"local_currency": {"id": "EUR", "locale": "de-DE"},
         "holdings": [{"symbol": "BTC", "amount": 2.0},
                      {"symbol": "XLM", "ledger_account": "GABC..."}]}
    """
    if not isinstance(data, dict):
        raise ConfigLoadError("setup must be a JSON object")

    local = data.get("local_currency")
    if not isinstance(local, dict):
        raise ConfigLoadError("local_currency must be an object")
    currency_id = str(local.get("id") or "").strip().upper()
    if not currency_id:
        raise ConfigLoadError("local_currency.id must be a non-empty symbol")
    locale_tag = str(local.get("locale") or "en-US")

    raw_holdings = data.get("holdings")
    if not isinstance(raw_holdings, list) or not raw_holdings:
        raise ConfigLoadError("holdings must be a non-empty list")

    try:
        local_currency = LocalCurrency(id=currency_id, locale=locale_tag)
    except (UnknownLocaleError, ValueError) as exc:
        raise ConfigLoadError(f"local_currency.locale {locale_tag!r} is not a known locale") from exc

    holdings = tuple(_parse_holding(raw, i) for i, raw in enumerate(raw_holdings))
    return Setup(local_currency=local_currency, holdings=holdings)


def load_setup(path: str | Path = SETUP_FILE) -> Setup:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigLoadError(f"Cannot read setup file {path}: {exc}") from exc
    except ValueError as exc:
        raise ConfigLoadError(f"Setup file {path} is not valid JSON: {exc}") from exc
    return parse_setup(data)


def load_setup_outcome(path: str | Path = SETUP_FILE) -> Outcome[Setup]:
    """Load once at startup; a failure is kept and reported by every cycle."""
    try:
        setup = load_setup(path)
    except ConfigLoadError as exc:
        logger.error("Setup load failed: %s", exc)
        return Outcome.failure(exc)
    logger.info(
        "Loaded setup: %d holdings valued in %s",
        len(setup.holdings), setup.local_currency.id,
    )
    return Outcome.success(setup)
