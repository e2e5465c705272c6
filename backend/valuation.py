import logging
import time
from dataclasses import dataclass

import httpx

from config import REFERENCE_CURRENCY
from ledger import LedgerBalanceResolver
from models import HoldingValuation, OwnedHolding, Outcome, Setup, ValuationResult
from pricing import fetch_prices

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValuationJob:
    """
    One refresh cycle. Built fresh for each submission and holds no state
    between runs.

    Order of work:
    1. A failed setup outcome is raised as-is, before any network call.
    2. One batched price fetch for every holding (PriceFetchError propagates).
    3. Holdings in configured order; a ledger_account means the quantity comes
       from the ledger (ExternalLookupError propagates and aborts the cycle).
    4. net_worth = quantity * local price.
    """

    setup: Outcome[Setup]
    http_client: httpx.Client
    ledger: LedgerBalanceResolver
    reference_currency: str = REFERENCE_CURRENCY

    def quantity_of(self, holding: OwnedHolding) -> float:
        if holding.ledger_account:
            return self.ledger.native_balance(holding.ledger_account)
        return holding.amount

    def run(self) -> ValuationResult:
        setup = self.setup.unwrap()
        started = time.perf_counter()
        local_id = setup.local_currency.id

        snapshot = fetch_prices(
            self.http_client,
            setup.symbols,
            local_id,
            reference_currency=self.reference_currency,
        )

        holdings = []
        for holding in setup.holdings:
            quote = snapshot[holding.symbol.upper()]
            quantity = self.quantity_of(holding)
            holdings.append(HoldingValuation(
                symbol=holding.symbol,
                quantity=quantity,
                reference_price=quote.reference_price,
                local_price=quote.local_price,
                net_worth=quantity * quote.local_price,
            ))

        result = ValuationResult(holdings=tuple(holdings), local_currency=setup.local_currency)
        logger.info(
            "Valued %d holdings at %.2f %s in %.0f ms",
            len(holdings), result.total_net_worth, local_id,
            (time.perf_counter() - started) * 1000,
        )
        return result
