import logging
from typing import Protocol

import httpx

from config import HTTP_TIMEOUT_SECONDS, LEDGER_API_URL, LEDGER_NATIVE_ASSET_TYPE, USER_AGENT
from errors import ExternalLookupError

logger = logging.getLogger(__name__)


class LedgerBalanceResolver(Protocol):
    def native_balance(self, account_id: str) -> float:
        ...


class HorizonLedger:
    """
    Reads account balances from a Stellar Horizon server.

    The httpx client is created once and reused for every lookup; pass a
    client built on httpx.MockTransport to substitute the network in tests.
    """

    def __init__(self, client: httpx.Client | None = None):
        self.client = client or httpx.Client(
            base_url=LEDGER_API_URL,
            timeout=HTTP_TIMEOUT_SECONDS,
            headers={"User-Agent": USER_AGENT},
        )

    def native_balance(self, account_id: str) -> float:
        """
        Return the balance of the FIRST entry tagged asset_type == "native".

        Raises ExternalLookupError when the account cannot be reached, does
        not exist, or carries no native entry. A missing entry is an error,
        never a zero balance.
        """
        try:
            response = self.client.get(f"/accounts/{account_id}")
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as exc:
            raise ExternalLookupError(
                f"Ledger account {account_id} lookup failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExternalLookupError(f"Ledger unreachable for {account_id}: {exc}") from exc
        except ValueError as exc:
            raise ExternalLookupError(f"Ledger response for {account_id} is not valid JSON") from exc

        balances = body.get("balances") if isinstance(body, dict) else None
        if not isinstance(balances, list):
            raise ExternalLookupError(f"Ledger response for {account_id} has no balances list")

        entry = next(
            (b for b in balances if isinstance(b, dict) and b.get("asset_type") == LEDGER_NATIVE_ASSET_TYPE),
            None,
        )
        if entry is None:
            raise ExternalLookupError(f"Ledger account {account_id} holds no native balance")

        try:
            balance = float(entry["balance"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ExternalLookupError(f"Unreadable native balance for {account_id}") from exc

        logger.debug("Ledger account %s native balance %s", account_id, balance)
        return balance

    def close(self) -> None:
        self.client.close()
