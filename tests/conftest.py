import pytest
import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'backend'))

import httpx

from models import LocalCurrency, OwnedHolding, Outcome, Setup

# ── Two-holding portfolio, valued in EUR ──
TEST_SETUP = Setup(
    local_currency=LocalCurrency(id="EUR", locale="de-DE"),
    holdings=(
        OwnedHolding(symbol="BTC", amount=2.0),
        OwnedHolding(symbol="ETH", amount=10.0),
    ),
)
# Expected: BTC 2 * 46000 = 92000, ETH 10 * 2760 = 27600, total 119600 EUR

MOCK_PRICES = {
    "BTC": {"USD": 50000, "EUR": 46000},
    "ETH": {"USD": 3000,  "EUR": 2760},
    "XLM": {"USD": 0.12,  "EUR": 0.11},
}

# ── Ledger-resolved holding: the static amount (999) must be ignored ──
STELLAR_ACCOUNT = "GCEXAMPLEACCOUNTIDXLMHOLDER0000000000000000000000000000"
TEST_SETUP_WITH_LEDGER = Setup(
    local_currency=LocalCurrency(id="EUR", locale="de-DE"),
    holdings=(
        OwnedHolding(symbol="BTC", amount=2.0),
        OwnedHolding(symbol="XLM", amount=999.0, ledger_account=STELLAR_ACCOUNT),
    ),
)

MOCK_ACCOUNT = {
    "id": STELLAR_ACCOUNT,
    "balances": [
        {"asset_type": "credit_alphanum4", "asset_code": "USDC", "balance": "25.0000000"},
        {"asset_type": "native", "balance": "1500.0000000"},
    ],
}


class FakeLedger:
    """Records every lookup; returns fixed balances or raises the given error."""

    def __init__(self, balances: dict | None = None, error: Exception | None = None):
        self.balances = balances or {}
        self.error = error
        self.calls: list[str] = []

    def native_balance(self, account_id: str) -> float:
        self.calls.append(account_id)
        if self.error is not None:
            raise self.error
        return self.balances[account_id]


@pytest.fixture
def make_client():
    """
    Factory for httpx.Client objects backed by httpx.MockTransport.

    make_client(payload, status_code=200, base_url="") returns (client, requests)
    where requests collects every httpx.Request the client sent. Pass a
    callable as payload to build the response (or raise) yourself.
    """
    clients = []

    def _make(payload, status_code: int = 200, base_url: str = ""):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if callable(payload):
                return payload(request)
            return httpx.Response(status_code, json=payload)

        client = httpx.Client(transport=httpx.MockTransport(handler), base_url=base_url)
        clients.append(client)
        return client, requests

    yield _make
    for client in clients:
        client.close()


@pytest.fixture
def setup_outcome():
    return Outcome.success(TEST_SETUP)


@pytest.fixture
def fake_ledger():
    return FakeLedger(balances={STELLAR_ACCOUNT: 1500.0})
