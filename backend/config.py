import os

from dotenv import load_dotenv

load_dotenv()

# Valuation cadence
REFRESH_INTERVAL_SECONDS = 600

# Pricing endpoint: one batched request per cycle (fsyms=BTC,ETH&tsyms=USD,EUR)
PRICE_API_URL = os.getenv("PRICE_API_URL", "https://min-api.cryptocompare.com/data/pricemulti")

# Stellar Horizon: the one ledger-integrated asset, quantity read from the account
LEDGER_API_URL = os.getenv("LEDGER_API_URL", "https://horizon.stellar.org")
LEDGER_ASSET_SYMBOL = "XLM"
LEDGER_NATIVE_ASSET_TYPE = "native"

# Unit prices are always shown in the reference currency
REFERENCE_CURRENCY = "USD"
REFERENCE_LOCALE = "en-US"

HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "10"))
USER_AGENT = "crypto-networth/1.0"

SETUP_FILE = os.getenv("SETUP_FILE", "setup.json")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
