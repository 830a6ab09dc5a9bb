"""
Transaction submission (ledger receipts for votes)

No real transaction building or signing happens here. Without a
configured gateway every vote gets a mock 64-hex hash; with
LEDGER_GATEWAY_URL set, the payload is POSTed to that gateway, which
answers with the hash of the transaction it submitted.
"""
import logging
import secrets
from typing import Any, Dict, Protocol

import requests

from treasury.config import get_settings

logger = logging.getLogger(__name__)


class LedgerSubmissionError(RuntimeError):
    pass


class TransactionSubmitter(Protocol):
    def submit(self, payload: Dict[str, Any]) -> str:
        """Submit payload, return the transaction hash."""
        ...


def generate_mock_transaction_hash() -> str:
    """64 lowercase hex chars, shaped like a real transaction id."""
    return secrets.token_hex(32)


class MockTransactionSubmitter:
    """Placeholder ledger: always succeeds, never touches the network."""

    def submit(self, payload: Dict[str, Any]) -> str:
        tx_hash = generate_mock_transaction_hash()
        logger.debug("Mock ledger accepted %s payload: %s", payload.get("type"), tx_hash)
        return tx_hash


class HttpTransactionSubmitter:
    """
    Forwards vote metadata to a ledger gateway.

    Gateway contract: POST {url} with the JSON payload, 200 + {"tx_hash": "..."}.
    """

    def __init__(self, url: str, timeout: int = 10):
        self.url = url
        self.timeout = timeout

    def submit(self, payload: Dict[str, Any]) -> str:
        try:
            resp = requests.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.exception("Ledger gateway unreachable: %s", self.url)
            raise LedgerSubmissionError(f"Ledger gateway unreachable: {exc}") from exc

        if resp.status_code != 200:
            logger.error("Ledger gateway error (HTTP %d): %s", resp.status_code, resp.text[:200])
            raise LedgerSubmissionError(f"Ledger gateway returned HTTP {resp.status_code}")

        try:
            tx_hash = resp.json()["tx_hash"]
        except (ValueError, KeyError, TypeError) as exc:
            raise LedgerSubmissionError("Ledger gateway response has no tx_hash") from exc

        if not tx_hash:
            raise LedgerSubmissionError("Ledger gateway returned an empty tx_hash")
        return str(tx_hash)


def get_transaction_submitter() -> TransactionSubmitter:
    """Gateway submitter when LEDGER_GATEWAY_URL is configured, mock otherwise."""
    settings = get_settings()
    if settings.LEDGER_GATEWAY_URL:
        return HttpTransactionSubmitter(settings.LEDGER_GATEWAY_URL, timeout=settings.LEDGER_TIMEOUT_SECONDS)
    return MockTransactionSubmitter()
