"""
Vote domain entity

Builds the payloads handed to the ledger (transaction metadata) and
written to the event log. Votes are persisted by the voting use cases.
"""
from datetime import datetime, timezone
from typing import Dict, Any, Iterable, Tuple

VOTE_PAYLOAD_TYPE = "budget_vote"


class Vote:

    @staticmethod
    def encode(budget_item_id: int, amount: int) -> Dict[str, Any]:
        """
        Transaction metadata for a single vote.
        """
        return {
            "type": VOTE_PAYLOAD_TYPE,
            "item_id": budget_item_id,
            "amount": amount,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def encode_bulk(entries: Iterable[Tuple[int, int]]) -> Dict[str, Any]:
        """
        Transaction metadata for a batch: one transaction, many (item_id, amount) votes.
        """
        return {
            "type": VOTE_PAYLOAD_TYPE,
            "votes": [
                {"item_id": item_id, "amount": amount}
                for item_id, amount in entries
            ],
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @staticmethod
    def cast(
        user_id: int,
        budget_item_id: int,
        amount: int,
        transaction_hash: str,
        previous_amount: int | None = None,
    ) -> Dict[str, Any]:
        """
        vote_cast event payload. previous_amount is set when an existing vote was replaced.
        """
        return {
            "user_id": user_id,
            "budget_item_id": budget_item_id,
            "amount": amount,
            "previous_amount": previous_amount,
            "transaction_hash": transaction_hash,
            "cast_at": datetime.now(timezone.utc).isoformat(),
        }
