"""
Tests for Vote payload builders
"""
from treasury.domain.vote import Vote, VOTE_PAYLOAD_TYPE


def test_encode_single_vote():
    payload = Vote.encode(3, 1_500_000)
    assert payload["type"] == VOTE_PAYLOAD_TYPE
    assert payload["item_id"] == 3
    assert payload["amount"] == 1_500_000
    assert "timestamp" in payload


def test_encode_bulk_keeps_order():
    payload = Vote.encode_bulk([(2, 10), (1, 0), (5, 7)])
    assert payload["type"] == VOTE_PAYLOAD_TYPE
    assert payload["votes"] == [
        {"item_id": 2, "amount": 10},
        {"item_id": 1, "amount": 0},
        {"item_id": 5, "amount": 7},
    ]


def test_cast_payload():
    payload = Vote.cast(user_id=1, budget_item_id=2, amount=30, transaction_hash="abc", previous_amount=10)
    assert payload["user_id"] == 1
    assert payload["budget_item_id"] == 2
    assert payload["amount"] == 30
    assert payload["previous_amount"] == 10
    assert payload["transaction_hash"] == "abc"


def test_cast_payload_first_vote():
    assert Vote.cast(1, 2, 30, "abc")["previous_amount"] is None
