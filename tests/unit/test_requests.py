"""
Unit tests for request validation and dispatch.
"""

import pytest
from pydantic import ValidationError

from clearhouse.core.auction import (
    AuctionHouse,
    ListItemRequest,
    PlaceBidRequest,
    dispatch,
    parse_request,
)
from clearhouse.core.errors import BidTooLow, RoundClosed
from clearhouse.core.host import LocalHost
from clearhouse.crypto import item_id


@pytest.fixture
def host():
    return LocalHost()


@pytest.fixture
def house(host):
    return AuctionHouse(host)


class TestParse:
    """Tests for payload validation."""

    def test_list_item(self):
        request = parse_request({"method": "list_item", "caller": "seller", "content": "lamp"})
        assert isinstance(request, ListItemRequest)
        assert request.reserve_price == 0

    def test_place_bid_normalizes_id(self):
        key = item_id("lamp")
        request = parse_request({
            "method": "place_bid", "caller": "bob", "item_id": key.lower(), "amount": 3,
        })
        assert isinstance(request, PlaceBidRequest)
        assert request.item_id == key

    def test_unknown_method(self):
        with pytest.raises(ValidationError):
            parse_request({"method": "steal", "caller": "bob"})

    def test_negative_amount(self):
        with pytest.raises(ValidationError):
            parse_request({
                "method": "place_bid", "caller": "bob", "item_id": item_id("x"), "amount": -1,
            })

    def test_bad_item_id(self):
        with pytest.raises(ValidationError):
            parse_request({"method": "withdraw_item", "caller": "bob", "item_id": "abc"})

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValidationError):
            parse_request({"method": "start_round", "caller": "op", "force": True})

    def test_empty_content(self):
        with pytest.raises(ValidationError):
            parse_request({"method": "list_item", "caller": "seller", "content": ""})


class TestDispatch:
    """Tests for executing requests against an auction."""

    def test_full_round(self, house, host):
        assert dispatch(house, host, {"method": "start_round", "caller": "op"}) == {
            "method": "start_round", "round": 1,
        }

        listed = dispatch(house, host, {
            "method": "list_item", "caller": "seller", "content": "lamp", "reserve_price": 2,
        })
        key = listed["item_id"]
        assert key == item_id("lamp")

        placed = dispatch(house, host, {
            "method": "place_bid", "caller": "bob", "item_id": key, "amount": 6,
        })
        assert placed == {"method": "place_bid", "item_id": key, "bidder": "bob", "amount": 6}

        cleared = dispatch(house, host, {"method": "clear_round", "caller": "op"})
        assert cleared["round"] == 1
        assert cleared["total_transferred"] == 6
        assert host.paid_to("seller") == 6

    def test_withdraw(self, house, host):
        dispatch(house, host, {"method": "start_round", "caller": "op"})
        key = dispatch(house, host, {
            "method": "list_item", "caller": "seller", "content": "lamp",
        })["item_id"]

        result = dispatch(house, host, {"method": "withdraw_item", "caller": "seller", "item_id": key})

        assert result["content"] == "lamp"
        assert len(house.catalog) == 0

    def test_rejection_propagates(self, house, host):
        with pytest.raises(RoundClosed):
            dispatch(house, host, {"method": "list_item", "caller": "seller", "content": "lamp"})

    def test_amount_is_attached_deposit(self, house, host):
        dispatch(house, host, {"method": "start_round", "caller": "op"})
        key = dispatch(house, host, {
            "method": "list_item", "caller": "seller", "content": "lamp", "reserve_price": 10,
        })["item_id"]

        with pytest.raises(BidTooLow):
            dispatch(house, host, {"method": "place_bid", "caller": "bob", "item_id": key, "amount": 9})
        assert house.hold_of("bob") == 0

    def test_negative_reserve_raised_to_floor(self, house, host):
        dispatch(house, host, {"method": "start_round", "caller": "op"})
        key = dispatch(house, host, {
            "method": "list_item", "caller": "seller", "content": "lamp", "reserve_price": -5,
        })["item_id"]

        assert house.listing(key).reserve_price == house.config.min_reserve
