"""
Request models - one validated request per public operation.

Payloads arrive as plain dicts (from JSON scripts or the CLI) naming
the operation in ``method``, the calling account in ``caller`` and the
operation's arguments. ``dispatch`` validates a payload and runs it as
a single call on the host.
"""

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from clearhouse.core.auction.house import AuctionHouse
from clearhouse.core.host import LocalHost
from clearhouse.crypto import normalize_item_id
from clearhouse.utils.validation import MAX_CONTENT_LENGTH


class _Request(BaseModel):
    model_config = ConfigDict(extra="forbid")

    caller: str = Field(min_length=2, max_length=64)


class StartRoundRequest(_Request):
    method: Literal["start_round"] = "start_round"


class ClearRoundRequest(_Request):
    method: Literal["clear_round"] = "clear_round"


class ListItemRequest(_Request):
    method: Literal["list_item"] = "list_item"
    content: str = Field(min_length=1, max_length=MAX_CONTENT_LENGTH)
    reserve_price: int = 0


class _ItemRequest(_Request):
    item_id: str

    @field_validator("item_id")
    @classmethod
    def _canonical_item_id(cls, value: str) -> str:
        return normalize_item_id(value)


class PlaceBidRequest(_ItemRequest):
    method: Literal["place_bid"] = "place_bid"
    amount: int = Field(ge=0)


class WithdrawItemRequest(_ItemRequest):
    method: Literal["withdraw_item"] = "withdraw_item"


Request = Annotated[
    Union[
        StartRoundRequest,
        ClearRoundRequest,
        ListItemRequest,
        PlaceBidRequest,
        WithdrawItemRequest,
    ],
    Field(discriminator="method"),
]

_request_adapter = TypeAdapter(Request)


def parse_request(payload: Dict[str, Any]) -> Request:
    """
    Validate a raw payload.

    Raises:
        pydantic.ValidationError: unknown method or malformed arguments
    """
    return _request_adapter.validate_python(payload)


def dispatch(house: AuctionHouse, host: LocalHost, payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a payload and execute it as one call.

    Args:
        house: Target auction
        host: Host resolving the caller and the attached amount
        payload: Raw request

    Returns:
        JSON-friendly result

    Raises:
        pydantic.ValidationError: malformed payload
        AuctionError: the operation was rejected
    """
    request = parse_request(payload)
    deposit = request.amount if isinstance(request, PlaceBidRequest) else 0

    with host.call(request.caller, deposit=deposit):
        if isinstance(request, StartRoundRequest):
            return {"method": request.method, "round": house.start_round()}

        if isinstance(request, ClearRoundRequest):
            return {"method": request.method, **house.clear_round().to_dict()}

        if isinstance(request, ListItemRequest):
            key = house.list_item(request.content, request.reserve_price)
            return {"method": request.method, "item_id": key}

        if isinstance(request, PlaceBidRequest):
            bid = house.place_bid(request.item_id)
            return {"method": request.method, "item_id": request.item_id, **bid.to_dict()}

        item = house.withdraw_item(request.item_id)
        return {"method": request.method, "item_id": request.item_id, **item.to_dict()}
