"""
Decoding of JSON-RPC result nodes into SDK records.

Every function here is pure: the same node always produces an equal record.
Shape mismatches raise DecodeError; the client turns that into
MALFORMED_RESPONSE. A missing list field is the one tolerated gap and
decodes to an empty list.
"""

from typing import Any, Callable, List, TypeVar

from .errors import DecodeError
from .models import (
    Account,
    AccountTransactions,
    App,
    Auction,
    Balance,
    Block,
    Chain,
    Event,
    Paginated,
    Script,
    Token,
    TokenData,
    TokenMetadata,
    Transaction,
)

T = TypeVar("T")

INT32_RANGE = (-2 ** 31, 2 ** 31 - 1)
UINT32_RANGE = (0, 2 ** 32 - 1)


# Scalars

def decode_string(node: Any) -> str:
    """Read a scalar node as text; numbers are accepted in their JSON form"""
    if isinstance(node, str):
        return node
    if isinstance(node, bool) or node is None:
        raise DecodeError(f"expected string, got {node!r}")
    if isinstance(node, (int, float)):
        return str(node)
    raise DecodeError(f"expected string, got {type(node).__name__}")


def decode_int(node: Any, bounds=INT32_RANGE) -> int:
    """
    Read a scalar node as an integer.

    Args:
        node: JSON integer or numeric text
        bounds: Inclusive (min, max) range the value must fit

    Returns:
        The integer value

    Raises:
        DecodeError: On non-numeric text, fractions, booleans or overflow
    """
    if isinstance(node, bool):
        raise DecodeError(f"expected integer, got {node!r}")
    if isinstance(node, int):
        value = node
    elif isinstance(node, float) and node.is_integer():
        value = int(node)
    elif isinstance(node, str):
        try:
            value = int(node.strip())
        except ValueError:
            raise DecodeError(f"expected integer, got {node!r}")
    else:
        raise DecodeError(f"expected integer, got {node!r}")

    low, high = bounds
    if not low <= value <= high:
        raise DecodeError(f"integer {value} out of range [{low}, {high}]")
    return value


def decode_bool(node: Any) -> bool:
    if isinstance(node, bool):
        return node
    if isinstance(node, str) and node.lower() in ("true", "false"):
        return node.lower() == "true"
    raise DecodeError(f"expected boolean, got {node!r}")


def decode_list(node: Any, element: Callable[[Any], T]) -> List[T]:
    """Decode an array node element-wise, keeping order"""
    if not isinstance(node, list):
        raise DecodeError(f"expected array, got {type(node).__name__}")
    return [element(child) for child in node]


def _require_object(node: Any, record: str) -> dict:
    if not isinstance(node, dict):
        raise DecodeError(f"{record}: expected object, got {type(node).__name__}")
    return node


def _string(node: dict, name: str) -> str:
    if node.get(name) is None:
        return ""
    return decode_string(node[name])


def _int32(node: dict, name: str) -> int:
    if node.get(name) is None:
        return 0
    return decode_int(node[name], INT32_RANGE)


def _uint32(node: dict, name: str) -> int:
    if node.get(name) is None:
        return 0
    return decode_int(node[name], UINT32_RANGE)


def _bool(node: dict, name: str) -> bool:
    if node.get(name) is None:
        return False
    return decode_bool(node[name])


def _list(node: dict, name: str, element: Callable[[Any], T]) -> List[T]:
    if node.get(name) is None:
        return []
    return decode_list(node[name], element)


# Records

def decode_balance(node: Any) -> Balance:
    node = _require_object(node, "Balance")
    return Balance(
        chain=_string(node, "chain"),
        amount=_string(node, "amount"),
        symbol=_string(node, "symbol"),
        decimals=_uint32(node, "decimals"),
        ids=_list(node, "ids", decode_string),
    )


def decode_account(node: Any) -> Account:
    node = _require_object(node, "Account")
    return Account(
        address=_string(node, "address"),
        name=_string(node, "name"),
        balances=_list(node, "balances", decode_balance),
    )


def decode_chain(node: Any) -> Chain:
    node = _require_object(node, "Chain")
    return Chain(
        name=_string(node, "name"),
        address=_string(node, "address"),
        parent_address=_string(node, "parentAddress"),
        height=_uint32(node, "height"),
    )


def decode_app(node: Any) -> App:
    node = _require_object(node, "App")
    return App(
        id=_string(node, "id"),
        title=_string(node, "title"),
        url=_string(node, "url"),
        description=_string(node, "description"),
        icon=_string(node, "icon"),
    )


def decode_event(node: Any) -> Event:
    node = _require_object(node, "Event")
    return Event(
        address=_string(node, "address"),
        kind=_string(node, "kind"),
        data=_string(node, "data"),
    )


def decode_transaction(node: Any) -> Transaction:
    node = _require_object(node, "Transaction")
    return Transaction(
        hash=_string(node, "hash"),
        chain_address=_string(node, "chainAddress"),
        timestamp=_uint32(node, "timestamp"),
        confirmations=_int32(node, "confirmations"),
        block_height=_uint32(node, "blockHeight"),
        block_hash=_string(node, "blockHash"),
        script=_string(node, "script"),
        events=_list(node, "events", decode_event),
        result=_string(node, "result"),
        fee=_string(node, "fee"),
    )


def decode_account_transactions(node: Any) -> AccountTransactions:
    node = _require_object(node, "AccountTransactions")
    return AccountTransactions(
        address=_string(node, "address"),
        txs=_list(node, "txs", decode_transaction),
    )


def decode_block(node: Any) -> Block:
    node = _require_object(node, "Block")
    return Block(
        hash=_string(node, "hash"),
        previous_hash=_string(node, "previousHash"),
        timestamp=_uint32(node, "timestamp"),
        height=_uint32(node, "height"),
        chain_address=_string(node, "chainAddress"),
        payload=_string(node, "payload"),
        txs=_list(node, "txs", decode_transaction),
        validator_address=_string(node, "validatorAddress"),
        reward=_string(node, "reward"),
    )


def decode_token_metadata(node: Any) -> TokenMetadata:
    node = _require_object(node, "TokenMetadata")
    return TokenMetadata(key=_string(node, "key"), value=_string(node, "value"))


def decode_token(node: Any) -> Token:
    node = _require_object(node, "Token")
    return Token(
        symbol=_string(node, "symbol"),
        name=_string(node, "name"),
        decimals=_int32(node, "decimals"),
        current_supply=_string(node, "currentSupply"),
        max_supply=_string(node, "maxSupply"),
        owner_address=_string(node, "ownerAddress"),
        metadata=_list(node, "metadataList", decode_token_metadata),
        flags=_string(node, "flags"),
    )


def decode_token_data(node: Any) -> TokenData:
    node = _require_object(node, "TokenData")
    # nodes have shipped the id under several casings
    id_key = next((key for key in ("ID", "iD", "id") if key in node), "ID")
    return TokenData(
        id=_string(node, id_key),
        chain_address=_string(node, "chainAddress"),
        owner_address=_string(node, "ownerAddress"),
        rom=_string(node, "rom"),
        ram=_string(node, "ram"),
        for_sale=_bool(node, "forSale"),
    )


def decode_auction(node: Any) -> Auction:
    node = _require_object(node, "Auction")
    return Auction(
        creator_address=_string(node, "creatorAddress"),
        chain_address=_string(node, "chainAddress"),
        start_date=_uint32(node, "startDate"),
        end_date=_uint32(node, "endDate"),
        base_symbol=_string(node, "baseSymbol"),
        quote_symbol=_string(node, "quoteSymbol"),
        token_id=_string(node, "tokenId"),
        price=_string(node, "price"),
        rom=_string(node, "rom"),
        ram=_string(node, "ram"),
    )


def decode_script(node: Any) -> Script:
    node = _require_object(node, "Script")
    return Script(
        events=_list(node, "events", decode_event),
        result=_string(node, "result"),
    )


def decode_paginated(node: Any, content: Callable[[Any], T]) -> Paginated:
    """
    Decode a paginated envelope.

    `page` and `totalPages` are read from the outer node before the
    nested `result` node is handed to `content`.

    Args:
        node: The outer `result` node of a paginated call
        content: Decoder for the nested `result` node

    Returns:
        Paginated with the decoded page content
    """
    node = _require_object(node, "Paginated")
    page = _int32(node, "page")
    total_pages = _int32(node, "totalPages")
    if "result" not in node:
        raise DecodeError("Paginated: missing nested result")
    return Paginated(page=page, total_pages=total_pages, result=content(node["result"]))
