"""
Event kinds and payload decoding
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .crypto import address_from_public_key
from .models import Event
from .serialization import BinaryReader, decode_hex, unserialize_string


class EventKind(Enum):
    """Event kinds a node can emit"""
    Unknown = 0
    ChainCreate = 1
    TokenCreate = 2
    TokenSend = 3
    TokenReceive = 4
    TokenMint = 5
    TokenBurn = 6
    TokenEscrow = 7
    TokenStake = 8
    TokenUnstake = 9
    TokenClaim = 10
    RoleDemote = 11
    RolePromote = 12
    AddressRegister = 13
    AddressLink = 14
    AddressUnlink = 15
    GasEscrow = 16
    GasPayment = 17
    OrderCreated = 18
    OrderCancelled = 19
    OrderFilled = 20
    OrderClosed = 21
    FeedCreate = 22
    FeedUpdate = 23
    FileCreate = 24
    FileDelete = 25
    ValidatorAdd = 26
    ValidatorRemove = 27
    ValidatorUpdate = 28
    BrokerRequest = 29
    ValueCreate = 30
    ValueUpdate = 31
    PollCreated = 32
    PollClosed = 33
    PollVote = 34
    ChannelCreate = 35
    ChannelRefill = 36
    ChannelSettle = 37
    LeaderboardCreate = 38
    LeaderboardInsert = 39
    LeaderboardReset = 40
    Metadata = 41
    Custom = 64


def parse_event_kind(text: str) -> Optional[EventKind]:
    """
    Parse the `kind` text of an event.

    Accepts the kind name or its numeric value.

    Returns:
        EventKind, or None if the text names no known kind
    """
    text = text.strip()
    if text in EventKind.__members__:
        return EventKind[text]
    try:
        return EventKind(int(text))
    except ValueError:
        return None


@dataclass
class TokenEventData:
    """Payload of token mint, burn, send and receive events"""
    symbol: str
    value: int
    chain_address: str


def decode_token_create(event: Event) -> str:
    """Symbol carried by a TokenCreate event"""
    return unserialize_string(decode_hex(event.data))


def decode_token_event(event: Event) -> TokenEventData:
    """
    Decode the payload of a token movement event.

    Raises:
        ValueError: If the payload is truncated or not valid hex
    """
    reader = BinaryReader(decode_hex(event.data))
    symbol = reader.read_string()
    value = reader.read_big_integer()
    chain_address = address_from_public_key(reader.read_bytes())
    return TokenEventData(symbol=symbol, value=value, chain_address=chain_address)
