"""
Data models for Phantasma SDK
"""

from dataclasses import dataclass, field
from enum import IntFlag
from typing import Any, List


class TokenFlags(IntFlag):
    """Token capability flags passed to CreateToken"""
    NONE = 0
    Transferable = 1 << 0
    Fungible = 1 << 1
    Finite = 1 << 2
    Divisible = 1 << 3
    Fuel = 1 << 4
    Stakable = 1 << 5
    Fiat = 1 << 6
    External = 1 << 7
    Burnable = 1 << 8


@dataclass
class Balance:
    """Token balance of an address on one chain"""
    chain: str
    amount: str
    symbol: str
    decimals: int
    ids: List[str] = field(default_factory=list)


@dataclass
class Account:
    """Account name and balances"""
    address: str
    name: str
    balances: List[Balance] = field(default_factory=list)


@dataclass
class Chain:
    """Chain deployed in the nexus"""
    name: str
    address: str
    parent_address: str
    height: int


@dataclass
class App:
    """Registered app"""
    id: str
    title: str
    url: str
    description: str
    icon: str


@dataclass
class Event:
    """Event emitted by a transaction; data is hex encoded"""
    address: str
    kind: str
    data: str


@dataclass
class Transaction:
    """Transaction as reported by the node"""
    hash: str
    chain_address: str
    timestamp: int
    confirmations: int
    block_height: int
    block_hash: str
    script: str
    events: List[Event]
    result: str
    fee: str


@dataclass
class AccountTransactions:
    """Transactions of an address"""
    address: str
    txs: List[Transaction]


@dataclass
class Block:
    """Block data"""
    hash: str
    previous_hash: str
    timestamp: int
    height: int
    chain_address: str
    payload: str
    txs: List[Transaction]
    validator_address: str
    reward: str


@dataclass
class TokenMetadata:
    """Key/value metadata entry of a token"""
    key: str
    value: str


@dataclass
class Token:
    """Token deployed in the nexus"""
    symbol: str
    name: str
    decimals: int
    current_supply: str
    max_supply: str
    owner_address: str
    metadata: List[TokenMetadata]
    flags: str

    @property
    def is_fungible(self) -> bool:
        return "Fungible" in self.flags.replace(",", " ").split()


@dataclass
class TokenData:
    """Data of a non-fungible token instance; rom and ram are hex encoded"""
    id: str
    chain_address: str
    owner_address: str
    rom: str
    ram: str
    for_sale: bool


@dataclass
class Auction:
    """Market auction of a token instance"""
    creator_address: str
    chain_address: str
    start_date: int
    end_date: int
    base_symbol: str
    quote_symbol: str
    token_id: str
    price: str
    rom: str
    ram: str


@dataclass
class Script:
    """Result of a read-only script invocation"""
    events: List[Event]
    result: str


@dataclass
class Paginated:
    """One page of a paginated call; `result` holds the decoded page content"""
    page: int
    total_pages: int
    result: Any


@dataclass
class SignedTransaction:
    """Transaction envelope ready for submission"""
    nexus: str
    chain: str
    script: bytes
    expiration: int
    signatures: List[bytes] = field(default_factory=list)
