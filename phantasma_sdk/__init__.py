"""
Phantasma Python SDK

Python SDK for Phantasma nodes.

Features:
- JSON-RPC client with typed records for every node method
- Classified errors instead of exceptions (ApiResult)
- Ed25519 transaction signing and WIF keys
- Transaction submission with event-based confirmation
- Local cache of owned non-fungible tokens
"""

__version__ = "0.1.0"
__author__ = "Phantasma SDK Contributors"

from .cache import AssetCache, TokenAsset
from .client import PhantasmaClient
from .config import ClientConfig
from .crypto import KeyPair, PhantasmaCrypto
from .errors import ApiResult, ErrorKind
from .events import EventKind, TokenEventData
from .models import (
    Account,
    Auction,
    Balance,
    Block,
    Chain,
    Event,
    Paginated,
    Token,
    TokenData,
    TokenFlags,
    Transaction,
)
from .script import ScriptBuilder
from .transport import JsonRpcTransport, ResponseOutcome
from .utils import Utils
from .workflow import (
    ConfirmationPolicy,
    EventExpectation,
    TransactionWorkflow,
    WorkflowOutcome,
    WorkflowState,
)

__all__ = [
    "AssetCache",
    "TokenAsset",
    "PhantasmaClient",
    "ClientConfig",
    "KeyPair",
    "PhantasmaCrypto",
    "ApiResult",
    "ErrorKind",
    "EventKind",
    "TokenEventData",
    "Account",
    "Auction",
    "Balance",
    "Block",
    "Chain",
    "Event",
    "Paginated",
    "Token",
    "TokenData",
    "TokenFlags",
    "Transaction",
    "ScriptBuilder",
    "JsonRpcTransport",
    "ResponseOutcome",
    "Utils",
    "ConfirmationPolicy",
    "EventExpectation",
    "TransactionWorkflow",
    "WorkflowOutcome",
    "WorkflowState",
]
