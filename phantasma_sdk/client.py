"""
Main Phantasma API client
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional

from . import decoder
from .config import ClientConfig, DEFAULT_NEXUS, DEFAULT_RPC_URL
from .crypto import KeyPair, PhantasmaCrypto, transaction_to_bytes
from .errors import ApiResult, DecodeError, ErrorKind
from .serialization import encode_hex
from .transport import JsonRpcTransport

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
TRANSACTION_VALIDITY = timedelta(hours=1)


class PhantasmaClient:
    """
    Main client for interacting with a Phantasma node.

    Every operation returns an ApiResult and never raises for network,
    protocol or decoding failures.

    Example:
        >>> client = PhantasmaClient("http://localhost:7077/rpc")
        >>> result = client.get_account("P2f7ZFuj6NfZ76ymNMnG3xRBT5hAMicDrQRHE4S7SoxEr")
        >>> if result.ok:
        ...     print(result.value.name)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_RPC_URL,
        timeout: float = 30,
        nexus: str = DEFAULT_NEXUS,
        transport: Optional[JsonRpcTransport] = None
    ):
        """
        Initialize Phantasma client.

        Args:
            base_url: JSON-RPC endpoint (default: http://localhost:7077/rpc)
            timeout: Request timeout in seconds (default: 30)
            nexus: Network name signed into transactions (default: simnet)
            transport: Pre-built transport; overrides base_url and timeout
        """
        self.nexus = nexus
        self.transport = transport if transport is not None else JsonRpcTransport(base_url, timeout)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "PhantasmaClient":
        return cls(config.rpc_url, timeout=config.timeout, nexus=config.nexus)

    @property
    def host(self) -> str:
        return self.transport.host

    def _call(self, method: str, decode: Callable[[Any], Any], *params: Any) -> ApiResult:
        outcome = self.transport.send(method, *params)
        if not outcome.ok:
            return ApiResult.failure(outcome.error_kind, outcome.message)
        try:
            return ApiResult.success(decode(outcome.result))
        except DecodeError as e:
            logger.warning("could not decode %s result: %s", method, e)
            return ApiResult.failure(ErrorKind.MALFORMED_RESPONSE, str(e))

    # Accounts

    def get_account(self, address: str) -> ApiResult:
        """
        Get the name and balances of an address.

        Args:
            address: Account address (P...)

        Returns:
            ApiResult with an Account
        """
        return self._call("getAccount", decoder.decode_account, address)

    def look_up_name(self, name: str) -> ApiResult:
        """Get the address that owns a name"""
        return self._call("lookUpName", decoder.decode_string, name)

    # Blocks

    def get_block_height(self, chain: str) -> ApiResult:
        """
        Get the height of a chain.

        Args:
            chain: Chain name or address

        Returns:
            ApiResult with an int
        """
        return self._call("getBlockHeight", decoder.decode_int, chain)

    def get_block_transaction_count_by_hash(self, block_hash: str) -> ApiResult:
        """Get the number of transactions in a block"""
        return self._call("getBlockTransactionCountByHash", decoder.decode_int, block_hash)

    def get_block_by_hash(self, block_hash: str) -> ApiResult:
        return self._call("getBlockByHash", decoder.decode_block, block_hash)

    def get_raw_block_by_hash(self, block_hash: str) -> ApiResult:
        """Get a block serialized as hex text"""
        return self._call("getRawBlockByHash", decoder.decode_string, block_hash)

    def get_block_by_height(self, chain: str, height: int) -> ApiResult:
        return self._call("getBlockByHeight", decoder.decode_block, chain, height)

    def get_raw_block_by_height(self, chain: str, height: int) -> ApiResult:
        """Get a block of a chain serialized as hex text"""
        return self._call("getRawBlockByHeight", decoder.decode_string, chain, height)

    def get_transaction_by_block_hash_and_index(self, block_hash: str, index: int) -> ApiResult:
        return self._call(
            "getTransactionByBlockHashAndIndex", decoder.decode_transaction, block_hash, index
        )

    # Transactions

    def get_address_transactions(
        self,
        address: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> ApiResult:
        """
        Get the latest transactions of an address.

        Paginated: repeat with page + 1 until page == total_pages.

        Returns:
            ApiResult with Paginated(result=AccountTransactions)
        """
        return self._call(
            "getAddressTransactions",
            lambda node: decoder.decode_paginated(node, decoder.decode_account_transactions),
            address, page, page_size,
        )

    def get_address_transaction_count(self, address: str, chain: str) -> ApiResult:
        return self._call("getAddressTransactionCount", decoder.decode_int, address, chain)

    def send_raw_transaction(self, tx_data: str) -> ApiResult:
        """
        Broadcast a signed transaction.

        Args:
            tx_data: Hex encoded signed envelope

        Returns:
            ApiResult with the transaction hash
        """
        return self._call("sendRawTransaction", decoder.decode_string, tx_data)

    def invoke_raw_script(self, chain: str, script_data: str) -> ApiResult:
        """Run a hex encoded script against current state without changing it"""
        return self._call("invokeRawScript", decoder.decode_script, chain, script_data)

    def get_transaction(self, tx_hash: str) -> ApiResult:
        return self._call("getTransaction", decoder.decode_transaction, tx_hash)

    def cancel_transaction(self, tx_hash: str) -> ApiResult:
        """Remove a pending transaction from the mempool"""
        return self._call("cancelTransaction", decoder.decode_string, tx_hash)

    def sign_and_send_transaction(
        self,
        keys: KeyPair,
        script: bytes,
        chain: str,
        expiration: Optional[datetime] = None
    ) -> ApiResult:
        """
        Sign a script and broadcast it.

        Args:
            keys: Signer key pair
            script: Script bytes from ScriptBuilder
            chain: Target chain name
            expiration: Defaults to one hour from now

        Returns:
            ApiResult with the transaction hash
        """
        if expiration is None:
            expiration = datetime.now(timezone.utc) + TRANSACTION_VALIDITY
        tx = PhantasmaCrypto.sign_transaction(keys, self.nexus, chain, script, expiration)
        return self.send_raw_transaction(encode_hex(transaction_to_bytes(tx)))

    # Chains and apps

    def get_chains(self) -> ApiResult:
        return self._call("getChains", lambda node: decoder.decode_list(node, decoder.decode_chain))

    def get_apps(self) -> ApiResult:
        return self._call("getApps", lambda node: decoder.decode_list(node, decoder.decode_app))

    # Tokens

    def get_tokens(self) -> ApiResult:
        """
        Get all tokens deployed in the nexus.

        Returns:
            ApiResult with a list of Token
        """
        return self._call("getTokens", lambda node: decoder.decode_list(node, decoder.decode_token))

    def get_token(self, symbol: str) -> ApiResult:
        return self._call("getToken", decoder.decode_token, symbol)

    def get_token_data(self, symbol: str, token_id: str) -> ApiResult:
        """
        Get the data of a non-fungible token instance.

        Returns:
            ApiResult with a TokenData (rom and ram hex encoded)
        """
        return self._call("getTokenData", decoder.decode_token_data, symbol, token_id)

    def get_token_transfers(
        self,
        symbol: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> ApiResult:
        """
        Get the latest transfers of a token.

        Paginated: repeat with page + 1 until page == total_pages.

        Returns:
            ApiResult with Paginated(result=[Transaction, ...])
        """
        return self._call(
            "getTokenTransfers",
            lambda node: decoder.decode_paginated(
                node, lambda inner: decoder.decode_list(inner, decoder.decode_transaction)
            ),
            symbol, page, page_size,
        )

    def get_token_transfer_count(self, symbol: str) -> ApiResult:
        return self._call("getTokenTransferCount", decoder.decode_int, symbol)

    def get_token_balance(self, address: str, symbol: str, chain: str) -> ApiResult:
        """Get the balance of one token on one chain for an address"""
        return self._call("getTokenBalance", decoder.decode_balance, address, symbol, chain)

    # Auctions

    def get_auctions_count(self, chain: str, symbol: str) -> ApiResult:
        return self._call("getAuctionsCount", decoder.decode_int, chain, symbol)

    def get_auctions(
        self,
        chain: str,
        symbol: str,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE
    ) -> ApiResult:
        """
        Get the auctions open in the market.

        Paginated: repeat with page + 1 until page == total_pages.

        Returns:
            ApiResult with Paginated(result=[Auction, ...])
        """
        return self._call(
            "getAuctions",
            lambda node: decoder.decode_paginated(
                node, lambda inner: decoder.decode_list(inner, decoder.decode_auction)
            ),
            chain, symbol, page, page_size,
        )

    def get_auction(self, chain: str, symbol: str, token_id: str) -> ApiResult:
        return self._call("getAuction", decoder.decode_auction, chain, symbol, token_id)

    # Pagination

    def fetch_all_pages(
        self,
        operation: Callable[..., ApiResult],
        *args: Any,
        page_size: int = DEFAULT_PAGE_SIZE,
        extract: Optional[Callable[[Any], List[Any]]] = None
    ) -> ApiResult:
        """
        Walk a paginated operation from page 1 until the last page.

        Args:
            operation: Bound paginated method, e.g. client.get_token_transfers
            *args: Arguments before page and page_size
            page_size: Entries per page
            extract: Turns one page's content into a list of entries;
                defaults to the content itself when it is a list

        Returns:
            ApiResult with the concatenated entries, or the first failure

        Example:
            >>> result = client.fetch_all_pages(client.get_token_transfers, "SOUL")
            >>> len(result.value)
        """
        if extract is None:
            extract = lambda content: content if isinstance(content, list) else [content]

        entries: List[Any] = []
        page = 1
        while True:
            result = operation(*args, page=page, page_size=page_size)
            if not result.ok:
                return result
            paginated = result.value
            entries.extend(extract(paginated.result))
            if paginated.page >= paginated.total_pages or paginated.page < page:
                return ApiResult.success(entries)
            page = paginated.page + 1

    def close(self):
        """Close the transport"""
        self.transport.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, *args):
        """Context manager exit"""
        self.close()
