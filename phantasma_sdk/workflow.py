"""
Transaction submission and confirmation.

A workflow signs a script, submits it, waits, looks the transaction up and
searches its events for the expected effect:

    BUILT -> SIGNED -> SUBMITTED -> AWAITING_CONFIRMATION -> CONFIRMED | FAILED

A submit failure ends the workflow immediately. Once submitted, the workflow
runs to CONFIRMED or FAILED; there is no mid-flight cancellation.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, List, Optional

from .cache import AssetCache, TokenAsset
from .client import PhantasmaClient, TRANSACTION_VALIDITY
from .config import DEFAULT_CONFIRMATION_DELAY, ClientConfig
from .crypto import KeyPair, PhantasmaCrypto, transaction_to_bytes
from .errors import ApiResult, ErrorKind
from .events import (
    EventKind,
    TokenEventData,
    decode_token_create,
    decode_token_event,
    parse_event_kind,
)
from .models import Event, TokenFlags
from .script import ScriptBuilder
from .serialization import decode_hex, encode_hex

logger = logging.getLogger(__name__)

DEFAULT_CHAIN = "main"
DEFAULT_GAS_PRICE = 1
DEFAULT_GAS_LIMIT = 9999


class WorkflowState(Enum):
    BUILT = "BUILT"
    SIGNED = "SIGNED"
    SUBMITTED = "SUBMITTED"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"
    CONFIRMED = "CONFIRMED"
    FAILED = "FAILED"


@dataclass
class ConfirmationPolicy:
    """
    Schedule of transaction lookups after submission.

    Attributes:
        delay: Seconds to wait before the first lookup
        max_attempts: Lookups allowed while the transaction is not yet visible
        backoff: Multiplier applied to the wait after each failed lookup
        timeout: Overall budget in seconds for waiting; None means unbounded
    """
    delay: float = DEFAULT_CONFIRMATION_DELAY
    max_attempts: int = 1
    backoff: float = 1.0
    timeout: Optional[float] = None

    @classmethod
    def from_config(cls, config: ClientConfig, **overrides: Any) -> "ConfirmationPolicy":
        """Policy whose first wait is the configured confirmation delay"""
        return cls(delay=config.confirmation_delay, **overrides)


@dataclass
class EventExpectation:
    """
    The event that proves a transaction had its intended effect.

    Attributes:
        kind: Event kind to look for
        decode: Turns the event into a payload; raises ValueError on bad data
        matches: Accepts the payload of the expected subject
    """
    kind: EventKind
    decode: Callable[[Event], Any]
    matches: Callable[[Any], bool]


@dataclass
class WorkflowOutcome(ApiResult):
    """ApiResult of a workflow, with the state it ended in and the submitted hash"""
    state: WorkflowState = WorkflowState.BUILT
    tx_hash: Optional[str] = None
    history: List[WorkflowState] = field(default_factory=list)


def _identity(data: bytes) -> Any:
    return data


class TransactionWorkflow:
    """
    Runs transactions for one key pair and keeps its asset cache current.

    Example:
        >>> workflow = TransactionWorkflow(client, keys, cache=AssetCache())
        >>> outcome = workflow.create_token("CAR", "Car Demo Token", 10000)
        >>> outcome.state, outcome.value
        (<WorkflowState.CONFIRMED: 'CONFIRMED'>, 'CAR')
    """

    def __init__(
        self,
        client: PhantasmaClient,
        keys: KeyPair,
        cache: Optional[AssetCache] = None,
        policy: Optional[ConfirmationPolicy] = None,
        rom_decoder: Callable[[bytes], Any] = _identity,
        ram_decoder: Callable[[bytes], Any] = _identity,
        validity: timedelta = TRANSACTION_VALIDITY,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize the workflow.

        Args:
            client: API client used for submission and lookups
            keys: Signer key pair
            cache: Asset cache updated on confirmation and resync
            policy: Confirmation schedule (default: one lookup after 10 seconds)
            rom_decoder: Decodes immutable token attributes from bytes
            ram_decoder: Decodes mutable token attributes from bytes
            validity: Expiration window signed into each transaction
            sleep: Blocking wait, injectable for tests
            clock: Monotonic clock used for the policy timeout
            now: Wall clock used for expirations
        """
        self.client = client
        self.keys = keys
        self.cache = cache if cache is not None else AssetCache()
        self.policy = policy if policy is not None else ConfirmationPolicy()
        self.rom_decoder = rom_decoder
        self.ram_decoder = ram_decoder
        self.validity = validity
        self._sleep = sleep
        self._clock = clock
        self._now = now or (lambda: datetime.now(timezone.utc))

    def execute(
        self,
        script: bytes,
        chain: str,
        expectation: EventExpectation,
        on_confirmed: Optional[Callable[[Any], None]] = None
    ) -> WorkflowOutcome:
        """
        Sign, submit and confirm a script.

        Args:
            script: Script bytes from ScriptBuilder
            chain: Target chain name
            expectation: Event that confirms the transaction
            on_confirmed: Called with the decoded payload before CONFIRMED is reported

        Returns:
            WorkflowOutcome in state CONFIRMED (value = payload) or FAILED
        """
        history = [WorkflowState.BUILT]

        def finish(state, tx_hash=None, value=None, kind=None, message=None):
            history.append(state)
            if state is WorkflowState.FAILED:
                logger.warning("transaction %s failed: %s", tx_hash, message)
            else:
                logger.info("transaction %s confirmed", tx_hash)
            return WorkflowOutcome(
                value=value, error_kind=kind, message=message,
                state=state, tx_hash=tx_hash, history=history,
            )

        expiration = self._now() + self.validity
        tx = PhantasmaCrypto.sign_transaction(self.keys, self.client.nexus, chain, script, expiration)
        history.append(WorkflowState.SIGNED)

        submitted = self.client.send_raw_transaction(encode_hex(transaction_to_bytes(tx)))
        if not submitted.ok:
            return finish(WorkflowState.FAILED, kind=submitted.error_kind, message=submitted.message)
        tx_hash = submitted.value
        history.append(WorkflowState.SUBMITTED)
        logger.info("transaction %s submitted to %s", tx_hash, chain)

        history.append(WorkflowState.AWAITING_CONFIRMATION)
        lookup = self._await_transaction(tx_hash)
        if not lookup.ok:
            return finish(
                WorkflowState.FAILED, tx_hash,
                kind=ErrorKind.CONFIRMATION_FAILED,
                message=f"transaction lookup failed: {lookup.message}",
            )

        found = self._find_event(lookup.value.events, expectation)
        if not found.ok:
            return finish(WorkflowState.FAILED, tx_hash, kind=found.error_kind, message=found.message)

        if on_confirmed is not None:
            try:
                on_confirmed(found.value)
            except Exception as e:
                return finish(
                    WorkflowState.FAILED, tx_hash,
                    kind=ErrorKind.MALFORMED_RESPONSE,
                    message=f"confirmed but could not be applied: {e!r}",
                )
        return finish(WorkflowState.CONFIRMED, tx_hash, value=found.value)

    def _await_transaction(self, tx_hash: str) -> ApiResult:
        policy = self.policy
        wait = policy.delay
        started = self._clock()
        lookup = None
        for attempt in range(1, max(1, policy.max_attempts) + 1):
            if policy.timeout is not None and self._clock() - started + wait > policy.timeout:
                break
            self._sleep(wait)
            lookup = self.client.get_transaction(tx_hash)
            if lookup.ok:
                return lookup
            logger.info("lookup %d of %s failed: %s", attempt, tx_hash, lookup.message)
            wait *= policy.backoff
        if lookup is None:
            return ApiResult.failure(ErrorKind.CONFIRMATION_FAILED, "timed out before the first lookup")
        return lookup

    @staticmethod
    def _find_event(events: List[Event], expectation: EventExpectation) -> ApiResult:
        for event in events:
            kind = parse_event_kind(event.kind)
            if kind is None:
                return ApiResult.failure(
                    ErrorKind.CONFIRMATION_FAILED, f"unknown event kind {event.kind!r}"
                )
            if kind is not expectation.kind:
                continue
            try:
                payload = expectation.decode(event)
            except ValueError as e:
                return ApiResult.failure(
                    ErrorKind.CONFIRMATION_FAILED, f"could not decode {kind.name} event: {e}"
                )
            if expectation.matches(payload):
                return ApiResult.success(payload)
        return ApiResult.failure(
            ErrorKind.CONFIRMATION_FAILED, f"no matching {expectation.kind.name} event"
        )

    def _gas_script(self) -> ScriptBuilder:
        return ScriptBuilder().allow_gas(self.keys.address, DEFAULT_GAS_PRICE, DEFAULT_GAS_LIMIT)

    # Actions

    def create_token(
        self,
        symbol: str,
        name: str,
        max_supply: int,
        decimals: int = 0,
        flags: TokenFlags = TokenFlags.Transferable | TokenFlags.Finite,
        chain: str = DEFAULT_CHAIN
    ) -> WorkflowOutcome:
        """
        Deploy a new token and wait for its TokenCreate event.

        Returns:
            WorkflowOutcome with the created symbol as value
        """
        address = self.keys.address
        script = (self._gas_script()
                  .call_contract("nexus", "CreateToken", address, symbol, name,
                                 max_supply, decimals, int(flags))
                  .spend_gas(address)
                  .end_script())
        expectation = EventExpectation(
            kind=EventKind.TokenCreate,
            decode=decode_token_create,
            matches=lambda created: created == symbol,
        )
        return self.execute(script, chain, expectation)

    def mint_token(
        self,
        symbol: str,
        rom: bytes,
        ram: bytes,
        chain: str = DEFAULT_CHAIN
    ) -> WorkflowOutcome:
        """
        Mint a non-fungible token instance and add it to the cache.

        Args:
            symbol: Token symbol
            rom: Serialized immutable attributes
            ram: Serialized mutable attributes
            chain: Target chain name

        Returns:
            WorkflowOutcome with the TokenEventData of the mint as value
        """
        address = self.keys.address
        script = (self._gas_script()
                  .call_contract("token", "MintToken", address, symbol, rom, ram)
                  .spend_gas(address)
                  .end_script())
        expectation = EventExpectation(
            kind=EventKind.TokenMint,
            decode=decode_token_event,
            matches=lambda data: data.symbol == symbol,
        )

        def cache_minted(data: TokenEventData):
            token_id = str(data.value)
            if token_id in self.cache:
                logger.warning("minted token %s already cached", token_id)
                return
            self.cache.insert(TokenAsset(
                token_id=token_id,
                owner_address=address,
                rom=self.rom_decoder(rom),
                ram=self.ram_decoder(ram),
            ))

        return self.execute(script, chain, expectation, on_confirmed=cache_minted)

    def sync_assets(self, symbol: str, address: Optional[str] = None) -> ApiResult:
        """
        Resync the asset cache from the address's balance listing.

        Fetches the data of every listed instance of `symbol`, one call per id,
        and replaces the cache content only if every fetch and decode succeeds.

        Args:
            symbol: Token symbol whose instances are cached
            address: Owner address (default: the workflow's key pair)

        Returns:
            ApiResult with the list of cached TokenAsset

        Raises:
            RuntimeError: If another resync of the same cache is running
        """
        address = address or self.keys.address
        self.cache.begin_resync()
        try:
            account = self.client.get_account(address)
            if not account.ok:
                return account

            token_ids: List[str] = []
            for balance in account.value.balances:
                if balance.symbol != symbol:
                    continue
                for token_id in balance.ids:
                    if token_id not in token_ids:
                        token_ids.append(token_id)

            assets = []
            for token_id in token_ids:
                fetched = self.client.get_token_data(symbol, token_id)
                if not fetched.ok:
                    return fetched
                data = fetched.value
                try:
                    rom = self.rom_decoder(decode_hex(data.rom))
                    ram = self.ram_decoder(decode_hex(data.ram))
                except Exception as e:
                    logger.warning("could not decode token %s: %r", token_id, e)
                    return ApiResult.failure(
                        ErrorKind.MALFORMED_RESPONSE, f"token {token_id}: {e!r}"
                    )
                assets.append(TokenAsset(token_id, data.owner_address, rom, ram))

            self.cache.replace_all(assets)
            return ApiResult.success(assets)
        finally:
            self.cache.end_resync()

    def find_token(self, symbol: str) -> ApiResult:
        """
        Look a token up in the list of deployed tokens.

        Returns:
            ApiResult with the Token, or None if no token has that symbol
        """
        tokens = self.client.get_tokens()
        if not tokens.ok:
            return tokens
        match = next((token for token in tokens.value if token.symbol == symbol), None)
        return ApiResult.success(match)

    def owns_token(self, symbol: str, address: Optional[str] = None) -> ApiResult:
        """ApiResult with True if `address` (default: own key) owns the token contract"""
        address = address or self.keys.address
        found = self.find_token(symbol)
        if not found.ok:
            return found
        return ApiResult.success(found.value is not None and found.value.owner_address == address)
