"""
JSON-RPC transport for the Phantasma node API
"""

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .errors import ErrorKind

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
REQUEST_ID = "1"


@dataclass
class ResponseOutcome:
    """
    Classified result of one JSON-RPC round trip.

    Exactly one of `result` (when `error_kind` is None) or
    `error_kind` + `message` is meaningful.
    """
    result: Any = None
    error_kind: Optional[ErrorKind] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error_kind is None


def build_envelope(method: str, params: tuple) -> dict:
    """Build the JSON-RPC request envelope"""
    return {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "id": REQUEST_ID,
        "params": list(params),
    }


def classify_body(text: str) -> ResponseOutcome:
    """
    Classify a response body that arrived over HTTP.

    Args:
        text: Raw response body

    Returns:
        ResponseOutcome carrying the `result` node or the error classification
    """
    try:
        root = json.loads(text)
    except ValueError:
        return ResponseOutcome(error_kind=ErrorKind.PARSE_ERROR, message="failed to parse JSON")

    if not isinstance(root, dict):
        return ResponseOutcome(error_kind=ErrorKind.MALFORMED_RESPONSE, message="malformed response")

    if "error" in root:
        error = root["error"]
        if isinstance(error, dict):
            message = error.get("message")
            message = str(message) if message is not None else json.dumps(error)
        else:
            message = str(error)
        return ResponseOutcome(error_kind=ErrorKind.API_ERROR, message=message)

    if "result" in root:
        return ResponseOutcome(result=root["result"])

    return ResponseOutcome(error_kind=ErrorKind.MALFORMED_RESPONSE, message="malformed response")


class JsonRpcTransport:
    """
    Sends JSON-RPC requests to a single node endpoint.

    No retries happen here; every call is one HTTP POST.

    Example:
        >>> transport = JsonRpcTransport("http://localhost:7077/rpc")
        >>> outcome = transport.send("getBlockHeight", "main")
        >>> outcome.ok, outcome.result
    """

    def __init__(
        self,
        host: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the transport.

        Args:
            host: JSON-RPC endpoint URL
            timeout: Request timeout in seconds (default: 30)
            session: Optional pre-built session, mostly for tests
        """
        self.host = host
        self.timeout = timeout
        self._lock = threading.Lock()
        self.session = session if session is not None else self._new_session()

    @staticmethod
    def _new_session() -> requests.Session:
        session = requests.Session()
        session.headers.update({
            'Content-Type': 'application/json',
        })
        return session

    def send(self, method: str, *params: Any) -> ResponseOutcome:
        """
        Perform one JSON-RPC call.

        Args:
            method: Remote method name (e.g. "getAccount")
            *params: Positional JSON-RPC parameters

        Returns:
            ResponseOutcome; never raises for network or protocol failures
        """
        body = json.dumps(build_envelope(method, params))
        logger.debug("rpc request: %s", body)

        with self._lock:
            session = self.session

        try:
            response = session.post(self.host, data=body, timeout=self.timeout)
            response.raise_for_status()
            text = response.text
        except requests.RequestException as e:
            message = "request cancelled" if self._was_cancelled(session) else str(e)
            logger.warning("rpc %s failed: %s", method, message)
            return ResponseOutcome(error_kind=ErrorKind.NETWORK_ERROR, message=message)

        if self._was_cancelled(session):
            logger.warning("rpc %s cancelled", method)
            return ResponseOutcome(error_kind=ErrorKind.NETWORK_ERROR, message="request cancelled")

        logger.debug("rpc response: %s", text)
        outcome = classify_body(text)
        if not outcome.ok:
            logger.warning("rpc %s returned %s: %s", method, outcome.error_kind.value, outcome.message)
        return outcome

    def _was_cancelled(self, session) -> bool:
        # cancel() swaps the session out from under in-flight calls
        with self._lock:
            return session is not self.session

    def cancel(self):
        """
        Abort in-flight requests.

        The pending call resolves to NETWORK_ERROR; later calls use a new session.
        """
        with self._lock:
            old = self.session
            self.session = self._new_session()
        old.close()

    def close(self):
        """Close the session"""
        self.session.close()

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, *args):
        """Context manager exit"""
        self.close()
