import json
from typing import Any, Dict, List

import pytest
import requests

from phantasma_sdk import JsonRpcTransport, PhantasmaClient


class FakeResponse:
    """Minimal stand-in for requests.Response"""

    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


class Replies:
    """Successive replies for one method; the last one repeats"""

    def __init__(self, *replies: Any):
        self._replies = list(replies)

    def next(self) -> Any:
        if len(self._replies) > 1:
            return self._replies.pop(0)
        return self._replies[0]


class FakeSession:
    """
    Answers JSON-RPC calls from canned replies keyed by method name.

    A reply can be a FakeResponse, an exception to raise, a callable taking
    the request params, a Replies sequence, or any JSON value used as the
    `result`.
    """

    def __init__(self, replies: Dict[str, Any] = None):
        self.replies = dict(replies or {})
        self.requests: List[dict] = []
        self.closed = False

    def post(self, url, data=None, timeout=None, **kwargs):
        payload = json.loads(data)
        self.requests.append(payload)
        reply = self.replies[payload["method"]]
        if isinstance(reply, Replies):
            reply = reply.next()
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, FakeResponse):
            return reply
        if callable(reply):
            reply = reply(payload["params"])
            if isinstance(reply, FakeResponse):
                return reply
        return FakeResponse(json.dumps({"jsonrpc": "2.0", "id": "1", "result": reply}))

    def methods(self) -> List[str]:
        return [request["method"] for request in self.requests]

    def close(self):
        self.closed = True


def result_response(result: Any) -> FakeResponse:
    return FakeResponse(json.dumps({"jsonrpc": "2.0", "id": "1", "result": result}))


def error_response(message: str) -> FakeResponse:
    return FakeResponse(json.dumps({"jsonrpc": "2.0", "id": "1", "error": {"message": message}}))


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    transport = JsonRpcTransport("http://node.test/rpc", session=session)
    return PhantasmaClient(transport=transport)
