"""
Tests for PhantasmaClient operations against canned node replies.
"""

import requests

from phantasma_sdk import ErrorKind, KeyPair, ScriptBuilder
from phantasma_sdk.serialization import BinaryReader, decode_hex

from conftest import FakeResponse, Replies, error_response, result_response

ADDRESS = "P2f7ZFuj6NfZ76ymNMnG3xRBT5hAMicDrQRHE4S7SoxEr"

ACCOUNT = {
    "address": ADDRESS,
    "name": "anonymous",
    "balances": [
        {"chain": "main", "amount": "100000000", "symbol": "SOUL", "decimals": 8},
        {"chain": "main", "amount": "2", "symbol": "CAR", "decimals": 0, "ids": ["11", "12"]},
    ],
}


def transfers_page(page, total_pages, hashes):
    return {
        "page": page,
        "pageSize": len(hashes),
        "total": 3,
        "totalPages": total_pages,
        "result": [{"hash": h, "events": []} for h in hashes],
    }


class TestOperations:
    def test_get_account(self, client, session):
        session.replies["getAccount"] = ACCOUNT
        result = client.get_account(ADDRESS)

        assert result.ok
        assert result.value.name == "anonymous"
        assert result.value.balances[1].ids == ["11", "12"]
        assert session.requests[0]["params"] == [ADDRESS]

    def test_scalar_results(self, client, session):
        session.replies.update({
            "getBlockHeight": "1024",
            "lookUpName": ADDRESS,
            "getRawBlockByHash": "0a0b",
            "getTokenTransferCount": 3,
        })

        assert client.get_block_height("main").value == 1024
        assert client.look_up_name("genesis").value == ADDRESS
        assert client.get_raw_block_by_hash("FF").value == "0a0b"
        assert client.get_token_transfer_count("SOUL").value == 3

    def test_list_results(self, client, session):
        session.replies["getChains"] = [
            {"name": "main", "address": "S1", "parentAddress": "", "height": 10},
            {"name": "apps", "address": "S2", "parentAddress": "S1", "height": 4},
        ]
        result = client.get_chains()

        assert [chain.name for chain in result.value] == ["main", "apps"]

    def test_params_are_positional(self, client, session):
        session.replies["getAuction"] = {"tokenId": "5", "price": "10"}
        client.get_auction("main", "CAR", "5")

        assert session.requests[0]["method"] == "getAuction"
        assert session.requests[0]["params"] == ["main", "CAR", "5"]


class TestErrors:
    def test_api_error(self, client, session):
        session.replies["getToken"] = error_response("token not found")
        result = client.get_token("NOPE")

        assert not result.ok
        assert result.error_kind is ErrorKind.API_ERROR
        assert result.message == "token not found"

    def test_network_error(self, client, session):
        session.replies["getApps"] = requests.ConnectionError("refused")

        assert client.get_apps().error_kind is ErrorKind.NETWORK_ERROR

    def test_decode_failure_is_malformed(self, client, session):
        session.replies["getBlockHeight"] = "not a number"

        assert client.get_block_height("main").error_kind is ErrorKind.MALFORMED_RESPONSE

    def test_overflow_is_malformed(self, client, session):
        session.replies["getChains"] = [{"name": "main", "height": 2 ** 40}]

        assert client.get_chains().error_kind is ErrorKind.MALFORMED_RESPONSE

    def test_empty_envelope(self, client, session):
        session.replies["getTokens"] = FakeResponse("{}")

        assert client.get_tokens().error_kind is ErrorKind.MALFORMED_RESPONSE

    def test_dispatch(self, client, session):
        session.replies["getToken"] = error_response("x")
        seen = []

        client.get_token("X").dispatch(seen.append, lambda kind, message: seen.append((kind, message)))

        assert seen == [(ErrorKind.API_ERROR, "x")]


class TestPagination:
    def test_first_page(self, client, session):
        session.replies["getTokenTransfers"] = transfers_page(1, 2, ["a", "b"])
        result = client.get_token_transfers("SOUL", 1, 2)

        assert result.value.page == 1
        assert result.value.total_pages == 2
        assert [tx.hash for tx in result.value.result] == ["a", "b"]
        assert session.requests[0]["params"] == ["SOUL", 1, 2]

    def test_address_transactions(self, client, session):
        session.replies["getAddressTransactions"] = {
            "page": 1,
            "totalPages": 1,
            "result": {"address": ADDRESS, "txs": [{"hash": "a"}]},
        }
        result = client.get_address_transactions(ADDRESS)

        assert result.value.result.address == ADDRESS
        assert result.value.result.txs[0].hash == "a"

    def test_fetch_all_pages(self, client, session):
        session.replies["getTokenTransfers"] = Replies(
            result_response(transfers_page(1, 2, ["a", "b"])),
            result_response(transfers_page(2, 2, ["c"])),
        )
        result = client.fetch_all_pages(client.get_token_transfers, "SOUL", page_size=2)

        assert [tx.hash for tx in result.value] == ["a", "b", "c"]
        assert [request["params"][1] for request in session.requests] == [1, 2]

    def test_fetch_all_pages_stops_on_error(self, client, session):
        session.replies["getAuctions"] = error_response("chain not found")
        result = client.fetch_all_pages(client.get_auctions, "main", "CAR")

        assert result.error_kind is ErrorKind.API_ERROR
        assert len(session.requests) == 1


class TestSignAndSend:
    def test_submits_signed_envelope(self, client, session):
        session.replies["sendRawTransaction"] = "HASH"
        keys = KeyPair.generate()
        script = ScriptBuilder().allow_gas(keys.address, 1, 9999).spend_gas(keys.address).end_script()

        result = client.sign_and_send_transaction(keys, script, "main")

        assert result.value == "HASH"
        raw = decode_hex(session.requests[0]["params"][0])
        reader = BinaryReader(raw)
        assert reader.read_string() == "simnet"
        assert reader.read_string() == "main"
        assert reader.read_bytes() == script
