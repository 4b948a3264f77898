"""
Tests for the Data API endpoints
"""
import logging

from rosetta_server.models import Transaction

from .conftest import MINER, block_hash


def _post(client, path, network_identifier, **body):
    return client.post(path, json={"network_identifier": network_identifier, **body})


def test_network_list(client):
    """Test /network/list"""
    response = client.post("/network/list", json={})
    assert response.status_code == 200
    assert response.json() == {"network_identifiers": [{"blockchain": "ethereum", "network": "dev"}]}


def test_network_options(client, network_identifier):
    """Test /network/options"""
    response = _post(client, "/network/options", network_identifier)
    assert response.status_code == 200
    data = response.json()
    assert data["version"]["rosetta_version"] == "1.4.13"
    assert data["version"]["node_version"] == "fake/1.0"
    allow = data["allow"]
    assert allow["historical_balance_lookup"] is True
    assert allow["call_methods"] == ["faucet"]
    assert allow["operation_types"] == ["transfer"]
    assert {"status": "success", "successful": True} in allow["operation_statuses"]
    codes = [error["code"] for error in allow["errors"]]
    assert codes == list(range(1, 15))
    assert all(error["retriable"] is (error["code"] == 1) for error in allow["errors"])


def test_network_status(client, network_identifier):
    """Test /network/status"""
    data = _post(client, "/network/status", network_identifier).json()
    assert data["current_block_identifier"] == {"index": 100, "hash": block_hash(100)}
    assert data["genesis_block_identifier"] == {"index": 0, "hash": block_hash(0)}
    assert data["peers"] == [{"peer_id": "peer-1"}]


def test_unsupported_network(client):
    """Test requests for another network"""
    response = _post(client, "/network/status", {"blockchain": "bitcoin", "network": "mainnet"})
    assert response.status_code == 500
    error = response.json()
    assert error["code"] == 11
    assert error["retriable"] is False
    assert error["details"]["supported"] == ["ethereum/dev"]


def test_malformed_request(client, network_identifier):
    """Test request validation errors"""
    response = _post(client, "/account/balance", network_identifier)
    assert response.status_code == 500
    error = response.json()
    assert error["code"] == 10
    assert error["description"] == "MalformedRequest"
    assert any("account_identifier" in e["loc"] for e in error["details"]["errors"])


def test_genesis_block_is_its_own_parent(client, network_identifier):
    """Test the genesis block parent"""
    data = _post(client, "/block", network_identifier, block_identifier={"index": 0}).json()
    block = data["block"]
    assert block["parent_block_identifier"] == block["block_identifier"]


def test_block_by_index_and_hash(client, network_identifier):
    """Test block lookup by index and hash"""
    by_index = _post(client, "/block", network_identifier, block_identifier={"index": 42}).json()
    by_hash = _post(client, "/block", network_identifier, block_identifier={"hash": block_hash(42)}).json()
    assert by_index == by_hash
    block = by_index["block"]
    assert block["parent_block_identifier"]["index"] == 41
    assert block["transactions"][0]["operations"][0]["amount"]["value"] == "2000"


def test_block_by_index_follows_reorg(client, network_identifier, connector):
    """Test an index-only block lookup returns the canonical block after a reorg"""
    before = _post(client, "/block", network_identifier, block_identifier={"index": 100}).json()
    assert before["block"]["block_identifier"]["hash"] == block_hash(100)
    connector.reorg(2)
    after = _post(client, "/block", network_identifier, block_identifier={"index": 100}).json()
    assert after["block"]["block_identifier"]["hash"] == block_hash(100, "fork")
    assert after["block"]["parent_block_identifier"]["hash"] == block_hash(99, "fork")


def test_current_block(client, network_identifier):
    """Test an empty block identifier returns the tip"""
    data = _post(client, "/block", network_identifier, block_identifier={}).json()
    assert data["block"]["block_identifier"]["index"] == 100


def test_block_not_found(client, network_identifier):
    """Test a missing block"""
    response = _post(client, "/block", network_identifier, block_identifier={"index": 1000})
    assert response.status_code == 500
    assert response.json()["code"] == 2


def test_block_lookup_is_not_retried(client, network_identifier, connector):
    """Test BlockNotFound is not retried"""
    _post(client, "/block", network_identifier, block_identifier={"hash": "0xmissing"})
    assert connector.calls["block"] == 1


def test_block_by_hash_is_cached(client, network_identifier, connector):
    """Test blocks by hash are cached"""
    for _ in range(3):
        _post(client, "/block", network_identifier, block_identifier={"hash": block_hash(7)})
    assert connector.calls["block"] == 1


def test_block_transaction(client, network_identifier):
    """Test /block/transaction"""
    response = _post(
        client, "/block/transaction", network_identifier,
        block_identifier={"index": 9, "hash": block_hash(9)},
        transaction_identifier={"hash": "0xreward9"},
    )
    assert response.status_code == 200
    assert response.json()["transaction"]["operations"][0]["account"]["address"] == MINER

    missing = _post(
        client, "/block/transaction", network_identifier,
        block_identifier={"index": 9, "hash": block_hash(9)},
        transaction_identifier={"hash": "0xother"},
    )
    assert missing.json()["code"] == 3


def test_account_balance(client, network_identifier):
    """Test /account/balance"""
    data = _post(client, "/account/balance", network_identifier, account_identifier={"address": MINER}).json()
    assert data["block_identifier"]["index"] == 100
    assert data["balances"] == [{"value": "5000000", "currency": {"symbol": "ETH", "decimals": 18}}]


def test_account_balance_at_block(client, network_identifier):
    """Test a balance at a past block"""
    data = _post(
        client, "/account/balance", network_identifier,
        account_identifier={"address": MINER}, block_identifier={"index": 50},
    ).json()
    assert data["block_identifier"] == {"index": 50, "hash": block_hash(50)}


def test_account_balance_at_fixed_block_is_stable(client, network_identifier, connector):
    """Test a balance at an explicit block is identical across calls"""
    body = {
        "account_identifier": {"address": MINER},
        "block_identifier": {"index": 50, "hash": block_hash(50)},
    }
    first = _post(client, "/account/balance", network_identifier, **body).json()
    connector.balances[MINER] = 1
    connector.advance()
    second = _post(client, "/account/balance", network_identifier, **body).json()
    assert second == first
    assert first["block_identifier"] == {"index": 50, "hash": block_hash(50)}


def test_balance_cached_until_tip_moves(client, network_identifier, connector):
    """Test balances are cached until the tip moves"""
    body = {"account_identifier": {"address": MINER}}
    first = _post(client, "/account/balance", network_identifier, **body).json()
    connector.balances[MINER] = 1
    second = _post(client, "/account/balance", network_identifier, **body).json()
    assert second == first
    assert connector.calls["account_balance"] == 1

    connector.advance()
    third = _post(client, "/account/balance", network_identifier, **body).json()
    assert third["balances"][0]["value"] == "1"
    assert third["block_identifier"]["index"] == 101
    assert connector.calls["account_balance"] == 2


def test_account_coins_unsupported_on_account_chain(client, network_identifier):
    """Test /account/coins on an account chain"""
    response = _post(client, "/account/coins", network_identifier, account_identifier={"address": MINER})
    assert response.status_code == 500
    assert response.json()["code"] == 12


def test_mempool(client, network_identifier, connector):
    """Test /mempool"""
    transaction = Transaction(transaction_identifier={"hash": "0xpending"}, operations=[])
    connector.mempool_txs["0xpending"] = transaction
    data = _post(client, "/mempool", network_identifier).json()
    assert data["transaction_identifiers"] == [{"hash": "0xpending"}]

    found = _post(client, "/mempool/transaction", network_identifier, transaction_identifier={"hash": "0xpending"})
    assert found.json()["transaction"]["transaction_identifier"] == {"hash": "0xpending"}

    missing = _post(client, "/mempool/transaction", network_identifier, transaction_identifier={"hash": "0xgone"})
    assert missing.json()["code"] == 3


def test_transient_failures_are_retried(client, network_identifier, connector):
    """Test transient node failures are retried"""
    connector.failures["network_status"] = 2
    response = _post(client, "/network/status", network_identifier)
    assert response.status_code == 200
    assert connector.calls["network_status"] == 3


def test_node_unavailable_after_retries(client, network_identifier, connector):
    """Test the retry budget is exhausted"""
    connector.failures["network_status"] = 5
    response = _post(client, "/network/status", network_identifier)
    assert response.status_code == 500
    error = response.json()
    assert error["code"] == 1
    assert error["retriable"] is True
    assert error["details"]["attempts"] == 3
    assert connector.calls["network_status"] == 3


def test_reorg_is_logged(client, network_identifier, connector, caplog):
    """Test reorgs are logged"""
    _post(client, "/network/status", network_identifier)
    connector.reorg(2)
    with caplog.at_level(logging.WARNING, logger="rosetta_server.services.gateway"):
        _post(client, "/network/status", network_identifier)
    assert "Reorg detected" in caplog.text


def test_call_faucet(client, network_identifier, connector):
    """Test /call with the faucet method"""
    response = _post(client, "/call", network_identifier, method="faucet",
                     parameters={"address": "0xabc", "value": "10"})
    assert response.status_code == 200
    assert response.json() == {"result": {"address": "0xabc", "balance": "10"}, "idempotent": False}
    assert connector.balances["0xabc"] == 10


def test_call_unknown_method(client, network_identifier):
    """Test /call with an unknown method"""
    response = _post(client, "/call", network_identifier, method="eth_chainId", parameters={})
    assert response.json()["code"] == 12


def test_metrics_endpoint(client, network_identifier):
    """Test the metrics endpoint"""
    _post(client, "/network/status", network_identifier)
    response = client.get("/metrics/")
    assert response.status_code == 200
    assert "rosetta_connector_calls_total" in response.text


def test_lifespan_opens_and_closes_connector(app, connector):
    """Test the connector lifecycle"""
    from fastapi.testclient import TestClient

    with TestClient(app):
        assert connector.connected
    assert connector.closed
