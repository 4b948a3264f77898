"""
Tests for the Rosetta API client
"""
from unittest.mock import MagicMock, patch

import pytest
from requests.exceptions import ConnectionError, Timeout

from rosetta_client.api import APIError, RosettaAPI


@pytest.fixture
def api_client():
    """Create an API client for testing"""
    return RosettaAPI("http://test.com/", "bitcoin", "regtest", retry_delay=0)


def _response(status_code=200, body=None):
    mock = MagicMock()
    mock.status_code = status_code
    mock.json.return_value = body if body is not None else {}
    return mock


def test_api_init(api_client):
    """Test API client initialization"""
    assert api_client.base_url == "http://test.com"
    assert api_client.network_identifier == {"blockchain": "bitcoin", "network": "regtest"}


def test_post_injects_network_identifier(api_client):
    """Test POST requests carry the network identifier"""
    response = _response(body={"block_identifier": {"index": 1, "hash": "0x1"}, "balances": []})
    with patch.object(api_client.session, 'request', return_value=response) as mock_request:
        result = api_client.account_balance("bcrt1qxyz", block_index=1)

        mock_request.assert_called_once_with(
            method="POST",
            url="http://test.com/account/balance",
            json={
                "network_identifier": {"blockchain": "bitcoin", "network": "regtest"},
                "account_identifier": {"address": "bcrt1qxyz"},
                "block_identifier": {"index": 1},
            },
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            timeout=30
        )
        assert result == response.json.return_value


def test_error_body_raises_api_error(api_client):
    """Test Rosetta error bodies raise APIError"""
    response = _response(500, {"code": 2, "message": "Block not found", "retriable": False})
    with patch.object(api_client.session, 'request', return_value=response) as mock_request:
        with pytest.raises(APIError) as excinfo:
            api_client.block(index=5)
        assert mock_request.call_count == 1
    error = excinfo.value
    assert error.code == 2
    assert error.kind == "BlockNotFound"
    assert error.status_code == 500
    assert not error.transport


def test_retriable_errors_are_retried(api_client):
    """Test retriable error responses are retried"""
    unavailable = _response(500, {"code": 1, "message": "Node unavailable", "retriable": True})
    ok = _response(body={"current_block_identifier": {"index": 1, "hash": "0x1"}})
    with patch.object(api_client.session, 'request', side_effect=[unavailable, ok]) as mock_request:
        assert api_client.network_status() == ok.json.return_value
        assert mock_request.call_count == 2


def test_transport_errors_are_retried(api_client):
    """Test connection errors are retried"""
    with patch.object(api_client.session, 'request', side_effect=ConnectionError("refused")) as mock_request:
        with pytest.raises(APIError) as excinfo:
            api_client.network_status()
        assert mock_request.call_count == 3
    assert excinfo.value.transport
    assert excinfo.value.retriable


def test_submit_is_sent_once(api_client):
    """Test submit is never retried"""
    with patch.object(api_client.session, 'request', side_effect=Timeout("timed out")) as mock_request:
        with pytest.raises(APIError) as excinfo:
            api_client.submit("deadbeef")
        assert mock_request.call_count == 1
    assert excinfo.value.transport


def test_mempool_returns_hashes(api_client):
    """Test mempool listing"""
    response = _response(body={"transaction_identifiers": [{"hash": "a"}, {"hash": "b"}]})
    with patch.object(api_client.session, 'request', return_value=response):
        assert api_client.mempool() == ["a", "b"]


def test_invalid_json(api_client):
    """Test handling of invalid JSON responses"""
    response = _response()
    response.json.side_effect = ValueError("no json")
    response.text = "<html>"
    with patch.object(api_client.session, 'request', return_value=response):
        with pytest.raises(APIError):
            api_client.network_list()


def test_against_gateway(api):
    """Test the client against a running gateway"""
    assert api.network_list()["network_identifiers"] == [{"blockchain": "ethereum", "network": "dev"}]
    with pytest.raises(APIError) as excinfo:
        api.account_coins("0xabc")
    assert excinfo.value.kind == "UnsupportedOperation"
