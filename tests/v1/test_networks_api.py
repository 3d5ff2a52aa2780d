# tests/v1/test_networks_api.py
"""Tests for the supported-network listing."""

from fastapi import status


def test_list_networks(client) -> None:
    response = client.get("/api/v1/networks")
    assert response.status_code == status.HTTP_200_OK
    networks = {network["id"]: network for network in response.json()}
    assert networks["ethereum"]["family"] == "evm"
    assert networks["ethereum"]["isTestnet"] is False
    assert networks["solana-devnet"]["family"] == "solana"
    assert networks["solana-devnet"]["isTestnet"] is True
    assert all("rpcUrl" not in network for network in networks.values())
