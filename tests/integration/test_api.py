"""Integration tests for the HTTP API over in-memory services."""

import json

import pytest
from aiohttp import test_utils

from app.api import create_app
from app.utils.exceptions import ChainUnavailableError
from tests.fakes import (
    ONE_ETH,
    OUTSIDER_ADDRESS,
    WALLET_A_ADDRESS,
    WALLET_A_KEY,
    WALLET_B_ADDRESS,
    make_chain_tx,
)


@pytest.fixture
def app(services):
    return create_app(services)


async def _client(app) -> test_utils.TestClient:
    client = test_utils.TestClient(test_utils.TestServer(app))
    await client.start_server()
    return client


class TestWalletEndpoints:
    """Wallet creation, import and lookups."""

    @pytest.mark.asyncio
    async def test_create_wallet_returns_private_key_once(self, app):
        client = await _client(app)
        try:
            created = await client.post("/wallets")
            body = await created.json()
            assert created.status == 201
            assert body["balance"] == "0"
            assert body["privateKey"].startswith("0x")

            fetched = await client.get(f"/wallets/{body['address']}")
            assert fetched.status == 200
            assert await fetched.json() == {"address": body["address"], "balance": "0"}
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_import_wallet_and_live_balance(self, app, blockchain):
        blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH
        client = await _client(app)
        try:
            imported = await client.post("/wallets/import", json={"privateKey": WALLET_A_KEY})
            assert imported.status == 201
            assert await imported.json() == {"address": WALLET_A_ADDRESS, "balance": str(ONE_ETH)}

            balance = await client.get(f"/wallets/{WALLET_A_ADDRESS.lower()}/balance")
            assert await balance.json() == {
                "address": WALLET_A_ADDRESS,
                "balance": str(ONE_ETH),
                "balanceInEth": "1.0",
            }
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_import_rejects_malformed_key(self, app):
        client = await _client(app)
        try:
            response = await client.post("/wallets/import", json={"privateKey": "abc"})
            body = await response.json()
            assert response.status == 400
            assert body["error"] == "ValidationError"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_unknown_wallet_is_404(self, app):
        client = await _client(app)
        try:
            response = await client.get(f"/wallets/{WALLET_B_ADDRESS}")
            body = await response.json()
            assert response.status == 404
            assert body["error"] == "NotFoundError"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_chain_outage_is_503(self, app, blockchain):
        async def unavailable(address):
            raise ChainUnavailableError("Blockchain RPC unavailable")

        blockchain.get_balance = unavailable
        client = await _client(app)
        try:
            response = await client.get(f"/wallets/{WALLET_A_ADDRESS}/balance")
            assert response.status == 503
        finally:
            await client.close()


class TestTransactionEndpoints:
    """Transfer submission and lookups."""

    @pytest.mark.asyncio
    async def test_create_and_get_transaction(self, app, blockchain, mock_actor):
        blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH
        client = await _client(app)
        try:
            await client.post("/wallets/import", json={"privateKey": WALLET_A_KEY})

            created = await client.post(
                "/transactions",
                json={"from": WALLET_A_ADDRESS, "to": WALLET_B_ADDRESS, "amountInEth": "0.5"},
            )
            body = await created.json()
            assert created.status == 201
            assert body["status"] == "pending"
            assert body["amount"] == "500000000000000000"
            assert body["amountInEth"] == "0.5"
            mock_actor.send.assert_called_once()

            fetched = await client.get(f"/transactions/{body['id']}")
            assert (await fetched.json())["transactionHash"] == body["transactionHash"]

            history = await client.get(f"/wallets/{WALLET_B_ADDRESS}/transactions")
            assert await history.json() == [body["id"]]
        finally:
            await client.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("payload", "status"),
        [
            ({"from": "0x123", "to": WALLET_B_ADDRESS, "amountInEth": "0.1"}, 400),
            ({"from": WALLET_A_ADDRESS, "to": WALLET_B_ADDRESS, "amountInEth": "-1"}, 400),
            ({"from": WALLET_A_ADDRESS, "to": WALLET_A_ADDRESS.lower(), "amountInEth": "0.1"}, 400),
            ({"from": WALLET_A_ADDRESS, "to": WALLET_B_ADDRESS, "amountInEth": "2.0"}, 400),
            ({"from": WALLET_B_ADDRESS, "to": WALLET_A_ADDRESS, "amountInEth": "0.1"}, 404),
        ],
    )
    async def test_invalid_transfers(self, app, blockchain, payload, status):
        blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH
        client = await _client(app)
        try:
            await client.post("/wallets/import", json={"privateKey": WALLET_A_KEY})

            response = await client.post("/transactions", json=payload)

            assert response.status == status
            assert blockchain.sent == []
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_invalid_json_body_is_400(self, app):
        client = await _client(app)
        try:
            response = await client.post(
                "/transactions", data="{not json", headers={"Content-Type": "application/json"}
            )
            assert response.status == 400
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_unknown_transaction_is_404(self, app):
        client = await _client(app)
        try:
            response = await client.get("/transactions/does-not-exist")
            assert response.status == 404
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_chain_outage_during_broadcast_is_503(self, app, blockchain):
        blockchain.balances[WALLET_A_ADDRESS.lower()] = ONE_ETH
        blockchain.submit_error = ChainUnavailableError("RPC timeout")
        client = await _client(app)
        try:
            await client.post("/wallets/import", json={"privateKey": WALLET_A_KEY})

            response = await client.post(
                "/transactions",
                json={"from": WALLET_A_ADDRESS, "to": WALLET_B_ADDRESS, "amountInEth": "0.5"},
            )

            assert response.status == 503
            assert (await response.json())["error"] == "ChainUnavailableError"
        finally:
            await client.close()


class TestMonitorAndQueueEndpoints:
    """Monitor status, manual scan and queue inspection."""

    @pytest.mark.asyncio
    async def test_manual_scan_records_external_transfer(self, app, blockchain, store):
        client = await _client(app)
        try:
            await client.post("/wallets/import", json={"privateKey": WALLET_A_KEY})
            store.values["monitor:lastScannedBlock"] = "10"
            tx_hash = "0x" + "44" * 32
            blockchain.add_block(11, [make_chain_tx(tx_hash, OUTSIDER_ADDRESS, WALLET_A_ADDRESS)])
            blockchain.mine(tx_hash, block_number=11)

            response = await client.post("/blockchain-monitor/scan")
            assert await response.json() == {"message": "Blockchain scan triggered successfully"}

            status = await (await client.get("/blockchain-monitor/status")).json()
            assert status["lastScannedBlock"] == 11
            assert status["blocksBehind"] == 0
            assert status["monitoredWallets"] == 1

            history = await (await client.get(f"/wallets/{WALLET_A_ADDRESS}/transactions")).json()
            assert len(history) == 1
            external = await (await client.get(f"/transactions/{history[0]}")).json()
            assert external["source"] == "external"
            assert external["status"] == "confirmed"
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_queue_endpoints(self, app, store):
        await store.hash_set(
            "dramatiq:history:transactions",
            "job-9",
            json.dumps({"jobId": "job-9", "state": "completed"}),
        )
        client = await _client(app)
        try:
            job = await (await client.get("/queue/jobs/job-9")).json()
            missing = await (await client.get("/queue/jobs/unknown")).json()
            stats = await (await client.get("/queue/stats")).json()

            assert job["state"] == "completed"
            assert missing["state"] == "not_found"
            assert stats["counts"]["completed"] == 1
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_health_endpoints(self, app):
        client = await _client(app)
        try:
            health = await client.get("/health")
            ready = await client.get("/readiness")
            alive = await client.get("/liveness")

            assert health.status == 200
            assert (await health.json())["scheduler_running"] is False
            assert ready.status == 200
            assert alive.status == 200
        finally:
            await client.close()
