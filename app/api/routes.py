"""
HTTP routes.

Wallets, transactions, blockchain monitor and queue inspection.
"""

import json

from aiohttp import web

from app.api.schemas import CreateTransactionRequest, ImportWalletRequest
from app.services.container import ServiceContainer
from app.utils.exceptions import InvalidRequestError

SERVICES_KEY = web.AppKey("services", ServiceContainer)

routes = web.RouteTableDef()


async def _read_json(request: web.Request) -> dict:
    try:
        body = await request.json()
    except json.JSONDecodeError as e:
        raise InvalidRequestError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise InvalidRequestError("Request body must be a JSON object")
    return body


# ----------------------------------------------------------------------
# Wallets
# ----------------------------------------------------------------------


@routes.post("/wallets")
async def create_wallet(request: web.Request) -> web.Response:
    """Create a wallet. The private key is returned only here."""
    wallet = await request.app[SERVICES_KEY].wallet_service.create_wallet()
    return web.json_response(
        {
            "address": wallet.address,
            "balance": wallet.balance,
            "privateKey": wallet.private_key,
        },
        status=201,
    )


@routes.post("/wallets/import")
async def import_wallet(request: web.Request) -> web.Response:
    payload = ImportWalletRequest.model_validate(await _read_json(request))
    wallet = await request.app[SERVICES_KEY].wallet_service.import_wallet(payload.private_key)
    return web.json_response(
        {"address": wallet.address, "balance": wallet.balance},
        status=201,
    )


@routes.get("/wallets/{address}")
async def get_wallet(request: web.Request) -> web.Response:
    wallet = await request.app[SERVICES_KEY].wallet_service.get_wallet(
        request.match_info["address"]
    )
    return web.json_response({"address": wallet.address, "balance": wallet.balance})


@routes.get("/wallets/{address}/balance")
async def get_balance(request: web.Request) -> web.Response:
    """Live balance read from the chain."""
    balance = await request.app[SERVICES_KEY].wallet_service.get_balance(
        request.match_info["address"]
    )
    return web.json_response(balance)


@routes.get("/wallets/{address}/transactions")
async def get_wallet_transactions(request: web.Request) -> web.Response:
    transaction_ids = await request.app[SERVICES_KEY].wallet_service.get_transactions(
        request.match_info["address"]
    )
    return web.json_response(transaction_ids)


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------


@routes.post("/transactions")
async def create_transaction(request: web.Request) -> web.Response:
    payload = CreateTransactionRequest.model_validate(await _read_json(request))
    service = request.app[SERVICES_KEY].transaction_service

    transaction = await service.create_transaction(
        payload.from_address,
        payload.to_address,
        payload.amount_in_eth,
    )
    return web.json_response(service.to_response(transaction), status=201)


@routes.get("/transactions/{transaction_id}")
async def get_transaction(request: web.Request) -> web.Response:
    service = request.app[SERVICES_KEY].transaction_service
    transaction = await service.get_transaction(request.match_info["transaction_id"])
    return web.json_response(service.to_response(transaction))


# ----------------------------------------------------------------------
# Blockchain monitor
# ----------------------------------------------------------------------


@routes.get("/blockchain-monitor/status")
async def get_monitor_status(request: web.Request) -> web.Response:
    status = await request.app[SERVICES_KEY].monitor.get_monitoring_status()
    return web.json_response(status)


@routes.post("/blockchain-monitor/scan")
async def trigger_monitor_scan(request: web.Request) -> web.Response:
    """Run a scan cycle now (skipped if one is already running)."""
    await request.app[SERVICES_KEY].monitor.trigger_scan()
    return web.json_response({"message": "Blockchain scan triggered successfully"})


# ----------------------------------------------------------------------
# Queue
# ----------------------------------------------------------------------


@routes.get("/queue/stats")
async def get_queue_stats(request: web.Request) -> web.Response:
    stats = await request.app[SERVICES_KEY].queue_service.get_queue_stats()
    return web.json_response(stats)


@routes.get("/queue/jobs/{job_id}")
async def get_job_status(request: web.Request) -> web.Response:
    status = await request.app[SERVICES_KEY].queue_service.get_job_status(
        request.match_info["job_id"]
    )
    return web.json_response(status)
