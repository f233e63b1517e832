"""
HTTP error middleware.

Maps the service error hierarchy to JSON error bodies.
"""

from aiohttp import web
from loguru import logger
from pydantic import ValidationError

from app.repositories.transaction_repository import TransitionConflictError
from app.utils.exceptions import WalletServiceError


def error_response(error: str, message, status: int) -> web.Response:
    return web.json_response({"error": error, "message": message}, status=status)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except WalletServiceError as e:
        if e.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {e.message}")
        return error_response(type(e).__name__, e.message, e.status_code)
    except ValidationError as e:
        messages = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors(include_url=False)
        ]
        return error_response("ValidationError", messages, 400)
    except TransitionConflictError as e:
        logger.warning(f"{request.method} {request.path} conflict: {e}")
        return error_response("ConflictError", str(e), 409)
    except Exception as e:
        logger.exception(f"Unhandled error on {request.method} {request.path}: {e}")
        return error_response("InternalServerError", "Internal server error", 500)
