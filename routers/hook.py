# routers/hook.py

import asyncio
import logging
import traceback

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse

from dependencies import get_sync_context
from errors import HookerError, IgnoredNotMaster
from models.webhook_payload import require_master_change, parse_payload
from repo_sync import SyncContext

router = APIRouter()
logger = logging.getLogger(__name__)


def _error_response(error: HookerError) -> PlainTextResponse:
    return PlainTextResponse(error.response_body, status_code=error.status_code)


@router.post("/{repo_path:path}", summary="Repository Webhook Endpoint")
async def handle_webhook(
        repo_path: str,
        request: Request,
        sync_context: SyncContext = Depends(get_sync_context)
):
    # The body can only be consumed once; read it whole before decoding.
    body_bytes = await request.body()

    try:
        event = parse_payload(body_bytes)
        require_master_change(event)
    except IgnoredNotMaster as e:
        logger.info(f"'/{repo_path}': {e}")
        return _error_response(e)
    except HookerError as e:
        logger.warning(f"'/{repo_path}': {e}")
        return _error_response(e)

    # Sync in the default executor; the process-wide lock is a thread lock.
    loop = asyncio.get_running_loop()
    try:
        outcome = await loop.run_in_executor(None, sync_context.update, repo_path)
    except HookerError as e:
        logger.error(f"Update of '/{repo_path}' failed: {e}")
        return _error_response(e)
    except Exception as e:
        error_trace = traceback.format_exc()
        logger.error(f"Unexpected error updating '/{repo_path}': {str(e)}\n{error_trace}")
        return PlainTextResponse(
            str(status.HTTP_500_INTERNAL_SERVER_ERROR),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    if outcome.cleanup_error:
        logger.warning(f"Repository '{outcome.path}' updated but left in-progress state: {outcome.cleanup_error}")
    return PlainTextResponse("ok", status_code=status.HTTP_200_OK)
