# routers/health.py

import os
import logging

from fastapi import APIRouter, Depends

from config import HookerConfig
from dependencies import get_config

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Health Check Endpoint")
def health_check(config: HookerConfig = Depends(get_config)):
    logger.debug("Health check endpoint was called.")
    if not os.path.isdir(config.hook_path):
        logger.warning(f"Hook path '{config.hook_path}' is not a directory.")
    return {"status": "OK"}
