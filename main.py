# main.py

import argparse
import logging
import os

import uvicorn
from fastapi import FastAPI

from config import load_config
from logging_config import setup_logging

# Routers
from routers.health import router as health_router
from routers.hook import router as hook_router

logger = logging.getLogger(__name__)

app = FastAPI(
    title="hooker",
    description="Webhook deployment: force repositories under the hook root to origin/master",
    version="1.0.0",
    docs_url=None,
    redoc_url=None,
    openapi_url=None
)

# Health first: the hook route accepts any path.
app.include_router(health_router)
app.include_router(hook_router)


def run(argv=None):
    parser = argparse.ArgumentParser(description="hooker - bitbucket webhook deployment")
    parser.add_argument("--config", default=None, help="configuration file (default: $CONFIG_PATH or config.yaml)")
    args = parser.parse_args(argv)

    if args.config:
        # dependencies.get_config reads the same variable.
        os.environ["CONFIG_PATH"] = args.config

    config = load_config()
    setup_logging(config.debug, config.log_db_path)

    logger.info("Starting the hooker application...")
    logger.info(f"starting server on {config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


if __name__ == "__main__":
    run()
