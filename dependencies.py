# dependencies.py

import threading
from typing import Optional

from fastapi import Depends

from config import HookerConfig, load_config
from git_backend import GitPythonBackend
from repo_sync import SyncContext

# Sync dependencies run on threadpool workers; creation happens under this
# lock so there is exactly one config and one SyncContext per process.
_init_lock = threading.Lock()
_config: Optional[HookerConfig] = None
_sync_context: Optional[SyncContext] = None


def get_config() -> HookerConfig:
    global _config
    with _init_lock:
        if _config is None:
            _config = load_config()
        return _config


def get_sync_context(config: HookerConfig = Depends(get_config)) -> SyncContext:
    global _sync_context
    with _init_lock:
        if _sync_context is None:
            _sync_context = SyncContext(config, GitPythonBackend())
        return _sync_context
