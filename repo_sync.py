# repo_sync.py

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from config import HookerConfig
from errors import SyncFailed
from git_backend import GitBackend
from repo_guard import RepositoryTarget, resolve_repository

logger = logging.getLogger(__name__)

REMOTE_NAME = "origin"
LOCAL_MASTER = "refs/heads/master"
TRACKING_MASTER = "refs/remotes/origin/master"


class SyncStep:
    OPEN = "open"
    REMOTE_LOOKUP = "remote-lookup"
    FETCH = "fetch"
    TRACKING_REF_LOOKUP = "tracking-ref-lookup"
    MERGE = "merge"
    CHECKOUT = "checkout"
    REF_UPDATE = "ref-update"
    CLEANUP = "cleanup"


@dataclass(frozen=True)
class SyncOutcome:
    path: str
    commit: str
    cleanup_error: Optional[str] = None


@contextmanager
def _step(name: str, target: RepositoryTarget):
    logger.debug(f"[{target.path}] {name}")
    try:
        yield
    except Exception as e:
        logger.error(f"[{target.path}] step '{name}' failed: {e}")
        raise SyncFailed(name, e, target.path) from e


def synchronize(target: RepositoryTarget, backend: GitBackend) -> SyncOutcome:
    """
    Force the local master branch, HEAD and working tree of ``target`` to the
    commit origin/master points at after a fetch.

    The merge only exists to settle the index before the forced checkout; its
    result is discarded by the reset that follows. The first failing step
    aborts the sync without rolling anything back.

    Raises:
        SyncFailed: carrying the name of the step that failed.
    """
    with _step(SyncStep.OPEN, target):
        repo = backend.open(target.path)

    with _step(SyncStep.REMOTE_LOOKUP, target):
        remote = backend.lookup_remote(repo, REMOTE_NAME)

    with _step(SyncStep.FETCH, target):
        backend.fetch(remote)

    with _step(SyncStep.TRACKING_REF_LOOKUP, target):
        commit = backend.resolve_ref(repo, TRACKING_MASTER)
    logger.info(f"[{target.path}] {TRACKING_MASTER} is at {commit}")

    with _step(SyncStep.MERGE, target):
        backend.merge(repo, commit)

    with _step(SyncStep.CHECKOUT, target):
        backend.checkout_tree(repo, commit)

    with _step(SyncStep.REF_UPDATE, target):
        backend.set_ref(repo, LOCAL_MASTER, commit)
        backend.set_head(repo, commit)

    cleanup_error = None
    try:
        backend.state_cleanup(repo)
    except Exception as e:
        logger.warning(f"[{target.path}] could not clean up repository state: {e}")
        cleanup_error = str(e)

    return SyncOutcome(path=target.path, commit=commit, cleanup_error=cleanup_error)


class SyncContext:
    """
    Owns the process-wide lock under which repositories are resolved and
    synchronized. One instance per process; every request shares it.
    """

    def __init__(self, config: HookerConfig, backend: GitBackend):
        self.config = config
        self.backend = backend
        self.lock = threading.Lock()

    def update(self, request_path: str) -> SyncOutcome:
        """Resolve ``request_path`` under the hook root and sync it, one at a time."""
        logger.info(f"Updating repository for '{request_path}' under '{self.config.hook_path}'")
        with self.lock:
            target = resolve_repository(self.config.hook_path, request_path)
            outcome = synchronize(target, self.backend)
        logger.info(f"Repository '{outcome.path}' updated to {outcome.commit}.")
        return outcome
