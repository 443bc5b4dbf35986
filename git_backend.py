# git_backend.py

import logging
import os
import shutil
from typing import Any, Protocol

import git
from git import GitCommandError

logger = logging.getLogger(__name__)

# git exits with 128 on fatal errors; lower codes from merge mean it stopped
# on conflicts or on local changes it refused to overwrite.
GIT_FATAL_STATUS = 128

STATE_FILES = (
    "MERGE_HEAD",
    "MERGE_MSG",
    "MERGE_MODE",
    "AUTO_MERGE",
    "SQUASH_MSG",
    "CHERRY_PICK_HEAD",
    "REVERT_HEAD",
    "BISECT_LOG",
)
STATE_DIRS = ("rebase-merge", "rebase-apply")


class GitBackend(Protocol):
    """The version-control primitives a sync is built from."""

    def open(self, path: str) -> Any: ...

    def lookup_remote(self, repo: Any, name: str) -> Any: ...

    def fetch(self, remote: Any) -> None: ...

    def resolve_ref(self, repo: Any, ref_name: str) -> str: ...

    def merge(self, repo: Any, commit: str) -> None: ...

    def checkout_tree(self, repo: Any, commit: str) -> None: ...

    def set_ref(self, repo: Any, ref_name: str, commit: str) -> None: ...

    def set_head(self, repo: Any, commit: str) -> None: ...

    def state_cleanup(self, repo: Any) -> None: ...


class GitPythonBackend:
    def open(self, path: str) -> git.Repo:
        return git.Repo(path)

    def lookup_remote(self, repo: git.Repo, name: str) -> git.Remote:
        return repo.remote(name)

    def fetch(self, remote: git.Remote) -> None:
        for info in remote.fetch():
            logger.debug(f"Fetched {info.name}")

    def resolve_ref(self, repo: git.Repo, ref_name: str) -> str:
        return repo.commit(ref_name).hexsha

    def merge(self, repo: git.Repo, commit: str) -> None:
        # git refuses to merge over unmerged entries or a pending MERGE_HEAD,
        # so drop whatever an earlier merge left behind first.
        self.state_cleanup(repo)
        if repo.head.is_valid():
            repo.git.read_tree("--reset", "-u", "HEAD")
        try:
            out = repo.git.merge("--no-commit", "--no-edit", "--allow-unrelated-histories", commit)
            logger.debug(f"Merge output: {out}")
        except GitCommandError as e:
            if e.status == GIT_FATAL_STATUS:
                raise
            logger.info(f"Merge of {commit} did not complete cleanly (exit {e.status}); it will be reset.")

    def checkout_tree(self, repo: git.Repo, commit: str) -> None:
        # Replaces index and working tree with the commit's tree, dropping
        # local modifications and unmerged entries.
        repo.git.read_tree("--reset", "-u", commit)

    def set_ref(self, repo: git.Repo, ref_name: str, commit: str) -> None:
        repo.git.update_ref(ref_name, commit)

    def set_head(self, repo: git.Repo, commit: str) -> None:
        # Without --no-deref this moves the branch HEAD points at.
        repo.git.update_ref("HEAD", commit)

    def state_cleanup(self, repo: git.Repo) -> None:
        git_dir = repo.git_dir
        for name in STATE_FILES:
            path = os.path.join(git_dir, name)
            if os.path.isfile(path):
                logger.debug(f"Removing {path}")
                os.remove(path)
        for name in STATE_DIRS:
            path = os.path.join(git_dir, name)
            if os.path.isdir(path):
                logger.debug(f"Removing {path}")
                shutil.rmtree(path)
