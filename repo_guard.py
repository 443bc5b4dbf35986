# repo_guard.py

import logging
import os
from dataclasses import dataclass

from errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


@dataclass(frozen=True)
class RepositoryTarget:
    path: str
    git_dir: str


def resolve_repository(hook_path: str, request_path: str) -> RepositoryTarget:
    """
    Map a request path onto a repository directory under the hook root.

    The request path is joined onto the root as-is; symlinks placed under the
    root by the operator are followed.

    Raises:
        NotFound: the joined path is missing or is not a directory.
        Forbidden: the directory has no .git directory.
    """
    repo_dir = os.path.join(hook_path, request_path.lstrip("/"))

    if not os.path.exists(repo_dir):
        logger.warning(f"Repository directory does not exist: '{repo_dir}'")
        raise NotFound(repo_dir, "no such file or directory")
    if not os.path.isdir(repo_dir):
        logger.warning(f"Not a directory: '{repo_dir}'")
        raise NotFound(repo_dir, "not a directory")

    git_dir = os.path.join(repo_dir, GIT_DIR_NAME)
    if not os.path.exists(git_dir):
        logger.warning(f"Not a git repository: '{repo_dir}'")
        raise Forbidden(repo_dir, f"missing {GIT_DIR_NAME}")
    if not os.path.isdir(git_dir):
        logger.warning(f"{GIT_DIR_NAME} is a file, not a repository: '{repo_dir}'")
        raise Forbidden(repo_dir, f"{GIT_DIR_NAME} is not a directory")

    return RepositoryTarget(path=repo_dir, git_dir=git_dir)
