import shutil
import subprocess
import threading
import time
from pathlib import Path

import pytest

from config import HookerConfig

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not installed")


def git(*args, cwd=None, check=True):
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=check, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str) -> str:
    (repo / name).write_text(content, encoding="utf-8")
    git("add", name, cwd=repo)
    git("commit", "-m", message, cwd=repo)
    return git("rev-parse", "HEAD", cwd=repo)


@pytest.fixture
def git_identity(monkeypatch):
    monkeypatch.setenv("GIT_AUTHOR_NAME", "hooker")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "hooker@localhost")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "hooker")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "hooker@localhost")


@pytest.fixture
def hook_root(tmp_path):
    root = tmp_path / "hooks"
    root.mkdir()
    return root


@pytest.fixture
def remote_setup(tmp_path, hook_root, git_identity):
    """
    A bare origin, an upstream clone used to push new commits, and a
    deployment clone at <hook_root>/demo.
    """
    origin = tmp_path / "origin.git"
    git("init", "--bare", str(origin))
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=origin)

    upstream = tmp_path / "upstream"
    git("init", str(upstream))
    git("symbolic-ref", "HEAD", "refs/heads/master", cwd=upstream)
    commit_file(upstream, "README", "first\n", "first")
    git("remote", "add", "origin", str(origin), cwd=upstream)
    git("push", "origin", "master", cwd=upstream)

    deploy = hook_root / "demo"
    git("clone", str(origin), str(deploy))
    return {"origin": origin, "upstream": upstream, "deploy": deploy}


@pytest.fixture
def config(hook_root):
    return HookerConfig(hook_path=str(hook_root), log_db_path=None)


class FakeBackend:
    """Records every call; can fail a chosen method or hold the fetch open."""

    def __init__(self, commit="c0ffee", fail_on=None, fetch_delay=0.0):
        self.commit = commit
        self.fail_on = fail_on
        self.fetch_delay = fetch_delay
        self.calls = []
        self.active = 0
        self.max_active = 0
        self._guard = threading.Lock()

    def _call(self, name, *args):
        with self._guard:
            self.calls.append((name,) + args)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if name == "fetch" and self.fetch_delay:
                time.sleep(self.fetch_delay)
            if name == self.fail_on:
                raise RuntimeError(f"{name} exploded")
        finally:
            with self._guard:
                self.active -= 1

    def names(self):
        return [c[0] for c in self.calls]

    def open(self, path):
        self._call("open", path)
        return {"path": path}

    def lookup_remote(self, repo, name):
        self._call("lookup_remote", name)
        return name

    def fetch(self, remote):
        self._call("fetch", remote)

    def resolve_ref(self, repo, ref_name):
        self._call("resolve_ref", ref_name)
        return self.commit

    def merge(self, repo, commit):
        self._call("merge", commit)

    def checkout_tree(self, repo, commit):
        self._call("checkout_tree", commit)

    def set_ref(self, repo, ref_name, commit):
        self._call("set_ref", ref_name, commit)

    def set_head(self, repo, commit):
        self._call("set_head", commit)

    def state_cleanup(self, repo):
        self._call("state_cleanup")


@pytest.fixture
def fake_repo(hook_root):
    repo = hook_root / "demo"
    (repo / ".git").mkdir(parents=True)
    return repo
