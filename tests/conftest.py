import os
import shutil
import subprocess
from datetime import UTC, datetime, timedelta

import pytest

from minicommit.store import MiniCommitStore

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")

EXAMPLE_PATCH = """\
diff --git a/hello.txt b/hello.txt
new file mode 100644
index 0000000..ce01362
--- /dev/null
+++ b/hello.txt
@@ -0,0 +1 @@
+hello
"""

BASE_TIME = datetime(2026, 10, 19, 9, 30, 0, 123456, tzinfo=UTC)


def at(seconds: float) -> datetime:
    """A fixed instant offset from BASE_TIME."""
    return BASE_TIME + timedelta(seconds=seconds)


def git(cwd, *args):
    return subprocess.run(
        ["git", "-c", "commit.gpgsign=false", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )


@pytest.fixture
def repo(tmp_path):
    """A directory that looks like a working tree to the store (just a .git dir)."""
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def store(repo):
    return MiniCommitStore.open(repo)


@pytest.fixture
def no_parent_repo(monkeypatch, tmp_path):
    """Stop git from discovering a repository above tmp_path."""
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    # Keep the user's git config (color, prefixes, signing) out of the tests.
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    return tmp_path


@pytest.fixture
def git_repo(no_parent_repo, monkeypatch):
    """A real git repository with one commit."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    root = no_parent_repo / "work"
    root.mkdir()
    git(root, "init", "-q")
    git(root, "config", "user.name", "Test User")
    git(root, "config", "user.email", "test@example.com")
    (root / "README.md").write_text("# test\n")
    git(root, "add", "README.md")
    git(root, "commit", "-q", "-m", "initial")
    monkeypatch.delenv("MINI_COMMIT_LOG_LEVEL", raising=False)
    return root
