"""Shared test fixtures for Terminaut tests."""

from pathlib import Path

import pytest

from terminaut import config, storage
from terminaut.storage import StateStore


class FakeClock:
    """Monotonic clock for the store: every call is one second after the previous one."""

    def __init__(self, start: int = 1_700_000_000):
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def state_file(tmp_path, monkeypatch):
    """Points the process-wide store at a state file under tmp_path.

    The default store is forgotten before and after the test so every test
    initializes it from its own file.
    """
    path = tmp_path / "data" / "Terminaut" / "state.json"
    monkeypatch.setattr(config, "STATE_FILE", path)
    storage.reset_default_store()
    yield path
    storage.reset_default_store()


@pytest.fixture
def store(state_file, clock):
    """A fresh persistent store with a fake clock."""
    return StateStore.load(state_file, clock=clock)


@pytest.fixture
def tree(tmp_path):
    """Create a directory tree for search tests.

    root/
      .git/                   (so .gitignore files apply)
      .hidden/terminal-hidden/
      a/b/c/d/term5/          (depth 5, the deepest searched level)
      a/b/c/d/e/term-deep/    (depth 6, beyond the bound)
      build/terminal-build/   (excluded by root/.gitignore)
      docs/
      projects/
        .gitignore            (excludes term-tools-old/)
        terminaut/src/
        term-tools/
        term-tools-old/
      terminal.txt            (a file, never a result)

    Returns the root path.
    """
    root = tmp_path / "root"
    for relative in [
        ".git",
        ".hidden/terminal-hidden",
        "a/b/c/d/term5",
        "a/b/c/d/e/term-deep",
        "build/terminal-build",
        "docs",
        "projects/terminaut/src",
        "projects/term-tools",
        "projects/term-tools-old",
    ]:
        (root / relative).mkdir(parents=True)
    (root / ".gitignore").write_text("build/\n*.log\n")
    (root / "projects" / ".gitignore").write_text("term-tools-old/\n")
    (root / "terminal.txt").write_text("not a directory\n")
    return root


def names(results) -> list:
    return [r.name for r in results]


def make_dirs(base: Path, *relatives: str) -> list:
    created = []
    for relative in relatives:
        path = base / relative
        path.mkdir(parents=True, exist_ok=True)
        created.append(path)
    return created
