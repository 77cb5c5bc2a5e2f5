"""
Pytest configuration for home-dotfiles tests.

Every test gets a fresh source root under tmp_path and a HOME that
points somewhere else, so no real rc file or dotfile is ever read.
"""

import os

import pytest

from home_dotfiles import util


class DotfilesTestEnv:
    """Test environment holding a source root with dotfile directories."""

    def __init__(self, tmpdir):
        self.tmpdir = str(tmpdir)
        self.source_root = os.path.join(self.tmpdir, "src")
        self.home_dir = os.path.join(self.tmpdir, "home")
        os.makedirs(self.source_root)
        os.makedirs(self.home_dir)

    def path(self, *parts):
        """Absolute path below the source root."""
        return os.path.join(self.source_root, *parts)

    def create_tree(self, directory, files):
        """
        Create files below source_root/directory.

        files: dict mapping relative paths to content (or None for directories)
        """
        base = self.path(directory)
        os.makedirs(base, exist_ok=True)

        for path, content in files.items():
            full_path = os.path.join(base, path)
            if content is None:
                os.makedirs(full_path, exist_ok=True)
                continue
            parent = os.path.dirname(full_path)
            os.makedirs(parent, exist_ok=True)
            with open(full_path, "w") as f:
                f.write(content)

    def create_link(self, path, dest):
        """Create a symlink below the source root."""
        full_path = self.path(path)
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        os.symlink(dest, full_path)

    def write_rc(self, where, text):
        """Write an rc file into HOME ('home') or the working dir ('cwd')."""
        directory = self.home_dir if where == "home" else self.tmpdir
        with open(os.path.join(directory, ".home-dotfilesrc"), "w") as f:
            f.write(text)


@pytest.fixture
def dotfiles_env(tmp_path, monkeypatch):
    """Create a fresh dotfiles test environment."""
    env = DotfilesTestEnv(tmp_path)
    monkeypatch.setenv("HOME", env.home_dir)
    monkeypatch.delenv("HOME_DOTFILES_SOURCE", raising=False)
    monkeypatch.chdir(env.tmpdir)
    return env


@pytest.fixture(autouse=True)
def reset_debug_state():
    """Restore module-level diagnostics state after each test."""
    yield
    util.set_debug_level(0)
    util.set_test_mode(False)


def destinations(entries):
    """Destination paths of a mapping list, in order."""
    return [entry.destination_path for entry in entries]
