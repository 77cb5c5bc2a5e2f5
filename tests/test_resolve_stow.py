"""
Tests for resolving GNU Stow style dotfile directories.
"""

import pytest

from home_dotfiles import (
    ConfigurationError,
    DotfilesConfig,
    Layout,
    ResolutionError,
    assemble,
    resolve,
)

from conftest import destinations


@pytest.fixture
def stow_tree(dotfiles_env):
    """src/stow with a bash and a git package."""
    dotfiles_env.create_tree(
        "stow",
        {
            "bash/.bashrc": "bashrc",
            "git/.gitconfig": "gitconfig",
        },
    )
    return dotfiles_env


class TestResolveStow:
    """Stow layout: one package directory per application."""

    def test_package_names_are_dropped(self, stow_tree):
        """stow/bash/.bashrc => .bashrc, stow/git/.gitconfig => .gitconfig"""
        entries = resolve("stow", source_root=stow_tree.source_root, layout="stow")

        assert destinations(entries) == [".bashrc", ".gitconfig"]
        assert [e.content_ref.path for e in entries] == [
            stow_tree.path("stow", "bash", ".bashrc"),
            stow_tree.path("stow", "git", ".gitconfig"),
        ]

    def test_package_subset(self, stow_tree):
        """Only the listed packages are resolved"""
        entries = resolve(
            "stow",
            source_root=stow_tree.source_root,
            layout=Layout.STOW,
            packages=["git"],
        )

        assert destinations(entries) == [".gitconfig"]

    def test_package_order_is_preserved(self, stow_tree):
        """Packages are listed in configuration order, not name order"""
        entries = resolve(
            "stow",
            source_root=stow_tree.source_root,
            layout="stow",
            packages=["git", "bash"],
        )

        assert destinations(entries) == [".gitconfig", ".bashrc"]

    def test_empty_package_list_means_all_packages(self, stow_tree):
        """packages=[] behaves like no package restriction"""
        entries = resolve(
            "stow", source_root=stow_tree.source_root, layout="stow", packages=[]
        )

        assert destinations(entries) == [".bashrc", ".gitconfig"]

    def test_nested_package_contents(self, dotfiles_env):
        """Only the package segment is dropped from deeper paths"""
        dotfiles_env.create_tree(
            "stow",
            {
                "nvim/.config/nvim/init.lua": "",
                "nvim/.config/nvim/lua/plugins.lua": "",
            },
        )

        entries = resolve("stow", source_root=dotfiles_env.source_root, layout="stow")

        assert destinations(entries) == [
            ".config/nvim/init.lua",
            ".config/nvim/lua/plugins.lua",
        ]

    def test_package_trailing_slash(self, stow_tree):
        """A package given as 'git/' names the git package"""
        entries = resolve(
            "stow",
            source_root=stow_tree.source_root,
            layout="stow",
            packages=["git/"],
        )

        assert destinations(entries) == [".gitconfig"]

    def test_missing_package_is_an_error(self, stow_tree):
        """A listed package that does not exist aborts resolution"""
        with pytest.raises(ResolutionError) as excinfo:
            resolve(
                "stow",
                source_root=stow_tree.source_root,
                layout="stow",
                packages=["git", "emacs"],
            )

        assert "does not contain package emacs" in excinfo.value.message

    def test_file_outside_package_is_an_error(self, stow_tree):
        """A file directly in the stow directory has no package to drop"""
        stow_tree.create_tree("stow", {"README": "notes"})

        with pytest.raises(ResolutionError) as excinfo:
            resolve("stow", source_root=stow_tree.source_root, layout="stow")

        assert "not inside a package directory" in excinfo.value.message

    def test_file_outside_package_is_fine_with_package_subset(self, stow_tree):
        """Loose files are never looked at when packages are listed"""
        stow_tree.create_tree("stow", {"README": "notes"})

        entries = resolve(
            "stow",
            source_root=stow_tree.source_root,
            layout="stow",
            packages=["bash"],
        )

        assert destinations(entries) == [".bashrc"]

    def test_two_stow_directories(self, dotfiles_env):
        """Packages of several stow directories are concatenated"""
        dotfiles_env.create_tree("common", {"bash/.bashrc": ""})
        dotfiles_env.create_tree("laptop", {"bash/.bash_profile": ""})

        config = DotfilesConfig(
            source_root=dotfiles_env.source_root,
            layout="stow",
            directories=["common", "laptop"],
        )

        assert destinations(assemble(config)) == [".bashrc", ".bash_profile"]

    def test_same_file_in_two_packages(self, dotfiles_env):
        """Colliding packages both produce an entry"""
        dotfiles_env.create_tree(
            "stow", {"vim/.vimrc": "vim", "neovim/.vimrc": "neovim"}
        )

        entries = resolve("stow", source_root=dotfiles_env.source_root, layout="stow")

        assert destinations(entries) == [".vimrc", ".vimrc"]
        assert len({e.content_ref.path for e in entries}) == 2

    def test_slash_in_package_name(self, stow_tree):
        """Package names are single directory names"""
        with pytest.raises(ConfigurationError):
            resolve(
                "stow",
                source_root=stow_tree.source_root,
                layout="stow",
                packages=["git/sub"],
            )

    def test_dot_package_name(self, stow_tree):
        """'.' is the stow directory itself, not a package"""
        with pytest.raises(ConfigurationError) as excinfo:
            resolve(
                "stow",
                source_root=stow_tree.source_root,
                layout="stow",
                packages=["."],
            )

        assert "'.'" in excinfo.value.message

    def test_dot_dot_package_name(self, stow_tree):
        """'..' would list the parent of the stow directory"""
        with pytest.raises(ConfigurationError):
            resolve(
                "stow",
                source_root=stow_tree.source_root,
                layout="stow",
                packages=["git", "../"],
            )
