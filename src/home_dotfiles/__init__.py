# home-dotfiles - declarative dotfile deployment resolver
# Copyright (C) 2025 The home-dotfiles authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
home-dotfiles - resolve dotfile directories into files to install under $HOME

This package computes which files a home-directory deployment should
install and where: it walks dotfile source directories laid out either
as a plain mirror of $HOME or GNU Stow style (one package directory per
application), drops excluded files, and returns one mapping per file.
Writing anything into $HOME is left to the caller.

Basic usage::

    from home_dotfiles import resolve

    # dotfiles/bash/.bashrc => .bashrc
    for entry in resolve("bash", source_root="./dotfiles"):
        print(entry.destination_path, entry.content_ref.path)

Stow layout with a package subset::

    entries = resolve("stow", source_root="./dotfiles", layout="stow",
                      packages=["git", "vim"])
    files = dict(entries)  # {".gitconfig": LocalFile(...), ...}

With configuration reuse::

    from home_dotfiles import DotfilesConfig, assemble

    config = DotfilesConfig(source_root="./dotfiles", layout="stow",
                            directories=["stow"],
                            excluded=[".*~", "\\\\.git", "README.*"])
    entries = assemble(config)
"""

from home_dotfiles.resolver import (
    resolve,
    assemble,
    compile_excluded,
    enumerate_files,
    strip_plain,
    strip_stow,
    ExclusionMatcher,
)
from home_dotfiles.types import (
    DEFAULT_EXCLUDED,
    DotfilesConfig,
    Layout,
    LocalFile,
    MappingEntry,
    DotfilesError,
    ConfigurationError,
    ResolutionError,
    DotfilesCLIError,
)
from home_dotfiles.util import VERSION as __version__, resolve_directory, sanitize_name

# CLI entry point
from home_dotfiles.cli import main

__all__ = [
    "resolve",
    "assemble",
    "compile_excluded",
    "enumerate_files",
    "strip_plain",
    "strip_stow",
    "resolve_directory",
    "sanitize_name",
    "ExclusionMatcher",
    "DEFAULT_EXCLUDED",
    "DotfilesConfig",
    "Layout",
    "LocalFile",
    "MappingEntry",
    "DotfilesError",
    "ConfigurationError",
    "ResolutionError",
    "DotfilesCLIError",
    "__version__",
    "main",
]
