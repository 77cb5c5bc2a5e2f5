# home-dotfiles - declarative dotfile deployment resolver
# Copyright (C) 2025 The home-dotfiles authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Utility functions for home-dotfiles.

This module contains general-purpose utilities used throughout
home-dotfiles: diagnostics output, directory reference resolution and
store-safe name derivation.
"""

from __future__ import annotations

import os
import sys

VERSION = "0.4.0"
PROGRAM_NAME = "home-dotfiles"

# Prefix of every sanitized name, so generated artifacts are recognizable.
NAME_PREFIX = "home-dotfiles-"

# Characters that are graphic ASCII but still unsafe in a generated name.
_UNSAFE_NAME_CHARS = frozenset("./ ")

# Debug level and test mode are module-level state
_debug_level = 0
_test_mode = False


def set_debug_level(level: int) -> None:
    """Set verbosity level for debug()."""
    global _debug_level
    _debug_level = level


def get_debug_level() -> int:
    """Get current debug level."""
    return _debug_level


def set_test_mode(on_or_off: bool) -> None:
    """Set test mode on or off."""
    global _test_mode
    _test_mode = bool(on_or_off)


def get_test_mode() -> bool:
    """Get current test mode."""
    return _test_mode


def debug(level: int, *args) -> None:
    """
    Log to STDERR based on debug_level setting.

    Verbosity rules:
        0: errors only
        >= 1: print each configured directory as it is resolved
        >= 2: print package enumeration and summary counts
        >= 3: print every mapping produced
        >= 4: print every excluded file or directory
        >= 5: debug exclusion regexps

    Supports two calling conventions:
        debug(level, msg)
        debug(level, indent_level, msg)
    """
    if len(args) >= 2 and isinstance(args[0], int):
        indent_level = args[0]
        msg = args[1]
    elif len(args) >= 1:
        indent_level = 0
        msg = args[0]
    else:
        return

    if _debug_level >= level:
        indent = "    " * indent_level
        if _test_mode:
            print(f"# {indent}{msg}")
        else:
            print(f"{indent}{msg}", file=sys.stderr)


def resolve_directory(directory_ref: str, source_root: str) -> str:
    """
    Anchor a configured directory reference at the source root.

    Absolute references are returned unchanged; relative ones are joined
    onto source_root. Nothing is normalized and the filesystem is not
    consulted.
    """
    if not isinstance(directory_ref, str) or not isinstance(source_root, str):
        raise TypeError(
            f"directory references must be strings, got "
            f"{type(directory_ref).__name__} and {type(source_root).__name__}"
        )
    if directory_ref.startswith("/"):
        return directory_ref
    return os.path.join(source_root, directory_ref)


def sanitize_name(destination_path: str) -> str:
    """
    Derive a store-safe name from a destination path.

    Every character outside the graphic ASCII range, and every '.', '/'
    and ' ', is replaced with '-'. Distinct paths may map to the same
    name; callers that need uniqueness must not rely on this alone.
    """
    return NAME_PREFIX + "".join(
        c if "!" <= c <= "~" and c not in _UNSAFE_NAME_CHARS else "-"
        for c in destination_path
    )


def shorten_home(text: str) -> str:
    """Replace $HOME with ~ for readability in diagnostics."""
    home = os.environ.get("HOME", "")
    if home and home != "/":
        text = text.replace(home + "/", "~/")
    return text
