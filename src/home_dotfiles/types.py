# home-dotfiles - declarative dotfile deployment resolver
# Copyright (C) 2025 The home-dotfiles authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Type definitions for home-dotfiles.

This module contains the error hierarchy, the layout enum and the
dataclasses that flow through the resolver: the configuration going in
and the mapping entries coming out.
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol


# Regex fragments matched against file basenames (backup files, vim swap
# files and git metadata).
DEFAULT_EXCLUDED = (".*~", ".*\\.swp", "\\.git", "\\.gitignore")


class DotfilesError(Exception):
    """Base class for errors raised on purpose by home-dotfiles.

    Attributes:
        message: Human readable description of what went wrong.
        errno: Exit code used by the command-line front end.
    """

    def __init__(self, message: str, errno: int = 1):
        super().__init__(message)
        self.message = message
        self.errno = errno


class ConfigurationError(DotfilesError):
    """Invalid layout, malformed exclusion pattern or bad option value."""


class ResolutionError(DotfilesError):
    """A configured directory cannot be turned into mappings."""


class DotfilesCLIError(DotfilesError):
    """Usage error; the message is printed verbatim."""


class Layout(Enum):
    """How a source directory maps onto the home directory."""

    PLAIN = "plain"
    STOW = "stow"

    @classmethod
    def parse(cls, value: Layout | str) -> Layout:
        """Convert a layout name into a Layout, raising ConfigurationError."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(repr(m.value) for m in cls)
            raise ConfigurationError(
                f"invalid layout {value!r}; expected one of {valid}"
            ) from None

    def strip(self, file_path: str, directory: str) -> str:
        """Return the home-relative destination of file_path."""
        # Imported late: resolver depends on this module.
        from home_dotfiles.resolver import STRIPPERS

        return STRIPPERS[self](file_path, directory)


@dataclass(frozen=True, slots=True)
class LocalFile:
    """
    Lazy reference to a dotfile on the local filesystem.

    The hosting installer decides what to do with it (copy, symlink or
    import into a store under ``name``); nothing is read until read() is
    called.
    """

    path: str
    name: str

    def read(self) -> bytes:
        with open(self.path, "rb") as f:
            return f.read()


class ContentLoader(Protocol):
    """Turns a source path and its sanitized name into a content reference."""

    def __call__(self, path: str, name: str) -> object: ...


@dataclass(frozen=True, slots=True)
class MappingEntry:
    """
    One file to install: where it goes under $HOME and where it comes from.

    Unpacks like a (destination_path, content_ref) tuple, so
    ``dict(entries)`` gives a destination -> content mapping.
    """

    destination_path: str
    content_ref: object

    def __iter__(self):
        return iter((self.destination_path, self.content_ref))


@dataclass(frozen=True)
class DotfilesConfig:
    """
    Resolved configuration for one resolution call.

    Validation happens on construction, so an invalid layout or a
    malformed exclusion pattern never reaches the resolver.

    Attributes:
        source_root: Directory that relative entries of directories are
                     anchored at (default: current directory)
        layout: Layout.PLAIN or Layout.STOW (names are accepted too)
        directories: Source directories, absolute or relative
        packages: Package subset for the stow layout (ignored for plain)
        excluded: Regex fragments matched against file basenames
        verbose: Verbosity level (0-5)
    """

    source_root: str = field(default_factory=os.getcwd)
    layout: Layout = Layout.PLAIN
    directories: tuple[str, ...] = ()
    packages: Optional[tuple[str, ...]] = None
    excluded: tuple[str, ...] = DEFAULT_EXCLUDED
    verbose: int = 0
    matcher: Callable[[str], bool] = field(
        init=False, repr=False, compare=False, default=None
    )

    def __post_init__(self):
        # Imported late: resolver depends on this module.
        from home_dotfiles.resolver import compile_excluded

        if not isinstance(self.source_root, str):
            raise ConfigurationError(
                f"source_root must be a string, got {type(self.source_root).__name__}"
            )

        packages = self.packages
        if packages is not None:
            packages = tuple(
                p.rstrip("/") for p in _string_tuple(packages, "packages")
            )
            for package in packages:
                if not package or "/" in package:
                    raise ConfigurationError(
                        f"invalid package name {package!r}; "
                        "slashes are not permitted in package names"
                    )
                if package in (".", ".."):
                    raise ConfigurationError(
                        f"invalid package name {package!r}; "
                        "a package must be a subdirectory of the stow directory"
                    )

        excluded = _string_tuple(self.excluded, "excluded")

        # Frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, "layout", Layout.parse(self.layout))
        object.__setattr__(
            self, "directories", _string_tuple(self.directories, "directories")
        )
        object.__setattr__(self, "packages", packages)
        object.__setattr__(self, "excluded", excluded)
        object.__setattr__(self, "matcher", compile_excluded(excluded))

    def replace(self, **changes) -> DotfilesConfig:
        """Return a copy with the given fields changed (and re-validated)."""
        return dataclasses.replace(self, **changes)


def _string_tuple(values, field_name: str) -> tuple[str, ...]:
    """Freeze a sequence of strings, rejecting a bare string."""
    if isinstance(values, str):
        raise ConfigurationError(
            f"{field_name} must be a sequence of strings, not a single string"
        )
    try:
        values = tuple(values)
    except TypeError:
        raise ConfigurationError(f"{field_name} must be a sequence of strings") from None
    for value in values:
        if not isinstance(value, str):
            raise ConfigurationError(
                f"{field_name} entries must be strings, got {value!r}"
            )
    return values
