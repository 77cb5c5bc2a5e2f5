# home-dotfiles - declarative dotfile deployment resolver
# Copyright (C) 2025 The home-dotfiles authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Core resolver - turn dotfile source directories into home-file mappings.

This module provides the public API (resolve() and assemble()) as well
as the building blocks they are made of: the exclusion matcher, the
directory enumerator and the two layout strippers.
"""

from __future__ import annotations

import dataclasses
import os
import re
from typing import Iterable, Iterator, Optional, Sequence

from home_dotfiles.types import (
    ConfigurationError,
    ContentLoader,
    DotfilesConfig,
    Layout,
    LocalFile,
    MappingEntry,
    ResolutionError,
)
from home_dotfiles.util import (
    debug,
    set_debug_level,
    resolve_directory,
    sanitize_name,
    shorten_home,
)


# =============================================================================
# Public API
# =============================================================================


def resolve(
    *directories: str,
    config: DotfilesConfig | None = None,
    **kwargs,
) -> list[MappingEntry]:
    """Resolve dotfile directories into home-file mappings.

    Args:
        *directories: Directories to resolve; replaces config.directories
                      when given
        config: Optional DotfilesConfig for configuration
        **kwargs: Override config fields (source_root, layout, packages, etc.)

    Returns:
        List of MappingEntry, in directory order then discovery order
    """
    if directories:
        kwargs["directories"] = directories
    return assemble(_make_config(config, **kwargs))


def assemble(
    config: DotfilesConfig, loader: ContentLoader = LocalFile
) -> list[MappingEntry]:
    """Build the mapping list for a configuration.

    Each file found under the configured directories yields one entry,
    carrying loader(path, sanitized_name) as its content reference.
    Duplicate destinations are passed through as they are.
    """
    resolver = _Resolver(config, loader)
    for directory_ref in config.directories:
        resolver.plan_directory(directory_ref)
    debug(2, 0, f"Resolved {len(resolver.entries)} mapping(s)")
    return resolver.entries


def _make_config(config: DotfilesConfig | None, **kwargs) -> DotfilesConfig:
    """Create a DotfilesConfig from optional base config and overrides."""
    if config is None:
        return DotfilesConfig(**kwargs)
    elif kwargs:
        return dataclasses.replace(config, **kwargs)
    else:
        return config


# =============================================================================
# Exclusion matcher
# =============================================================================


# A global inline flag group, e.g. (?i) or (?sx), as opposed to (?i:...)
_GLOBAL_FLAGS = re.compile(r"\(\?[aiLmsux]+\)")


class ExclusionMatcher:
    """
    Predicate telling whether a file basename is excluded.

    All patterns are joined into one alternation and anchored so that a
    pattern has to match a trailing part of the name: ``^.*(p1|p2)$``.
    """

    __slots__ = ("patterns", "regexp")

    def __init__(self, patterns: Sequence[str], regexp: Optional[re.Pattern]):
        self.patterns = tuple(patterns)
        self.regexp = regexp

    def __call__(self, basename: str) -> bool:
        return self.regexp is not None and self.regexp.fullmatch(basename) is not None

    def __repr__(self) -> str:
        pattern = self.regexp.pattern if self.regexp is not None else None
        return f"ExclusionMatcher({pattern!r})"


def compile_excluded(patterns: Iterable[str]) -> ExclusionMatcher:
    """Compile exclusion regex fragments into a single basename matcher.

    Each pattern is checked in its anchored form, so global inline flags
    such as ``(?i)`` are rejected: they are only valid at the start of a
    whole regex. Use a scoped group like ``(?i:readme)`` instead.

    Raises ConfigurationError naming the first malformed pattern.
    """
    patterns = tuple(patterns)
    if not patterns:
        return ExclusionMatcher(patterns, None)

    for pattern in patterns:
        try:
            re.compile(rf"^.*({pattern})$", re.DOTALL)
        except re.error as e:
            hint = ""
            if _GLOBAL_FLAGS.search(pattern):
                hint = (
                    "; global inline flags such as (?i) are not allowed, "
                    "use a scoped group like (?i:...)"
                )
            raise ConfigurationError(
                f"invalid exclusion pattern {pattern!r}: {e}{hint}"
            ) from e

    combined = "|".join(patterns)
    try:
        regexp = re.compile(rf"^.*({combined})$", re.DOTALL)
    except re.error as e:
        raise ConfigurationError(
            f"invalid exclusion patterns /{combined}/: {e}"
        ) from e
    return ExclusionMatcher(patterns, regexp)


# =============================================================================
# Directory enumerator
# =============================================================================


def enumerate_files(
    directory: str,
    matcher: ExclusionMatcher,
    packages: Sequence[str] | None = None,
) -> list[str]:
    """List the files under directory, leaving out excluded names.

    With packages, only directory/<package> subtrees are listed, one
    after the other in the given order. Entries are visited in sorted
    name order; directories whose name is excluded are pruned whole.
    """
    _require_directory(directory, f"missing source directory: {directory}")
    if not packages:
        return list(_find_files(directory, matcher))

    files: list[str] = []
    for package in packages:
        pkg_path = os.path.join(directory, package)
        _require_directory(
            pkg_path,
            f"The source directory {directory} does not contain package {package}",
        )
        debug(2, 1, f"Listing package {package}...")
        files.extend(_find_files(pkg_path, matcher))
    return files


def _require_directory(path: str, message: str) -> None:
    if not os.path.isdir(path):
        raise ResolutionError(message, errno=2)


def _find_files(directory: str, matcher: ExclusionMatcher) -> Iterator[str]:
    """Recursively yield non-directory entries below directory."""
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        raise ResolutionError(
            f"cannot read directory: {directory} ({e.strerror})", errno=2
        ) from e

    for entry in entries:
        if matcher(entry.name):
            debug(4, 1, f"Excluding {entry.path}")
            continue
        if entry.is_dir(follow_symlinks=False):
            yield from _find_files(entry.path, matcher)
        else:
            yield entry.path


# =============================================================================
# Layout strippers
# =============================================================================


def _relative_path(file_path: str, directory: str) -> str:
    """Drop the directory prefix (and one separator) from file_path."""
    prefix = directory if directory.endswith("/") else directory + "/"
    if not file_path.startswith(prefix) or len(file_path) == len(prefix):
        raise ResolutionError(f"{file_path} is not inside {directory}")
    return file_path[len(prefix):]


def strip_plain(file_path: str, directory: str) -> str:
    """Destination of a file in a plain layout: its path below directory."""
    return _relative_path(file_path, directory)


def strip_stow(file_path: str, directory: str) -> str:
    """Destination of a file in a stow layout.

    The first segment below directory is the package name and does not
    appear in the destination: stow/bash/.bashrc => .bashrc
    """
    segments = _relative_path(file_path, directory).split("/")
    if len(segments) < 2:
        raise ResolutionError(
            f"{file_path} is not inside a package directory of {directory}; "
            "stow layout expects DIRECTORY/PACKAGE/FILE"
        )
    return "/".join(segments[1:])


STRIPPERS = {
    Layout.PLAIN: strip_plain,
    Layout.STOW: strip_stow,
}


# =============================================================================
# Internal Resolver class
# =============================================================================


class _Resolver:
    """
    Internal class that accumulates mappings for one configuration.

    Used by assemble() and by the CLI. The stripper is picked once here,
    so the per-file loop does not look at the layout again.
    """

    def __init__(self, config: DotfilesConfig, loader: ContentLoader = LocalFile):
        self.c = config
        self.loader = loader
        self.strip = STRIPPERS[config.layout]
        self.packages = config.packages if config.layout is Layout.STOW else None
        self.entries: list[MappingEntry] = []

        # verbose=0 leaves a level set by the caller untouched
        if config.verbose:
            set_debug_level(config.verbose)
        debug(2, 0, f"source root is {shorten_home(config.source_root)}")
        debug(2, 0, f"layout is {config.layout.value}")
        if config.matcher.regexp is not None:
            debug(5, 0, f"Exclusion regexp: /{config.matcher.regexp.pattern}/")
        else:
            debug(5, 0, "Exclusion regexp: none")

    def plan_directory(self, directory_ref: str) -> None:
        """Append the mappings for one configured directory."""
        directory = resolve_directory(directory_ref, self.c.source_root)
        debug(1, 0, f"Resolving {directory_ref} ({shorten_home(directory)})...")

        files = enumerate_files(directory, self.c.matcher, self.packages)
        for file_path in files:
            destination = self.strip(file_path, directory)
            name = sanitize_name(destination)
            debug(3, 1, f"{destination} <= {shorten_home(file_path)}")
            self.entries.append(
                MappingEntry(destination, self.loader(file_path, name))
            )

        debug(1, 0, f"Resolving {directory_ref}... {len(files)} file(s)")
