# home-dotfiles - declarative dotfile deployment resolver
# Copyright (C) 2025 The home-dotfiles authors
# SPDX-License-Identifier: GPL-3.0-or-later

"""
Command-line interface for home-dotfiles.

This module contains the CLI functions including argument parsing,
rc file handling, and the main entry point.
"""

from __future__ import annotations
import os
import pwd
import re
import shlex
import sys
from typing import Sequence

from home_dotfiles.resolver import assemble
from home_dotfiles.types import (
    DEFAULT_EXCLUDED,
    DotfilesCLIError,
    DotfilesConfig,
    DotfilesError,
)
from home_dotfiles.util import VERSION, PROGRAM_NAME

RC_FILE = ".home-dotfilesrc"
SOURCE_ENV_VAR = "HOME_DOTFILES_SOURCE"

# Options taking a value, by spelling
_VALUE_OPTIONS = {
    "-s": "source",
    "--source": "source",
    "-l": "layout",
    "--layout": "layout",
    "-p": "package",
    "--package": "package",
    "-x": "exclude",
    "--exclude": "exclude",
}
_LIST_OPTIONS = ("package", "exclude")


def main(args: Sequence[str] | None = None) -> None:
    """Main entry point for home-dotfiles command."""
    try:
        _main(sys.argv[1:] if args is None else list(args))
    except DotfilesCLIError as e:
        print(e.message, file=sys.stderr)
        sys.exit(e.errno)
    except DotfilesError as e:
        print(f"{PROGRAM_NAME}: ERROR: {e.message}", file=sys.stderr)
        sys.exit(e.errno)


def _main(args: list[str]) -> None:
    """Main implementation (can raise DotfilesError)."""
    options, directories = process_options(args)

    excluded = () if options.get("no-default-excludes") else DEFAULT_EXCLUDED
    config = DotfilesConfig(
        source_root=options["source"],
        layout=options.get("layout", "plain"),
        directories=tuple(directories),
        packages=tuple(options["package"]) if options.get("package") else None,
        excluded=tuple(excluded) + tuple(options.get("exclude", [])),
        verbose=options.get("verbose", 0),
    )

    for entry in assemble(config):
        fields = [entry.destination_path, entry.content_ref.path]
        if options.get("names"):
            fields.append(entry.content_ref.name)
        print("\t".join(fields))


def process_options(args: Sequence[str]) -> tuple[dict, list[str]]:
    """Parse and process command line and rc file options.

    Returns: (options, directories)
    """
    cli_options, directories = parse_cli_options(args)
    rc_options = get_config_file_options()

    # Merge rc file and command line options
    options = dict(rc_options)
    for option, cli_value in cli_options.items():
        rc_value = rc_options.get(option)

        if isinstance(cli_value, list) and rc_value is not None:
            options[option] = list(rc_value) + list(cli_value)
        else:
            options[option] = cli_value

    if "source" not in options:
        options["source"] = os.environ.get(SOURCE_ENV_VAR) or os.getcwd()

    if not directories:
        show_usage_and_exit(f"{PROGRAM_NAME}: No directories to resolve\n")

    return (options, directories)


def parse_cli_options(args: Sequence[str]) -> tuple[dict, list[str]]:
    """Parse command line options.

    Returns: (options, directories)
    """
    options: dict = {}
    directories: list[str] = []

    i = 0
    while i < len(args):
        arg = args[i]

        # Everything after -- is a directory
        if arg == "--":
            directories.extend(args[i + 1:])
            break

        # Options with values: -s DIR, --source DIR, --source=DIR, -sDIR
        elif arg in _VALUE_OPTIONS:
            if i + 1 >= len(args):
                show_usage_and_exit(f"Option {arg.lstrip('-')} requires an argument")
            i += 1
            _set_option(options, _VALUE_OPTIONS[arg], args[i])
        elif arg.startswith("--") and arg.partition("=")[0] in _VALUE_OPTIONS:
            name, _, value = arg.partition("=")
            _set_option(options, _VALUE_OPTIONS[name], value)
        elif arg[:2] in _VALUE_OPTIONS and len(arg) > 2 and not arg.startswith("--"):
            _set_option(options, _VALUE_OPTIONS[arg[:2]], arg[2:])

        # Verbose option with optional value
        elif arg in ("-v", "--verbose"):
            options["verbose"] = options.get("verbose", 0) + 1
        elif arg.startswith("--verbose="):
            try:
                options["verbose"] = int(arg[10:])
            except ValueError:
                options["verbose"] = 1

        # Boolean flags
        elif arg == "--no-default-excludes":
            options["no-default-excludes"] = True
        elif arg == "--names":
            options["names"] = True

        # Help and version
        elif arg in ("-h", "--help"):
            show_usage_and_exit()
        elif arg in ("-V", "--version"):
            show_version_and_exit()

        # Directory argument (including "-" which is a valid directory name)
        elif not arg.startswith("-") or arg == "-":
            directories.append(arg)

        elif arg.startswith("--"):
            show_usage_and_exit(f"Unknown option: {arg[2:].partition('=')[0]}")

        else:
            # Bundled short flags: -vvh is parsed as -v -v -h
            for char in arg[1:]:
                match char:
                    case "v":
                        options["verbose"] = options.get("verbose", 0) + 1
                    case "h":
                        show_usage_and_exit()
                    case "V":
                        show_version_and_exit()
                    case _:
                        show_usage_and_exit(f"Unknown option: {char}")

        i += 1

    return (options, directories)


def _set_option(options: dict, name: str, value: str) -> None:
    if name in _LIST_OPTIONS:
        options.setdefault(name, []).append(value)
    else:
        options[name] = value


def get_config_file_options() -> dict:
    """Search for default settings in any rc files.

    ~/.home-dotfilesrc is read first, then ./.home-dotfilesrc; options in
    the later file are appended to those in the earlier one.
    """
    defaults: list[str] = []
    rc_candidate_paths = [RC_FILE]

    home = os.environ.get("HOME")
    if home:
        rc_candidate_paths.insert(0, os.path.join(home, RC_FILE))

    for file_path in rc_candidate_paths:
        try:
            with open(file_path, "r") as f:
                for line in f:
                    line = line.rstrip("\n\r")
                    try:
                        defaults.extend(shlex.split(line, comments=True))
                    except ValueError:
                        defaults.extend(line.split())
        except (FileNotFoundError, PermissionError):
            continue  # Skip missing or unreadable files
        except IsADirectoryError:
            raise DotfilesCLIError(f"Could not open {file_path} for reading")

    rc_options, _ = parse_cli_options(defaults)

    if "source" in rc_options:
        rc_options["source"] = expand_filepath(rc_options["source"], "--source option")

    return rc_options


def expand_filepath(path: str, source: str) -> str:
    """Expand environment variables and tilde in file paths."""
    path = expand_environment_variables(path, source)
    path = expand_tilde_to_homedir(path)
    return path


def expand_environment_variables(path: str, source: str) -> str:
    """Expand environment variables in path.

    Replace non-escaped $VAR and ${VAR} with os.environ[VAR].
    """

    def replace_var(match):
        var = match.group(1)
        try:
            return os.environ[var]
        except KeyError:
            raise DotfilesCLIError(
                f"{source} references undefined environment variable ${var}; aborting!"
            )

    path = re.sub(r"(?<!\\)\$\{([^}]+)}", replace_var, path)
    path = re.sub(r"(?<!\\)\$(\w+)", replace_var, path)
    path = path.replace("\\$", "$")

    return path


def expand_tilde_to_homedir(path: str) -> str:
    """Expand tilde to user's home directory path."""
    if "\\~" in path:
        return path.replace("\\~", "~")

    if not path.startswith("~"):
        return path

    # Split ~username/rest into parts
    tilde_part, slash, rest = path.partition("/")
    username = tilde_part.removeprefix("~")

    if username:
        home = get_homedir_from_passwd(username=username)
    else:
        home = os.environ.get("HOME") or get_homedir_from_passwd()

    if not home:
        return path
    return home + slash + rest


def get_homedir_from_passwd(username: str | None = None) -> str | None:
    try:
        if username is not None:
            return pwd.getpwnam(username).pw_dir
        return pwd.getpwuid(os.getuid()).pw_dir
    except KeyError:
        return None


def show_usage_and_exit(msg: str | None = None, exit_code: int | None = None) -> None:
    """Print program usage message and exit."""
    if msg:
        print(msg, file=sys.stderr)

    print(f"""{PROGRAM_NAME} version {VERSION}

Resolve dotfile source directories into the files to install under $HOME.
Prints one DESTINATION<TAB>SOURCE line per file.

SYNOPSIS:

    {PROGRAM_NAME} [OPTION ...] DIRECTORY ...

OPTIONS:

    -s DIR, --source=DIR      Resolve relative DIRECTORY arguments against DIR
                              (default is ${SOURCE_ENV_VAR} or current dir)
    -l LAYOUT, --layout=LAYOUT
                              'plain' mirrors DIRECTORY into $HOME; 'stow'
                              treats each subdirectory as a package whose
                              name is dropped (default is plain)
    -p NAME, --package=NAME   Only use package NAME (stow layout, repeatable)
    -x REGEX, --exclude=REGEX Exclude files whose name ends in this regex
                              (repeatable, added to the defaults)
    --no-default-excludes     Do not exclude {' '.join(DEFAULT_EXCLUDED)}
    --names                   Also print the store-safe name of each file

    -v, --verbose[=N]         Increase verbosity (levels are from 0 to 5;
                                -v or --verbose adds 1; --verbose=N sets level)
    -V, --version             Show version number
    -h, --help                Show this help

Defaults are read from ~/{RC_FILE} and ./{RC_FILE}.""")

    if exit_code is not None:
        sys.exit(exit_code)
    elif msg:
        sys.exit(1)
    else:
        sys.exit(0)


def show_version_and_exit() -> None:
    """Print version and exit."""
    print(f"{PROGRAM_NAME} version {VERSION}")
    sys.exit(0)


if __name__ == "__main__":
    main()
